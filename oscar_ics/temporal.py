"""
Date/time resolution for course meetings.

Printed schedules give a date range ("01/06/2025 - 04/25/2025"), a time pair
("9:00 AM - 9:50 AM") and a set of weekdays. From those we derive:

- the first occurrence, moved forward onto the first listed weekday
- the recurrence boundary: the last instant of the range's final day

Every printed value is read in one fixed civil timezone.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from oscar_ics.model import DateTimeArray

DATE_FORMAT = "%m/%d/%Y"
DATE_TIME_FORMAT = "%m/%d/%Y %I:%M%p"
UNTIL_FORMAT = "%Y%m%dT%H%M%SZ"

WEEKDAYS: Tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# ISO numbering, Monday=1 .. Sunday=7
DAY_TO_NUMBER: Dict[str, int] = {
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
    "Sunday": 7,
}

DAY_TO_BYDAY: Dict[str, str] = {
    "Sunday": "SU",
    "Monday": "MO",
    "Tuesday": "TU",
    "Wednesday": "WE",
    "Thursday": "TH",
    "Friday": "FR",
    "Saturday": "SA",
}

_WHITESPACE_RE = re.compile(r"\s+")


def split_range(text: str) -> List[str]:
    """
    Split "A - B" into its two trimmed halves (extra pieces are dropped).
    """
    return [part.strip() for part in text.split("-")[:2]]


def split_time_pair(text: str) -> List[str]:
    """
    "9:00 AM - 9:50 AM" -> ["9:00AM", "9:50AM"]
    """
    compact = _WHITESPACE_RE.sub("", text)
    return compact.split("-", 1)


def parse_local(date_str: str, time_str: str, tz: tzinfo) -> datetime:
    """
    Parse a printed date and time as wall-clock time in `tz`.
    Raises ValueError for malformed input.
    """
    naive = datetime.strptime(f"{date_str.strip()} {time_str.strip()}", DATE_TIME_FORMAT)
    return naive.replace(tzinfo=tz)


def weekday_delta(start: datetime, days: Sequence[str]) -> int:
    """
    Smallest non-negative number of days from `start` to one of `days`.

    Unknown day names are ignored; with no usable day the delta is 0.
    """
    targets = [DAY_TO_NUMBER[d] for d in days if d in DAY_TO_NUMBER]
    if not targets:
        return 0
    return min((target - start.isoweekday()) % 7 for target in targets)


def align_to_first_matching_weekday(start: datetime, days: Sequence[str]) -> datetime:
    return start + timedelta(days=weekday_delta(start, days))


def align_meeting(start: datetime, end: datetime, days: Sequence[str]) -> Tuple[datetime, datetime]:
    """
    Shift start and end by the same whole number of calendar days so that the
    start lands on one of `days`.
    """
    if not days:
        return start, end
    aligned = align_to_first_matching_weekday(start, days)
    # Whole calendar days between the two dates; time of day is untouched.
    shift = timedelta(days=(aligned.date() - start.date()).days)
    return start + shift, end + shift


def recurrence_boundary(date_str: str, tz: tzinfo) -> datetime:
    """
    Last instant (inclusive) of the given calendar day in `tz`.
    """
    midnight = datetime.strptime(date_str.strip(), DATE_FORMAT).replace(tzinfo=tz)
    return midnight + timedelta(days=1) - timedelta(milliseconds=1)


def resolve_meeting(
    days: Sequence[str],
    times: Sequence[str],
    date_strings: Sequence[str],
    tz: tzinfo,
) -> Optional[Tuple[datetime, datetime, datetime]]:
    """
    Resolve (start, end, until) for one meeting, or None when the inputs are
    incomplete or cannot be parsed.
    """
    if not days or len(times) < 2 or len(date_strings) < 2:
        return None
    try:
        start = parse_local(date_strings[0], times[0], tz)
        end = parse_local(date_strings[0], times[1], tz)
        until = recurrence_boundary(date_strings[1], tz)
    except ValueError:
        return None

    start, end = align_meeting(start, end, days)
    return start, end, until


def to_utc_array(dt: datetime) -> DateTimeArray:
    u = dt.astimezone(timezone.utc)
    return (u.year, u.month, u.day, u.hour, u.minute)


def to_local_array(dt: datetime) -> DateTimeArray:
    return (dt.year, dt.month, dt.day, dt.hour, dt.minute)


def format_until_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime(UNTIL_FORMAT)
