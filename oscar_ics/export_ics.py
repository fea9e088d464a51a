"""
iCalendar (.ics) export.

We convert selected courses into weekly recurring events that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Each exportable course becomes one VEVENT with
    RRULE:FREQ=WEEKLY;BYDAY=<days>;INTERVAL=1;UNTIL=<last instant, UTC>
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from oscar_ics.config import Settings
from oscar_ics.errors import CalendarSerializationError, ExportPreconditionError
from oscar_ics.model import CalendarEvent, CalendarHeader, Course, DateTimeArray
from oscar_ics.temporal import DAY_TO_BYDAY, format_until_utc, to_local_array, to_utc_array

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select_courses(courses: Sequence[Course], crns: Optional[Iterable[int]] = None) -> List[Course]:
    """
    Pick the courses to export.

    Without CRNs every exportable course is selected. Explicitly selected
    CRNs must exist and must have days and times.
    """
    if crns is None:
        exportable = [c for c in courses if c.exportable and c.until is not None]
        if not exportable:
            raise ExportPreconditionError("Please select at least one course to export.")
        return exportable

    wanted = list(dict.fromkeys(crns))
    if not wanted:
        raise ExportPreconditionError("Please select at least one course to export.")

    selected: List[Course] = []
    for crn in wanted:
        matches = [c for c in courses if c.crn == crn]
        if not matches:
            raise ExportPreconditionError(f"CRN {crn} is not in this schedule.")
        for course in matches:
            if not (course.exportable and course.until is not None):
                raise ExportPreconditionError(
                    f"CRN {crn} ({course.details}) has no day/time information and cannot be exported."
                )
        selected.extend(matches)
    return selected


# ---------------------------------------------------------------------------
# Event building
# ---------------------------------------------------------------------------


def build_recurrence_rule(days: Sequence[str], until: datetime) -> str:
    """
    Weekly rule for the given days, keeping the order they were listed in.
    """
    by_days = ",".join(DAY_TO_BYDAY[d] for d in days if d in DAY_TO_BYDAY)
    return f"FREQ=WEEKLY;BYDAY={by_days};INTERVAL=1;UNTIL={format_until_utc(until)}"


def course_to_event(course: Course, output_mode: str = "utc") -> Optional[CalendarEvent]:
    """
    Project one course onto a calendar event, or None if it lacks day/start/end/until.
    """
    if not course.day or course.start is None or course.end is None or course.until is None:
        return None

    if output_mode == "local":
        start, end = to_local_array(course.start), to_local_array(course.end)
    else:
        start, end = to_utc_array(course.start), to_utc_array(course.end)

    location = ", ".join(part for part in (course.location, course.room) if part) or None

    return CalendarEvent(
        title=course.details,
        description=course.title,
        start=start,
        end=end,
        start_input_type=output_mode,
        start_output_type=output_mode,
        end_input_type=output_mode,
        end_output_type=output_mode,
        location=location,
        recurrence_rule=build_recurrence_rule(course.day, course.until),
    )


def build_events(courses: Iterable[Course], output_mode: str = "utc") -> List[CalendarEvent]:
    """
    Build events for all courses; incomplete courses are skipped silently.
    """
    events: List[CalendarEvent] = []
    for course in courses:
        event = course_to_event(course, output_mode)
        if event is None:
            logger.debug("skipping CRN %s: missing day/time information", course.crn)
            continue
        events.append(event)
    return events


def build_header(settings: Settings, calendar_name: Optional[str] = None) -> CalendarHeader:
    return CalendarHeader(
        product_id=settings.product_id,
        cal_name=calendar_name or settings.default_calendar_name,
    )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _fold(line: str, limit: int = 75) -> List[str]:
    """
    Fold a content line into chunks of at most `limit` octets (RFC 5545 3.1).
    """
    out: List[str] = []
    current = ""
    size = 0
    for ch in line:
        ch_size = len(ch.encode("utf-8"))
        # continuation lines start with a space, which counts towards the limit
        budget = limit if not out else limit - 1
        if size + ch_size > budget:
            out.append(current)
            current, size = "", 0
        current += ch
        size += ch_size
    out.append(current)
    return [out[0]] + [" " + chunk for chunk in out[1:]]


def _check_array(name: str, value: DateTimeArray) -> datetime:
    if len(value) != 5 or not all(isinstance(v, int) for v in value):
        raise CalendarSerializationError(f"{name} must be five integers [y, m, d, h, min], got {value!r}")
    year, month, day, hour, minute = value
    if year < 1 or not 1 <= month <= 12 or not 1 <= day <= 31 or not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise CalendarSerializationError(f"{name} is out of range: {value!r}")
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError as exc:
        raise CalendarSerializationError(f"{name} is not a valid date: {value!r}") from exc


def _format_array(value: DateTimeArray, value_type: str) -> str:
    year, month, day, hour, minute = value
    text = f"{year:04d}{month:02d}{day:02d}T{hour:02d}{minute:02d}00"
    return text + "Z" if value_type == "utc" else text


def render_calendar(events: Sequence[CalendarEvent], header: CalendarHeader) -> str:
    """
    Render events as iCalendar text. Raises CalendarSerializationError on invalid events.
    """
    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append(f"PRODID:{header.product_id}")
    lines.append("CALSCALE:GREGORIAN")
    lines.append(f"METHOD:{header.method}")
    lines.append(f"X-WR-CALNAME:{_ics_escape(header.cal_name)}")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    for ev in events:
        if not ev.title.strip():
            raise CalendarSerializationError("Event title must not be empty")
        start = _check_array("start", ev.start)
        end = _check_array("end", ev.end)
        if end < start:
            raise CalendarSerializationError(f"Event {ev.title!r} ends before it starts")
        if not ev.recurrence_rule.startswith("FREQ="):
            raise CalendarSerializationError(f"Invalid recurrence rule: {ev.recurrence_rule!r}")

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{uuid.uuid4()}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{_format_array(ev.start, ev.start_output_type)}")
        lines.append(f"DTEND:{_format_array(ev.end, ev.end_output_type)}")
        lines.append(f"SUMMARY:{_ics_escape(ev.title.strip())}")
        if ev.description.strip():
            lines.append(f"DESCRIPTION:{_ics_escape(ev.description.strip())}")
        if ev.location:
            lines.append(f"LOCATION:{_ics_escape(ev.location)}")
        lines.append(f"RRULE:{ev.recurrence_rule}")
        lines.append(f"TRANSP:{ev.transp}")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")

    folded: list[str] = []
    for line in lines:
        folded.extend(_fold(line))
    # ICS standard uses CRLF
    return "\r\n".join(folded) + "\r\n"


def export_events_to_ics(events: Sequence[CalendarEvent], header: CalendarHeader, out_path: str | Path) -> int:
    """
    Export events to an .ics file. Returns number of exported events.

    Nothing is written when the calendar cannot be rendered.
    """
    text = render_calendar(events, header)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8", newline="")
    return len(events)


def export_courses(
    courses: Sequence[Course],
    out_path: str | Path,
    settings: Settings,
    calendar_name: Optional[str] = None,
    crns: Optional[Iterable[int]] = None,
) -> int:
    """
    Select, build and write in one step. Raises ScheduleError subclasses.
    """
    selected = select_courses(courses, crns)
    events = build_events(selected, settings.output_mode)
    return export_events_to_ics(events, build_header(settings, calendar_name), out_path)
