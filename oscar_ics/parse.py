"""
Parsing (table rows -> structured courses).

- Finds the schedule table between the "Title" header row and the
  "Total Hours" footer row
- Classifies every row in between (course header, date range, days, time,
  location, or unrecognized)
- Assembles the classified rows into one Course per meeting pattern

Course blocks in the PDF are irregular: details may sit one per row, wrap
across rows, or a course may list two meeting patterns back to back. A
meeting that already has days and a time is closed as soon as a new pattern
starts, so no fixed per-course row count is needed.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from datetime import tzinfo
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from oscar_ics.config import Settings, load_settings
from oscar_ics.layout import extract_document_rows
from oscar_ics.model import Course, Meeting, ParseResult, Row
from oscar_ics.temporal import WEEKDAYS, resolve_meeting, split_range, split_time_pair

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row classification
# ---------------------------------------------------------------------------


class RowKind(Enum):
    HEADER = "header"
    DATE_RANGE = "date_range"
    DAY = "day"
    TIME = "time"
    LOCATION = "location"
    UNRECOGNIZED = "unrecognized"


DATE_RANGE_RE = re.compile(r"\d{2}/\d{2}/\d{4}\s*-\s*\d{2}/\d{2}/\d{4}")
TIME_RE = re.compile(r":\d{2}\s*[AP]M", re.IGNORECASE)

# Location lines carry an asterisk or digits after a comma; instructor
# "Last, First" lines have neither. Best-effort: a name containing digits
# still reads as a location.
LOCATION_HINT_RE = re.compile(r"\*|,.*\d")


def _joined(row: Row) -> str:
    return " ".join(row).strip()


def _parse_days(text: str) -> Optional[List[str]]:
    """
    "Monday, Wednesday" -> ["Monday", "Wednesday"]; None unless every part is a weekday.
    """
    parts = [p.strip() for p in text.split(",")]
    if parts and all(p in WEEKDAYS for p in parts):
        return parts
    return None


def classify_row(row: Row, header_label: str = "Title") -> RowKind:
    """
    Classify one table row. Checks run in priority order; the first match wins.
    """
    if len(row) in (5, 6) and row[0] != header_label:
        return RowKind.HEADER

    text = _joined(row)
    if DATE_RANGE_RE.fullmatch(text):
        return RowKind.DATE_RANGE
    if _parse_days(text) is not None:
        return RowKind.DAY
    if TIME_RE.search(text):
        return RowKind.TIME
    if len(row) == 1 and "," in text and LOCATION_HINT_RE.search(text):
        return RowKind.LOCATION
    return RowKind.UNRECOGNIZED


def split3(text: str, sep: str = ",") -> List[str]:
    """
    Split into [first, middle, last]; the middle keeps any inner separators.
    Raises ValueError when there are fewer than three parts.
    """
    parts = text.split(sep)
    if len(parts) < 3:
        raise ValueError(f"Expected at least three {sep!r}-separated parts: {text!r}")
    return [parts[0], sep.join(parts[1:-1]), parts[-1]]


def _parse_crn(cell: str) -> int:
    try:
        return int(cell.strip())
    except ValueError:
        logger.warning("CRN %r is not a number; using -1", cell)
        return -1


# ---------------------------------------------------------------------------
# Assembly (CORE LOGIC)
# ---------------------------------------------------------------------------


class CourseAssembler:
    """
    Single-pass accumulator turning classified table rows into courses.

    State carried between rows:
    - the base fields of the current course (title, details, crn)
    - the meeting being filled in
    - the current date range, which applies until it is restated
    """

    def __init__(self, tz: tzinfo, header_label: str = "Title") -> None:
        self.tz = tz
        self.header_label = header_label
        self.courses: List[Course] = []
        self.base: Optional[Course] = None
        self.meeting: Optional[Meeting] = None
        self.date_strings: List[str] = []
        self._emitted_for_base = 0

    def feed(self, row: Row) -> RowKind:
        kind = classify_row(row, self.header_label)

        if kind is RowKind.HEADER:
            self._start_course(row)
            return kind

        # Anything before the first course row has nothing to attach to
        if self.base is None:
            return RowKind.UNRECOGNIZED

        text = _joined(row)

        if kind is RowKind.DATE_RANGE:
            self._close_complete_meeting()
            self.date_strings = split_range(text)
            self._current_meeting().date_strings = list(self.date_strings)
        elif kind is RowKind.DAY:
            self._close_complete_meeting()
            self._current_meeting().days = _parse_days(text)
        elif kind is RowKind.TIME:
            self._current_meeting().times = split_time_pair("".join(row))
        elif kind is RowKind.LOCATION:
            meeting = self._current_meeting()
            if meeting.room is not None:
                return RowKind.UNRECOGNIZED
            self._apply_location(meeting, row[0])

        return kind

    def finish(self) -> List[Course]:
        self._close_course()
        return self.courses

    # -- transitions --------------------------------------------------------

    def _start_course(self, row: Row) -> None:
        self._close_course()

        cells = list(row)
        if len(cells) == 6:
            # Date range wrapped by the extractor into two cells
            cells[4] = f"{cells[4]}{cells[5]}"

        self.base = Course(crn=_parse_crn(cells[3]), title=cells[0], details=cells[1])
        self.date_strings = split_range(cells[4])
        self.meeting = None
        self._emitted_for_base = 0
        logger.debug("course %s: %s / %s", self.base.crn, self.base.title, self.base.details)

    def _current_meeting(self) -> Meeting:
        if self.meeting is None:
            self.meeting = Meeting()
        return self.meeting

    def _close_complete_meeting(self) -> None:
        # A fresh pattern is starting; keep the finished one instead of overwriting it
        if self.meeting is not None and self.meeting.is_complete():
            self._finalize_meeting()

    def _close_course(self) -> None:
        if self.base is None:
            return
        self._finalize_meeting()
        if self._emitted_for_base == 0:
            # Listed, but not exportable
            self.courses.append(self.base)

    def _finalize_meeting(self) -> None:
        meeting, self.meeting = self.meeting, None
        if self.base is None or meeting is None:
            return

        date_strings = meeting.date_strings if meeting.date_strings else self.date_strings
        resolved = resolve_meeting(meeting.days or [], meeting.times or [], date_strings, self.tz)
        if resolved is None:
            logger.debug("course %s: dropping incomplete meeting %r", self.base.crn, meeting)
            return

        start, end, until = resolved
        self.courses.append(
            replace(
                self.base,
                day=tuple(meeting.days or ()),
                start=start,
                end=end,
                until=until,
                campus=meeting.campus,
                location=meeting.location,
                room=meeting.room,
            )
        )
        self._emitted_for_base += 1

    @staticmethod
    def _apply_location(meeting: Meeting, text: str) -> None:
        try:
            campus, location, room = (part.strip() for part in split3(text, ","))
        except ValueError:
            logger.debug("location %r has no campus/room parts", text)
            meeting.location = text.strip()
            return
        meeting.campus, meeting.location, meeting.room = campus, location, room


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_table_bounds(rows: Sequence[Row], settings: Settings) -> Optional[tuple[int, int]]:
    """
    Return (header_index, footer_index), or None when the table is missing.
    """
    head_idx = next((i for i, row in enumerate(rows) if row[0] == settings.header_label), -1)
    tail_idx = next((i for i, row in enumerate(rows) if row[0] == settings.footer_label), -1)
    if head_idx == -1 or tail_idx == -1 or tail_idx <= head_idx:
        return None
    return head_idx, tail_idx


def find_calendar_name(rows: Sequence[Row], head_idx: int) -> Optional[str]:
    """
    The nearest row above the table header whose first cell ends with "Schedule".
    """
    for i in range(head_idx - 1, -1, -1):
        line = rows[i][0]
        if line.lower().endswith("schedule"):
            return line
    return None


def parse_rows(rows: Sequence[Row], settings: Optional[Settings] = None) -> ParseResult:
    """
    Parse the document's full row sequence into courses.

    Returns an empty result when the table header or footer is missing.
    """
    settings = settings or load_settings()

    bounds = find_table_bounds(rows, settings)
    if bounds is None:
        logger.warning(
            "No schedule table found (need a %r row followed by a %r row)",
            settings.header_label,
            settings.footer_label,
        )
        return ParseResult()

    head_idx, tail_idx = bounds
    assembler = CourseAssembler(settings.tz, settings.header_label)
    for row in rows[head_idx + 1 : tail_idx]:
        kind = assembler.feed(row)
        logger.debug("%-12s %s", kind.value, row)

    return ParseResult(
        courses=assembler.finish(),
        calendar_name=find_calendar_name(rows, head_idx),
    )


def parse_schedule_pdf(pdf_path: str | Path, settings: Optional[Settings] = None) -> ParseResult:
    """
    Full pipeline: PDF -> rows -> courses.
    """
    rows = extract_document_rows(pdf_path)
    logger.debug("%s: %d rows", pdf_path, len(rows))
    return parse_rows(rows, settings)


def course_to_dict(course: Course) -> Dict[str, Any]:
    """
    JSON-friendly view of a course (datetimes as ISO 8601 strings).
    """
    return {
        "crn": course.crn,
        "title": course.title,
        "details": course.details,
        "day": list(course.day) if course.day else None,
        "start": course.start.isoformat() if course.start else None,
        "end": course.end.isoformat() if course.end else None,
        "until": course.until.isoformat() if course.until else None,
        "campus": course.campus,
        "location": course.location,
        "room": course.room,
        "exportable": course.exportable,
    }


def write_courses_json(courses: Sequence[Course], out_path: str | Path) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps([course_to_dict(c) for c in courses], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return out

