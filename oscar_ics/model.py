"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects that flow through
the pipeline so that:
- all modules share the same field names
- every stage produces new records instead of editing the previous stage's output

    fragments -> rows -> courses -> calendar events
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple

# One reconstructed table row: the non-empty cell strings, left to right.
Row = List[str]

# Wire format for a date-time: (year, month, day, hour, minute)
DateTimeArray = Tuple[int, int, int, int, int]


@dataclass(frozen=True)
class TextFragment:
    """
    One positioned text run from a PDF page.

    `text` is None for marked-content items that carry no literal string.
    `y` is the baseline in PDF coordinates (larger y = higher on the page).
    """

    text: Optional[str]
    x: float
    y: float

    @classmethod
    def from_word(cls, word: dict[str, Any], page_height: float) -> "TextFragment":
        """
        Build a fragment from a pdfplumber word dict.

        The baseline comes from the text matrix of the word's first character;
        without one we approximate it from the word's bottom edge.
        """
        chars = word.get("chars") or []
        matrix = chars[0].get("matrix") if chars else None
        if matrix:
            y = float(matrix[5])
        else:
            y = float(page_height) - float(word["bottom"])
        return cls(text=word.get("text"), x=float(word["x0"]), y=y)


@dataclass
class Meeting:
    """
    One scheduling pattern of a course while it is being assembled.

    All fields are optional until the meeting is finalized.
    """

    days: Optional[List[str]] = None
    times: Optional[List[str]] = None
    campus: Optional[str] = None
    location: Optional[str] = None
    room: Optional[str] = None
    date_strings: Optional[List[str]] = None

    def is_complete(self) -> bool:
        return bool(self.days) and bool(self.times)


@dataclass(frozen=True)
class Course:
    """
    One resolved course meeting, as shown in listings and exported.
    """

    crn: int
    title: str
    details: str
    day: Optional[Tuple[str, ...]] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    until: Optional[datetime] = None
    campus: Optional[str] = None
    location: Optional[str] = None
    room: Optional[str] = None

    @property
    def exportable(self) -> bool:
        return bool(self.day) and self.start is not None and self.end is not None


@dataclass
class CalendarEvent:
    """
    One recurring event in the shape the calendar serializer expects.
    """

    title: str
    description: str
    start: DateTimeArray
    end: DateTimeArray
    recurrence_rule: str
    start_input_type: str = "utc"
    start_output_type: str = "utc"
    end_input_type: str = "utc"
    end_output_type: str = "utc"
    location: Optional[str] = None
    transp: str = "OPAQUE"


@dataclass
class CalendarHeader:
    product_id: str
    cal_name: str
    method: str = "PUBLISH"


@dataclass
class ParseResult:
    """
    Output of one document parse. Empty when no schedule table was found.
    """

    courses: List[Course] = field(default_factory=list)
    calendar_name: Optional[str] = None
