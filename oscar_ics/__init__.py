"""OSCAR to ICS: turn a printed OSCAR schedule PDF into recurring calendar events."""

from oscar_ics.parse import parse_rows, parse_schedule_pdf

__all__ = ["parse_rows", "parse_schedule_pdf"]
