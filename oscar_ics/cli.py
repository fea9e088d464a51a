"""
CLI (Command Line Interface).

Commands:

    oscar-ics rows <schedule.pdf>
    oscar-ics parse <schedule.pdf> [--json courses.json]
    oscar-ics export <schedule.pdf> [-o out.ics] [--crn 12345 ...]

Global options select the civil timezone (--timezone), local wall-clock
output instead of UTC (--local) and the log level (--log-level).
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

from rich import box
from rich.console import Console
from rich.table import Table

from oscar_ics.config import Settings, load_settings
from oscar_ics.errors import ScheduleError
from oscar_ics.export_ics import export_courses
from oscar_ics.layout import PDF_READ_ERRORS, extract_document_rows
from oscar_ics.logging_setup import configure_logging
from oscar_ics.model import Course, ParseResult, Row
from oscar_ics.parse import parse_schedule_pdf, write_courses_json

logger = logging.getLogger(__name__)

console = Console()


T = TypeVar("T")


def _read_pdf(pdf: Path, reader: Callable[[Path], T]) -> Optional[T]:
    """
    Run `reader` on the PDF; print a message and return None if it cannot be read.
    """
    if not pdf.exists():
        print(f"File not found: {pdf}")
        return None
    try:
        return reader(pdf)
    except PDF_READ_ERRORS as exc:
        logger.debug("failed to read %s", pdf, exc_info=True)
        print(f"Could not read PDF {pdf}: {exc}")
        return None


def _load_rows(pdf: Path) -> Optional[list[Row]]:
    return _read_pdf(pdf, extract_document_rows)


def _load_result(pdf: Path, settings: Settings) -> Optional[ParseResult]:
    return _read_pdf(pdf, lambda path: parse_schedule_pdf(path, settings))


def _schedule_text(course: Course) -> tuple[str, str]:
    days = ", ".join(course.day) if course.day else "Unknown"
    if course.start and course.end:
        times = f"{course.start.strftime('%I:%M %p')} - {course.end.strftime('%I:%M %p')}"
    else:
        times = "Unknown"
    return days, times


def _location_text(course: Course) -> tuple[str, str]:
    campus = course.campus or "Unknown"
    if course.location and course.room:
        place = f"{course.location}, Room {course.room}"
    else:
        place = course.location or course.room or "Unknown"
    return campus, place


def _courses_table(courses: list[Course], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Title")
    table.add_column("Course Details")
    table.add_column("CRN", justify="right")
    table.add_column("Schedule")
    table.add_column("Location")

    for c in sorted(courses, key=lambda c: c.details):
        days, times = _schedule_text(c)
        campus, place = _location_text(c)
        style = None if c.exportable else "red"
        table.add_row(c.title, c.details, str(c.crn), f"{days}\n{times}", f"{campus}\n{place}", style=style)
    return table


def _cmd_rows(args: argparse.Namespace) -> int:
    """
    Print the reconstructed rows (useful when a PDF does not parse as expected).
    """
    rows = _load_rows(args.pdf)
    if rows is None:
        return 1
    for row in rows:
        print(" | ".join(row))
    return 0


def _cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print the parsed courses, optionally writing them as JSON.
    """
    result = _load_result(args.pdf, settings)
    if result is None:
        return 1
    if not result.courses:
        print("No schedule table found.")
        return 1

    title = result.calendar_name or settings.default_calendar_name
    console.print(_courses_table(result.courses, title))

    exportable = sum(1 for c in result.courses if c.exportable)
    print(f"{exportable} of {len(result.courses)} course(s) can be exported.")

    if args.json:
        out = write_courses_json(result.courses, args.json)
        print(f"JSON written to {out}")
    return 0


def _cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    """
    Export the selected courses into an iCalendar (.ics) file.
    """
    result = _load_result(args.pdf, settings)
    if result is None:
        return 1
    if not result.courses:
        print("No schedule table found.")
        return 1

    calendar_name = result.calendar_name or settings.default_calendar_name
    out_path = args.out if args.out else Path(f"{calendar_name}.ics")

    try:
        n = export_courses(result.courses, out_path, settings, calendar_name, crns=args.crn)
    except ScheduleError as exc:
        print(f"Export failed: {exc}")
        return 1

    print(f"Exported {n} events to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="oscar-ics", description="Convert an OSCAR schedule PDF to ICS")
    parser.add_argument("--timezone", type=str, default=None, help="Civil timezone of the schedule (e.g. America/New_York)")
    parser.add_argument("--local", action="store_true", help="Write local wall-clock times instead of UTC")
    parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    p_rows = sub.add_parser("rows", help="Print the table rows reconstructed from the PDF")
    p_rows.add_argument("pdf", type=Path, help="Schedule PDF")

    p_parse = sub.add_parser("parse", help="List the courses found in the PDF")
    p_parse.add_argument("pdf", type=Path, help="Schedule PDF")
    p_parse.add_argument("--json", type=Path, default=None, help="Also write the courses to this JSON file")

    p_export = sub.add_parser("export", help="Export courses to .ics")
    p_export.add_argument("pdf", type=Path, help="Schedule PDF")
    p_export.add_argument("-o", "--out", type=Path, default=None, help="Output file path (default: <calendar name>.ics)")
    p_export.add_argument(
        "--crn", type=int, action="append", default=None, help="Only export this CRN (repeatable; default: all)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        settings = load_settings(timezone=args.timezone, output_mode="local" if args.local else None)
    except ValueError as exc:
        print(str(exc))
        raise SystemExit(2)

    if args.command == "rows":
        raise SystemExit(_cmd_rows(args))
    if args.command == "parse":
        raise SystemExit(_cmd_parse(args, settings))
    if args.command == "export":
        raise SystemExit(_cmd_export(args, settings))

    raise SystemExit(2)
