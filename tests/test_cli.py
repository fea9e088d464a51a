"""
Tests for the CLI entry points.

The PDF reader is patched out; the commands run on synthetic table rows.
"""

import json
import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from unittest import mock

from oscar_ics.cli import main

ROWS = [
    ["Spring 2025 Student Detail Schedule"],
    ["Title"],
    ["Intro to X", "CS 1301 - A", "", "12345", "01/06/2025 - 04/25/2025"],
    ["Monday, Wednesday"],
    ["9:00 AM - 9:50 AM"],
    ["Main Campus, Bldg 1, Room 101"],
    ["Research", "RES 4699 - R", "", "50001", "01/06/2025 - 04/25/2025"],
    ["Total Hours"],
]


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.pdf = self.tmp / "schedule.pdf"
        self.pdf.write_bytes(b"%PDF-1.4\n")
        self.extract = mock.Mock(return_value=[list(r) for r in ROWS])
        for target in ("oscar_ics.cli.extract_document_rows", "oscar_ics.parse.extract_document_rows"):
            patcher = mock.patch(target, new=self.extract)
            patcher.start()
            self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(list(argv))
        return ctx.exception.code, out.getvalue()

    def read_ics(self, path: Path) -> str:
        # keep the CRLF line endings the calendar is written with
        return path.read_bytes().decode("utf-8")

    def test_export_writes_ics(self) -> None:
        target = self.tmp / "out.ics"
        code, output = self.run_cli("export", str(self.pdf), "-o", str(target))
        self.assertEqual(code, 0)
        self.assertIn("Exported 1 events", output)
        text = self.read_ics(target)
        self.assertIn("RRULE:FREQ=WEEKLY;BYDAY=MO,WE;INTERVAL=1;UNTIL=20250426T035959Z", text)
        self.assertIn("X-WR-CALNAME:Spring 2025 Student Detail Schedule", text)

    def test_export_local_mode(self) -> None:
        target = self.tmp / "out.ics"
        code, _ = self.run_cli("--local", "export", str(self.pdf), "-o", str(target))
        self.assertEqual(code, 0)
        self.assertIn("DTSTART:20250106T090000\r\n", self.read_ics(target))

    def test_export_course_without_times_fails(self) -> None:
        target = self.tmp / "out.ics"
        code, output = self.run_cli("export", str(self.pdf), "-o", str(target), "--crn", "50001")
        self.assertEqual(code, 1)
        self.assertIn("Export failed", output)
        self.assertFalse(target.exists())

    def test_parse_writes_json(self) -> None:
        target = self.tmp / "courses.json"
        code, output = self.run_cli("parse", str(self.pdf), "--json", str(target))
        self.assertEqual(code, 0)
        self.assertIn("1 of 2 course(s) can be exported.", output)
        data = json.loads(target.read_text(encoding="utf-8"))
        self.assertEqual([c["crn"] for c in data], [12345, 50001])
        self.assertEqual(data[0]["day"], ["Monday", "Wednesday"])
        self.assertEqual(data[0]["start"], "2025-01-06T09:00:00-05:00")
        self.assertFalse(data[1]["exportable"])

    def test_rows_prints_cells(self) -> None:
        code, output = self.run_cli("rows", str(self.pdf))
        self.assertEqual(code, 0)
        self.assertIn("Intro to X | CS 1301 - A |  | 12345 | 01/06/2025 - 04/25/2025", output)

    def test_no_table_found(self) -> None:
        self.extract.return_value = [["Nothing here"]]
        code, output = self.run_cli("export", str(self.pdf))
        self.assertEqual(code, 1)
        self.assertIn("No schedule table found.", output)

    def test_missing_pdf(self) -> None:
        code, output = self.run_cli("parse", str(self.tmp / "missing.pdf"))
        self.assertEqual(code, 1)
        self.assertIn("File not found", output)

    def test_unreadable_pdf(self) -> None:
        self.extract.side_effect = OSError("truncated file")
        for command in ("rows", "parse", "export"):
            code, output = self.run_cli(command, str(self.pdf))
            self.assertEqual(code, 1)
            self.assertIn("Could not read PDF", output)

    def test_bad_timezone(self) -> None:
        code, _ = self.run_cli("--timezone", "Not/AZone", "parse", str(self.pdf))
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
