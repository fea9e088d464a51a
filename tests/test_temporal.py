"""
Unit tests for date/time resolution.

2025-01-06 is a Monday; New York is UTC-5 in January and UTC-4 in late April.
"""

import unittest
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from oscar_ics.temporal import (
    align_meeting,
    format_until_utc,
    parse_local,
    recurrence_boundary,
    resolve_meeting,
    split_range,
    split_time_pair,
    to_local_array,
    to_utc_array,
    weekday_delta,
)

NY = ZoneInfo("America/New_York")


class TestSplitting(unittest.TestCase):
    def test_split_range(self) -> None:
        self.assertEqual(split_range("01/06/2025 - 04/25/2025"), ["01/06/2025", "04/25/2025"])
        self.assertEqual(split_range("01/06/2025 -04/25/2025"), ["01/06/2025", "04/25/2025"])

    def test_split_time_pair(self) -> None:
        self.assertEqual(split_time_pair("9:00 AM - 9:50 AM"), ["9:00AM", "9:50AM"])
        self.assertEqual(split_time_pair("12:30 pm -  1:45 pm"), ["12:30pm", "1:45pm"])


class TestWeekdayAlignment(unittest.TestCase):
    def test_start_already_on_a_listed_day(self) -> None:
        start = parse_local("01/06/2025", "9:00AM", NY)
        self.assertEqual(weekday_delta(start, ["Monday", "Wednesday"]), 0)

    def test_moves_to_nearest_listed_day(self) -> None:
        # Tuesday -> Wednesday (not the following Monday)
        start = parse_local("01/07/2025", "9:00AM", NY)
        end = parse_local("01/07/2025", "9:50AM", NY)
        new_start, new_end = align_meeting(start, end, ["Monday", "Wednesday"])
        self.assertEqual(new_start, datetime(2025, 1, 8, 9, 0, tzinfo=NY))
        self.assertEqual(new_end, datetime(2025, 1, 8, 9, 50, tzinfo=NY))
        self.assertEqual(new_start.strftime("%A"), "Wednesday")

    def test_wraps_around_the_week(self) -> None:
        # Saturday -> Monday is two days forward
        start = parse_local("01/11/2025", "10:00AM", NY)
        self.assertEqual(weekday_delta(start, ["Monday"]), 2)

    def test_aligning_twice_is_a_no_op(self) -> None:
        start = parse_local("01/09/2025", "2:00PM", NY)
        end = parse_local("01/09/2025", "3:15PM", NY)
        once = align_meeting(start, end, ["Tuesday"])
        twice = align_meeting(once[0], once[1], ["Tuesday"])
        self.assertEqual(once, twice)
        self.assertEqual(weekday_delta(once[0], ["Tuesday"]), 0)

    def test_wall_clock_kept_across_dst_change(self) -> None:
        # 2025-03-08 is a Saturday; DST starts 2025-03-09
        start = parse_local("03/08/2025", "9:00AM", NY)
        end = parse_local("03/08/2025", "9:50AM", NY)
        new_start, _ = align_meeting(start, end, ["Monday"])
        self.assertEqual((new_start.day, new_start.hour, new_start.minute), (10, 9, 0))
        self.assertEqual(to_utc_array(new_start), (2025, 3, 10, 13, 0))

    def test_unknown_days_mean_no_shift(self) -> None:
        start = parse_local("01/07/2025", "9:00AM", NY)
        self.assertEqual(weekday_delta(start, ["Someday"]), 0)


class TestRecurrenceBoundary(unittest.TestCase):
    def test_last_millisecond_of_the_day(self) -> None:
        until = recurrence_boundary("04/25/2025", NY)
        next_midnight = datetime(2025, 4, 26, tzinfo=NY)
        self.assertEqual(next_midnight - until, timedelta(milliseconds=1))

    def test_rendered_in_utc_during_dst(self) -> None:
        self.assertEqual(format_until_utc(recurrence_boundary("04/25/2025", NY)), "20250426T035959Z")

    def test_rendered_in_utc_outside_dst(self) -> None:
        self.assertEqual(format_until_utc(recurrence_boundary("01/31/2025", NY)), "20250201T045959Z")


class TestResolveMeeting(unittest.TestCase):
    def test_resolves_start_end_until(self) -> None:
        resolved = resolve_meeting(["Monday", "Wednesday"], ["9:00AM", "9:50AM"], ["01/06/2025", "04/25/2025"], NY)
        self.assertIsNotNone(resolved)
        assert resolved is not None
        start, end, until = resolved
        self.assertEqual(to_utc_array(start), (2025, 1, 6, 14, 0))
        self.assertEqual(to_local_array(end), (2025, 1, 6, 9, 50))
        self.assertEqual(format_until_utc(until), "20250426T035959Z")

    def test_incomplete_inputs_return_none(self) -> None:
        dates = ["01/06/2025", "04/25/2025"]
        self.assertIsNone(resolve_meeting([], ["9:00AM", "9:50AM"], dates, NY))
        self.assertIsNone(resolve_meeting(["Monday"], ["9:00AM"], dates, NY))
        self.assertIsNone(resolve_meeting(["Monday"], ["9:00AM", "9:50AM"], ["01/06/2025"], NY))

    def test_unparseable_time_returns_none(self) -> None:
        self.assertIsNone(resolve_meeting(["Monday"], ["TBA", "TBA"], ["01/06/2025", "04/25/2025"], NY))


if __name__ == "__main__":
    unittest.main()
