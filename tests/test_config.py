import logging
import unittest

from oscar_ics.config import Settings, load_settings
from oscar_ics.logging_setup import resolve_log_level


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = load_settings(env={})
        self.assertEqual(s, Settings())
        self.assertEqual(s.timezone, "America/New_York")
        self.assertEqual(s.output_mode, "utc")

    def test_environment_overrides(self) -> None:
        s = load_settings(env={"OSCAR_ICS_TIMEZONE": "America/Chicago", "OSCAR_ICS_OUTPUT_MODE": "LOCAL"})
        self.assertEqual(s.timezone, "America/Chicago")
        self.assertEqual(s.output_mode, "local")

    def test_arguments_beat_environment(self) -> None:
        s = load_settings(env={"OSCAR_ICS_TIMEZONE": "America/Chicago"}, timezone="Europe/Zurich")
        self.assertEqual(s.timezone, "Europe/Zurich")

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            load_settings(env={}, timezone="Not/AZone")
        with self.assertRaises(ValueError):
            load_settings(env={}, output_mode="floating")


class TestLogLevel(unittest.TestCase):
    def test_names_and_numbers(self) -> None:
        self.assertEqual(resolve_log_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_log_level("15"), 15)
        self.assertEqual(resolve_log_level(logging.ERROR), logging.ERROR)

    def test_unknown_falls_back(self) -> None:
        self.assertEqual(resolve_log_level("loud", default=logging.INFO), logging.INFO)
        self.assertEqual(resolve_log_level("  ", default=logging.INFO), logging.INFO)


if __name__ == "__main__":
    unittest.main()
