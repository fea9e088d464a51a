"""
Exception hierarchy.

Parsing problems are recovered locally and never raise; only the export stage
reports errors back to the user, because they need a different selection or
input rather than a retry.
"""


class ScheduleError(Exception):
    """Base exception for all errors surfaced to the user."""

    pass


class ExportPreconditionError(ScheduleError):
    """Nothing exportable was selected, or a selected course has no day/time."""

    pass


class CalendarSerializationError(ScheduleError):
    """The calendar serializer rejected an event. No file is written."""

    pass
