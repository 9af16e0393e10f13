"""
Exceptions raised by coursehours.

The CLI catches CourseHoursError and prints its message, so every
message here should be readable by an end user.
"""

from __future__ import annotations


class CourseHoursError(Exception):
    """Base class for all user-facing errors."""


class CalendarDecodeError(CourseHoursError):
    """The calendar file could not be read or parsed."""


class SessionFileError(CourseHoursError):
    """The saved session file is missing required fields or is not valid JSON."""


class EmptyScheduleError(CourseHoursError):
    """An export was requested but there is nothing to export."""
