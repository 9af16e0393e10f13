"""
Calendar import (.ics -> ScheduleEntry list).

- Decodes the calendar container with the icalendar library
- Extracts EACH VEVENT as exactly ONE raw event (no RRULE expansion)
- Normalizes every raw event into a ScheduleEntry:
  - hours come from the wall-clock fields of start/end rebuilt as UTC,
    so the local timezone of the machine never shifts durations or days
  - HH:MM display times come from the real (possibly zoned) instant
  - module / type / cohort come from classify_title()

Decoding is all-or-nothing: one broken event makes the whole file invalid.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Union

import icalendar

from coursehours.classify import classify_title
from coursehours.errors import CalendarDecodeError
from coursehours.model import ScheduleEntry


INVALID_CALENDAR_MESSAGE = "The calendar file is invalid."

DateOrDateTime = Union[date, datetime]


@dataclass
class RawEvent:
    """
    One VEVENT as decoded by icalendar, before any interpretation.
    """

    summary: str
    start: DateOrDateTime
    end: DateOrDateTime


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _event_end(component: icalendar.Event, start: DateOrDateTime) -> DateOrDateTime:
    dtend = component.get("DTEND")
    if dtend is not None:
        return dtend.dt
    duration = component.get("DURATION")
    if duration is not None:
        return start + duration.dt
    return start


def decode_calendar(text: str) -> List[RawEvent]:
    """
    Parse .ics text into raw events.

    Raises CalendarDecodeError if the text is not a calendar
    or if any event lacks a start.
    """
    try:
        calendar = icalendar.Calendar.from_ical(text)
        events: List[RawEvent] = []
        for component in calendar.walk("VEVENT"):
            dtstart = component.get("DTSTART")
            if dtstart is None:
                raise ValueError("VEVENT without DTSTART")
            start = dtstart.dt
            end = _event_end(component, start)
            summary = str(component.get("SUMMARY", ""))
            events.append(RawEvent(summary=summary, start=start, end=end))
        return events
    except Exception as exc:
        raise CalendarDecodeError(INVALID_CALENDAR_MESSAGE) from exc


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def utc_from_fields(value: DateOrDateTime) -> datetime:
    """
    Rebuild the wall-clock fields of a decoded value as a UTC instant.

    The zone of the value is ignored on purpose: two values that read
    10:00 and 12:00 are always 2 hours apart and fall on the same day key.
    """
    if isinstance(value, datetime):
        return datetime(
            value.year, value.month, value.day,
            value.hour, value.minute, value.second,
            tzinfo=timezone.utc,
        )
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def display_time(value: DateOrDateTime) -> str:
    """
    'HH:MM' of the real instant in the local zone (naive values are shown as-is).
    """
    if not isinstance(value, datetime):
        return "00:00"
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%H:%M")


def normalize_event(raw: RawEvent) -> ScheduleEntry:
    start = utc_from_fields(raw.start)
    end = utc_from_fields(raw.end)
    hours = (end - start) / timedelta(hours=1)

    info = classify_title(raw.summary)

    return ScheduleEntry(
        start_instant=start,
        duration_hours=max(hours, 0.0),
        display_start_time=display_time(raw.start),
        display_end_time=display_time(raw.end),
        raw_title=raw.summary,
        module_name=info.module_name,
        module_code=info.module_code,
        session_type=info.session_type,
        cohort=info.cohort,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_ics_content(text: str) -> List[ScheduleEntry]:
    """
    Decode .ics text and normalize every event.
    """
    return [normalize_event(raw) for raw in decode_calendar(text)]


def load_calendar_file(path: Union[str, Path]) -> List[ScheduleEntry]:
    """
    Read an .ics file from disk and return its entries.

    Unreadable files are reported like unparsable ones.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CalendarDecodeError(f"Could not read calendar file: {path}") from exc
    return parse_ics_content(text)
