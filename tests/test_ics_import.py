"""
Unit tests for calendar decoding and event normalization.

Contract:
- durations come from the wall-clock fields rebuilt as UTC (no zone shift)
- a broken calendar fails as a whole with CalendarDecodeError
- odd titles never fail, they degrade to fallback fields
"""

import tempfile
import unittest
from datetime import date, datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

from coursehours.errors import CalendarDecodeError
from coursehours.ics_import import (
    INVALID_CALENDAR_MESSAGE,
    RawEvent,
    decode_calendar,
    load_calendar_file,
    normalize_event,
    parse_ics_content,
)
from coursehours.model import APPRENTICE, STANDARD


def _calendar(*events: list[str]) -> str:
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//coursehours tests//EN"]
    for i, ev in enumerate(events):
        lines += ["BEGIN:VEVENT", f"UID:test-{i}", "DTSTAMP:20250901T000000Z"] + ev + ["END:VEVENT"]
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


SAMPLE = _calendar(
    ["SUMMARY:R5.09 Virtualisation TDA", "DTSTART:20250908T080000Z", "DTEND:20250908T100000Z"],
    ["SUMMARY:SAe 3.OSC.03 APP TP2", "DTSTART:20250909T133000Z", "DTEND:20250909T170000Z"],
)


class TestNormalizeEvent(unittest.TestCase):
    def test_floating_times(self) -> None:
        raw = RawEvent("R5.09 TDA", datetime(2025, 9, 8, 8, 0), datetime(2025, 9, 8, 10, 30))
        entry = normalize_event(raw)

        self.assertEqual(entry.start_instant, datetime(2025, 9, 8, 8, 0, tzinfo=timezone.utc))
        self.assertEqual(entry.duration_hours, 2.5)
        self.assertEqual(entry.display_start_time, "08:00")
        self.assertEqual(entry.display_end_time, "10:30")
        self.assertEqual(entry.date_key, "2025-09-08")
        self.assertEqual(entry.raw_title, "R5.09 TDA")
        self.assertEqual(entry.module_code, "R5.09")
        self.assertEqual(entry.session_type, "TDA")
        self.assertEqual(entry.cohort, STANDARD)

    def test_zoned_times_keep_their_wall_clock_day(self) -> None:
        # 23:30 in Paris is 21:30 UTC, but the day key must stay the local day
        paris = ZoneInfo("Europe/Paris")
        raw = RawEvent("R1.01 TDA", datetime(2025, 9, 8, 23, 30, tzinfo=paris), datetime(2025, 9, 9, 1, 0, tzinfo=paris))
        entry = normalize_event(raw)

        self.assertEqual(entry.date_key, "2025-09-08")
        self.assertEqual(entry.duration_hours, 1.5)
        self.assertEqual(entry.start_instant.tzinfo, timezone.utc)

    def test_end_before_start_gives_zero_hours(self) -> None:
        raw = RawEvent("R1.01", datetime(2025, 9, 8, 10, 0), datetime(2025, 9, 8, 9, 0))
        self.assertEqual(normalize_event(raw).duration_hours, 0.0)

    def test_all_day_event(self) -> None:
        entry = normalize_event(RawEvent("Journée SAe 1.01", date(2025, 9, 8), date(2025, 9, 9)))
        self.assertEqual(entry.duration_hours, 24.0)
        self.assertEqual(entry.display_start_time, "00:00")
        self.assertEqual(entry.module_code, "Journée")


class TestParseIcsContent(unittest.TestCase):
    def test_sample_calendar(self) -> None:
        entries = parse_ics_content(SAMPLE)
        self.assertEqual(len(entries), 2)

        by_code = {e.module_code: e for e in entries}
        self.assertEqual(by_code["R5.09"].duration_hours, 2.0)
        self.assertEqual(by_code["R5.09"].module_name, "R5.09 Virtualisation")
        self.assertEqual(by_code["SAe 3.OSC.03"].duration_hours, 3.5)
        self.assertEqual(by_code["SAe 3.OSC.03"].cohort, APPRENTICE)
        self.assertEqual(by_code["SAe 3.OSC.03"].session_type, "TP2")

    def test_tzid_event_uses_wall_clock_fields(self) -> None:
        text = _calendar(
            ["SUMMARY:R2.01 TP1", "DTSTART;TZID=Europe/Paris:20250910T100000", "DTEND;TZID=Europe/Paris:20250910T113000"]
        )
        (entry,) = parse_ics_content(text)
        self.assertEqual(entry.start_instant, datetime(2025, 9, 10, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(entry.duration_hours, 1.5)

    def test_duration_without_dtend(self) -> None:
        text = _calendar(["SUMMARY:R2.01 TDB", "DTSTART:20250910T080000Z", "DURATION:PT1H30M"])
        (entry,) = parse_ics_content(text)
        self.assertEqual(entry.duration_hours, 1.5)

    def test_event_without_end_has_zero_hours(self) -> None:
        text = _calendar(["SUMMARY:R2.01", "DTSTART:20250910T080000Z"])
        (entry,) = parse_ics_content(text)
        self.assertEqual(entry.duration_hours, 0.0)

    def test_calendar_without_events(self) -> None:
        self.assertEqual(parse_ics_content(_calendar()), [])


class TestDecodeFailures(unittest.TestCase):
    def test_garbage_is_invalid(self) -> None:
        with self.assertRaises(CalendarDecodeError) as ctx:
            decode_calendar("this is not a calendar")
        self.assertEqual(str(ctx.exception), INVALID_CALENDAR_MESSAGE)

    def test_event_without_start_invalidates_the_file(self) -> None:
        text = _calendar(
            ["SUMMARY:R5.09 TDA", "DTSTART:20250908T080000Z", "DTEND:20250908T100000Z"],
            ["SUMMARY:broken"],
        )
        with self.assertRaises(CalendarDecodeError):
            parse_ics_content(text)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(CalendarDecodeError):
                load_calendar_file(Path(d) / "missing.ics")

    def test_load_calendar_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "edt.ics"
            p.write_text(SAMPLE, encoding="utf-8")
            self.assertEqual(len(load_calendar_file(p)), 2)


if __name__ == "__main__":
    unittest.main()
