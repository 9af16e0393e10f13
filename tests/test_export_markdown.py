"""
Tests for the matrix rows and the markdown export built on them.
"""

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from coursehours.aggregate import aggregate
from coursehours.errors import EmptyScheduleError
from coursehours.export_markdown import export_markdown, render_markdown
from coursehours.matrix import (
    CUMULATIVE_ROW,
    MODULE_ROW,
    SPACER_ROW,
    TYPE_ROW,
    build_matrix,
    format_date_column,
    format_hours,
    format_share,
)
from coursehours.model import STANDARD, ScheduleEntry


def _entry(code: str, session_type: str, day: str, hours: float) -> ScheduleEntry:
    return ScheduleEntry(
        start_instant=datetime.strptime(day, "%Y-%m-%d").replace(hour=8, tzinfo=timezone.utc),
        duration_hours=hours,
        display_start_time="08:00",
        display_end_time="",
        raw_title=f"{code} {session_type}",
        module_name=code,
        module_code=code,
        session_type=session_type,
        cohort=STANDARD,
    )


ENTRIES = [
    _entry("R5.09", "TDA", "2025-09-08", 2),
    _entry("R5.09", "TDA", "2025-09-08", 1.5),
    _entry("R5.09", "TP1", "2025-09-09", 1),
]


class TestFormatting(unittest.TestCase):
    def test_format_hours(self) -> None:
        self.assertEqual(format_hours(3.5), "3,5")
        self.assertEqual(format_hours(2.0), "2")
        self.assertEqual(format_hours(0.25), "0,25")
        self.assertEqual(format_hours(1 / 3), "0,333")

    def test_format_share_rounds_half_up(self) -> None:
        self.assertEqual(format_share(50.5), "51%")
        self.assertEqual(format_share(12.4), "12%")
        self.assertEqual(format_share(0.0), "0%")

    def test_format_date_column(self) -> None:
        self.assertEqual(format_date_column("2025-09-08"), "08/09")


class TestBuildMatrix(unittest.TestCase):
    def test_row_layout(self) -> None:
        rows = build_matrix(aggregate(ENTRIES))
        self.assertEqual([r.kind for r in rows], [MODULE_ROW, TYPE_ROW, TYPE_ROW, CUMULATIVE_ROW, SPACER_ROW])

        module, tda, tp1, cumul, _ = rows
        self.assertEqual(module.label, "R5.09 (standard)")
        self.assertEqual(module.total, 4.5)
        self.assertEqual(tda.cells, [3.5, None])
        self.assertEqual(tp1.cells, [None, 1.0])
        self.assertEqual(cumul.cells, [3.5, 4.5])


class TestMarkdown(unittest.TestCase):
    def test_render(self) -> None:
        md = render_markdown(aggregate(ENTRIES))
        expected = "\n".join(
            [
                "| Module/Type | Total | 08/09 | 09/09 |",
                "|:---|:---:|:---:|:---:|",
                "| **R5.09 (standard)** | **4,5h** |  |  |",
                "| TDA | 3,5h (78%) | 3,5 |  |",
                "| TP1 | 1h (22%) |  | 1 |",
                "| *Cumul* |  | 3,5 | 4,5 |",
                "|  |  |  |  |",
            ]
        ) + "\n"
        self.assertEqual(md, expected)

    def test_cumulative_row_is_truncated_after_last_session(self) -> None:
        entries = ENTRIES + [_entry("R1.01", "TDA", "2025-09-10", 2)]
        md = render_markdown(aggregate(entries, sort_policy="code"))
        lines = md.splitlines()

        # R1.01 comes first with "code" ordering; its cumulative starts on its only day
        self.assertEqual(lines[2], "| **R1.01 (standard)** | **2h** |  |  |  |")
        self.assertIn("| *Cumul* |  |  |  | 2 |", lines)
        # R5.09 stops on 09/09 and leaves 10/09 empty
        self.assertIn("| *Cumul* |  | 3,5 | 4,5 |  |", lines)

    def test_empty_result_raises(self) -> None:
        with self.assertRaises(EmptyScheduleError):
            render_markdown(aggregate([]))

    def test_export_writes_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "sub" / "hours.md"
            export_markdown(aggregate(ENTRIES), out)
            text = out.read_text(encoding="utf-8")
            self.assertTrue(text.startswith("| Module/Type | Total |"))
            self.assertIn("| TDA | 3,5h (78%) | 3,5 |  |", text)


if __name__ == "__main__":
    unittest.main()
