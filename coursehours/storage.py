"""
Session save / restore.

A session file is a JSON document that stores:
- every decoded ScheduleEntry (instants as ISO-8601 strings)
- the user's display preferences (sort order, date range, colours, ...)

Design rationale:
- the .ics export only has to be decoded once; the session file can be
  reopened later and produces exactly the same aggregation
- preferences travel with the data, so a shared session looks the same everywhere

Loading is strict about the data (entries, module colours) and lenient about
preferences: a missing preference falls back to its default.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from coursehours.aggregate import SORT_POLICIES
from coursehours.errors import SessionFileError
from coursehours.model import APPRENTICE, STANDARD, ScheduleEntry


DEFAULT_TABLE_WIDTH = 100
DEFAULT_TOOLTIP_DELAY = 200
DEFAULT_SORT_ORDER = "date"
DEFAULT_THEME = "light"
DEFAULT_COHORT_COLORS = {APPRENTICE: "#ef4444", STANDARD: "#0ea5e9"}
DEFAULT_PAST_DATE_COLORS = {"light": "#e5e7eb", "dark": "#111827"}


def school_year_bounds(today: Optional[date] = None) -> Tuple[str, str]:
    """
    Default date range of the current school year as ('YYYY-MM-DD', 'YYYY-MM-DD').

    The year runs from the last Monday of August to the last Friday of July.
    Before August, "current" means the year that started last calendar year.
    """
    today = today or date.today()
    start_year = today.year if today.month >= 8 else today.year - 1

    last_of_august = date(start_year, 8, 31)
    start = last_of_august - timedelta(days=last_of_august.weekday())

    last_of_july = date(start_year + 1, 7, 31)
    end = last_of_july - timedelta(days=(last_of_july.weekday() - 4) % 7)

    return start.isoformat(), end.isoformat()


@dataclass
class SessionState:
    """
    Everything a session file holds.
    """

    entries: List[ScheduleEntry]
    module_colors: Dict[str, str] = field(default_factory=dict)
    table_width: int = DEFAULT_TABLE_WIDTH
    tooltip_delay: int = DEFAULT_TOOLTIP_DELAY
    sort_order: str = DEFAULT_SORT_ORDER
    cohort_colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COHORT_COLORS))
    past_date_colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PAST_DATE_COLORS))
    theme: str = DEFAULT_THEME
    default_start_date: str = ""
    default_end_date: str = ""
    available_modules: List[str] = field(default_factory=list)
    selected_modules: List[str] = field(default_factory=list)
    file_name: str = ""

    def __post_init__(self) -> None:
        if not self.default_start_date or not self.default_end_date:
            start, end = school_year_bounds()
            self.default_start_date = self.default_start_date or start
            self.default_end_date = self.default_end_date or end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "table_width": self.table_width,
            "tooltip_delay": self.tooltip_delay,
            "sort_order": self.sort_order,
            "module_colors": dict(self.module_colors),
            "cohort_colors": dict(self.cohort_colors),
            "past_date_colors": dict(self.past_date_colors),
            "theme": self.theme,
            "default_start_date": self.default_start_date,
            "default_end_date": self.default_end_date,
            "available_modules": list(self.available_modules),
            "selected_modules": list(self.selected_modules),
            "file_name": self.file_name,
        }


def save_session(state: SessionState, path: str | Path) -> None:
    """
    Save a session to a JSON file. Creates parent directories if needed.
    """
    session_path = Path(path)
    session_path.parent.mkdir(parents=True, exist_ok=True)
    session_path.write_text(json.dumps(state.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")


def load_session(path: str | Path) -> SessionState:
    """
    Load a session written by save_session().

    Raises SessionFileError if the file cannot be read, is not JSON,
    lacks the entries / module colours, or holds a malformed entry.
    """
    session_path = Path(path)

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise SessionFileError(f"Could not read session file: {session_path}") from exc
    except json.JSONDecodeError as exc:
        raise SessionFileError("Invalid or corrupted session file.") from exc

    # entries and colours must be present; an empty list / dict is fine
    if (
        not isinstance(data, dict)
        or not isinstance(data.get("entries"), list)
        or not isinstance(data.get("module_colors"), dict)
    ):
        raise SessionFileError("Invalid or corrupted session file.")

    try:
        entries = [ScheduleEntry.from_dict(e) for e in data["entries"]]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SessionFileError("Invalid or corrupted session file.") from exc

    start, end = school_year_bounds()

    # every preference falls back to its default when missing or empty
    try:
        return _state_from_dict(data, entries, start, end, session_path.name)
    except (TypeError, ValueError) as exc:
        raise SessionFileError("Invalid or corrupted session file.") from exc


def _sort_order(value: Any) -> str:
    # unknown orders would make the aggregation fail later
    text = str(value or "")
    return text if text in SORT_POLICIES else DEFAULT_SORT_ORDER


def _state_from_dict(data: Dict[str, Any], entries: List[ScheduleEntry], start: str, end: str, name: str) -> SessionState:
    return SessionState(
        entries=entries,
        module_colors={str(k): str(v) for k, v in data["module_colors"].items()},
        table_width=int(data.get("table_width") or DEFAULT_TABLE_WIDTH),
        tooltip_delay=int(data.get("tooltip_delay") or DEFAULT_TOOLTIP_DELAY),
        sort_order=_sort_order(data.get("sort_order")),
        cohort_colors=dict(data.get("cohort_colors") or DEFAULT_COHORT_COLORS),
        past_date_colors=dict(data.get("past_date_colors") or DEFAULT_PAST_DATE_COLORS),
        theme=str(data.get("theme") or DEFAULT_THEME),
        default_start_date=str(data.get("default_start_date") or start),
        default_end_date=str(data.get("default_end_date") or end),
        available_modules=[str(x) for x in data.get("available_modules") or []],
        selected_modules=[str(x) for x in data.get("selected_modules") or []],
        file_name=str(data.get("file_name") or name),
    )
