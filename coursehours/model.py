"""
Central data model definitions used across the project.

This module defines the canonical structure of schedule entries and of the
aggregated module matrix so that:
- the calendar import, the aggregation and every export share the same field names
- the hours of one module/type/day are summed in exactly one place (HoursTable.add)
- consumers (terminal table, markdown, PDF) never re-derive totals on their own
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

APPRENTICE = "apprentice"
STANDARD = "standard"
COHORTS = (APPRENTICE, STANDARD)

# Administrative marker token for apprenticeship groups (exact, case-sensitive)
APPRENTICE_MARKER = "APP"

TUTORIAL_TYPES = ("TDA", "TDB")
PRACTICAL_TYPES = ("TP1", "TP2", "TP3")
ASSESSMENT_TYPE = "Controle"
KNOWN_SESSION_TYPES = TUTORIAL_TYPES + PRACTICAL_TYPES + (ASSESSMENT_TYPE,)

# Plain lectures carry no type tag
UNSPECIFIED_TYPE = "N/A"

# Sorts after every real YYYY-MM-DD key
NO_DATE_SENTINEL = "9999-99-99"

ModuleKey = Tuple[str, str]


def module_label(module_code: str, cohort: str) -> str:
    """
    Human readable module key, e.g. "R5.09 (standard)".

    Used in the module filter, in the session file and as colour key.
    """
    return f"{module_code} ({cohort})"


def parse_module_label(label: str) -> ModuleKey:
    """
    Inverse of module_label().

    Raises ValueError if the label does not end with a known cohort in brackets.
    """
    text = label.strip()
    for cohort in COHORTS:
        suffix = f" ({cohort})"
        if text.endswith(suffix):
            code = text[: -len(suffix)].strip()
            if code:
                return code, cohort
    raise ValueError(f"Invalid module label: {label!r}")


def date_key_of(instant: datetime) -> str:
    """
    Return the UTC calendar day of an instant as 'YYYY-MM-DD'.
    """
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return instant.date().isoformat()


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@dataclass
class ScheduleEntry:
    """
    Represents one teaching session occurrence decoded from the calendar.

    start_instant is always timezone-aware (UTC). The display times are
    for humans only and never take part in any computation.
    """

    start_instant: datetime
    duration_hours: float
    display_start_time: str
    display_end_time: str
    raw_title: str
    module_name: str
    module_code: str
    session_type: str
    cohort: str

    @property
    def date_key(self) -> str:
        return date_key_of(self.start_instant)

    @property
    def module_key(self) -> ModuleKey:
        return self.module_code, self.cohort

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-safe representation (start_instant as ISO-8601 string).
        """
        return {
            "start_instant": self.start_instant.isoformat(),
            "duration_hours": self.duration_hours,
            "display_start_time": self.display_start_time,
            "display_end_time": self.display_end_time,
            "raw_title": self.raw_title,
            "module_name": self.module_name,
            "module_code": self.module_code,
            "session_type": self.session_type,
            "cohort": self.cohort,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleEntry":
        """
        Rehydrate an entry written by to_dict().

        Raises KeyError / ValueError / TypeError on malformed input;
        the storage layer turns these into SessionFileError.
        """
        start = datetime.fromisoformat(str(data["start_instant"]))
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        else:
            start = start.astimezone(timezone.utc)

        return cls(
            start_instant=start,
            duration_hours=float(data["duration_hours"]),
            display_start_time=str(data.get("display_start_time", "")),
            display_end_time=str(data.get("display_end_time", "")),
            raw_title=str(data.get("raw_title", "")),
            module_name=str(data.get("module_name", "")),
            module_code=str(data["module_code"]),
            session_type=str(data.get("session_type") or UNSPECIFIED_TYPE),
            cohort=str(data.get("cohort") or STANDARD),
        )


# ---------------------------------------------------------------------------
# Aggregated matrix
# ---------------------------------------------------------------------------


def session_type_rank(session_type: str) -> int:
    # lecture, tutorial, practical, assessment, anything else
    if session_type == UNSPECIFIED_TYPE:
        return 0
    if session_type in TUTORIAL_TYPES:
        return 1
    if session_type.startswith("TP"):
        return 2
    if session_type == ASSESSMENT_TYPE:
        return 3
    return 4


def session_type_sort_key(session_type: str) -> Tuple[int, str]:
    return session_type_rank(session_type), session_type


class HoursTable:
    """
    Hours of one module keyed by (session_type, date_key).

    add() is the only way to write a cell: hours for the same
    type and day accumulate by addition.
    """

    def __init__(self) -> None:
        self._cells: Dict[Tuple[str, str], float] = {}

    def add(self, session_type: str, date_key: str, hours: float) -> None:
        key = (session_type, date_key)
        self._cells[key] = self._cells.get(key, 0.0) + hours

    def get(self, session_type: str, date_key: str) -> Optional[float]:
        return self._cells.get((session_type, date_key))

    def items(self) -> Iterator[Tuple[Tuple[str, str], float]]:
        return iter(self._cells.items())

    def session_types(self) -> List[str]:
        seen: Dict[str, None] = {}
        for session_type, _ in self._cells:
            seen.setdefault(session_type, None)
        return list(seen)

    def date_keys(self) -> List[str]:
        return sorted({date_key for _, date_key in self._cells})

    def hours_on(self, date_key: str) -> float:
        return sum(h for (_, d), h in self._cells.items() if d == date_key)

    def type_total(self, session_type: str) -> float:
        return sum(h for (t, _), h in self._cells.items() if t == session_type)

    def total(self) -> float:
        return sum(self._cells.values())

    def nested(self) -> Dict[str, Dict[str, float]]:
        out: Dict[str, Dict[str, float]] = {}
        for (session_type, date_key), hours in self._cells.items():
            out.setdefault(session_type, {})[date_key] = hours
        return out

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HoursTable):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"HoursTable({self._cells!r})"


@dataclass
class AggregatedModule:
    """
    One row group of the output matrix, keyed by (module_code, cohort).
    """

    module_name: str
    module_code: str
    cohort: str
    hours: HoursTable = field(default_factory=HoursTable)

    @property
    def key(self) -> ModuleKey:
        return self.module_code, self.cohort

    @property
    def label(self) -> str:
        return module_label(self.module_code, self.cohort)

    @property
    def hours_by_type_and_date(self) -> Dict[str, Dict[str, float]]:
        return self.hours.nested()

    @property
    def last_session_date_key(self) -> str:
        """
        Latest day with a recorded cell, "" for an empty module.
        """
        keys = self.hours.date_keys()
        return keys[-1] if keys else ""

    def first_session_date_key(self, date_axis: List[str]) -> Optional[str]:
        """
        Earliest axis day on which the module has non-zero hours in any type.
        """
        taught = {date_key for (_, date_key), hours in self.hours.items() if hours}
        for date_key in date_axis:
            if date_key in taught:
                return date_key
        return None

    def session_types(self) -> List[str]:
        return sorted(self.hours.session_types(), key=session_type_sort_key)

    def total_hours(self) -> float:
        return self.hours.total()

    def type_total(self, session_type: str) -> float:
        return self.hours.type_total(session_type)

    def type_share(self, session_type: str) -> float:
        """
        Percentage (0-100) of the module total taken by one session type.
        """
        total = self.total_hours()
        if total <= 0:
            return 0.0
        return self.type_total(session_type) / total * 100

    def cumulative_hours(self, date_axis: List[str]) -> Dict[str, float]:
        """
        Running total of the module hours along the shared date axis.

        Each day's value includes that day's hours across all types.
        Days after the module's last session are left out on purpose,
        as are leading days where nothing has been taught yet.
        """
        last = self.last_session_date_key
        running = 0.0
        out: Dict[str, float] = {}
        for date_key in date_axis:
            if date_key > last:
                break
            running += self.hours.hours_on(date_key)
            if running > 0:
                out[date_key] = running
        return out


@dataclass
class AggregationResult:
    """
    Output of the aggregation engine.

    date_axis is shared by every module: it holds the distinct days of
    all filtered entries, not only those of one module.
    """

    ordered_modules: List[AggregatedModule]
    date_axis: List[str]

    @property
    def is_empty(self) -> bool:
        return not self.ordered_modules

    def module(self, module_code: str, cohort: str) -> Optional[AggregatedModule]:
        for mod in self.ordered_modules:
            if mod.key == (module_code, cohort):
                return mod
        return None
