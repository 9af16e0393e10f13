"""
Aggregation engine (entries -> ordered module-by-date matrix).

Given the normalized entries of a calendar:
- keep the entries of the selected date range / modules
- group them by (module_code, cohort)
- sum hours per (session_type, day) inside each group
- build the shared date axis and order the modules

The engine is a pure function: it never mutates its input and keeps no state,
so callers simply recompute it whenever the range, filter or sort order changes.
An empty input gives an empty result, never an exception.
"""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Collection, Dict, Iterable, List, Optional

from coursehours.model import (
    NO_DATE_SENTINEL,
    AggregatedModule,
    AggregationResult,
    ModuleKey,
    ScheduleEntry,
)


SORT_BY_DATE = "date"
SORT_BY_CODE = "code"
SORT_POLICIES = (SORT_BY_DATE, SORT_BY_CODE)


def _day_bound(date_key: str, end_of_day: bool) -> datetime:
    day = datetime.strptime(date_key, "%Y-%m-%d").date()
    clock = time.max if end_of_day else time.min
    return datetime.combine(day, clock, tzinfo=timezone.utc)


def filter_by_date_range(
    entries: Iterable[ScheduleEntry],
    start_key: Optional[str] = None,
    end_key: Optional[str] = None,
) -> List[ScheduleEntry]:
    """
    Keep entries starting between start_key 00:00 and end_key 23:59:59 (UTC), both inclusive.

    A missing bound leaves that side open.
    Raises ValueError for bounds that are not 'YYYY-MM-DD'.
    """
    lower = _day_bound(start_key, end_of_day=False) if start_key else None
    upper = _day_bound(end_key, end_of_day=True) if end_key else None

    out: List[ScheduleEntry] = []
    for entry in entries:
        if lower is not None and entry.start_instant < lower:
            continue
        if upper is not None and entry.start_instant > upper:
            continue
        out.append(entry)
    return out


def module_keys(entries: Iterable[ScheduleEntry]) -> List[ModuleKey]:
    """
    Sorted distinct (module_code, cohort) keys, e.g. for a filter menu.
    """
    return sorted({entry.module_key for entry in entries})


def _group(entries: Iterable[ScheduleEntry]) -> List[AggregatedModule]:
    # dicts keep first-appearance order, which is the tie-break for sorting
    groups: Dict[ModuleKey, AggregatedModule] = {}
    for entry in entries:
        mod = groups.get(entry.module_key)
        if mod is None:
            mod = AggregatedModule(
                module_name=entry.module_name,
                module_code=entry.module_code,
                cohort=entry.cohort,
            )
            groups[entry.module_key] = mod
        mod.hours.add(entry.session_type, entry.date_key, entry.duration_hours)
    return list(groups.values())


def _order(modules: List[AggregatedModule], date_axis: List[str], sort_policy: str) -> List[AggregatedModule]:
    if sort_policy == SORT_BY_DATE:
        first_dates = {
            mod.key: mod.first_session_date_key(date_axis) or NO_DATE_SENTINEL for mod in modules
        }
        return sorted(modules, key=lambda mod: first_dates[mod.key])
    if sort_policy == SORT_BY_CODE:
        return sorted(modules, key=lambda mod: mod.module_code)
    raise ValueError(f"Unknown sort policy: {sort_policy!r} (expected one of {SORT_POLICIES})")


def aggregate(
    entries: Iterable[ScheduleEntry],
    sort_policy: str = SORT_BY_DATE,
    module_filter: Optional[Collection[ModuleKey]] = None,
) -> AggregationResult:
    """
    Build the module-by-date matrix.

    module_filter=None keeps every module; an empty collection keeps none.
    """
    if module_filter is not None:
        wanted = set(module_filter)
        selected = [e for e in entries if e.module_key in wanted]
    else:
        selected = list(entries)

    modules = _group(selected)
    date_axis = sorted({entry.date_key for entry in selected})

    return AggregationResult(
        ordered_modules=_order(modules, date_axis, sort_policy),
        date_axis=date_axis,
    )
