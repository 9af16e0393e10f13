"""
Matrix layout shared by every output (terminal table, markdown, PDF).

build_matrix() turns an AggregationResult into a flat list of rows:

    module      R5.09 (standard)   total            (no day cells)
    type        TDA                total + share    hours per day
    ...
    cumulative  Cumul              -                running total per day
    spacer

Consumers only format these rows. They never re-aggregate entries,
so every export shows exactly the same numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from coursehours.model import AggregationResult


MODULE_ROW = "module"
TYPE_ROW = "type"
CUMULATIVE_ROW = "cumulative"
SPACER_ROW = "spacer"

CUMULATIVE_LABEL = "Cumul"


@dataclass
class MatrixRow:
    kind: str
    label: str
    total: Optional[float]
    share: Optional[float]
    cells: List[Optional[float]]
    module_label: str = ""
    last_session_date_key: str = ""


def build_matrix(result: AggregationResult) -> List[MatrixRow]:
    axis = result.date_axis
    rows: List[MatrixRow] = []

    for mod in result.ordered_modules:
        label = mod.label
        last = mod.last_session_date_key

        rows.append(MatrixRow(MODULE_ROW, label, mod.total_hours(), None, [None] * len(axis), label, last))

        for session_type in mod.session_types():
            cells: List[Optional[float]] = []
            for date_key in axis:
                hours = mod.hours.get(session_type, date_key)
                # zero and missing both render as an empty cell
                cells.append(hours if hours else None)
            rows.append(
                MatrixRow(
                    TYPE_ROW,
                    session_type,
                    mod.type_total(session_type),
                    mod.type_share(session_type),
                    cells,
                    label,
                    last,
                )
            )

        cumulative = mod.cumulative_hours(axis)
        rows.append(
            MatrixRow(
                CUMULATIVE_ROW,
                CUMULATIVE_LABEL,
                None,
                None,
                [cumulative.get(date_key) for date_key in axis],
                label,
                last,
            )
        )
        rows.append(MatrixRow(SPACER_ROW, "", None, None, [None] * len(axis), label, last))

    return rows


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_hours(value: float) -> str:
    """
    French number style: 3.5 -> '3,5', 2.0 -> '2', at most 3 decimals.
    """
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text.replace(".", ",")


def format_share(share: float) -> str:
    # half-up, like toFixed(0)
    return f"{int(math.floor(share + 0.5))}%"


def format_date_column(date_key: str) -> str:
    """
    'YYYY-MM-DD' -> 'DD/MM'.
    """
    return datetime.strptime(date_key, "%Y-%m-%d").strftime("%d/%m")


def format_cell(value: Optional[float]) -> str:
    return "" if value is None else format_hours(value)
