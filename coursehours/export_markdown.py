"""
Markdown export.

Writes the module matrix as one GitHub-style markdown table:

    | Module/Type | Total | 08/09 | 09/09 |
    |:---|:---:|:---:|:---:|
    | **R5.09 (standard)** | **3,5h** |  |  |
    | TDA | 3,5h (100%) | 3,5 |  |
    | *Cumul* |  | 3,5 |  |
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from coursehours.errors import EmptyScheduleError
from coursehours.matrix import (
    CUMULATIVE_ROW,
    MODULE_ROW,
    SPACER_ROW,
    TYPE_ROW,
    build_matrix,
    format_cell,
    format_date_column,
    format_hours,
    format_share,
)
from coursehours.model import AggregationResult


def _md_row(cells: List[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def render_markdown(result: AggregationResult) -> str:
    """
    Render the matrix as markdown text. Raises EmptyScheduleError for an empty result.
    """
    if result.is_empty:
        raise EmptyScheduleError("No data to export.")

    axis = result.date_axis
    lines: List[str] = []
    lines.append(_md_row(["Module/Type", "Total"] + [format_date_column(d) for d in axis]))
    lines.append("|" + "|".join([":---", ":---:"] + [":---:"] * len(axis)) + "|")

    for row in build_matrix(result):
        day_cells = [format_cell(v) for v in row.cells]

        if row.kind == MODULE_ROW:
            lines.append(_md_row([f"**{row.label}**", f"**{format_hours(row.total or 0.0)}h**"] + day_cells))
        elif row.kind == TYPE_ROW:
            total = f"{format_hours(row.total or 0.0)}h ({format_share(row.share or 0.0)})"
            lines.append(_md_row([row.label, total] + day_cells))
        elif row.kind == CUMULATIVE_ROW:
            lines.append(_md_row([f"*{row.label}*", ""] + day_cells))
        elif row.kind == SPACER_ROW:
            lines.append(_md_row(["", ""] + day_cells))

    return "\n".join(lines) + "\n"


def export_markdown(result: AggregationResult, out_path: str | Path) -> Path:
    """
    Write the markdown table to out_path and return the path.
    """
    out = Path(out_path)
    text = render_markdown(result)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    return out
