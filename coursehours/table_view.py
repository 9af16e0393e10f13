from __future__ import annotations

from datetime import date
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coursehours.matrix import (
    CUMULATIVE_ROW,
    MODULE_ROW,
    SPACER_ROW,
    build_matrix,
    format_cell,
    format_date_column,
    format_hours,
    format_share,
)
from coursehours.model import AggregationResult


def render_table(result: AggregationResult, today: Optional[date] = None) -> Table:
    """
    Build a rich Table of the module matrix.

    Past days are dimmed and each module's last session day is highlighted in red.
    """
    today_key = (today or date.today()).isoformat()

    table = Table(title="Teaching hours", box=box.SIMPLE)
    table.add_column("Type")
    table.add_column("Total", justify="right")
    for date_key in result.date_axis:
        style = "dim" if date_key < today_key else None
        table.add_column(format_date_column(date_key), justify="center", header_style=style)

    for row in build_matrix(result):
        if row.kind == SPACER_ROW:
            table.add_section()
            continue

        if row.kind == MODULE_ROW:
            cells = ["" for _ in row.cells]
            table.add_row(f"[bold]{escape(row.label)}[/]", f"[bold]{format_hours(row.total or 0.0)}h[/]", *cells)
            continue

        cells = []
        for date_key, value in zip(result.date_axis, row.cells):
            text = format_cell(value)
            if text and date_key == row.last_session_date_key:
                text = f"[red]{text}[/]"
            cells.append(text)

        if row.kind == CUMULATIVE_ROW:
            cells = [f"[green]{c}[/]" if c else "" for c in cells]
            table.add_row(f"[green]{row.label} >[/]", "", *cells)
        else:
            total = f"{format_share(row.share or 0.0)} [yellow]{format_hours(row.total or 0.0)}h[/]"
            table.add_row(f"  {escape(row.label)}", total, *cells)

    return table


def print_table(result: AggregationResult, console: Optional[Console] = None) -> None:
    (console or Console()).print(render_table(result))
