"""
PDF export.

Draws the module matrix on a single page whose size follows the table,
like a snapshot of the on-screen dashboard (nothing is cut off, no pagination).
Module header rows are filled with the module colour.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from coursehours.colors import css_color_to_rgb
from coursehours.errors import EmptyScheduleError
from coursehours.matrix import (
    CUMULATIVE_ROW,
    MODULE_ROW,
    SPACER_ROW,
    TYPE_ROW,
    MatrixRow,
    build_matrix,
    format_cell,
    format_date_column,
    format_hours,
    format_share,
)
from coursehours.model import AggregationResult


MARGIN = 20
ROW_HEIGHT = 18
LABEL_WIDTH = 150
TOTAL_WIDTH = 90
DAY_WIDTH = 42
FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 8

HEADER_FILL = colors.HexColor("#f3f4f6")
DEFAULT_MODULE_FILL = colors.HexColor("#d1d5db")
LAST_SESSION_FILL = colors.HexColor("#fecaca")
CUMULATIVE_TEXT = colors.HexColor("#16a34a")


def _label_cells(row: MatrixRow) -> List[str]:
    if row.kind == MODULE_ROW:
        return [row.label, f"{format_hours(row.total or 0.0)}h"]
    if row.kind == TYPE_ROW:
        return [row.label, f"{format_share(row.share or 0.0)}  {format_hours(row.total or 0.0)}h"]
    if row.kind == CUMULATIVE_ROW:
        return [f"{row.label} >", ""]
    return ["", ""]


def _module_fill(label: str, module_colors: Dict[str, str]):
    rgb = css_color_to_rgb(module_colors.get(label, ""))
    if rgb is None:
        return DEFAULT_MODULE_FILL, colors.black
    return colors.Color(*rgb), colors.white


def export_pdf(
    result: AggregationResult,
    out_path: str | Path,
    module_colors: Optional[Dict[str, str]] = None,
) -> Path:
    """
    Write the matrix to a one-page PDF and return the path.

    Raises EmptyScheduleError for an empty result.
    """
    if result.is_empty:
        raise EmptyScheduleError("No data to export.")

    module_colors = module_colors or {}
    axis = result.date_axis
    rows = build_matrix(result)

    widths = [LABEL_WIDTH, TOTAL_WIDTH] + [DAY_WIDTH] * len(axis)
    page_width = 2 * MARGIN + sum(widths)
    page_height = 2 * MARGIN + ROW_HEIGHT * (len(rows) + 1)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(out), pagesize=(page_width, page_height))
    c.setTitle("Teaching hours")

    # reportlab's origin is bottom-left, rows are drawn top-down
    def row_top(index: int) -> float:
        return page_height - MARGIN - index * ROW_HEIGHT

    def draw_row(index: int, texts: List[str], fill, text_color, bold: bool = False, day_fills=None) -> None:
        y = row_top(index) - ROW_HEIGHT
        x = MARGIN
        for col, (width, text) in enumerate(zip(widths, texts)):
            cell_fill = fill
            if day_fills is not None and col >= 2 and day_fills[col - 2] is not None:
                cell_fill = day_fills[col - 2]
            if cell_fill is not None:
                c.setFillColor(cell_fill)
                c.rect(x, y, width, ROW_HEIGHT, stroke=0, fill=1)
            c.setStrokeColor(colors.lightgrey)
            c.rect(x, y, width, ROW_HEIGHT, stroke=1, fill=0)
            if text:
                c.setFillColor(text_color)
                c.setFont(FONT_BOLD if bold else FONT, FONT_SIZE)
                if col == 0:
                    c.drawString(x + 4, y + 6, text)
                else:
                    c.drawCentredString(x + width / 2, y + 6, text)
            x += width

    draw_row(0, ["Type", "Total"] + [format_date_column(d) for d in axis], HEADER_FILL, colors.black, bold=True)

    for i, row in enumerate(rows, start=1):
        texts = _label_cells(row) + [format_cell(v) for v in row.cells]
        if row.kind == MODULE_ROW:
            fill, text_color = _module_fill(row.label, module_colors)
            draw_row(i, texts, fill, text_color, bold=True)
        elif row.kind == SPACER_ROW:
            draw_row(i, texts, None, colors.black)
        else:
            day_fills = [LAST_SESSION_FILL if d == row.last_session_date_key else None for d in axis]
            text_color = CUMULATIVE_TEXT if row.kind == CUMULATIVE_ROW else colors.black
            draw_row(i, texts, colors.white, text_color, bold=row.kind == CUMULATIVE_ROW, day_fills=day_fills)

    c.showPage()
    c.save()
    return out
