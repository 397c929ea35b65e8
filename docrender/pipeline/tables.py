from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from reportlab.lib import colors

from .layout import Cursor, PageLayout
from .themes import FONT_SCALE, SPACING_SCALE

MIN_FLEX_WIDTH = 60.0


@dataclass(frozen=True)
class Column:
    header: str
    width: Optional[float] = None  # None = takes the remaining width
    align: str = "left"


@dataclass(frozen=True)
class TableStyle:
    header_fill: str = "table_header"   # theme colour keys
    header_text: Optional[str] = None   # None = white
    bordered: bool = False
    font_size: float = FONT_SCALE["body"]
    header_size: float = FONT_SCALE["body"]
    padding: float = SPACING_SCALE["sm"] + 1


def column_widths(columns: Sequence[Column], total_width: float) -> List[float]:
    fixed = sum(col.width or 0.0 for col in columns)
    flexible = [col for col in columns if col.width is None]
    share = max(MIN_FLEX_WIDTH, (total_width - fixed) / len(flexible)) if flexible else 0.0
    return [col.width if col.width is not None else share for col in columns]


def _cell_align(layout: PageLayout, column: Column, index: int) -> str:
    if index == 0 and layout.direction == "rtl":
        return {"left": "right", "right": "left"}.get(column.align, column.align)
    return column.align


def draw_table(
    layout: PageLayout,
    columns: Sequence[Column],
    rows: Sequence[Sequence[str]],
    style: TableStyle = TableStyle(),
) -> Cursor:
    """Draw a header row and alternating body rows at the layout cursor.

    Columns are laid out from the reading-start edge, so under rtl the first
    column sits at the right. Flexible cells wrap; a row that does not fit
    moves to a new page and the header row is drawn again there. A row taller
    than a whole page is split line by line across pages. Returns the
    cursor just below the last row, which may be on a later page than the
    one the table started on.
    """
    widths = column_widths(columns, layout.content_width)
    offsets = [sum(widths[:i]) for i in range(len(widths))]
    table_width = sum(widths)
    pad = style.padding
    header_h = layout.leading(style.header_size) + 2 * pad
    body_lh = layout.leading(style.font_size)
    header_text = layout.color(style.header_text) if style.header_text else colors.white
    border = layout.color("border")

    def cell_box(i: int) -> float:
        return layout.span_x(offsets[i], widths[i])

    def cell_text_x(i: int, align: str) -> float:
        left = cell_box(i)
        if align == "right":
            return left + widths[i] - pad
        if align == "center":
            return left + widths[i] / 2
        return left + pad

    def draw_header() -> None:
        top = layout.y
        canv = layout.canv
        canv.setFillColor(layout.color(style.header_fill))
        canv.rect(layout.span_x(0, table_width), top - header_h, table_width, header_h, stroke=0, fill=1)
        if style.bordered:
            canv.setStrokeColor(border)
            canv.setLineWidth(0.5)
            for i in range(len(columns)):
                canv.rect(cell_box(i), top - header_h, widths[i], header_h, stroke=1, fill=0)
        for i, column in enumerate(columns):
            align = _cell_align(layout, column, i)
            layout.draw_text(
                cell_text_x(i, align),
                top - pad - style.header_size,
                column.header,
                style.header_size,
                bold=True,
                color=header_text,
                align=align,
            )
        layout.y = top - header_h

    def wrap_row(row: Sequence[str]) -> List[List[str]]:
        cells = [str(value) for value in row]
        return [
            layout.wrap(cells[i], style.font_size, width=widths[i] - 2 * pad) if col.width is None else [cells[i]]
            for i, col in enumerate(columns)
        ]

    def row_height(cell_lines: Sequence[Sequence[str]]) -> float:
        return max(len(lines) for lines in cell_lines) * body_lh + 2 * pad

    def draw_slice(cell_lines: Sequence[Sequence[str]], fill_key: str) -> None:
        row_h = row_height(cell_lines)
        top = layout.y
        canv = layout.canv
        canv.setFillColor(layout.color(fill_key))
        canv.rect(layout.span_x(0, table_width), top - row_h, table_width, row_h, stroke=0, fill=1)
        canv.setStrokeColor(border)
        canv.setLineWidth(0.5)
        if style.bordered:
            for i in range(len(columns)):
                canv.rect(cell_box(i), top - row_h, widths[i], row_h, stroke=1, fill=0)
        else:
            left = layout.span_x(0, table_width)
            canv.line(left, top - row_h, left + table_width, top - row_h)

        for i, column in enumerate(columns):
            align = _cell_align(layout, column, i)
            baseline = top - pad - style.font_size
            for line in cell_lines[i]:
                layout.draw_text(cell_text_x(i, align), baseline, line, style.font_size, align=align)
                baseline -= body_lh
        layout.y = top - row_h

    def continue_on_new_page() -> None:
        layout.new_page()
        draw_header()

    # body height available below a repeated header on a fresh page
    page_body = layout.top - layout.bottom - header_h
    wrapped = [wrap_row(row) for row in rows]

    one_line_row = body_lh + 2 * pad
    first_row_h = row_height(wrapped[0]) if wrapped else one_line_row
    # keep the header with the first row, or with the first slice of a row taller than a page
    layout.ensure_space(header_h + (first_row_h if first_row_h <= page_body else one_line_row))
    draw_header()

    for row_index, cell_lines in enumerate(wrapped):
        fill_key = "table_row_even" if row_index % 2 == 0 else "table_row_odd"
        pending = cell_lines
        fresh_page = False
        while row_height(pending) > layout.remaining():
            fit = int((layout.remaining() - 2 * pad) // body_lh)
            if not fresh_page and (row_height(pending) <= page_body or fit < 1):
                continue_on_new_page()
                fresh_page = True
                continue
            # the row is taller than a page: draw what fits and carry the rest over
            fit = max(fit, 1)
            draw_slice([lines[:fit] for lines in pending], fill_key)
            pending = [lines[fit:] for lines in pending]
            continue_on_new_page()
            fresh_page = True
        draw_slice(pending, fill_key)

    return layout.cursor
