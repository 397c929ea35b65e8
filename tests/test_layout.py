from __future__ import annotations

import pytest
from reportlab.pdfbase import pdfmetrics

from docrender.pipeline.layout import Cursor, PageLayout, wrap_text
from docrender.pipeline.tables import Column, TableStyle, column_widths, draw_table
from docrender.pipeline.themes import FONT_SCALE, PRIMARY_THEME


class RecordingCanvas:
    """Collects draw calls instead of writing PDF operators."""

    def __init__(self, canv) -> None:
        self._canv = canv
        self.strings = []

    def __getattr__(self, name):  # noqa: ANN001 - proxy
        return getattr(self._canv, name)

    def drawString(self, x, y, text, *args, **kwargs):  # noqa: N802 - reportlab API
        self.strings.append(("left", x, y, text))

    def drawRightString(self, x, y, text, *args, **kwargs):  # noqa: N802 - reportlab API
        self.strings.append(("right", x, y, text))

    def drawCentredString(self, x, y, text, *args, **kwargs):  # noqa: N802 - reportlab API
        self.strings.append(("center", x, y, text))


def test_wrap_text_respects_width() -> None:
    text = "The quick brown fox jumps over the lazy dog " * 6
    lines = wrap_text(text, "Helvetica", 11, 150)
    assert len(lines) > 1
    assert all(pdfmetrics.stringWidth(line, "Helvetica", 11) <= 150 for line in lines)
    assert " ".join(lines) == text.strip()


def test_wrap_text_breaks_cjk_and_long_words() -> None:
    cjk = wrap_text("这是一个很长的中文句子需要被换行处理以适应宽度", "Helvetica", 11, 40)
    assert len(cjk) > 1
    long_word = wrap_text("x" * 200, "Helvetica", 11, 60)
    assert len(long_word) > 1
    assert "".join(long_word) == "x" * 200


def test_wrap_empty_text() -> None:
    assert wrap_text("", "Helvetica", 11, 100) == [""]


def test_cursor_ordering() -> None:
    assert Cursor(1, 700).is_at_or_below(Cursor(0, 100))
    assert Cursor(0, 100).is_at_or_below(Cursor(0, 100))
    assert not Cursor(0, 200).is_at_or_below(Cursor(0, 100))


def test_paragraph_advances_cursor_by_line_height(blank_canvas, helvetica) -> None:
    layout = PageLayout(blank_canvas, PRIMARY_THEME, helvetica)
    layout.start()
    before = layout.cursor
    after = layout.write_paragraph("One short line")
    assert after.page == before.page
    assert before.y - after.y == pytest.approx(PRIMARY_THEME.leading(FONT_SCALE["body"]))


def test_paragraph_paginates(blank_canvas, helvetica) -> None:
    layout = PageLayout(blank_canvas, PRIMARY_THEME, helvetica)
    layout.start()
    end = layout.write_paragraph("\n".join(f"Line {i}" for i in range(120)))
    assert end.page >= 2
    assert end.y >= layout.bottom
    assert layout.finish() == end.page + 1


def test_page_hooks_run_for_every_page(blank_canvas, helvetica) -> None:
    layout = PageLayout(blank_canvas, PRIMARY_THEME, helvetica)
    started, ended = [], []
    layout.on_page_start(lambda lay: started.append(lay.page))
    layout.on_page_end(lambda lay: ended.append(lay.page))
    layout.start()
    layout.new_page()
    layout.new_page()
    layout.finish()
    assert started == [0, 1, 2]
    assert ended == [0, 1, 2]


def test_rtl_lines_anchor_at_right_margin(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, direction="rtl", page_size=blank_canvas._pagesize)
    layout.start()
    layout.write_paragraph("Right aligned text")
    align, x, _, _ = recorder.strings[-1]
    assert align == "right"
    assert x == layout.page_width - layout.margin


def test_ltr_lines_anchor_at_left_margin(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, page_size=blank_canvas._pagesize)
    layout.start()
    layout.write_paragraph("Left aligned text")
    align, x, _, _ = recorder.strings[-1]
    assert align == "left"
    assert x == layout.margin


def test_column_widths_share_remaining_space() -> None:
    columns = [Column("Description"), Column("Qty", width=50), Column("Total", width=100)]
    assert column_widths(columns, 500) == [350, 50, 100]


def test_long_table_ends_on_later_page(blank_canvas, helvetica) -> None:
    layout = PageLayout(blank_canvas, PRIMARY_THEME, helvetica)
    layout.start()
    start = layout.cursor
    columns = [Column("Description"), Column("Qty", width=50, align="right")]
    rows = [[f"Item {i} with a reasonably long description", str(i)] for i in range(80)]
    end = draw_table(layout, columns, rows)
    assert end.page > start.page
    assert end == layout.cursor
    assert end.y >= layout.bottom


def test_table_repeats_header_on_new_page(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, page_size=blank_canvas._pagesize)
    layout.start()
    rows = [[f"Row {i}", "1"] for i in range(80)]
    end = draw_table(layout, [Column("Description"), Column("Qty", width=50, align="right")], rows)
    headers = [entry for entry in recorder.strings if entry[3] == "Description"]
    assert len(headers) == end.page + 1


def test_rtl_table_mirrors_columns(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, direction="rtl", page_size=blank_canvas._pagesize)
    layout.start()
    draw_table(layout, [Column("Description"), Column("Qty", width=50, align="right")], [["Widget", "3"]])
    by_text = {entry[3]: entry for entry in recorder.strings}
    assert by_text["Description"][1] > by_text["Qty"][1]
    assert by_text["Widget"][0] == "right"


def test_row_taller_than_a_page_is_split(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, page_size=blank_canvas._pagesize)
    layout.start()
    description = " ".join(f"word{i}" for i in range(900))
    end = draw_table(layout, [Column("Description"), Column("Qty", width=50, align="right")], [[description, "1"]])
    assert end.page >= 1
    assert end.y >= layout.bottom
    assert all(entry[2] >= layout.bottom for entry in recorder.strings)
    drawn = [entry[3] for entry in recorder.strings if entry[3].startswith("word")]
    assert " ".join(drawn) == description


def test_header_stays_with_wrapped_first_row(blank_canvas, helvetica) -> None:
    recorder = RecordingCanvas(blank_canvas)
    layout = PageLayout(recorder, PRIMARY_THEME, helvetica, page_size=blank_canvas._pagesize)
    layout.start()
    style = TableStyle()
    header_h = layout.leading(style.header_size) + 2 * style.padding
    one_line_row = layout.leading(style.font_size) + 2 * style.padding
    layout.y = layout.bottom + header_h + one_line_row + 1
    wrapped_row = ["A long description that wraps onto several lines " * 4, "2"]
    end = draw_table(layout, [Column("Description"), Column("Qty", width=50, align="right")], [wrapped_row])
    headers = [entry for entry in recorder.strings if entry[3] == "Description"]
    assert len(headers) == 1
    assert end.page == 1
