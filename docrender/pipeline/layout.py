from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .fonts import PreparedFonts, font_name
from .shaping import has_cjk, reshape, visual_line
from .themes import FONT_SCALE, Theme, hex_color

PageHook = Callable[["PageLayout"], None]

# keeps body text clear of the footer band
FOOTER_RESERVE = 18.0


@dataclass(frozen=True)
class Cursor:
    page: int
    y: float

    def is_at_or_below(self, other: "Cursor") -> bool:
        """True when this position comes at or after ``other`` in reading order."""
        if self.page != other.page:
            return self.page > other.page
        return self.y <= other.y


def _tokens(text: str) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for i, word in enumerate(text.split()):
        sep = " " if i else ""
        if has_cjk(word):
            for j, ch in enumerate(word):
                out.append((ch, sep if j == 0 else ""))
        else:
            out.append((word, sep))
    return out


def wrap_text(text: str, font: str, size: float, max_width: float) -> List[str]:
    """Word wrap for ``font`` at ``size``.

    CJK runs may break between any two characters; a single word wider than
    ``max_width`` is split by character.
    """
    def width(value: str) -> float:
        return pdfmetrics.stringWidth(value, font, size)

    lines: List[str] = []
    cur = ""
    for token, sep in _tokens(text or ""):
        candidate = f"{cur}{sep}{token}" if cur else token
        if width(candidate) <= max_width:
            cur = candidate
            continue
        if cur:
            lines.append(cur)
        if width(token) <= max_width:
            cur = token
            continue
        chunk = ""
        for ch in token:
            if chunk and width(chunk + ch) > max_width:
                lines.append(chunk)
                chunk = ch
            else:
                chunk += ch
        cur = chunk
    if cur:
        lines.append(cur)
    return lines or [""]


class PageLayout:
    """Vertical write cursor over a reportlab canvas.

    ``y`` is the top of the next free line in canvas coordinates and moves
    down the page. Horizontal positions are given as offsets from the
    reading-start edge, so the same composer code lays out left-to-right
    and right-to-left documents: ``start`` is the left margin for ltr and
    the right margin for rtl.
    """

    def __init__(
        self,
        canv: canvas.Canvas,
        theme: Theme,
        fonts: PreparedFonts,
        direction: str = "ltr",
        page_size: Optional[Tuple[float, float]] = None,
    ) -> None:
        self.canv = canv
        self.theme = theme
        self.family = fonts.primary_family
        self.bold_family = fonts.secondary_family
        self.direction = direction
        self.page_width, self.page_height = page_size or canv._pagesize
        self.margin = theme.spacing.margin
        self.top = self.page_height - self.margin
        self.bottom = self.margin + FOOTER_RESERVE
        self.page = 0
        self.y = self.top
        self._on_page_start: List[PageHook] = []
        self._on_page_end: List[PageHook] = []

    # -- page lifecycle -------------------------------------------------

    def on_page_start(self, hook: PageHook) -> None:
        self._on_page_start.append(hook)

    def on_page_end(self, hook: PageHook) -> None:
        self._on_page_end.append(hook)

    def start(self) -> None:
        self._begin_page()

    def finish(self) -> int:
        """Close the last page; returns the number of pages drawn."""
        for hook in self._on_page_end:
            hook(self)
        return self.page + 1

    def new_page(self) -> None:
        for hook in self._on_page_end:
            hook(self)
        self.canv.showPage()
        self.page += 1
        self.y = self.top
        self._begin_page()

    def _begin_page(self) -> None:
        # showPage() resets the graphics state
        for hook in self._on_page_start:
            hook(self)
        self.set_font(FONT_SCALE["body"])
        self.canv.setFillColor(self.color("text"))
        self.canv.setStrokeColor(self.color("border"))

    @property
    def cursor(self) -> Cursor:
        return Cursor(self.page, self.y)

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    def remaining(self) -> float:
        return self.y - self.bottom

    def ensure_space(self, height: float) -> bool:
        """Start a new page unless ``height`` points fit below the cursor."""
        if self.remaining() < height:
            self.new_page()
            return True
        return False

    def space(self, dy: float) -> Cursor:
        self.y -= dy
        if self.y < self.bottom:
            self.new_page()
        return self.cursor

    # -- geometry -------------------------------------------------------

    def leading(self, size: float) -> float:
        return self.theme.leading(size)

    def x_for(self, offset: float = 0.0, side: str = "start") -> float:
        from_left = (side == "start") == (self.direction != "rtl")
        if from_left:
            return self.margin + offset
        return self.page_width - self.margin - offset

    def align_for(self, side: str = "start") -> str:
        if side == "center":
            return "center"
        from_left = (side == "start") == (self.direction != "rtl")
        return "left" if from_left else "right"

    def span_x(self, offset: float, width: float) -> float:
        """Left edge of a box ``width`` wide that sits ``offset`` from the start edge."""
        if self.direction == "rtl":
            return self.page_width - self.margin - offset - width
        return self.margin + offset

    # -- drawing --------------------------------------------------------

    def color(self, key: str) -> colors.Color:
        return hex_color(getattr(self.theme.colors, key))

    def font(self, bold: bool = False) -> str:
        # bold runs (headings, labels, totals) use the secondary family
        return font_name(self.bold_family if bold else self.family, bold=bold)

    def set_font(self, size: float, bold: bool = False) -> None:
        self.canv.setFont(self.font(bold), size)

    def text_width(self, text: str, size: float, bold: bool = False) -> float:
        return pdfmetrics.stringWidth(reshape(text), self.font(bold), size)

    def wrap(self, text: str, size: float, bold: bool = False, width: Optional[float] = None) -> List[str]:
        max_width = self.content_width if width is None else width
        return wrap_text(reshape(text), self.font(bold), size, max_width)

    def draw_text(
        self,
        x: float,
        baseline: float,
        text: str,
        size: float,
        bold: bool = False,
        color: Optional[colors.Color] = None,
        align: str = "left",
        family: Optional[str] = None,
    ) -> None:
        line = visual_line(reshape(text), self.direction)
        if family:
            self.canv.setFont(font_name(family, bold=bold), size)
        else:
            self.set_font(size, bold)
        self.canv.setFillColor(color if color is not None else self.color("text"))
        if align == "right":
            self.canv.drawRightString(x, baseline, line)
        elif align == "center":
            self.canv.drawCentredString(x, baseline, line)
        else:
            self.canv.drawString(x, baseline, line)

    def write_line(
        self,
        text: str,
        size: float = FONT_SCALE["body"],
        bold: bool = False,
        color: Optional[colors.Color] = None,
        offset: float = 0.0,
        side: str = "start",
    ) -> Cursor:
        lh = self.leading(size)
        self.ensure_space(lh)
        x = self.page_width / 2 if side == "center" else self.x_for(offset, side)
        self.draw_text(x, self.y - size, text, size, bold, color, self.align_for(side))
        self.y -= lh
        return self.cursor

    def write_paragraph(
        self,
        text: str,
        size: float = FONT_SCALE["body"],
        bold: bool = False,
        color: Optional[colors.Color] = None,
        offset: float = 0.0,
        width: Optional[float] = None,
        side: str = "start",
    ) -> Cursor:
        """Wrap ``text`` to the available width and write it line by line.

        Explicit newlines start new lines and blank lines keep one line of
        space. Each line is placed at the direction's anchor; a page break is
        taken before any line that would cross the bottom margin.
        """
        max_width = (self.content_width - offset) if width is None else width
        lh = self.leading(size)
        for raw in str(text or "").splitlines() or [""]:
            if not raw.strip():
                self.space(lh)
                continue
            for line in self.wrap(raw, size, bold, max_width):
                self.ensure_space(lh)
                x = self.page_width / 2 if side == "center" else self.x_for(offset, side)
                self.draw_text(x, self.y - size, line, size, bold, color, self.align_for(side))
                self.y -= lh
        return self.cursor

    def write_pair(
        self,
        label: str,
        value: str,
        label_width: float,
        size: float = FONT_SCALE["body"],
        offset: float = 0.0,
    ) -> Cursor:
        lh = self.leading(size)
        self.ensure_space(lh)
        align = self.align_for("start")
        self.draw_text(self.x_for(offset), self.y - size, label, size, bold=True, align=align)
        lines = self.wrap(value, size, width=self.content_width - offset - label_width)
        for i, line in enumerate(lines):
            if i:
                self.ensure_space(lh)
            self.draw_text(self.x_for(offset + label_width), self.y - size, line, size, align=align)
            self.y -= lh
        return self.cursor

    def write_columns(
        self,
        blocks: Sequence[Sequence[Tuple[str, float, bool]]],
        gap: float = 18.0,
        heading_color: Optional[colors.Color] = None,
    ) -> Cursor:
        """Write side-by-side blocks of ``(text, size, bold)`` lines.

        The first block sits at the reading-start edge. The tallest block is
        kept on one page, and the cursor ends below it.
        """
        if not blocks:
            return self.cursor
        col_width = (self.content_width - gap * (len(blocks) - 1)) / len(blocks)
        wrapped = [
            [(line, size, bold) for text, size, bold in block for line in self.wrap(text, size, bold, col_width)]
            for block in blocks
        ]
        heights = [sum(self.leading(size) for _, size, _ in block) for block in wrapped]
        self.ensure_space(max(heights))
        top = self.y
        bottom = top
        align = self.align_for("start")
        for index, block in enumerate(wrapped):
            y = top
            offset = index * (col_width + gap)
            for line_index, (line, size, bold) in enumerate(block):
                color = heading_color if line_index == 0 and heading_color is not None else None
                self.draw_text(self.x_for(offset), y - size, line, size, bold, color, align)
                y -= self.leading(size)
            bottom = min(bottom, y)
        self.y = bottom
        return self.cursor

    def rule(
        self,
        offset: float = 0.0,
        width: Optional[float] = None,
        color: Optional[colors.Color] = None,
        line_width: float = 1.0,
    ) -> None:
        span = (self.content_width - offset) if width is None else width
        x = self.span_x(offset, span)
        self.canv.setStrokeColor(color if color is not None else self.color("border"))
        self.canv.setLineWidth(line_width)
        self.canv.line(x, self.y, x + span, self.y)
