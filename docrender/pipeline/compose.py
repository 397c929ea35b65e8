from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader

from .. import config
from ..errors import UnsupportedDocumentTypeError
from ..models import NDA, DocumentType, Invoice, Party, Template
from .fonts import font_name
from .formatting import format_currency, format_date, format_number
from .labels import Labels
from .layout import Cursor, PageLayout
from .tables import Column, TableStyle, draw_table
from .themes import FONT_SCALE, SPACING_SCALE, Theme, gradient_bands

logger = logging.getLogger(__name__)

WATERMARK_SIZE = 50
WATERMARK_ALPHA = 0.1
WATERMARK_GREY = colors.Color(200 / 255, 200 / 255, 200 / 255)
FOOTER_BASELINE = 24.0
LOGO_MAX_HEIGHT = 40.0
LOGO_MAX_WIDTH = 160.0
SIGNATURE_BLOCK = 120.0
TOTALS_WIDTH = 210.0
SIGNATURE_LINE = "______________________"


@dataclass(frozen=True)
class TemplateStyle:
    """Styling knobs a template passes to the shared drawing primitives."""

    name: str
    header: str = "band"            # band | rule | plain
    header_height: float = 72.0
    uppercase_title: bool = False
    title_size: float = FONT_SCALE["title"]
    heading_size: float = FONT_SCALE["subheading"]
    section_rule: bool = False
    totals_panel: bool = True
    table: TableStyle = TableStyle()


TEMPLATE_STYLES: Dict[Template, TemplateStyle] = {
    Template.MODERN: TemplateStyle(name="modern"),
    Template.CLASSIC: TemplateStyle(
        name="classic",
        header="rule",
        uppercase_title=True,
        title_size=FONT_SCALE["title"] - 2,
        section_rule=True,
        totals_panel=False,
        table=TableStyle(bordered=True, header_size=FONT_SCALE["body"]),
    ),
    Template.MINIMAL: TemplateStyle(
        name="minimal",
        header="plain",
        title_size=FONT_SCALE["heading"] + 4,
        heading_size=FONT_SCALE["body"] + 1,
        totals_panel=False,
        table=TableStyle(padding=SPACING_SCALE["sm"], header_size=FONT_SCALE["small"] + 1),
    ),
}


@dataclass
class RenderContext:
    theme: Theme
    labels: Labels
    locale: str
    website_url: Optional[str] = config.DEFAULT_WEBSITE_URL
    watermark: bool = False
    logo: Optional[ImageReader] = None


@dataclass
class Composition:
    page_count: int
    # where each block started, plus ``table_end`` for the item table
    marks: Dict[str, Cursor] = field(default_factory=dict)


def _percent(rate: float) -> str:
    return f"{rate * 100:g}%"


def _party_block(heading: str, party: Party) -> List[Tuple[str, float, bool]]:
    body = FONT_SCALE["body"]
    return [
        (heading, FONT_SCALE["subheading"], True),
        (party.name, body, True),
        (party.address, body, False),
        (party.email, body, False),
        (party.phone, body, False),
    ]


class Composer:
    """Draws one document type; the template only changes ``self.style``."""

    def __init__(self, style: TemplateStyle) -> None:
        self.style = style

    def render(self, layout: PageLayout, document, ctx: RenderContext) -> Composition:
        self._install_page_hooks(layout, ctx)
        layout.start()
        marks = self.compose(layout, document, ctx)
        return Composition(page_count=layout.finish(), marks=marks)

    def compose(self, layout: PageLayout, document, ctx: RenderContext) -> Dict[str, Cursor]:
        raise NotImplementedError

    # -- page decorations ----------------------------------------------

    def _install_page_hooks(self, layout: PageLayout, ctx: RenderContext) -> None:
        if ctx.theme.name == "dark":
            layout.on_page_start(self._paint_background)
        layout.on_page_end(lambda lay: self._draw_footer(lay, ctx))
        if ctx.watermark:
            layout.on_page_end(self._draw_watermark)

    @staticmethod
    def _paint_background(layout: PageLayout) -> None:
        layout.canv.setFillColor(layout.color("background"))
        layout.canv.rect(0, 0, layout.page_width, layout.page_height, stroke=0, fill=1)

    @staticmethod
    def _draw_footer(layout: PageLayout, ctx: RenderContext) -> None:
        size = FONT_SCALE["tiny"]
        grey = layout.color("text_secondary")
        page_label = f"{ctx.labels['page']} {layout.page + 1}"
        latin = layout.theme.fonts
        layout.draw_text(layout.page_width / 2, FOOTER_BASELINE, page_label, size, color=grey, align="center")
        if ctx.website_url:
            layout.draw_text(
                layout.x_for(0, "start"), FOOTER_BASELINE, ctx.website_url, size,
                color=grey, align=layout.align_for("start"), family=latin.monospace,
            )
        layout.draw_text(
            layout.x_for(0, "end"), FOOTER_BASELINE, config.POWERED_BY_TEXT, size,
            color=grey, align=layout.align_for("end"), family=latin.secondary,
        )

    @staticmethod
    def _draw_watermark(layout: PageLayout) -> None:
        canv = layout.canv
        canv.saveState()
        canv.setFillAlpha(WATERMARK_ALPHA)
        canv.setFillColor(WATERMARK_GREY)
        canv.setFont(font_name(layout.theme.fonts.primary, bold=True), WATERMARK_SIZE)
        canv.translate(layout.page_width / 2, layout.page_height / 2)
        canv.rotate(45)
        canv.drawCentredString(0, 0, config.WATERMARK_TEXT)
        canv.restoreState()

    # -- shared blocks --------------------------------------------------

    def _draw_band(self, layout: PageLayout) -> float:
        """Fill the header band across the page top; returns its bottom edge."""
        canv = layout.canv
        height = self.style.header_height
        bottom = layout.page_height - height
        if layout.theme.effects.header_gradient:
            bands = gradient_bands(layout.theme)
            step = height / len(bands)
            for i, band in enumerate(bands):
                canv.setFillColor(band)
                canv.rect(0, layout.page_height - (i + 1) * step, layout.page_width, step, stroke=0, fill=1)
        else:
            canv.setFillColor(layout.color("primary"))
            canv.rect(0, bottom, layout.page_width, height, stroke=0, fill=1)
        return bottom

    @staticmethod
    def _draw_logo(layout: PageLayout, logo: ImageReader, top: float) -> float:
        img_w, img_h = logo.getSize()
        height = min(LOGO_MAX_HEIGHT, float(img_h))
        width = height * img_w / img_h if img_h else height
        if width > LOGO_MAX_WIDTH:
            height *= LOGO_MAX_WIDTH / width
            width = LOGO_MAX_WIDTH
        layout.canv.drawImage(logo, layout.span_x(0, width), top - height, width=width, height=height, mask="auto")
        return height

    def _title(self, text: str) -> str:
        return text.upper() if self.style.uppercase_title else text

    def _header_rule(self, layout: PageLayout) -> None:
        if self.style.header == "rule":
            layout.rule(color=layout.color("primary"), line_width=1.5)
            layout.y -= 3
            layout.rule(color=layout.color("primary"), line_width=0.5)
        else:
            layout.rule()
        layout.space(SPACING_SCALE["lg"])

    def _heading(self, layout: PageLayout, text: str) -> Cursor:
        size = self.style.heading_size
        layout.ensure_space(layout.leading(size) + layout.leading(FONT_SCALE["body"]) * 2)
        start = layout.cursor
        layout.write_paragraph(self._title(text), size, bold=True, color=layout.color("primary"))
        if self.style.section_rule:
            layout.rule(line_width=0.5)
            layout.space(SPACING_SCALE["xs"])
        return start

    def _gap(self, layout: PageLayout) -> None:
        layout.space(layout.theme.spacing.section_gap)


class InvoiceComposer(Composer):
    def compose(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> Dict[str, Cursor]:
        marks: Dict[str, Cursor] = {}
        marks["header"] = layout.cursor
        self._header(layout, invoice, ctx)
        marks["parties"] = self._parties(layout, invoice, ctx)
        marks["details"] = self._details(layout, invoice, ctx)
        marks["items"] = layout.cursor
        marks["table_end"] = self._items(layout, invoice, ctx)
        marks["totals"] = self._totals(layout, invoice, ctx)
        if invoice.terms:
            marks["terms"] = self._note(layout, ctx.labels["terms"], invoice.terms)
        if invoice.notes:
            marks["notes"] = self._note(layout, ctx.labels["notes"], invoice.notes)
        layout.write_paragraph(
            ctx.labels["thank_you"], FONT_SCALE["small"], color=layout.color("text_secondary"), side="center"
        )
        return marks

    def _header(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> None:
        small = FONT_SCALE["small"]
        number = f"{ctx.labels['invoice_number']}: {invoice.invoice_number}"
        issued = format_date(invoice.date, ctx.locale)
        end_x = layout.x_for(0, "end")
        end_align = layout.align_for("end")

        if self.style.header == "band":
            bottom = self._draw_band(layout)
            top = layout.page_height
            white = colors.white
            if ctx.logo is not None:
                self._draw_logo(layout, ctx.logo, top - (self.style.header_height - LOGO_MAX_HEIGHT) / 2)
            else:
                layout.draw_text(
                    layout.x_for(0), top - 43, invoice.from_party.name, FONT_SCALE["heading"],
                    bold=True, color=white, align=layout.align_for("start"),
                )
            layout.draw_text(end_x, top - 28, number, small, color=white, align=end_align)
            layout.draw_text(end_x, top - 50, issued, small, color=white, align=end_align)
            layout.y = bottom - SPACING_SCALE["xl"]
            layout.write_line(self._title(ctx.labels["invoice"]), self.style.title_size, True, layout.color("primary"))
            layout.space(SPACING_SCALE["md"])
            return

        top = layout.y
        if ctx.logo is not None:
            used = self._draw_logo(layout, ctx.logo, top)
        else:
            size = FONT_SCALE["heading"]
            layout.draw_text(
                layout.x_for(0), top - size, invoice.from_party.name, size,
                bold=True, color=layout.color("primary"), align=layout.align_for("start"),
            )
            used = layout.leading(size)
        layout.draw_text(end_x, top - small, number, small, align=end_align)
        layout.draw_text(end_x, top - small - layout.leading(small), issued, small, align=end_align)
        layout.y = top - max(used, 2 * layout.leading(small)) - SPACING_SCALE["md"]
        layout.write_line(self._title(ctx.labels["invoice"]), self.style.title_size, True, layout.color("text"))
        self._header_rule(layout)

    def _parties(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> Cursor:
        self._gap(layout)
        start = layout.cursor
        layout.write_columns(
            [
                _party_block(ctx.labels["from"], invoice.from_party),
                _party_block(ctx.labels["to"], invoice.to_party),
            ],
            gap=layout.margin,
            heading_color=layout.color("primary"),
        )
        return start

    def _details(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> Cursor:
        self._gap(layout)
        start = layout.cursor
        labels = ctx.labels
        rows = [
            (labels["invoice_number"], invoice.invoice_number),
            (labels["issue_date"], format_date(invoice.date, ctx.locale)),
            (labels["due_date"], format_date(invoice.due_date, ctx.locale)),
            (labels["currency"], invoice.currency),
        ]
        label_width = max(layout.text_width(label, FONT_SCALE["body"], bold=True) for label, _ in rows) + 12
        for label, value in rows:
            layout.write_pair(label, value, label_width)
        return start

    def _items(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> Cursor:
        self._gap(layout)
        labels = ctx.labels
        columns = [
            Column(labels["description"]),
            Column(labels["quantity"], width=56, align="right"),
            Column(labels["rate"], width=96, align="right"),
            Column(labels["amount"], width=104, align="right"),
        ]
        rows = []
        for item in invoice.items:
            decimals = 0 if float(item.quantity).is_integer() else 2
            rows.append(
                [
                    item.description,
                    format_number(item.quantity, ctx.locale, decimals=decimals),
                    format_currency(item.rate, invoice.currency, ctx.locale),
                    format_currency(item.amount, invoice.currency, ctx.locale),
                ]
            )
        return draw_table(layout, columns, rows, self.style.table)

    def _totals(self, layout: PageLayout, invoice: Invoice, ctx: RenderContext) -> Cursor:
        labels = ctx.labels
        body = FONT_SCALE["body"]
        lines = [
            (f"{labels['subtotal']}:", format_currency(invoice.subtotal, invoice.currency, ctx.locale), body, False),
            (
                f"{labels['tax']} ({_percent(invoice.tax_rate)}):",
                format_currency(invoice.tax_amount, invoice.currency, ctx.locale),
                body,
                False,
            ),
            (f"{labels['total']}:", format_currency(invoice.total, invoice.currency, ctx.locale), self.style.heading_size, True),
        ]
        pad = SPACING_SCALE["md"]
        height = sum(layout.leading(size) for _, _, size, _ in lines) + 2 * pad

        layout.space(SPACING_SCALE["lg"])
        layout.ensure_space(height)
        start = layout.cursor
        canv = layout.canv
        box_offset = layout.content_width - TOTALS_WIDTH
        if self.style.totals_panel:
            canv.setFillColor(layout.color("surface"))
            radius = layout.theme.spacing.border_radius
            canv.roundRect(layout.span_x(box_offset, TOTALS_WIDTH), layout.y - height, TOTALS_WIDTH, height, radius, stroke=0, fill=1)

        y = layout.y - pad
        for label, value, size, is_total in lines:
            if is_total and not self.style.totals_panel:
                layout.y = y + 2
                layout.rule(offset=box_offset, width=TOTALS_WIDTH)
            color = layout.color("primary") if is_total else None
            baseline = y - size
            layout.draw_text(
                layout.x_for(box_offset + pad), baseline, label, size, bold=is_total,
                color=color, align=layout.align_for("start"),
            )
            layout.draw_text(
                layout.x_for(pad, "end"), baseline, value, size, bold=is_total,
                color=color, align=layout.align_for("end"),
            )
            y -= layout.leading(size)
        layout.y = start.y - height
        return start

    def _note(self, layout: PageLayout, heading: str, text: str) -> Cursor:
        self._gap(layout)
        start = self._heading(layout, heading)
        layout.write_paragraph(text, FONT_SCALE["body"], color=layout.color("text_secondary"))
        return start


class NDAComposer(Composer):
    def compose(self, layout: PageLayout, nda: NDA, ctx: RenderContext) -> Dict[str, Cursor]:
        marks: Dict[str, Cursor] = {}
        marks["header"] = layout.cursor
        self._header(layout, nda, ctx)
        marks["parties"] = self._parties(layout, nda, ctx)
        marks["purpose"] = self._purpose(layout, nda, ctx)
        marks["clauses"] = self._clauses(layout, nda)
        marks["signatures"] = self._signatures(layout, nda, ctx)
        return marks

    def _header(self, layout: PageLayout, nda: NDA, ctx: RenderContext) -> None:
        title = self._title(nda.title)
        if self.style.header == "band":
            bottom = self._draw_band(layout)
            size = self.style.title_size
            lines = layout.wrap(title, size, bold=True, width=layout.content_width)
            baseline = layout.page_height - (self.style.header_height + size) / 2
            # long titles continue below the band
            for line in lines:
                on_band = baseline > bottom
                layout.draw_text(
                    layout.page_width / 2, baseline, line, size, bold=True,
                    color=colors.white if on_band else layout.color("primary"), align="center",
                )
                baseline -= layout.leading(size)
            layout.y = min(bottom, baseline + size) - SPACING_SCALE["xl"]
        else:
            layout.write_paragraph(title, self.style.title_size, bold=True, color=layout.color("text"), side="center")
            layout.space(SPACING_SCALE["sm"])
            self._header_rule(layout)

        labels = ctx.labels
        pairs = [(labels["effective_date"], format_date(nda.effective_date, ctx.locale))]
        if nda.termination_date:
            pairs.append((labels["termination_date"], format_date(nda.termination_date, ctx.locale)))
        pairs.append((labels["jurisdiction"], nda.jurisdiction))
        pairs.append((labels["term_months"], format_number(nda.term_months, ctx.locale, decimals=0)))
        label_width = max(layout.text_width(label, FONT_SCALE["body"], bold=True) for label, _ in pairs) + 12
        for label, value in pairs:
            layout.write_pair(label, value, label_width)

    def _parties(self, layout: PageLayout, nda: NDA, ctx: RenderContext) -> Cursor:
        self._gap(layout)
        start = self._heading(layout, ctx.labels["parties"])
        layout.write_columns(
            [
                _party_block(ctx.labels["disclosing_party"], nda.disclosing_party),
                _party_block(ctx.labels["receiving_party"], nda.receiving_party),
            ],
            gap=layout.margin,
        )
        return start

    def _purpose(self, layout: PageLayout, nda: NDA, ctx: RenderContext) -> Cursor:
        self._gap(layout)
        labels = ctx.labels
        start = layout.cursor
        recitals = labels.get("recital_text")
        if recitals:
            self._heading(layout, labels["recitals"])
            layout.write_paragraph(recitals)
            layout.space(SPACING_SCALE["md"])
        self._heading(layout, labels["purpose"])
        layout.write_paragraph(nda.purpose)
        agreement = labels.get("agreement_text")
        if agreement:
            layout.space(SPACING_SCALE["md"])
            layout.write_paragraph(agreement, bold=True)
        return start

    def _clauses(self, layout: PageLayout, nda: NDA) -> Cursor:
        start = layout.cursor
        for number, section in enumerate(nda.sections, start=1):
            self._gap(layout)
            heading = f"{number}. {section.title}" if section.title else f"{number}."
            self._heading(layout, heading)
            if section.body:
                layout.write_paragraph(section.body)
        return start

    def _signatures(self, layout: PageLayout, nda: NDA, ctx: RenderContext) -> Cursor:
        labels = ctx.labels
        self._gap(layout)
        layout.ensure_space(SIGNATURE_BLOCK)
        start = layout.cursor
        layout.write_line(self._title(labels["signatures"]), self.style.heading_size, True, layout.color("primary"), side="center")
        layout.space(SPACING_SCALE["lg"])
        body = FONT_SCALE["body"]

        def block(heading: str, party: Party) -> Sequence[Tuple[str, float, bool]]:
            return [
                (heading, FONT_SCALE["subheading"], True),
                (f"{labels['signature']}: {SIGNATURE_LINE}", body, False),
                (f"{labels['print_name']}: {party.name}", body, False),
                (f"{labels['date']}: {SIGNATURE_LINE}", body, False),
            ]

        layout.write_columns(
            [
                block(labels["disclosing_party"], nda.disclosing_party),
                block(labels["receiving_party"], nda.receiving_party),
            ],
            gap=layout.margin,
        )
        return start


COMPOSERS: Dict[Tuple[DocumentType, Template], Composer] = {
    **{(DocumentType.INVOICE, template): InvoiceComposer(style) for template, style in TEMPLATE_STYLES.items()},
    **{(DocumentType.NDA, template): NDAComposer(style) for template, style in TEMPLATE_STYLES.items()},
}


def composer_for(document_type: object, template: object = None) -> Composer:
    try:
        kind = DocumentType(str(getattr(document_type, "value", document_type)).strip().lower())
    except ValueError as exc:
        raise UnsupportedDocumentTypeError(document_type) from exc
    composer = COMPOSERS[(kind, Template.parse(template))]
    logger.debug("Composing %s with the %s template", kind.value, composer.style.name)
    return composer
