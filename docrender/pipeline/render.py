from __future__ import annotations

import base64
import binascii
import io
import logging
import webbrowser
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .. import config
from ..errors import DownloadEnvironmentError, LogoLoadError
from ..models import Document, RenderOptions
from ..storage import default_filename
from .compose import RenderContext, composer_for
from .fonts import FontRegistry, get_font_registry
from .labels import labels_for
from .layout import PageLayout
from .output import PdfBlob, RenderedPdf, finalize
from .sanitize import sanitize_document
from .themes import apply_accent, resolve_theme

logger = logging.getLogger(__name__)

OptionsLike = Union[RenderOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> RenderOptions:
    if options is None:
        return RenderOptions()
    if isinstance(options, RenderOptions):
        return options
    return RenderOptions.from_mapping(options)


def load_logo(reference: Optional[str]) -> Optional[ImageReader]:
    """Open a company logo given as a file path or a base64 ``data:`` URI."""
    if not reference:
        return None
    try:
        if reference.startswith("data:"):
            _, _, payload = reference.partition(",")
            source: Any = io.BytesIO(base64.b64decode(payload, validate=True))
        else:
            path = Path(reference).expanduser()
            if not path.is_file():
                raise LogoLoadError(f"Logo file not found: {path}")
            source = str(path)
        logo = ImageReader(source)
        logo.getSize()
    except LogoLoadError:
        raise
    except (binascii.Error, ValueError, OSError) as exc:
        raise LogoLoadError(f"Unreadable company logo: {exc}") from exc
    return logo


async def render_pdf(
    document: Any,
    options: OptionsLike = None,
    registry: Optional[FontRegistry] = None,
) -> RenderedPdf:
    """Render ``document`` once and return the bytes with their metadata.

    The payload is normalized first, fonts for the locale are fetched and
    registered, and only then is anything drawn. Any failure leaves no
    partial output behind.
    """
    opts = coerce_options(options)
    doc: Document = sanitize_document(document, opts.document_type, locale=opts.locale)
    composer = composer_for(doc.type, opts.template)
    theme = apply_accent(resolve_theme(opts.theme), opts.accent_color)
    logo = load_logo(opts.company_logo)

    fonts = await (registry or get_font_registry()).prepare_fonts(opts.locale)
    direction = opts.text_direction or fonts.direction
    ctx = RenderContext(
        theme=theme,
        labels=labels_for(opts.locale),
        locale=opts.locale,
        website_url=opts.website_url or config.DEFAULT_WEBSITE_URL,
        watermark=opts.include_watermark,
        logo=logo,
    )

    filename = default_filename(doc)
    buffer = io.BytesIO()
    canv = canvas.Canvas(buffer, pagesize=config.PAGE_SIZE, invariant=1)
    canv.setTitle(getattr(doc, "title", None) or filename)
    canv.setCreator(config.PDF_CREATOR)
    layout = PageLayout(canv, theme, fonts, direction=direction, page_size=config.PAGE_SIZE)
    composition = composer.render(layout, doc, ctx)
    logger.info(
        "Rendered %s (%s, %s, %s): %d pages",
        filename,
        opts.locale,
        composer.style.name,
        theme.name,
        composition.page_count,
    )
    return finalize(canv, buffer, composition.page_count, filename)


async def render_to_data_uri(document: Any, options: OptionsLike = None, registry: Optional[FontRegistry] = None) -> str:
    return (await render_pdf(document, options, registry)).to_data_uri()


async def render_to_bytes(document: Any, options: OptionsLike = None, registry: Optional[FontRegistry] = None) -> bytes:
    return (await render_pdf(document, options, registry)).to_bytes()


async def render_to_blob(document: Any, options: OptionsLike = None, registry: Optional[FontRegistry] = None) -> PdfBlob:
    return (await render_pdf(document, options, registry)).to_blob()


async def trigger_download(
    document: Any,
    options: OptionsLike = None,
    filename: Optional[str] = None,
    directory: Optional[Path] = None,
    registry: Optional[FontRegistry] = None,
) -> Path:
    """Save the rendered PDF into the download directory and open it in a browser."""
    try:
        browser = webbrowser.get()
    except webbrowser.Error as exc:
        raise DownloadEnvironmentError("PDF download needs a browser, none is available") from exc

    rendered = await render_pdf(document, options, registry)
    target_dir = Path(directory or config.DOWNLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    name = filename or rendered.filename
    if not name.lower().endswith(".pdf"):
        name = f"{name}.pdf"
    target = target_dir / Path(name).name
    target.write_bytes(rendered.data)
    logger.info("Saved %s (%d bytes)", target, len(rendered.data))
    browser.open(target.resolve().as_uri())
    return target
