from __future__ import annotations

import asyncio
import json
import logging
import webbrowser
from pathlib import Path
from typing import Any, Optional

import typer

from . import config
from .errors import RenderError
from .models import RenderOptions, Template, init_db, reset_engine
from .pipeline.output import object_url
from .pipeline.render import render_pdf, trigger_download
from .pipeline.run import run_render_job
from .pipeline.themes import THEMES
from .storage import recent_renders

app = typer.Typer(help="Multilingual invoice and NDA PDF renderer")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_document(path: Path) -> Any:
    if not path.exists():
        raise typer.BadParameter(f"Input not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{path} is not valid JSON: {exc}") from exc


def _options(
    document: Any,
    doc_type: Optional[str],
    locale: Optional[str],
    template: Optional[str],
    theme: Optional[str],
    watermark: bool,
    accent: Optional[str],
    logo: Optional[Path],
    website: Optional[str],
    direction: Optional[str],
) -> RenderOptions:
    tag = doc_type or (document.get("type") if isinstance(document, dict) else None)
    doc_locale = document.get("locale") if isinstance(document, dict) else None
    return RenderOptions.from_mapping(
        {
            "documentType": tag,
            "locale": locale or doc_locale,
            "template": template,
            "theme": theme,
            "includeWatermark": watermark,
            "accentColor": accent,
            "companyLogo": str(logo) if logo else None,
            "websiteUrl": website,
            "textDirection": direction,
        }
    )


def _set_out(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


TYPE_OPTION = typer.Option(None, "--type", help="invoice or nda (default: the document's type field)")
LOCALE_OPTION = typer.Option(None, "--locale", help="BCP 47 locale, e.g. en-US, ar-SA, ja-JP")
TEMPLATE_OPTION = typer.Option(None, "--template", help="modern, classic (alias legal) or minimal")
THEME_OPTION = typer.Option(None, "--theme", help="primary, neutral or dark")
WATERMARK_OPTION = typer.Option(False, "--watermark", help="Stamp DRAFT on every page")
ACCENT_OPTION = typer.Option(None, "--accent", help="Hex colour replacing the theme's primary colour")
LOGO_OPTION = typer.Option(None, "--logo", help="Company logo image")
WEBSITE_OPTION = typer.Option(None, "--website", help="Website shown in the footer")
DIRECTION_OPTION = typer.Option(None, "--direction", help="Force ltr or rtl")


@app.command()
def render(
    input_path: Path = typer.Argument(..., help="Document JSON"),
    doc_type: Optional[str] = TYPE_OPTION,
    locale: Optional[str] = LOCALE_OPTION,
    template: Optional[str] = TEMPLATE_OPTION,
    theme: Optional[str] = THEME_OPTION,
    watermark: bool = WATERMARK_OPTION,
    accent: Optional[str] = ACCENT_OPTION,
    logo: Optional[Path] = LOGO_OPTION,
    website: Optional[str] = WEBSITE_OPTION,
    direction: Optional[str] = DIRECTION_OPTION,
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    previews: bool = typer.Option(False, "--previews", help="Also write PNG previews of the first pages"),
) -> None:
    _set_out(out)
    document = _load_document(input_path)
    try:
        options = _options(document, doc_type, locale, template, theme, watermark, accent, logo, website, direction)
        record = asyncio.run(run_render_job(document, options, previews=previews))
    except RenderError as exc:
        typer.echo(f"FAILED: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"READY: {config.OUT_DIR / record.slug} ({record.page_count} pages, {record.byte_size} bytes)")


@app.command()
def download(
    input_path: Path = typer.Argument(..., help="Document JSON"),
    doc_type: Optional[str] = TYPE_OPTION,
    locale: Optional[str] = LOCALE_OPTION,
    template: Optional[str] = TEMPLATE_OPTION,
    theme: Optional[str] = THEME_OPTION,
    watermark: bool = WATERMARK_OPTION,
    accent: Optional[str] = ACCENT_OPTION,
    logo: Optional[Path] = LOGO_OPTION,
    website: Optional[str] = WEBSITE_OPTION,
    direction: Optional[str] = DIRECTION_OPTION,
    filename: Optional[str] = typer.Option(None, "--filename", help="Name of the saved file"),
    to: Optional[Path] = typer.Option(None, "--to", help="Download directory"),
) -> None:
    document = _load_document(input_path)
    try:
        options = _options(document, doc_type, locale, template, theme, watermark, accent, logo, website, direction)
        target = asyncio.run(trigger_download(document, options, filename=filename, directory=to))
    except RenderError as exc:
        typer.echo(f"FAILED: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Saved {target}")


@app.command()
def preview(
    input_path: Path = typer.Argument(..., help="Document JSON"),
    doc_type: Optional[str] = TYPE_OPTION,
    locale: Optional[str] = LOCALE_OPTION,
    template: Optional[str] = TEMPLATE_OPTION,
    theme: Optional[str] = THEME_OPTION,
    direction: Optional[str] = DIRECTION_OPTION,
) -> None:
    """Open the rendered PDF from a temporary file that is removed afterwards."""
    document = _load_document(input_path)
    try:
        options = _options(document, doc_type, locale, template, theme, False, None, None, None, direction)
        rendered = asyncio.run(render_pdf(document, options))
    except RenderError as exc:
        typer.echo(f"FAILED: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    with object_url(rendered.to_blob()) as url:
        webbrowser.open(url)
        typer.confirm(f"Previewing {url}. Close preview?", default=True)


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    limit: int = typer.Option(20, "--limit", help="Number of records"),
) -> None:
    _set_out(out)
    init_db()
    records = recent_renders(limit)
    if not records:
        typer.echo("No renders recorded")
        return
    for record in records:
        line = (
            f"{record.created_at:%Y-%m-%d %H:%M} {record.status.value:<6} {record.slug} "
            f"{record.document_type}/{record.template}/{record.theme} {record.locale} "
            f"{record.page_count}p {record.byte_size}B"
        )
        if record.fail_code:
            line += f" {record.fail_code}: {record.fail_detail}"
        typer.echo(line)


@app.command()
def themes() -> None:
    for name in THEMES:
        typer.echo(name)
    typer.echo(f"templates: {', '.join(t.value for t in Template)}")


if __name__ == "__main__":
    app()
