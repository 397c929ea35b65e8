from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .. import config
from ..errors import (
    FontLoadError,
    LogoLoadError,
    OutputEncodingError,
    UnsupportedDocumentTypeError,
)
from ..models import RenderOptions, RenderRecord, RenderStatus, init_db
from ..storage import artifact_path, record_render, safe_slug, slug_for, write_options
from .fonts import FontRegistry
from .render import OptionsLike, coerce_options, render_pdf
from .render_preview import render_previews
from .sanitize import sanitize_document

logger = logging.getLogger(__name__)

FAIL_CODES = {
    FontLoadError: "FONT_LOAD_FAILED",
    UnsupportedDocumentTypeError: "UNSUPPORTED_DOCUMENT_TYPE",
    LogoLoadError: "LOGO_LOAD_FAILED",
    OutputEncodingError: "OUTPUT_ENCODING_FAILED",
}


def _fail_code(exc: BaseException) -> str:
    for error_type, code in FAIL_CODES.items():
        if isinstance(exc, error_type):
            return code
    return "RENDER_ERROR"


def _prepare_temp_dir(root: Path, slug: str) -> Path:
    temp_dir = root / f"{slug}.tmp"
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def _finalize_artifacts(temp_dir: Path, final_dir: Path, artifacts: List[Path]) -> List[Path]:
    if final_dir.exists():
        shutil.rmtree(final_dir)
    temp_dir.replace(final_dir)
    return [final_dir / path.relative_to(temp_dir) for path in artifacts]


def _write_error(root: Path, slug: str, message: str) -> Path:
    error_path = artifact_path(slug, "error", base_dir=root)
    error_path.write_text(message, encoding="utf-8")
    return error_path


def _job_identity(raw: Any, opts: RenderOptions) -> Tuple[str, str]:
    """Slug and document type recorded for a job, even when the type is unsupported."""
    try:
        doc = sanitize_document(raw, opts.document_type, locale=opts.locale)
    except UnsupportedDocumentTypeError as exc:
        kind = str(exc.document_type)
        return safe_slug(f"{kind} render"), kind
    return slug_for(doc), doc.type


async def run_render_job(
    raw: Any,
    options: OptionsLike = None,
    out_dir: Optional[Path] = None,
    previews: bool = False,
    registry: Optional[FontRegistry] = None,
) -> RenderRecord:
    """Render one document into ``<out_dir>/<slug>/`` and record the outcome.

    Artifacts are written to a temporary directory that replaces the final
    one only once every file exists. Failures are logged, recorded with a
    fail code and written to ``error.log``, then re-raised.
    """
    init_db()
    opts = coerce_options(options)
    root = Path(out_dir or config.OUT_DIR)
    slug, document_type = _job_identity(raw, opts)
    record = RenderRecord(
        slug=slug,
        document_type=document_type,
        locale=opts.locale,
        template=opts.template.value,
        theme=opts.theme or config.DEFAULT_THEME,
    )

    temp_dir = _prepare_temp_dir(root, slug)
    try:
        rendered = await render_pdf(raw, opts, registry)
        pdf_path = artifact_path(slug, "pdf", base_dir=temp_dir, include_slug=False)
        pdf_path.write_bytes(rendered.data)
        artifacts = [pdf_path, write_options(slug, opts.model_dump(mode="json"), base_dir=temp_dir, include_slug=False)]
        if previews:
            artifacts.extend(render_previews(rendered.data, slug, base_dir=temp_dir, include_slug=False))
        _finalize_artifacts(temp_dir, root / slug, artifacts)
    except Exception as exc:
        logger.exception("Render job failed for %s", slug)
        shutil.rmtree(temp_dir, ignore_errors=True)
        _write_error(root, slug, f"{type(exc).__name__}: {exc}")
        record.status = RenderStatus.FAILED
        record.fail_code = _fail_code(exc)
        record.fail_detail = str(exc)
        try:
            record_render(record)
        except SQLAlchemyError:
            logger.exception("Could not record failed render %s", slug)
        raise

    record.page_count = rendered.page_count
    record.byte_size = len(rendered.data)
    record.status = RenderStatus.READY
    return record_render(record)
