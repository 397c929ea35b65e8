from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Optional

from slugify import slugify
from sqlmodel import select

from . import config
from .models import NDA, Document, Invoice, RenderRecord, get_session


ARTIFACT_NAMES = {
    "preview_1": "preview_1.png",
    "preview_2": "preview_2.png",
    "preview_3": "preview_3.png",
    "options": "options.json",
    "error": "error.log",
}


def safe_slug(text: str) -> str:
    slug = slugify(text)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(text.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from text")
    return slug


def slug_for(document: Document) -> str:
    if isinstance(document, Invoice):
        return safe_slug(f"invoice {document.invoice_number}")
    if isinstance(document, NDA):
        return safe_slug(
            f"nda {document.disclosing_party.name} {document.receiving_party.name} {document.effective_date}"
        )
    raise TypeError(f"Not a document: {type(document).__name__}")


def default_filename(document: Document) -> str:
    return f"{slug_for(document)}.pdf"


def render_dir(slug: str, base_dir: Path | None = None, include_slug: bool = True) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug if include_slug else root
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(
    slug: str,
    artifact_type: str,
    base_dir: Path | None = None,
    include_slug: bool = True,
) -> Path:
    if artifact_type == "pdf":
        filename = f"{slug}.pdf"
    else:
        filename = ARTIFACT_NAMES[artifact_type]
    return render_dir(slug, base_dir=base_dir, include_slug=include_slug) / filename


def write_options(slug: str, options: dict, base_dir: Path | None = None, include_slug: bool = True) -> Path:
    path = artifact_path(slug, "options", base_dir=base_dir, include_slug=include_slug)
    path.write_text(json.dumps(options, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def record_render(record: RenderRecord) -> RenderRecord:
    with get_session() as session:
        session.add(record)
        session.commit()
        session.refresh(record)
    return record


def recent_renders(limit: Optional[int] = 20) -> list[RenderRecord]:
    with get_session() as session:
        statement = select(RenderRecord).order_by(RenderRecord.id.desc())
        if limit:
            statement = statement.limit(limit)
        return list(session.exec(statement).all())
