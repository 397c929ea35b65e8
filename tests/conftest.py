from __future__ import annotations

import io
from pathlib import Path
from typing import List

import httpx
import pytest
import reportlab
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from docrender.pipeline.fonts import FONT_CONFIGS, FontRegistry, PreparedFonts

VERA_DIR = Path(reportlab.__file__).resolve().parent / "fonts"
BOLD_URLS = {variant.url for bundle in FONT_CONFIGS.values() for variant in bundle.variants if variant.style == "bold"}


def vera_transport(calls: List[str] | None = None, status: int = 200) -> httpx.MockTransport:
    """Serve reportlab's bundled Vera fonts for every font URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        if status != 200:
            return httpx.Response(status, content=b"missing")
        name = "VeraBd.ttf" if url in BOLD_URLS else "Vera.ttf"
        return httpx.Response(200, content=(VERA_DIR / name).read_bytes())

    return httpx.MockTransport(handler)


@pytest.fixture
def font_calls() -> List[str]:
    return []


@pytest.fixture
def registry(font_calls) -> FontRegistry:
    return FontRegistry(transport=vera_transport(font_calls))


@pytest.fixture
def helvetica() -> PreparedFonts:
    # built-in Type 1 family, no download needed
    return PreparedFonts(
        primary_family="Helvetica",
        secondary_family="Helvetica",
        direction="ltr",
    )


@pytest.fixture
def blank_canvas():
    buffer = io.BytesIO()
    return canvas.Canvas(buffer, pagesize=A4, invariant=1)


@pytest.fixture
def vera():
    return vera_transport
