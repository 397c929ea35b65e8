from __future__ import annotations

import asyncio
import base64
import webbrowser
from pathlib import Path

import fitz  # PyMuPDF
import pytest

from docrender import config
from docrender.errors import (
    DownloadEnvironmentError,
    InvalidOptionsError,
    LogoLoadError,
    RenderError,
    UnsupportedDocumentTypeError,
)
from docrender.models import RenderOptions
from docrender.pipeline.output import DATA_URI_PREFIX, data_uri_to_bytes
from docrender.pipeline.render import (
    coerce_options,
    load_logo,
    render_pdf,
    render_to_blob,
    render_to_bytes,
    render_to_data_uri,
    trigger_download,
)

INVOICE = {
    "invoiceNumber": "INV-7",
    "date": "2024-03-05",
    "from": {"name": "Acme Studio", "email": "billing@acme.test"},
    "to": {"name": "Globex"},
    "items": [{"description": "Website redesign", "quantity": 1, "rate": 100}],
    "subtotal": 40,
    "taxRate": 0.08,
    "taxAmount": 1,
    "total": 41,
}

NDA_DOC = {
    "title": "Mutual Non-Disclosure Agreement",
    "effectiveDate": "2024-01-15",
    "disclosingParty": {"name": "Acme"},
    "receivingParty": {"name": "Globex"},
    "purpose": "Evaluate a joint venture",
}


def _text(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return "\n".join(page.get_text() for page in doc)


def test_data_uri_prefix(registry) -> None:
    uri = asyncio.run(render_to_data_uri(INVOICE, {"documentType": "invoice"}, registry))
    assert uri.startswith("data:application/pdf")
    assert uri.startswith(DATA_URI_PREFIX)


def test_all_output_forms_carry_the_same_bytes(registry) -> None:
    rendered = asyncio.run(render_pdf(INVOICE, {"documentType": "invoice"}, registry))
    assert rendered.to_bytes() == rendered.to_blob().data
    assert data_uri_to_bytes(rendered.to_data_uri()) == rendered.to_bytes()
    assert rendered.to_bytes().startswith(b"%PDF-")
    assert rendered.to_blob().mime_type == "application/pdf"


def test_separate_entry_points_agree(registry) -> None:
    options = {"documentType": "invoice"}
    data = asyncio.run(render_to_bytes(INVOICE, options, registry))
    blob = asyncio.run(render_to_blob(INVOICE, options, registry))
    uri = asyncio.run(render_to_data_uri(INVOICE, options, registry))
    assert blob.data == data
    assert base64.b64decode(uri[len(DATA_URI_PREFIX):]) == data


def test_tax_and_total_are_recomputed(registry) -> None:
    data = asyncio.run(render_to_bytes(INVOICE, {"documentType": "invoice", "locale": "en-US"}, registry))
    text = _text(data)
    assert "$8.00" in text
    assert "$108.00" in text
    assert "Tax (8%)" in text
    assert "$41.00" not in text


def test_unknown_theme_renders_like_default(registry) -> None:
    default = asyncio.run(render_to_bytes(INVOICE, {"documentType": "invoice"}, registry))
    unknown = asyncio.run(render_to_bytes(INVOICE, {"documentType": "invoice", "theme": "sepia"}, registry))
    assert unknown == default


def test_nda_render_contains_parties_and_clause(registry) -> None:
    rendered = asyncio.run(render_pdf(NDA_DOC, {"documentType": "nda", "template": "legal"}, registry))
    text = _text(rendered.data)
    assert "Acme" in text
    assert "Globex" in text
    assert "Confidentiality Obligations" in text
    assert rendered.filename == "nda-acme-globex-2024-01-15.pdf"


def test_footer_and_watermark(registry) -> None:
    options = {"documentType": "invoice", "includeWatermark": True, "websiteUrl": "https://example.test"}
    text = _text(asyncio.run(render_to_bytes(INVOICE, options, registry)))
    assert "DRAFT" in text
    assert "https://example.test" in text
    assert "Page 1" in text
    assert config.POWERED_BY_TEXT in text


def test_arabic_invoice_renders(registry) -> None:
    rendered = asyncio.run(
        render_pdf(INVOICE, {"documentType": "invoice", "locale": "ar-SA", "template": "minimal"}, registry)
    )
    assert rendered.page_count == 1
    assert rendered.data.startswith(b"%PDF-")


def test_unsupported_document_type(registry) -> None:
    with pytest.raises(UnsupportedDocumentTypeError):
        asyncio.run(render_pdf(INVOICE, {"documentType": "receipt"}, registry))


def test_options_from_camel_case_mapping() -> None:
    options = coerce_options(
        {"documentType": "nda", "template": "legal", "includeWatermark": True, "accentColor": None, "unknown": 1}
    )
    assert isinstance(options, RenderOptions)
    assert options.document_type == "nda"
    assert options.template.value == "classic"
    assert options.include_watermark is True
    assert options.accent_color is None


def test_bad_logo_is_rejected_before_drawing(registry, tmp_path: Path) -> None:
    with pytest.raises(LogoLoadError):
        load_logo(str(tmp_path / "missing.png"))
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")
    with pytest.raises(LogoLoadError):
        asyncio.run(render_pdf(INVOICE, {"documentType": "invoice", "companyLogo": str(broken)}, registry))


def test_download_without_browser(monkeypatch, registry, tmp_path: Path) -> None:
    def no_browser(*args, **kwargs):  # noqa: ANN002, ANN003 - test helper
        raise webbrowser.Error("could not locate runnable browser")

    monkeypatch.setattr(webbrowser, "get", no_browser)
    with pytest.raises(DownloadEnvironmentError):
        asyncio.run(trigger_download(INVOICE, {"documentType": "invoice"}, directory=tmp_path, registry=registry))
    assert list(tmp_path.iterdir()) == []


def test_download_saves_and_opens(monkeypatch, registry, tmp_path: Path) -> None:
    opened = []

    class FakeBrowser:
        def open(self, url: str) -> bool:
            opened.append(url)
            return True

    monkeypatch.setattr(webbrowser, "get", lambda *args, **kwargs: FakeBrowser())
    target = asyncio.run(
        trigger_download(INVOICE, {"documentType": "invoice"}, filename="my invoice", directory=tmp_path, registry=registry)
    )
    assert target == tmp_path / "my invoice.pdf"
    assert target.read_bytes().startswith(b"%PDF-")
    assert opened == [target.resolve().as_uri()]


def test_payload_tag_selects_document_type(registry) -> None:
    tagged = dict(NDA_DOC, type="nda")
    rendered = asyncio.run(render_pdf(tagged, {"locale": "en-US"}, registry))
    text = _text(rendered.data)
    assert rendered.filename.startswith("nda-")
    assert "Mutual Non-Disclosure Agreement" in text
    assert "Invoice Number" not in text


def test_document_type_is_case_insensitive(registry) -> None:
    rendered = asyncio.run(render_pdf(NDA_DOC, {"documentType": "NDA"}, registry))
    assert rendered.filename.startswith("nda-")


def test_text_direction_is_normalized() -> None:
    assert coerce_options({"textDirection": "RTL"}).text_direction == "rtl"
    assert coerce_options({"textDirection": " ltr "}).text_direction == "ltr"
    assert coerce_options({"textDirection": "auto"}).text_direction is None
    assert coerce_options({}).document_type is None


def test_invalid_options_raise_typed_error(registry) -> None:
    with pytest.raises(InvalidOptionsError):
        coerce_options({"includeWatermark": "maybe"})
    with pytest.raises(RenderError):
        asyncio.run(render_pdf(INVOICE, {"includeWatermark": "maybe"}, registry))


def test_footer_and_watermark_use_theme_latin_fonts(registry) -> None:
    options = {"documentType": "invoice", "includeWatermark": True}
    data = asyncio.run(render_to_bytes(INVOICE, options, registry))
    with fitz.open(stream=data, filetype="pdf") as doc:
        names = {font[3] for font in doc[0].get_fonts()}
    assert any("Courier" in name for name in names)
    assert any("Helvetica-Bold" in name for name in names)
