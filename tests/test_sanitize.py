from __future__ import annotations

from datetime import date, timedelta

import pytest

from docrender.errors import UnsupportedDocumentTypeError
from docrender.models import NDA, Invoice
from docrender.pipeline.sanitize import (
    DEFAULT_SECTION,
    sanitize_document,
    sanitize_invoice,
    sanitize_nda,
    sanitize_party,
)

GARBAGE = [None, [], "text", 42, 3.5, {"sections": "nope"}, {"disclosingParty": 7, "termMonths": "soon"}]


@pytest.mark.parametrize("raw", GARBAGE)
def test_sanitize_nda_never_raises(raw) -> None:
    nda = sanitize_nda(raw)
    assert isinstance(nda, NDA)
    assert nda.sections
    assert nda.sections[0].title or nda.sections[0].body
    assert nda.term_months == 12
    assert nda.disclosing_party.name == "Unknown Party"


@pytest.mark.parametrize("raw", GARBAGE)
def test_sanitize_invoice_never_raises(raw) -> None:
    invoice = sanitize_invoice(raw)
    assert isinstance(invoice, Invoice)
    assert invoice.total == invoice.subtotal + invoice.tax_amount


def test_party_placeholders() -> None:
    party = sanitize_party({"name": "  Acme  ", "email": "   "})
    assert party.model_dump() == {
        "name": "Acme",
        "address": "No address provided",
        "email": "No email provided",
        "phone": "No phone provided",
    }


def test_nda_accepts_generator_keys() -> None:
    nda = sanitize_nda(
        {
            "title": " Mutual NDA ",
            "effectiveDate": "2024-01-15",
            "terminationDate": "",
            "disclosingParty": {"name": "Acme"},
            "receivingParty": {"name": "Globex"},
            "governingLaw": "Delaware",
            "termMonths": "24",
            "sections": [
                {"title": "Scope", "content": "Everything shared."},
                {"title": "", "body": ""},
                {"title": "Return", "body": "Return all materials."},
                "junk",
            ],
        }
    )
    assert nda.title == "Mutual NDA"
    assert nda.effective_date == "2024-01-15"
    assert nda.termination_date is None
    assert nda.jurisdiction == "Delaware"
    assert nda.term_months == 24
    assert [s.title for s in nda.sections] == ["Scope", "Return"]
    assert nda.sections[0].body == "Everything shared."


def test_nda_defaults() -> None:
    nda = sanitize_nda({})
    assert nda.title == "Non-Disclosure Agreement"
    assert nda.effective_date == date.today().isoformat()
    assert nda.jurisdiction == "Governing law not specified"
    assert nda.purpose == "General business collaboration"
    assert [s.model_dump() for s in nda.sections] == [DEFAULT_SECTION.model_dump()]


def test_invoice_recomputes_totals() -> None:
    invoice = sanitize_invoice(
        {
            "invoiceNumber": "INV-042",
            "items": [
                {"description": "Design", "quantity": 2, "unitPrice": 40, "amount": 1},
                {"description": "Hosting", "qty": "1", "price": "20"},
            ],
            "subtotal": 5,
            "taxRate": 0.08,
            "taxAmount": 999,
            "total": 1,
        }
    )
    assert invoice.invoice_number == "INV-042"
    assert invoice.items[0].model_dump() == {"description": "Design", "quantity": 2.0, "rate": 40.0, "amount": 80.0}
    assert invoice.subtotal == 100.0
    assert invoice.tax_amount == 8.0
    assert invoice.total == 108.0


def test_invoice_percent_tax_rate_is_normalized() -> None:
    invoice = sanitize_invoice({"items": [{"quantity": 1, "rate": 50}], "tax_rate": 10})
    assert invoice.tax_rate == pytest.approx(0.10)
    assert invoice.tax_amount == 5.0


def test_invoice_defaults() -> None:
    invoice = sanitize_invoice({"items": [{}]}, locale="ja-JP")
    assert invoice.invoice_number == "INV-001"
    assert invoice.items[0].description == "Service/Product"
    assert invoice.items[0].quantity == 1
    assert invoice.items[0].amount == 0
    assert invoice.currency == "JPY"
    assert invoice.locale == "ja-JP"
    assert invoice.due_date == (date.today() + timedelta(days=30)).isoformat()
    assert invoice.terms is None


def test_invoice_accepts_model_instance() -> None:
    first = sanitize_invoice({"items": [{"quantity": 3, "rate": 10}], "from": {"name": "Acme"}})
    again = sanitize_invoice(first)
    assert again.from_party.name == "Acme"
    assert again.total == first.total


def test_sanitize_document_dispatch() -> None:
    assert isinstance(sanitize_document({}, "invoice"), Invoice)
    assert isinstance(sanitize_document({"type": "nda"}), NDA)
    with pytest.raises(UnsupportedDocumentTypeError):
        sanitize_document({}, "receipt")


def test_termination_date_accepts_date_objects() -> None:
    assert sanitize_nda({"terminationDate": date(2026, 1, 1)}).termination_date == "2026-01-01"
    assert sanitize_nda({"terminationDate": "  "}).termination_date is None


def test_untagged_payload_is_an_invoice() -> None:
    assert isinstance(sanitize_document({"invoiceNumber": "INV-9"}), Invoice)
    assert isinstance(sanitize_document({"type": "NDA"}), NDA)
