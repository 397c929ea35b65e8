from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional

from .. import config
from ..errors import UnsupportedDocumentTypeError
from ..models import NDA, DocumentType, Invoice, LineItem, Party, Section
from .formatting import suggested_currency

UNKNOWN_PARTY = Party(
    name="Unknown Party",
    address="No address provided",
    email="No email provided",
    phone="No phone provided",
)

DEFAULT_SECTION = Section(
    title="Confidentiality Obligations",
    body=(
        "Each party agrees to keep confidential information secret and to use it "
        "only for the permitted purpose defined in this agreement."
    ),
)

DEFAULT_NDA_TITLE = "Non-Disclosure Agreement"
DEFAULT_JURISDICTION = "Governing law not specified"
DEFAULT_PURPOSE = "General business collaboration"
DEFAULT_TERM_MONTHS = 12
DEFAULT_INVOICE_NUMBER = "INV-001"
DEFAULT_ITEM_DESCRIPTION = "Service/Product"
PAYMENT_DAYS = 30


def _as_mapping(value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return dump()
    return {}


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any, fallback: str = "") -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        trimmed = value.strip()
        if trimmed:
            return trimmed
    return fallback


def _number(value: Any, fallback: float = 0.0) -> float:
    if isinstance(value, bool):
        return fallback
    try:
        number = float(str(value).replace(",", "").strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def _date_text(value: Any, fallback: date) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return _text(value, fallback.isoformat())


def _optional_date_text(value: Any) -> Optional[str]:
    if isinstance(value, date):
        return value.isoformat()
    return _text(value) or None


def sanitize_party(raw: Any) -> Party:
    data = _as_mapping(raw)
    if not data:
        return UNKNOWN_PARTY.model_copy()
    return Party(
        name=_text(_pick(data, "name", "company", "companyName"), UNKNOWN_PARTY.name),
        address=_text(data.get("address"), UNKNOWN_PARTY.address),
        email=_text(data.get("email"), UNKNOWN_PARTY.email),
        phone=_text(data.get("phone"), UNKNOWN_PARTY.phone),
    )


def sanitize_sections(raw: Any) -> List[Section]:
    """Normalize clause entries, dropping the ones with neither title nor body."""
    if not isinstance(raw, (list, tuple)):
        return []
    sections = []
    for entry in raw:
        data = _as_mapping(entry)
        section = Section(
            title=_text(_pick(data, "title", "heading")),
            body=_text(_pick(data, "body", "content", "text")),
        )
        if section.title or section.body:
            sections.append(section)
    return sections


def sanitize_nda(raw: Any) -> NDA:
    data = _as_mapping(raw)
    today = date.today()
    sections = sanitize_sections(data.get("sections")) or [DEFAULT_SECTION.model_copy()]

    term = _number(_pick(data, "term_months", "termMonths"), DEFAULT_TERM_MONTHS)
    termination = _optional_date_text(_pick(data, "termination_date", "terminationDate"))

    return NDA(
        title=_text(data.get("title"), DEFAULT_NDA_TITLE),
        effective_date=_date_text(_pick(data, "effective_date", "effectiveDate", "date"), today),
        termination_date=termination,
        disclosing_party=sanitize_party(_pick(data, "disclosing_party", "disclosingParty")),
        receiving_party=sanitize_party(_pick(data, "receiving_party", "receivingParty")),
        purpose=_text(data.get("purpose"), DEFAULT_PURPOSE),
        sections=sections,
        jurisdiction=_text(_pick(data, "jurisdiction", "governingLaw", "governing_law"), DEFAULT_JURISDICTION),
        term_months=int(term) if term > 0 else DEFAULT_TERM_MONTHS,
    )


def _line_item(raw: Any) -> LineItem:
    data = _as_mapping(raw)
    quantity = _number(_pick(data, "quantity", "qty"), 1.0)
    rate = _number(_pick(data, "rate", "unitPrice", "unit_price", "price"), 0.0)
    return LineItem(
        description=_text(_pick(data, "description", "name", "item"), DEFAULT_ITEM_DESCRIPTION),
        quantity=quantity,
        rate=rate,
        amount=round(quantity * rate, 2),
    )


def _tax_rate(value: Any) -> float:
    rate = _number(value, 0.0)
    if rate < 0:
        return 0.0
    # 8 means 8 %
    return rate / 100 if rate > 1 else rate


def sanitize_invoice(raw: Any, locale: Optional[str] = None) -> Invoice:
    """Normalize an invoice payload and recompute every derived amount.

    Line amounts, subtotal, tax and total are always derived from quantities,
    rates and the tax rate; whatever totals the payload carried are ignored.
    """
    data = _as_mapping(raw)
    today = date.today()
    doc_locale = _text(data.get("locale"), locale or config.DEFAULT_LOCALE)

    raw_items = _pick(data, "items", "lineItems", "line_items")
    items = [_line_item(entry) for entry in raw_items] if isinstance(raw_items, (list, tuple)) else []
    subtotal = round(sum(item.amount for item in items), 2)
    tax_rate = _tax_rate(_pick(data, "tax_rate", "taxRate"))
    tax_amount = round(subtotal * tax_rate, 2)

    terms = _text(data.get("terms"))
    notes = _text(data.get("notes"))
    currency = _text(data.get("currency"), suggested_currency(doc_locale)).upper()

    return Invoice(
        invoice_number=_text(_pick(data, "invoice_number", "invoiceNumber", "number"), DEFAULT_INVOICE_NUMBER),
        date=_date_text(_pick(data, "date", "issueDate", "issue_date"), today),
        due_date=_date_text(_pick(data, "due_date", "dueDate"), today + timedelta(days=PAYMENT_DAYS)),
        from_party=sanitize_party(_pick(data, "from_party", "from", "fromParty", "seller")),
        to_party=sanitize_party(_pick(data, "to_party", "to", "toParty", "client", "billTo")),
        items=items,
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=round(subtotal + tax_amount, 2),
        currency=currency,
        locale=doc_locale,
        terms=terms or None,
        notes=notes or None,
    )


def sanitize_document(raw: Any, document_type: Any = None, locale: Optional[str] = None):
    """Dispatch on ``document_type``, or on the payload's own ``type`` tag.

    A payload with neither is treated as an invoice.
    """
    tag = document_type if document_type is not None else _as_mapping(raw).get("type")
    if tag is None:
        tag = config.DEFAULT_DOCUMENT_TYPE
    tag = getattr(tag, "value", tag)
    text = str(tag or "").strip().lower()
    if text == DocumentType.INVOICE.value:
        return sanitize_invoice(raw, locale=locale)
    if text == DocumentType.NDA.value:
        return sanitize_nda(raw)
    raise UnsupportedDocumentTypeError(tag)
