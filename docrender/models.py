from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Mapping, Optional, Union

from pydantic import ValidationError
from sqlmodel import Field, SQLModel, create_engine, Session

from . import config
from .errors import InvalidOptionsError


class DocumentType(str, Enum):
    INVOICE = "invoice"
    NDA = "nda"


class Template(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"

    @classmethod
    def parse(cls, value: object) -> "Template":
        if isinstance(value, Template):
            return value
        text = str(value or "").strip().lower()
        if text == "legal":
            return cls.CLASSIC
        try:
            return cls(text)
        except ValueError:
            return cls(config.DEFAULT_TEMPLATE)


class RenderStatus(str, Enum):
    READY = "READY"
    FAILED = "FAILED"


class Party(SQLModel):
    name: str
    address: str
    email: str
    phone: str


class LineItem(SQLModel):
    description: str
    quantity: float
    rate: float
    amount: float


class Section(SQLModel):
    title: str
    body: str


class Invoice(SQLModel):
    type: Literal["invoice"] = "invoice"
    invoice_number: str
    date: str
    due_date: str
    from_party: Party
    to_party: Party
    items: List[LineItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0
    currency: str = config.DEFAULT_CURRENCY
    locale: str = config.DEFAULT_LOCALE
    terms: Optional[str] = None
    notes: Optional[str] = None


class NDA(SQLModel):
    type: Literal["nda"] = "nda"
    title: str
    effective_date: str
    termination_date: Optional[str] = None
    disclosing_party: Party
    receiving_party: Party
    purpose: str
    sections: List[Section] = Field(default_factory=list)
    jurisdiction: str
    term_months: int = 12


Document = Union[Invoice, NDA]


# camelCase keys accepted from the generation layer
_OPTION_ALIASES = {
    "documentType": "document_type",
    "includeWatermark": "include_watermark",
    "accentColor": "accent_color",
    "companyLogo": "company_logo",
    "websiteUrl": "website_url",
    "textDirection": "text_direction",
}


class RenderOptions(SQLModel):
    locale: str = config.DEFAULT_LOCALE
    # None lets the payload's own ``type`` tag decide
    document_type: Optional[str] = None
    template: Template = Template.MODERN
    theme: Optional[str] = None
    include_watermark: bool = False
    accent_color: Optional[str] = None
    company_logo: Optional[str] = None
    website_url: Optional[str] = None
    text_direction: Optional[Literal["ltr", "rtl"]] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "RenderOptions":
        data = {_OPTION_ALIASES.get(key, key): value for key, value in values.items()}
        data = {key: value for key, value in data.items() if value is not None}
        data = {key: value for key, value in data.items() if key in cls.model_fields}
        if "template" in data:
            data["template"] = Template.parse(data["template"])
        if "document_type" in data:
            data["document_type"] = str(getattr(data["document_type"], "value", data["document_type"]))
        if "text_direction" in data:
            direction = str(data["text_direction"]).strip().lower()
            if direction in ("ltr", "rtl"):
                data["text_direction"] = direction
            else:
                # "auto" and unknown values fall back to the locale's direction
                del data["text_direction"]
        try:
            return cls(**data)
        except ValidationError as exc:
            raise InvalidOptionsError(str(exc)) from exc


class RenderRecord(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(index=True)
    document_type: str
    locale: str
    template: str
    theme: str
    page_count: int = 0
    byte_size: int = 0
    status: RenderStatus = Field(default=RenderStatus.READY)
    fail_code: Optional[str] = None
    fail_detail: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
