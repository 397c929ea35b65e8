from __future__ import annotations

from pathlib import Path

from reportlab.lib.pagesizes import A4


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "renders.db"
DOWNLOAD_DIR = Path.home() / "Downloads"

DEFAULT_LOCALE = "en-US"
REFERENCE_LOCALE = "en-US"
DEFAULT_CURRENCY = "USD"
DEFAULT_DOCUMENT_TYPE = "invoice"
DEFAULT_TEMPLATE = "modern"
DEFAULT_THEME = "primary"

DEFAULT_WEBSITE_URL = "https://xinfoice.com"
POWERED_BY_TEXT = "Powered by Xinfoice"
WATERMARK_TEXT = "DRAFT"
PDF_CREATOR = "docrender"

PAGE_SIZE = A4
FONT_FETCH_TIMEOUT = 30.0


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "renders.db"
