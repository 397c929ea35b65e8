from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Dict, Union

from babel import Locale, dates, numbers

from ..config import REFERENCE_LOCALE

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, None]

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
    "CHF": "CHF",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "PLN": "zł",
    "CZK": "Kč",
    "HUF": "Ft",
    "RUB": "₽",
    "CNY": "¥",
    "INR": "₹",
    "BRL": "R$",
    "MXN": "$",
    "ZAR": "R",
    "DZD": "د.ج",
    "MAD": "د.م.",
    "TND": "د.ت",
    "EGP": "ج.م",
    "NGN": "₦",
    "KES": "KSh",
    "GHS": "₵",
    "XOF": "CFA",
    "XAF": "FCFA",
}

LOCALE_CURRENCY: Dict[str, str] = {
    "en-US": "USD",
    "en-GB": "GBP",
    "en-CA": "CAD",
    "en-AU": "AUD",
    "fr-FR": "EUR",
    "fr-CA": "CAD",
    "de-DE": "EUR",
    "es-ES": "EUR",
    "it-IT": "EUR",
    "pt-BR": "BRL",
    "pt-PT": "EUR",
    "nl-NL": "EUR",
    "sv-SE": "SEK",
    "no-NO": "NOK",
    "da-DK": "DKK",
    "fi-FI": "EUR",
    "pl-PL": "PLN",
    "cs-CZ": "CZK",
    "hu-HU": "HUF",
    "ru-RU": "RUB",
    "zh-CN": "CNY",
    "ja-JP": "JPY",
    "ar-EG": "EGP",
    "ar-DZ": "DZD",
    "ar-MA": "MAD",
    "ar-TN": "TND",
    "hi-IN": "INR",
}

# Arabic-script languages
RTL_LANGUAGES = frozenset({"ar", "fa", "ur", "ps"})

DATE_PLACEHOLDER = "Date not specified"

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%B %d, %Y", "%d %B %Y", "%b %d, %Y")


def language_of(locale: str) -> str:
    return str(locale or "").replace("_", "-").split("-")[0].strip().lower()


def is_rtl(locale: str) -> bool:
    return language_of(locale) in RTL_LANGUAGES


def direction_for(locale: str) -> str:
    return "rtl" if is_rtl(locale) else "ltr"


def currency_symbol(currency: str) -> str:
    code = str(currency or "").upper()
    return CURRENCY_SYMBOLS.get(code, code)


def suggested_currency(locale: str) -> str:
    return LOCALE_CURRENCY.get(str(locale), "USD")


def _babel_locale(locale: str) -> Locale:
    return Locale.parse(str(locale).replace("_", "-"), sep="-")


def _amount(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Invalid amount %r, formatting as zero", value)
        return 0.0
    if math.isnan(number) or math.isinf(number):
        logger.warning("Non-finite amount %r, formatting as zero", value)
        return 0.0
    return number


def _decimal_pattern(decimals: int) -> str:
    decimals = max(0, int(decimals))
    return "#,##0." + "0" * decimals if decimals else "#,##0"


def format_currency(amount: object, currency: str = "USD", locale: str = REFERENCE_LOCALE) -> str:
    value = _amount(amount)
    code = str(currency or "USD").upper()
    try:
        return numbers.format_currency(value, code, locale=_babel_locale(locale), currency_digits=False)
    except Exception as exc:
        logger.warning("Currency formatting failed for %s %s: %s", locale, code, exc)

    symbol = currency_symbol(code)
    try:
        formatted = numbers.format_decimal(value, format=_decimal_pattern(2), locale=_babel_locale(locale))
        if is_rtl(locale):
            return f"{formatted} {symbol}"
        return f"{symbol}{formatted}"
    except Exception as exc:
        logger.warning("Symbol fallback failed for %s %s: %s", locale, code, exc)

    try:
        formatted = numbers.format_decimal(
            value, format=_decimal_pattern(2), locale=_babel_locale(REFERENCE_LOCALE)
        )
    except Exception:
        formatted = f"{value:,.2f}"
    return f"{symbol}{formatted}"


def format_number(value: object, locale: str = REFERENCE_LOCALE, decimals: int = 2) -> str:
    number = _amount(value)
    pattern = _decimal_pattern(decimals)
    try:
        return numbers.format_decimal(number, format=pattern, locale=_babel_locale(locale))
    except Exception as exc:
        logger.warning("Number formatting failed for %s: %s", locale, exc)
    try:
        return numbers.format_decimal(number, format=pattern, locale=_babel_locale(REFERENCE_LOCALE))
    except Exception:
        return f"{number:,.{max(0, int(decimals))}f}"


def parse_date(value: DateLike) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: DateLike, locale: str = REFERENCE_LOCALE) -> str:
    parsed = parse_date(value)
    if parsed is None:
        text = str(value or "").strip()
        return text or DATE_PLACEHOLDER
    try:
        return dates.format_date(parsed, format="long", locale=_babel_locale(locale))
    except Exception as exc:
        logger.warning("Date formatting failed for %s: %s", locale, exc)
    try:
        return dates.format_date(parsed, format="long", locale=_babel_locale(REFERENCE_LOCALE))
    except Exception:
        return parsed.isoformat()
