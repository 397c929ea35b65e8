from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Set, Tuple

import httpx
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..config import FONT_FETCH_TIMEOUT
from ..errors import FontLoadError
from .formatting import direction_for, is_rtl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontVariant:
    key: str
    storage_name: str
    font_name: str
    style: str  # normal | bold
    url: str

    @property
    def registered_name(self) -> str:
        return font_name(self.font_name, bold=self.style == "bold")


@dataclass(frozen=True)
class FontConfig:
    primary_family: str
    variants: Tuple[FontVariant, ...]
    secondary_family: Optional[str] = None


@dataclass(frozen=True)
class PreparedFonts:
    primary_family: str
    secondary_family: str
    direction: str


def font_name(family: str, bold: bool = False) -> str:
    return f"{family}-Bold" if bold else family


FONT_CONFIGS: Dict[str, FontConfig] = {
    "default": FontConfig(
        primary_family="NotoSans",
        secondary_family="NotoSans",
        variants=(
            FontVariant(
                key="notosans-regular",
                storage_name="NotoSans-Regular.ttf",
                font_name="NotoSans",
                style="normal",
                url="https://fonts.gstatic.com/s/notosans/v36/o-0IIpQlx3QUlC5A4PNb4g.ttf",
            ),
            FontVariant(
                key="notosans-bold",
                storage_name="NotoSans-Bold.ttf",
                font_name="NotoSans",
                style="bold",
                url="https://fonts.gstatic.com/s/notosans/v36/o-0NIpQlx3QUlC5A4PNr5TRA.ttf",
            ),
        ),
    ),
    "arabic": FontConfig(
        primary_family="NotoNaskhArabic",
        secondary_family="NotoNaskhArabic",
        variants=(
            FontVariant(
                key="notonaskh-regular",
                storage_name="NotoNaskhArabic-Regular.ttf",
                font_name="NotoNaskhArabic",
                style="normal",
                url="https://fonts.gstatic.com/s/notonaskharabic/v21/taiFGn5y_w0ifkv0DyEKY5Z0MKJDNiIDOBcH.ttf",
            ),
            FontVariant(
                key="notonaskh-bold",
                storage_name="NotoNaskhArabic-Bold.ttf",
                font_name="NotoNaskhArabic",
                style="bold",
                url="https://fonts.gstatic.com/s/notonaskharabic/v21/taiIGn5y_w0ifkv0DyEKY5Z0MKJDNyqJOYoBSslP.ttf",
            ),
        ),
    ),
    "zh-CN": FontConfig(
        primary_family="NotoSansSC",
        variants=(
            FontVariant(
                key="notosans-sc-regular",
                storage_name="NotoSansSC-Regular.ttf",
                font_name="NotoSansSC",
                style="normal",
                url="https://fonts.gstatic.com/s/notosanssc/v19/k3kJo84MPvpLmixcA63oeALZTYKlEwoy.ttf",
            ),
            FontVariant(
                key="notosans-sc-bold",
                storage_name="NotoSansSC-Bold.ttf",
                font_name="NotoSansSC",
                style="bold",
                url="https://fonts.gstatic.com/s/notosanssc/v19/k3kHo84MPvpLmixcA63oeALZhaKIExkzL_NP.ttf",
            ),
        ),
    ),
    "ja-JP": FontConfig(
        primary_family="NotoSansJP",
        variants=(
            FontVariant(
                key="notosans-jp-regular",
                storage_name="NotoSansJP-Regular.ttf",
                font_name="NotoSansJP",
                style="normal",
                url="https://fonts.gstatic.com/s/notosansjp/v63/-F63fjptAgt5VM-kVkqdyU8n1lYTFA.ttf",
            ),
            FontVariant(
                key="notosans-jp-bold",
                storage_name="NotoSansJP-Bold.ttf",
                font_name="NotoSansJP",
                style="bold",
                url="https://fonts.gstatic.com/s/notosansjp/v63/-F6sfjptAgt5VM-kVkqdyU8n1pJWez0s.ttf",
            ),
        ),
    ),
    "ko-KR": FontConfig(
        primary_family="NotoSansKR",
        variants=(
            FontVariant(
                key="notosans-kr-regular",
                storage_name="NotoSansKR-Regular.ttf",
                font_name="NotoSansKR",
                style="normal",
                url="https://fonts.gstatic.com/s/notosanskr/v40/Pby6FmXiEBPT4ITbgNA9cg.ttf",
            ),
            FontVariant(
                key="notosans-kr-bold",
                storage_name="NotoSansKR-Bold.ttf",
                font_name="NotoSansKR",
                style="bold",
                url="https://fonts.gstatic.com/s/notosanskr/v40/Pby7FmXiEBPT4ITbgNA-ZjcvNA.ttf",
            ),
        ),
    ),
}


def resolve_font_config(locale: str) -> FontConfig:
    if locale in FONT_CONFIGS:
        return FONT_CONFIGS[locale]
    if is_rtl(locale):
        return FONT_CONFIGS["arabic"]
    return FONT_CONFIGS["default"]


class FontRegistry:
    """Fetches locale fonts and registers them with reportlab.

    One registry lives for the whole process. Every variant is fetched at
    most once: concurrent callers share the in-flight task, and a loaded
    variant is never evicted. A failed fetch fails every waiter with
    :class:`FontLoadError` and leaves the variant unloaded.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = FONT_FETCH_TIMEOUT,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._loaded: Set[str] = set()
        self._loading: Dict[str, asyncio.Task] = {}
        self._families: Set[str] = set()

    def is_loaded(self, variant_key: str) -> bool:
        return variant_key in self._loaded

    async def prepare_fonts(self, locale: str) -> PreparedFonts:
        font_config = resolve_font_config(locale)
        await asyncio.gather(*(self._ensure_loaded(variant) for variant in font_config.variants))
        self._register_family(font_config)
        secondary = font_config.secondary_family or font_config.primary_family
        return PreparedFonts(
            primary_family=font_config.primary_family,
            secondary_family=secondary,
            direction=direction_for(locale),
        )

    async def _ensure_loaded(self, variant: FontVariant) -> None:
        if variant.key in self._loaded:
            return
        task = self._loading.get(variant.key)
        if task is None:
            task = asyncio.ensure_future(self._load(variant))
            self._loading[variant.key] = task
            task.add_done_callback(lambda _done, key=variant.key: self._loading.pop(key, None))
        await asyncio.shield(task)

    async def _load(self, variant: FontVariant) -> None:
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(variant.url)
                response.raise_for_status()
                data = response.content
        except httpx.HTTPError as exc:
            raise FontLoadError(variant.key, variant.url, str(exc)) from exc

        try:
            pdfmetrics.registerFont(TTFont(variant.registered_name, io.BytesIO(data)))
        except Exception as exc:
            raise FontLoadError(variant.key, variant.url, f"cannot decode {variant.storage_name}: {exc}") from exc

        self._loaded.add(variant.key)
        logger.info("Fetched font %s (%d bytes)", variant.key, len(data))

    def _register_family(self, font_config: FontConfig) -> None:
        family = font_config.primary_family
        if family in self._families:
            return
        styles = {variant.style: variant.registered_name for variant in font_config.variants}
        regular = styles.get("normal") or next(iter(styles.values()))
        bold = styles.get("bold", regular)
        pdfmetrics.registerFontFamily(family, normal=regular, bold=bold, italic=regular, boldItalic=bold)
        self._families.add(family)


_default_registry: Optional[FontRegistry] = None


def get_font_registry() -> FontRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = FontRegistry()
    return _default_registry
