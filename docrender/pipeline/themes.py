from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from reportlab.lib import colors

from ..config import DEFAULT_THEME


@dataclass(frozen=True)
class ThemeColors:
    primary: str
    primary_light: str
    secondary: str
    accent: str
    background: str
    surface: str
    text: str
    text_secondary: str
    border: str
    table_header: str
    table_row_even: str
    table_row_odd: str


@dataclass(frozen=True)
class ThemeFonts:
    """Built-in Latin families for footer and watermark text that is never localized."""

    primary: str
    secondary: str
    monospace: str


@dataclass(frozen=True)
class ThemeSpacing:
    margin: float           # points
    section_gap: float
    line_height: float      # multiplier applied to the font size
    border_radius: float


@dataclass(frozen=True)
class ThemeEffects:
    header_gradient: bool
    shadows: bool


@dataclass(frozen=True)
class Theme:
    name: str
    colors: ThemeColors
    fonts: ThemeFonts
    spacing: ThemeSpacing
    effects: ThemeEffects

    def leading(self, font_size: float) -> float:
        return round(font_size * self.spacing.line_height, 2)


_SPACING = ThemeSpacing(margin=42.0, section_gap=18.0, line_height=1.45, border_radius=4.0)
_FONTS = ThemeFonts(primary="Helvetica", secondary="Helvetica", monospace="Courier")


PRIMARY_THEME = Theme(
    name="primary",
    colors=ThemeColors(
        primary="#1E40AF",
        primary_light="#3B82F6",
        secondary="#06B6D4",
        accent="#1E3A8A",
        background="#FFFFFF",
        surface="#F8FAFC",
        text="#1E293B",
        text_secondary="#64748B",
        border="#E2E8F0",
        table_header="#06B6D4",
        table_row_even="#FFFFFF",
        table_row_odd="#F8FAFC",
    ),
    fonts=_FONTS,
    spacing=_SPACING,
    effects=ThemeEffects(header_gradient=True, shadows=True),
)

NEUTRAL_THEME = Theme(
    name="neutral",
    colors=ThemeColors(
        primary="#475569",
        primary_light="#64748B",
        secondary="#94A3B8",
        accent="#1E293B",
        background="#FFFFFF",
        surface="#F8FAFC",
        text="#1E293B",
        text_secondary="#64748B",
        border="#E2E8F0",
        table_header="#475569",
        table_row_even="#FFFFFF",
        table_row_odd="#F1F5F9",
    ),
    fonts=_FONTS,
    spacing=_SPACING,
    effects=ThemeEffects(header_gradient=False, shadows=False),
)

DARK_THEME = Theme(
    name="dark",
    colors=ThemeColors(
        primary="#1E40AF",
        primary_light="#3B82F6",
        secondary="#06B6D4",
        accent="#1E3A8A",
        background="#F8FAFC",
        surface="#FFFFFF",
        text="#1E293B",
        text_secondary="#64748B",
        border="#E2E8F0",
        table_header="#06B6D4",
        table_row_even="#F8FAFC",
        table_row_odd="#FFFFFF",
    ),
    fonts=_FONTS,
    spacing=_SPACING,
    effects=ThemeEffects(header_gradient=True, shadows=True),
)


THEMES: Dict[str, Theme] = {
    "primary": PRIMARY_THEME,
    "neutral": NEUTRAL_THEME,
    "dark": DARK_THEME,
}

DEFAULT = THEMES[DEFAULT_THEME]

FONT_SCALE: Dict[str, float] = {
    "title": 24,
    "heading": 16,
    "subheading": 14,
    "body": 11,
    "small": 9,
    "tiny": 8,
}

# Fibonacci steps
SPACING_SCALE: Dict[str, float] = {
    "xs": 2,
    "sm": 4,
    "md": 8,
    "lg": 13,
    "xl": 21,
    "2xl": 34,
    "3xl": 55,
}

GRADIENT_STEPS = 5

_HEX_RE = re.compile(r"^#?[0-9a-fA-F]{6}$")


def resolve_theme(name: Optional[str] = None) -> Theme:
    return THEMES.get(str(name or "").strip().lower(), DEFAULT)


def apply_accent(theme: Theme, accent_color: Optional[str]) -> Theme:
    """Return a copy of ``theme`` using ``accent_color`` as its primary colour."""
    if not accent_color or not _HEX_RE.match(accent_color.strip()):
        return theme
    value = "#" + accent_color.strip().lstrip("#").upper()
    return replace(theme, colors=replace(theme.colors, primary=value))


def hex_color(value: str, default: colors.Color = colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def gradient_bands(theme: Theme, steps: int = GRADIENT_STEPS) -> Tuple[colors.Color, ...]:
    """Colours for a banded header running from the secondary to the primary colour."""
    start = hex_color(theme.colors.secondary)
    end = hex_color(theme.colors.primary)
    bands = []
    for i in range(steps):
        ratio = i / max(1, steps - 1)
        bands.append(
            colors.Color(
                start.red + (end.red - start.red) * ratio,
                start.green + (end.green - start.green) * ratio,
                start.blue + (end.blue - start.blue) * ratio,
            )
        )
    return tuple(bands)
