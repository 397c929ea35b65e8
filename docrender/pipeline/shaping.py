from __future__ import annotations

import re

import arabic_reshaper
from bidi.algorithm import get_display

_RTL_CHARS = re.compile("[\u0590-\u08FF\uFB1D-\uFDFF\uFE70-\uFEFF]")
_CJK_CHARS = re.compile("[\u3040-\u30FF\u3400-\u4DBF\u4E00-\u9FFF\uAC00-\uD7AF\uF900-\uFAFF]")


def has_rtl(text: str) -> bool:
    return bool(_RTL_CHARS.search(text or ""))


def has_cjk(text: str) -> bool:
    return bool(_CJK_CHARS.search(text or ""))


def reshape(text: str) -> str:
    """Join Arabic letters into their contextual presentation forms.

    Reshaping keeps logical order, so wrapping can measure the shaped
    glyph widths before each line is reordered with :func:`visual_line`.
    """
    if not has_rtl(text):
        return text
    return arabic_reshaper.reshape(text)


def visual_line(text: str, direction: str = "ltr") -> str:
    """Reorder one already-wrapped, already-reshaped line for drawing."""
    if not has_rtl(text):
        return text
    base_dir = "R" if direction == "rtl" else "L"
    return get_display(text, base_dir=base_dir)
