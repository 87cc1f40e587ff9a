"""Rune segmentation and terminal cell widths.

A "rune" of a line is one grapheme cluster: the unit the cursor moves by
and the unit painted into one (or, for wide characters, two) cells.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def runes(text: str) -> list[str]:
    """Split *text* into grapheme clusters."""
    if text.isascii():
        return list(text)
    return list(grapheme.graphemes(text))


def rune_width(g: str) -> int:
    """Number of terminal cells the grapheme cluster *g* occupies (0-2)."""
    if not g:
        return 0
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    cached = _width_cache.get(g)
    if cached is not None:
        return cached

    width = None
    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tone modifiers and regional indicators
        if (
            cp in (0xFE0F, 0x200D)
            or 0x1F3FB <= cp <= 0x1F3FF
            or 0x1F1E6 <= cp <= 0x1F1FF
        ):
            width = 2
            break
    if width is None:
        first = g[0]
        if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
            width = 2
        elif unicodedata.category(first).startswith("M"):
            width = 0
        else:
            width = max(_wcwidth.wcwidth(first), 0)

    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[g] = width
    return width


def visible_width(text: str) -> int:
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(rune_width(g) for g in runes(text))


def expand_leading_tabs(text: str, tab_width: int) -> str:
    """Replace the tabs at the start of *text* with *tab_width* spaces each."""
    stripped = text.lstrip("\t")
    tabs = len(text) - len(stripped)
    if not tabs:
        return text
    return " " * (tabs * tab_width) + stripped
