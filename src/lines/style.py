"""Cell styles: attributes and colors of painted runes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntFlag
from typing import NamedTuple


class Attr(IntFlag):
    NONE = 0
    BOLD = 1 << 0
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    REVERSE = 1 << 5
    STRIKETHROUGH = 1 << 6


_SGR_ATTRS: tuple[tuple[Attr, str], ...] = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKETHROUGH, "9"),
)


@dataclass(frozen=True)
class Style:
    """Attributes plus 256-color foreground/background (``None`` = default)."""

    attrs: Attr = Attr.NONE
    fg: int | None = None
    bg: int | None = None

    def with_attrs(self, attrs: Attr) -> Style:
        return replace(self, attrs=self.attrs | attrs)

    def without_attrs(self, attrs: Attr) -> Style:
        return replace(self, attrs=self.attrs & ~attrs)

    def with_fg(self, fg: int | None) -> Style:
        return replace(self, fg=fg)

    def with_bg(self, bg: int | None) -> Style:
        return replace(self, bg=bg)

    def highlighted(self) -> Style:
        """The style of a highlighted cell: this style with reversed colors."""
        return replace(self, attrs=self.attrs ^ Attr.REVERSE)

    def sgr(self) -> str:
        """ANSI SGR sequence selecting this style from a reset state."""
        codes = ["0"]
        codes.extend(code for attr, code in _SGR_ATTRS if self.attrs & attr)
        if self.fg is not None:
            codes.append(f"38;5;{self.fg}")
        if self.bg is not None:
            codes.append(f"48;5;{self.bg}")
        return f"\x1b[{';'.join(codes)}m"


DEFAULT_STYLE = Style()


class StyleRange(NamedTuple):
    """*style* applied to the cells ``start`` (inclusive) to ``end``."""

    start: int
    end: int
    style: Style

    def covers(self, cell: int) -> bool:
        return self.start <= cell < self.end
