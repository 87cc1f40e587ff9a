"""Content lines of a component.

A ``Line`` is a sequence of runes (grapheme clusters) with style ranges,
flags and a horizontal panning offset ``start`` used when a cell focused
line is wider than its component.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Callable, Iterator

from lines.style import DEFAULT_STYLE, Style, StyleRange
from lines.text import rune_width, runes


class LineFlags(IntFlag):
    NONE = 0
    NOT_FOCUSABLE = 1 << 0
    HIGHLIGHTED = 1 << 1
    TRIMMED_HIGHLIGHTED = 1 << 2


HIGHLIGHT_FLAGS = LineFlags.HIGHLIGHTED | LineFlags.TRIMMED_HIGHLIGHTED

Cell = tuple[str, Style]


class Line:
    """One content line.

    At most one of ``HIGHLIGHTED`` and ``TRIMMED_HIGHLIGHTED`` is set.
    """

    def __init__(
        self,
        text: str = "",
        style: Style = DEFAULT_STYLE,
        flags: LineFlags = LineFlags.NONE,
    ) -> None:
        self.rr: list[str] = runes(text)
        self.ss: list[StyleRange] = []
        self.style = style
        self.flags = flags
        self.start = 0
        self.dirty = True
        self._overflow = (False, False)

    def __len__(self) -> int:
        return len(self.rr)

    def __repr__(self) -> str:
        return f"Line({self.text!r}, flags={self.flags!r})"

    @property
    def text(self) -> str:
        return "".join(self.rr)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def set(
        self,
        text: str,
        style: Style | None = None,
        flags: LineFlags | None = None,
    ) -> Line:
        """Replace content and style ranges; keeps highlighting."""
        self.rr = runes(text)
        self.ss = []
        if style is not None:
            self.style = style
        if flags is not None:
            self.flags = flags | (self.flags & HIGHLIGHT_FLAGS)
        self.start = 0
        self.dirty = True
        return self

    def set_at(self, cell: int, text: str, style: Style | None = None) -> Line:
        """Write *text* from *cell* on, truncating what followed.

        A line shorter than *cell* is padded with blanks.
        """
        if cell < 0:
            return self
        rr = runes(text)
        if len(self.rr) < cell:
            self.rr.extend(" " * (cell - len(self.rr)))
        self.rr[cell:] = rr
        self.ss = [sr for sr in self.ss if sr.start < cell]
        if style is not None and rr:
            self.ss.append(StyleRange(cell, cell + len(rr), style))
        self.dirty = True
        return self

    def add_style_range(self, *ranges: StyleRange) -> Line:
        self.ss.extend(ranges)
        self.dirty = True
        return self

    def style_at(self, cell: int) -> Style:
        """Style of *cell*; later ranges win over earlier ones."""
        for sr in reversed(self.ss):
            if sr.covers(cell):
                return sr.style
        return self.style

    def insert_rune(self, cell: int, r: str) -> None:
        if cell >= len(self.rr):
            self.rr.extend(" " * (cell - len(self.rr)))
            self.rr.append(r)
        else:
            self.rr.insert(cell, r)
            self.ss = [
                sr if sr.end <= cell else StyleRange(
                    sr.start if sr.start < cell else sr.start + 1,
                    sr.end + 1,
                    sr.style,
                )
                for sr in self.ss
            ]
        self.dirty = True

    def replace_rune(self, cell: int, r: str) -> None:
        if cell >= len(self.rr):
            self.insert_rune(cell, r)
            return
        self.rr[cell] = r
        self.dirty = True

    def delete_rune(self, cell: int) -> None:
        if not 0 <= cell < len(self.rr):
            return
        del self.rr[cell]
        ss: list[StyleRange] = []
        for sr in self.ss:
            if sr.end <= cell:
                ss.append(sr)
            elif sr.start > cell:
                ss.append(StyleRange(sr.start - 1, sr.end - 1, sr.style))
            elif sr.end - sr.start > 1:
                ss.append(StyleRange(sr.start, sr.end - 1, sr.style))
        self.ss = ss
        self.dirty = True

    def join(self, other: Line) -> None:
        """Append the runes and style ranges of *other*."""
        offset = len(self.rr)
        self.rr.extend(other.rr)
        self.ss.extend(
            StyleRange(sr.start + offset, sr.end + offset, sr.style)
            for sr in other.ss
        )
        self.dirty = True

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def is_flagged(self, ff: LineFlags) -> bool:
        return bool(ff) and self.flags & ff == ff

    @property
    def is_focusable(self) -> bool:
        return not self.flags & LineFlags.NOT_FOCUSABLE

    def flag(self, ff: LineFlags) -> None:
        if ff & HIGHLIGHT_FLAGS:
            self.flags &= ~HIGHLIGHT_FLAGS
        self.flags |= ff
        self.dirty = True

    def unflag(self, ff: LineFlags) -> None:
        if self.flags & ff:
            self.flags &= ~ff
            self.dirty = True

    # ------------------------------------------------------------------
    # Panning
    # ------------------------------------------------------------------
    #
    # Cells are counted in runes from ``start``; columns are screen
    # columns, which differ from cells once a wide rune is visible.

    def _width(self, idx: int) -> int:
        """Columns the rune at content index *idx* takes; 1 past the end."""
        if idx < len(self.rr):
            return rune_width(self.rr[idx]) or 1
        return 1

    def column_of(self, cell: int) -> int:
        """Screen column of *cell* of the visible part of this line."""
        return sum(self._width(self.start + i) for i in range(max(0, cell)))

    def cell_at(self, column: int) -> int:
        """Cell of the visible part of this line painted at *column*."""
        x = cell = 0
        while True:
            w = self._width(self.start + cell)
            if column < x + w:
                return cell
            x += w
            cell += 1

    def reset_line_focus(self) -> None:
        if self.start:
            self.start = 0
            self.dirty = True

    def decrement_start(self) -> None:
        if self.start > 0:
            self.start -= 1
            self.dirty = True

    def pan_to(self, idx: int, width: int) -> None:
        """Move ``start`` the least amount making rune *idx* fit *width*."""
        start = min(self.start, max(0, idx))
        span = sum(self._width(i) for i in range(start, idx + 1))
        while start < idx and span > width:
            span -= self._width(start)
            start += 1
        if start != self.start:
            self.start = start
            self.dirty = True

    def is_overflowing(self, width: int) -> tuple[bool, bool, bool]:
        """Report ``(left, right, changed)`` overflow of the visible part."""
        left = self.start > 0
        right = sum(self._width(i) for i in range(self.start, len(self.rr))) > width
        changed = (left, right) != self._overflow
        self._overflow = (left, right)
        return left, right, changed

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def cells(self, width: int, highlight: Callable[[Style], Style]) -> list[Cell]:
        """Exactly *width* cells of the visible part of this line.

        A wide rune is followed by an empty continuation cell; the rest of
        the width is padded with blanks in the line's style.  *highlight*
        maps the style of highlighted cells.
        """
        out: list[Cell] = []
        trimmed = self.flags & LineFlags.TRIMMED_HIGHLIGHTED
        highlighted = self.flags & LineFlags.HIGHLIGHTED
        lo = hi = -1
        if trimmed:
            text = self.rr
            lo = next((i for i, r in enumerate(text) if r != " "), -1)
            hi = next(
                (i for i in range(len(text) - 1, -1, -1) if text[i] != " "), -1
            )
        idx = self.start
        while len(out) < width and idx < len(self.rr):
            r = self.rr[idx]
            style = self.style_at(idx)
            if highlighted or (trimmed and lo <= idx <= hi):
                style = highlight(style)
            w = rune_width(r) or 1
            if len(out) + w > width:
                break
            out.append((r, style))
            out.extend(("", style) for _ in range(w - 1))
            idx += 1
        pad = highlight(self.style) if highlighted else self.style
        out.extend((" ", pad) for _ in range(width - len(out)))
        return out


class LineBuffer:
    """The ordered lines of a component."""

    def __init__(self) -> None:
        self._ll: list[Line] = []

    def __len__(self) -> int:
        return len(self._ll)

    def __getitem__(self, idx: int) -> Line:
        return self._ll[idx]

    def __iter__(self) -> Iterator[Line]:
        return iter(self._ll)

    def line(self, idx: int, style: Style = DEFAULT_STYLE) -> Line:
        """Line *idx*, padding the buffer with empty lines as needed."""
        while len(self._ll) <= idx:
            self._ll.append(Line(style=style))
        return self._ll[idx]

    def remove(self, idx: int) -> Line:
        line = self._ll.pop(idx)
        for ln in self._ll[idx:]:
            ln.dirty = True
        return line

    def truncate(self, n: int) -> None:
        del self._ll[max(0, n):]

    def reset(self, idx: int = -1) -> None:
        """Blank line *idx*; ``-1`` removes all lines."""
        if idx == -1:
            self._ll.clear()
            return
        if 0 <= idx < len(self._ll):
            self._ll[idx].set("", flags=LineFlags.NONE)
            self._ll[idx].unflag(HIGHLIGHT_FLAGS)

    @property
    def is_dirty(self) -> bool:
        return any(line.dirty for line in self._ll)

    def clean(self) -> None:
        for line in self._ll:
            line.dirty = False
