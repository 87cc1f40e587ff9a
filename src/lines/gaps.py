"""Gaps: frames and margins around a component's content area.

A component's gaps are organized in levels; level 0 is the outermost.
Each level may have a top, right, bottom and left gap line and four
corners.  Every gap line present reduces the content area by one line or
column, so content, cursor and line focus coordinates are always
relative to the area inside the gaps.

Gap lines are written through a ``GapsWriter`` obtained from
``Component.gaps(level)``::

    gg = self.gaps(0)
    gg.horizontal.filling().write("─")
    gg.vertical.filling().write("│")
    gg.corners.write("╭╮╯╰")
    gg.top.at(2).write(" title ")

A *filling* rune repeats to use up the space the gap line's other runes
leave; several fillers of a line share that space evenly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

from lines.style import Style
from lines.text import runes


class Side(enum.IntFlag):
    TOP = 1 << 0
    RIGHT = 1 << 1
    BOTTOM = 1 << 2
    LEFT = 1 << 3

    HORIZONTAL = TOP | BOTTOM
    VERTICAL = LEFT | RIGHT
    ALL = TOP | RIGHT | BOTTOM | LEFT


class Corner(enum.IntFlag):
    TOP_LEFT = 1 << 0
    TOP_RIGHT = 1 << 1
    BOTTOM_RIGHT = 1 << 2
    BOTTOM_LEFT = 1 << 3

    ALL = TOP_LEFT | TOP_RIGHT | BOTTOM_RIGHT | BOTTOM_LEFT


# painting order of the corners, clockwise from the top left
_CORNERS = (
    Corner.TOP_LEFT,
    Corner.TOP_RIGHT,
    Corner.BOTTOM_RIGHT,
    Corner.BOTTOM_LEFT,
)

GapCell = tuple[str, Style]


@dataclass
class _Rune:
    rune: str
    style: Style | None = None
    filling: bool = False


class GapLine:
    """The runes of one gap line of one level."""

    def __init__(self) -> None:
        self.rr: list[_Rune] = []
        self.style: Style | None = None

    def set(self, text: str, style: Style | None = None) -> None:
        self.rr = [_Rune(r, style) for r in runes(text)]

    def set_at(
        self, at: int, text: str, style: Style | None = None, filling: bool = False
    ) -> None:
        """Write *text* from *at* on, truncating what followed.

        A filling write stores only the first rune of *text* as filler.
        """
        rr = runes(text) or [" "]
        if filling:
            new = [_Rune(rr[0], style, True)]
        else:
            new = [_Rune(r, style) for r in rr]
        if len(self.rr) < at:
            self.rr.extend(_Rune(" ") for _ in range(at - len(self.rr)))
        self.rr[at:] = new

    def cells(self, length: int, dflt: Style) -> list[GapCell]:
        """Exactly *length* cells with fillers expanded."""
        style = self.style or dflt
        fillers = [r for r in self.rr if r.filling]
        fixed = len(self.rr) - len(fillers)
        space = max(0, length - fixed)
        out: list[GapCell] = []
        seen = 0
        for r in self.rr:
            cell = (r.rune, r.style or style)
            if not r.filling:
                out.append(cell)
                continue
            n = space // len(fillers) + (1 if seen < space % len(fillers) else 0)
            seen += 1
            out.extend([cell] * n)
        out = out[:length]
        out.extend([(" ", style)] * (length - len(out)))
        return out


@dataclass
class _CornerRune:
    rune: str = " "
    style: Style | None = None


class Gaps:
    """All gap levels of one component."""

    def __init__(self) -> None:
        self.sides: dict[Side, list[GapLine]] = {
            Side.TOP: [],
            Side.RIGHT: [],
            Side.BOTTOM: [],
            Side.LEFT: [],
        }
        self.corners: dict[Corner, list[_CornerRune]] = {c: [] for c in _CORNERS}
        self.dirty = False

    def lengths(self) -> tuple[int, int, int, int]:
        """Gap lines of the ``(top, right, bottom, left)`` sides."""
        return (
            len(self.sides[Side.TOP]),
            len(self.sides[Side.RIGHT]),
            len(self.sides[Side.BOTTOM]),
            len(self.sides[Side.LEFT]),
        )

    def line(self, side: Side, level: int) -> GapLine:
        ll = self.sides[side]
        while len(ll) <= level:
            ll.append(GapLine())
        self.dirty = True
        return ll[level]

    def corner(self, corner: Corner, level: int) -> _CornerRune:
        rr = self.corners[corner]
        while len(rr) <= level:
            rr.append(_CornerRune())
        self.dirty = True
        return rr[level]

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def cells(
        self, width: int, height: int, dflt: Style
    ) -> Iterator[tuple[int, int, GapCell]]:
        """Yield ``(x, y, cell)`` of all gap cells of a *width* x *height* area.

        Horizontal gap lines of a level leave out the columns of the
        vertical gap lines of the same or an outer level, which the
        corners occupy.
        """
        top, right, bottom, left = self.lengths()
        for corner in _CORNERS:
            for i, cr in enumerate(self.corners[corner]):
                x = i if corner in (Corner.TOP_LEFT, Corner.BOTTOM_LEFT) else (
                    width - 1 - i
                )
                y = i if corner in (Corner.TOP_LEFT, Corner.TOP_RIGHT) else (
                    height - 1 - i
                )
                yield x, y, (cr.rune, cr.style or dflt)
        for side in (Side.TOP, Side.BOTTOM):
            x, w = 0, width
            for i, gl in enumerate(self.sides[side]):
                if w <= 0 or i >= height:
                    break
                if left > i:
                    x, w = x + 1, w - 1
                if right > i:
                    w -= 1
                y = i if side is Side.TOP else height - 1 - i
                for j, cell in enumerate(gl.cells(max(0, w), dflt)):
                    yield x + j, y, cell
        for side in (Side.LEFT, Side.RIGHT):
            y, h = 0, height
            for i, gl in enumerate(self.sides[side]):
                if h <= 0 or i >= width:
                    break
                if top > i:
                    y, h = y + 1, h - 1
                if bottom > i:
                    h -= 1
                x = i if side is Side.LEFT else width - 1 - i
                for j, cell in enumerate(gl.cells(max(0, h), dflt)):
                    yield x, y + j, cell


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class GapWriter:
    """Writes the gap lines of *sides* at one level.

    ``at(idx)``, ``filling()`` and ``styled(style)`` return derived
    writers; ``write`` replaces a gap line's runes unless a position was
    given.
    """

    def __init__(
        self,
        gaps: Gaps,
        level: int,
        sides: Side,
        at: int = -1,
        filling: bool = False,
        style: Style | None = None,
    ) -> None:
        self._gaps = gaps
        self.level = level
        self.sides = sides
        self._at = at
        self._filling = filling
        self._style = style

    def at(self, idx: int) -> GapWriter:
        return GapWriter(
            self._gaps, self.level, self.sides, max(0, idx), self._filling, self._style
        )

    def filling(self) -> GapWriter:
        """Writer whose first written rune fills the remaining space."""
        return GapWriter(
            self._gaps, self.level, self.sides, self._at, True, self._style
        )

    def styled(self, style: Style) -> GapWriter:
        return GapWriter(
            self._gaps, self.level, self.sides, self._at, self._filling, style
        )

    def set_style(self, style: Style) -> GapWriter:
        """Set the default style of the gap lines of this writer's level."""
        for side in self._sides():
            self._gaps.line(side, self.level).style = style
        return self

    def _sides(self) -> Iterator[Side]:
        for side in (Side.TOP, Side.RIGHT, Side.BOTTOM, Side.LEFT):
            if self.sides & side:
                yield side

    def write(self, text: str) -> GapWriter:
        for side in self._sides():
            gl = self._gaps.line(side, self.level)
            if self._at < 0 and not self._filling:
                gl.set(text, self._style)
            else:
                gl.set_at(max(0, self._at), text, self._style, self._filling)
        return self


class CornerWriter:
    """Writes the *corners* of one level.

    Writing all corners takes one rune for all of them or four runes in
    the order top left, top right, bottom right, bottom left.
    """

    def __init__(
        self, gaps: Gaps, level: int, corners: Corner, style: Style | None = None
    ) -> None:
        self._gaps = gaps
        self.level = level
        self.corners = corners
        self._style = style

    def styled(self, style: Style) -> CornerWriter:
        return CornerWriter(self._gaps, self.level, self.corners, style)

    def write(self, text: str) -> CornerWriter:
        rr = runes(text) or [" "]
        chosen = [c for c in _CORNERS if self.corners & c]
        if len(chosen) > 1 and len(rr) == len(chosen):
            assigned = rr
        else:
            assigned = [rr[0]] * len(chosen)
        for corner, r in zip(chosen, assigned):
            cr = self._gaps.corner(corner, self.level)
            cr.rune, cr.style = r, self._style
        return self


class GapsWriter:
    """Access to the gap lines and corners of one level."""

    def __init__(self, gaps: Gaps, level: int) -> None:
        self._gaps = gaps
        self.level = max(0, level)

    def _writer(self, sides: Side) -> GapWriter:
        return GapWriter(self._gaps, self.level, sides)

    @property
    def top(self) -> GapWriter:
        return self._writer(Side.TOP)

    @property
    def right(self) -> GapWriter:
        return self._writer(Side.RIGHT)

    @property
    def bottom(self) -> GapWriter:
        return self._writer(Side.BOTTOM)

    @property
    def left(self) -> GapWriter:
        return self._writer(Side.LEFT)

    @property
    def horizontal(self) -> GapWriter:
        return self._writer(Side.HORIZONTAL)

    @property
    def vertical(self) -> GapWriter:
        return self._writer(Side.VERTICAL)

    def _corner(self, corners: Corner) -> CornerWriter:
        return CornerWriter(self._gaps, self.level, corners)

    @property
    def corners(self) -> CornerWriter:
        return self._corner(Corner.ALL)

    @property
    def top_left(self) -> CornerWriter:
        return self._corner(Corner.TOP_LEFT)

    @property
    def top_right(self) -> CornerWriter:
        return self._corner(Corner.TOP_RIGHT)

    @property
    def bottom_right(self) -> CornerWriter:
        return self._corner(Corner.BOTTOM_RIGHT)

    @property
    def bottom_left(self) -> CornerWriter:
        return self._corner(Corner.BOTTOM_LEFT)

    def filling(self) -> GapWriter:
        """Filling writer of all four gap lines of this level."""
        return self._writer(Side.ALL).filling()

    def write(self, text: str) -> GapsWriter:
        self._writer(Side.ALL).write(text)
        return self

    def set_style(self, style: Style) -> GapsWriter:
        """Default style of this level's gap lines and corners."""
        self._writer(Side.ALL).set_style(style)
        for corner in _CORNERS:
            cr = self._gaps.corner(corner, self.level)
            if cr.style is None:
                cr.style = style
        return self
