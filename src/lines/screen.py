"""Screen state of a ``Lines`` instance and differential painting.

The ``Screen`` owns the layout of the component tree, the overlay layers
stacked above it, the focused component, the component under the mouse and
the single cursor.  ``paint`` composes the visible lines of all laid out
components into a cell grid and writes the rows which changed since the
last paint to the terminal.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from lines.layout import Layout, LayerPos, children_of, walk
from lines.line import Cell
from lines.style import DEFAULT_STYLE, Style

if TYPE_CHECKING:
    from lines.component import Component, ComponentWrapper
    from lines.terminal import Terminal

logger = logging.getLogger(__name__)

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_RESET = "\x1b[0m"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"


class CursorStyle(enum.IntEnum):
    """DECSCUSR cursor shapes."""

    DEFAULT = 0
    BLINKING_BLOCK = 1
    BLOCK = 2
    BLINKING_UNDERLINE = 3
    UNDERLINE = 4
    BLINKING_BAR = 5
    BAR = 6


@dataclass
class Cursor:
    """The screen cursor, relative to its owner's content area."""

    owner: ComponentWrapper
    line: int
    column: int
    style: CursorStyle | None = None

    @property
    def absolute(self) -> tuple[int, int]:
        x, y, _, _ = self.owner.content_area()
        return x + self.owner.screen_column(self.line, self.column), y + self.line


@dataclass
class Layer:
    """An overlay component tree shown above *host*."""

    host: ComponentWrapper
    root: ComponentWrapper
    pos: LayerPos
    layout: Layout
    pre_focus: ComponentWrapper | None = None
    rect: tuple[int, int, int, int] = field(default=(0, 0, 0, 0))

    @property
    def is_modal(self) -> bool:
        return self.root.caps.is_modal

    def contains(self, x: int, y: int) -> bool:
        return self.root.dim.contains(x, y)


class Screen:
    def __init__(self, root: ComponentWrapper, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.root = root
        self.base: Layout | None = None
        self.layers: list[Layer] = []
        self.focus: ComponentWrapper = root
        self.mouse_over: ComponentWrapper | None = None
        self.cursor: Cursor | None = None
        self._painted: list[list[Cell]] = []
        self._cells: list[list[Cell]] = []

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int) -> bool:
        """Set the screen size; return ``False`` for ignored sizes."""
        if width <= 0 or height <= 0:
            logger.debug("ignoring resize to %dx%d", width, height)
            return False
        if (width, height) == self.size:
            return False
        self.width, self.height = width, height
        self._painted = []
        return True

    def focused_component(self) -> Component:
        return self.focus.user

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def set_cursor(
        self,
        owner: ComponentWrapper,
        line: int,
        column: int,
        style: CursorStyle | None = None,
    ) -> None:
        if self.cursor is not None and self.cursor.owner is owner and style is None:
            style = self.cursor.style
        self.cursor = Cursor(owner, line, column, style)

    def clear_cursor(self) -> None:
        self.cursor = None

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def layouts(self) -> list[Layout]:
        base = [self.base] if self.base is not None else []
        return base + [layer.layout for layer in self.layers]

    def wrappers(self) -> Iterator[ComponentWrapper]:
        """All laid out components, base tree first, layers bottom up."""
        for layout in self.layouts():
            yield from walk(layout.root)

    def user_trees(self) -> list[ComponentWrapper]:
        return [self.root] + [layer.root for layer in self.layers]

    def contains(self, w: ComponentWrapper) -> bool:
        return any(w is c for c in self.wrappers())

    def layer_of(self, w: ComponentWrapper) -> Layer | None:
        top = w
        while top.parent is not None:
            top = top.parent
        return next((layer for layer in self.layers if layer.root is top), None)

    def layer_hosted_by(self, host: ComponentWrapper) -> Layer | None:
        return next((layer for layer in self.layers if layer.host is host), None)

    def modal_layer(self) -> Layer | None:
        """The topmost layer if it is modal."""
        if self.layers and self.layers[-1].is_modal:
            return self.layers[-1]
        return None

    def locate(self, x: int, y: int) -> list[ComponentWrapper]:
        """Path to the innermost component at (x, y), topmost layer first."""
        for layer in reversed(self.layers):
            path = layer.layout.locate(x, y)
            if path:
                return path
        if self.base is None:
            return []
        return self.base.locate(x, y)

    def reflow(
        self, wrap: Callable[[Component, ComponentWrapper | None], ComponentWrapper]
    ) -> list[ComponentWrapper]:
        """Lay out the base tree and all layers; return changed components."""
        if self.base is None:
            self.base = Layout(self.root, wrap)
        changed = self.base.reflow((0, 0, self.width, self.height))
        for layer in self.layers:
            layer.rect = self._layer_rect(layer)
            changed.extend(layer.layout.reflow(layer.rect))
            # content height is only known once the overlay tree is laid out
            rect = self._layer_rect(layer)
            if rect != layer.rect:
                layer.rect = rect
                changed.extend(layer.layout.reflow(rect))
        return changed

    def _layer_rect(self, layer: Layer) -> tuple[int, int, int, int]:
        return layer.pos.resolve(
            self.width, self.height, _content_height(layer.root)
        )

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def _compose(self) -> list[list[Cell]]:
        blank: Cell = (" ", DEFAULT_STYLE)
        grid = [[blank] * self.width for _ in range(self.height)]
        for layout in self.layouts():
            for w in layout.order:
                self._compose_component(grid, w)
        return grid

    def _compose_component(self, grid: list[list[Cell]], w: ComponentWrapper) -> None:
        x, y, width, height = w.dim.rect
        if width <= 0 or height <= 0:
            return
        style = w.style
        area = [[(" ", style)] * width for _ in range(height)]
        for gx, gy, cell in w.gaps.cells(width, height, style):
            if 0 <= gx < width and 0 <= gy < height:
                area[gy][gx] = cell
        cx, cy, cw, _ = w.content_area()
        cx, cy = cx - x, cy - y
        if cw > 0:
            for i, line in enumerate(w.visible_lines()):
                if line is not None:
                    area[cy + i][cx : cx + cw] = line.cells(cw, w.globals.highlight)
        if w.scroll.bar:
            bx, by, _, bh = w.bar_area()
            sbd, position = w.globals.scroll_bar, w.scroll.bar_position()
            for i in range(bh):
                area[by + i][bx] = (" ", sbd.position if i == position else sbd.style)
        for i, row in enumerate(area[: max(0, self.height - y)]):
            visible = row[: max(0, self.width - x)]
            grid[y + i][x : x + len(visible)] = visible

    def cells(self) -> list[list[Cell]]:
        """The cell grid of the last paint."""
        return self._cells

    def rows(self) -> list[str]:
        """Text of the last painted rows."""
        return ["".join(r for r, _ in row) for row in self._cells]

    def paint(self, terminal: Terminal, full: bool = False) -> None:
        """Write the rows changed since the last paint to *terminal*."""
        grid = self._compose()
        self._cells = grid
        out: list[str] = []
        if full or len(self._painted) != len(grid):
            out.append(_CLEAR_SCREEN)
            self._painted = []
        out.append(_HIDE_CURSOR)
        written = 0
        for y, row in enumerate(grid):
            if y < len(self._painted) and self._painted[y] == row:
                continue
            out.append(f"\x1b[{y + 1};1H")
            out.append(_render_row(row))
            written += 1
        self._painted = grid
        cursor = self._visible_cursor()
        if cursor is not None:
            x, y, style = cursor
            out.append(f"\x1b[{y + 1};{x + 1}H")
            if style is not None:
                out.append(f"\x1b[{int(style)} q")
            out.append(_SHOW_CURSOR)
        if written or cursor is not None:
            logger.debug("painted %d rows", written)
        terminal.write("".join(out))

    def _visible_cursor(self) -> tuple[int, int, CursorStyle | None] | None:
        c = self.cursor
        if c is None or not self.contains(c.owner):
            return None
        x, y = c.absolute
        cx, cy, cw, ch = c.owner.content_area()
        if not (cx <= x < cx + cw and cy <= y < cy + ch):
            return None
        return x, y, c.style


def _content_height(w: ComponentWrapper) -> int:
    """Lines needed to show an overlay tree without scrolling."""
    if w.dim.fixed_height is not None:
        return w.dim.fixed_height
    kind, _ = children_of(w.user)
    if kind == "stacked":
        inner = sum(_content_height(c) for c in w.children)
    elif kind == "chained":
        inner = max([0] + [_content_height(c) for c in w.children])
    else:
        inner = w.content_len()
    top, _, bottom, _ = w.gaps.lengths()
    return max(1, inner) + top + bottom



def _render_row(row: list[Cell]) -> str:
    out: list[str] = []
    current: Style | None = None
    for r, style in row:
        if not r:
            continue
        if style != current:
            out.append(style.sgr())
            current = style
        out.append(r)
    out.append(_RESET)
    return "".join(out)
