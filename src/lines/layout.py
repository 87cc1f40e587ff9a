"""Minimal geometry: dimensions, layer positions and the component layout.

Children of a component defining ``for_stacked()`` are placed on top of
each other, children of one defining ``for_chained()`` side by side.
Fixed sizes (``Dim.set_height``/``Dim.set_width``) are honoured first; the
rest of the available space is distributed evenly among the filling
children.  Overlays are placed by their ``LayerPos``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Literal, Union

if TYPE_CHECKING:
    from lines.component import Component, ComponentWrapper

logger = logging.getLogger(__name__)

Rect = tuple[int, int, int, int]


# ---------------------------------------------------------------------------
# Dim
# ---------------------------------------------------------------------------


class Dim:
    """A component's rectangle plus its size preferences."""

    def __init__(self) -> None:
        self.x = 0
        self.y = 0
        self.width = 0
        self.height = 0
        self.fixed_width: int | None = None
        self.fixed_height: int | None = None

    def __repr__(self) -> str:
        return f"Dim(x={self.x}, y={self.y}, w={self.width}, h={self.height})"

    def set_width(self, width: int) -> Dim:
        self.fixed_width = max(0, width)
        return self

    def set_height(self, height: int) -> Dim:
        self.fixed_height = max(0, height)
        return self

    def set_filling(self) -> Dim:
        """Drop fixed sizes; the component fills the space it gets."""
        self.fixed_width = None
        self.fixed_height = None
        return self

    @property
    def rect(self) -> Rect:
        return self.x, self.y, self.width, self.height

    def contains(self, x: int, y: int) -> bool:
        return (
            self.x <= x < self.x + self.width and self.y <= y < self.y + self.height
        )

    def _place(self, rect: Rect) -> bool:
        """Set the rectangle; report whether it changed."""
        if rect == self.rect:
            return False
        self.x, self.y, self.width, self.height = rect
        return True


# ---------------------------------------------------------------------------
# LayerPos
# ---------------------------------------------------------------------------

Anchor = Literal[
    "center",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
    "top-center",
    "bottom-center",
    "left-center",
    "right-center",
]

# int: number of cells; str: percentage of the screen like "50%"
SizeValue = Union[int, str]


def _size(value: SizeValue | None, reference: int) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if value.endswith("%"):
        try:
            return math.floor(reference * float(value[:-1]) / 100)
        except ValueError:
            return None
    return None


@dataclass
class LayerPos:
    """Position of an overlay on the screen.

    An explicit ``row``/``col`` wins over the ``anchor``; the offsets are
    added in either case and the result is clamped to the screen.
    """

    anchor: Anchor = "center"
    width: SizeValue | None = None
    height: SizeValue | None = None
    offset_x: int = 0
    offset_y: int = 0
    row: SizeValue | None = None
    col: SizeValue | None = None
    margin: int = 0

    def resolve(
        self, screen_width: int, screen_height: int, content_height: int
    ) -> Rect:
        """Return the overlay's ``(x, y, width, height)``."""
        m = self.margin
        width = _size(self.width, screen_width)
        if width is None:
            width = screen_width - 2 * m
        width = max(1, min(width, screen_width))
        height = _size(self.height, screen_height)
        if height is None:
            height = content_height
        height = max(1, min(height, max(1, screen_height - 2 * m)))

        row = _size(self.row, screen_height)
        if row is None:
            row = self._anchor_row(screen_height, height)
        col = _size(self.col, screen_width)
        if col is None:
            col = self._anchor_col(screen_width, width)
        row = max(0, min(row + self.offset_y, screen_height - height))
        col = max(0, min(col + self.offset_x, screen_width - width))
        return col, row, width, height

    def _anchor_row(self, screen_height: int, height: int) -> int:
        if self.anchor.startswith("top"):
            return self.margin
        if self.anchor.startswith("bottom"):
            return screen_height - height - self.margin
        return self.margin + max(0, (screen_height - 2 * self.margin - height) // 2)

    def _anchor_col(self, screen_width: int, width: int) -> int:
        if self.anchor in ("top-left", "bottom-left", "left-center"):
            return self.margin
        if self.anchor in ("top-right", "bottom-right", "right-center"):
            return screen_width - width - self.margin
        return self.margin + max(0, (screen_width - 2 * self.margin - width) // 2)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def children_of(user: Component) -> tuple[str, list[Component]]:
    """``("stacked"|"chained"|"", children)`` of a user component."""
    stacked = getattr(user, "for_stacked", None)
    if callable(stacked):
        return "stacked", [c for c in stacked() if c is not None]
    chained = getattr(user, "for_chained", None)
    if callable(chained):
        return "chained", [c for c in chained() if c is not None]
    return "", []


def partition(total: int, fixed: list[int | None]) -> list[int]:
    """Split *total* cells among children with optional fixed sizes."""
    sizes = [0] * len(fixed)
    remaining = total
    for i, size in enumerate(fixed):
        if size is not None:
            sizes[i] = min(size, remaining)
            remaining -= sizes[i]
    filling = [i for i, size in enumerate(fixed) if size is None]
    if filling:
        share, extra = divmod(max(0, remaining), len(filling))
        for n, i in enumerate(filling):
            sizes[i] = share + (1 if n < extra else 0)
    return sizes


class Layout:
    """Places a component tree into a rectangle.

    *wrap* returns the wrapper of a user component, attaching it if it
    wasn't yet.  ``order`` lists the placed wrappers depth first.
    """

    def __init__(
        self,
        root: ComponentWrapper,
        wrap: Callable[[Component, ComponentWrapper | None], ComponentWrapper],
    ) -> None:
        self.root = root
        self._wrap = wrap
        self.order: list[ComponentWrapper] = []
        self.changed: list[ComponentWrapper] = []

    def reflow(self, rect: Rect) -> list[ComponentWrapper]:
        """Place the tree into *rect*; return wrappers whose rect changed."""
        self.order = []
        self.changed = []
        self._place(self.root, rect)
        return self.changed

    def _place(self, w: ComponentWrapper, rect: Rect) -> None:
        x, y, width, height = rect
        dim = w.dim
        if dim.fixed_width is not None:
            width = min(width, dim.fixed_width)
        if dim.fixed_height is not None:
            height = min(height, dim.fixed_height)
        if dim._place((x, y, width, height)):
            self.changed.append(w)
        self.order.append(w)

        kind, children = children_of(w.user)
        wrapped = [self._wrap(c, w) for c in children]
        w.children = wrapped
        if not wrapped:
            return
        # nested components are framed by their parent's gaps
        x, y, width, height = w.inner_area()
        if kind == "stacked":
            sizes = partition(height, [c.dim.fixed_height for c in wrapped])
            offset = y
            for child, size in zip(wrapped, sizes):
                self._place(child, (x, offset, width, size))
                offset += size
        else:
            sizes = partition(width, [c.dim.fixed_width for c in wrapped])
            offset = x
            for child, size in zip(wrapped, sizes):
                self._place(child, (offset, y, size, height))
                offset += size

    def locate(self, x: int, y: int) -> list[ComponentWrapper]:
        """Path from the root to the innermost component containing (x, y)."""
        if not self.root.dim.contains(x, y):
            return []
        path = [self.root]
        while True:
            inner = next(
                (
                    c
                    for c in path[-1].children
                    if c.dim.width and c.dim.height and c.dim.contains(x, y)
                ),
                None,
            )
            if inner is None:
                return path
            path.append(inner)


def walk(root: ComponentWrapper) -> Iterable[ComponentWrapper]:
    """Depth first iteration over a laid out tree."""
    yield root
    for child in root.children:
        yield from walk(child)
