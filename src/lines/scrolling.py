"""Vertical scrolling of a component's content."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lines.errors import guarded

if TYPE_CHECKING:
    from lines.component import ComponentWrapper


def page_size(height: int) -> int:
    """Lines moved by one ``up()``/``down()`` for a *height* lines area."""
    if height <= 1:
        return 1
    if height < 20:
        return height - 1
    return height - height // 10


class Scroller:
    """Scrolls a component's content by pages.

    Obtained through ``Component.scroll`` and only usable while the
    component is enabled.  Scroll targets beyond the content are no-ops,
    as is any scrolling before the component was laid out.

    Setting ``bar`` shows a scroll bar in the last column of the content
    area; a primary click on it scrolls down, a secondary click up.
    """

    def __init__(self, wrapper: ComponentWrapper) -> None:
        self._w = wrapper
        self._bar = False

    @property
    def bar(self) -> bool:
        return self._bar

    @bar.setter
    def bar(self, value: bool) -> None:
        self._w.check_enabled("bar")
        if value != self._bar:
            self._bar = value
            self._w.dirty = True

    @guarded
    def is_at_top(self) -> bool:
        return self._w.first == 0

    @guarded
    def is_at_bottom(self) -> bool:
        w = self._w
        return w.first + w.height >= w.content_len()

    @guarded
    def coordinate_to_index(self, y: int) -> int:
        """Content index of content area line *y*; ``-1`` if there is none."""
        w = self._w
        if y < 0 or y >= w.height:
            return -1
        idx = w.first + y
        return idx if idx < w.content_len() else -1

    @guarded
    def bar_contains(self, x: int, y: int) -> bool:
        """``True`` if (x, y) relative to the component is on its scroll bar."""
        w = self._w
        if not self._bar:
            return False
        bx, by, _, bh = w.bar_area()
        return x == bx and by <= y < by + bh

    def bar_position(self) -> int:
        """Content area line of the scroll bar's position mark; ``-1`` if none."""
        w = self._w
        n, h = w.content_len(), w.height
        if h <= 0 or n <= h:
            return -1
        if w.first == 0:
            return 0
        if w.first + h >= n:
            return h - 1
        return max(1, min(h - 2, round(w.first * (h - 1) / (n - h))))

    @guarded
    def up(self) -> None:
        w = self._w
        if w.height <= 0 or w.first == 0:
            return
        w.set_first(max(0, w.first - page_size(w.height)))

    @guarded
    def down(self) -> None:
        w = self._w
        n, h = w.content_len(), w.height
        if h <= 0 or h >= n:
            return
        w.set_first(min(w.first + page_size(h), n - h))

    @guarded
    def to_top(self) -> None:
        self._w.set_first(0)

    @guarded
    def to_bottom(self) -> None:
        w = self._w
        if w.height <= 0:
            return
        w.set_first(max(0, w.content_len() - w.height))

    @guarded
    def to(self, idx: int) -> None:
        """Scroll the least amount of pages making line *idx* visible."""
        w = self._w
        if w.height <= 0:
            return
        n = w.content_len()
        if w.first <= idx < w.first + w.height and idx < n:
            return
        if idx <= 0:
            self.to_top()
            return
        if idx >= n - 1:
            self.to_bottom()
            return
        while idx < w.first:
            before = w.first
            self.up()
            if w.first == before:
                break
        while idx >= w.first + w.height:
            before = w.first
            self.down()
            if w.first == before:
                break
