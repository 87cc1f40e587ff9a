"""The environment handed to every component callback.

An ``Env`` gives a callback access to the ``Lines`` instance, the event
being reported, the reported component's content (through ``write`` and
``ll``) and lets it stop the event from bubbling further.  An ``Env`` is
only valid during the callback it was created for.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

from lines.errors import LinesError
from lines.line import LineFlags
from lines.style import Style, StyleRange
from lines.text import expand_leading_tabs

if TYPE_CHECKING:
    from lines.component import Component, ComponentWrapper
    from lines.events import Event
    from lines.ui import Lines

logger = logging.getLogger(__name__)


class ComponentMode(enum.Enum):
    """How ``Env.write`` treats a component's existing content."""

    OVERWRITING = "overwriting"
    APPENDING = "appending"
    # appending while keeping the last lines visible
    TAILING = "tailing"


class LineWriter:
    """Writes content line *idx* of a component.

    ``at(cell)`` and ``styled(style)`` return writers writing from *cell*
    on, respectively with *style*; ``write`` replaces the whole line unless
    a cell was given.
    """

    def __init__(
        self,
        wrapper: ComponentWrapper,
        idx: int,
        cell: int = -1,
        style: Style | None = None,
    ) -> None:
        self._w = wrapper
        self.idx = idx
        self.cell = cell
        self.style = style

    def at(self, cell: int) -> LineWriter:
        return LineWriter(self._w, self.idx, cell, self.style)

    def styled(self, style: Style) -> LineWriter:
        return LineWriter(self._w, self.idx, self.cell, style)

    def write(self, text: str) -> LineWriter:
        """Write *text*; each newline continues on the following line."""
        if self.idx < 0:
            return self
        w = self._w
        for i, part in enumerate(text.split("\n")):
            part = expand_leading_tabs(part, w.tab_width)
            line = w.buffer.line(self.idx + i, w.style)
            if self.cell < 0 or i > 0:
                line.set(part, self.style if self.style is not None else w.style)
            else:
                line.set_at(self.cell, part, self.style)
        w.content_changed()
        return self

    def flag(self, ff: LineFlags) -> LineWriter:
        """Set flags like ``NOT_FOCUSABLE`` on the written line."""
        if self.idx >= 0:
            self._w.buffer.line(self.idx, self._w.style).flag(ff)
            self._w.content_changed()
        return self

    def add_style_range(self, *ranges: StyleRange) -> LineWriter:
        if self.idx >= 0:
            self._w.buffer.line(self.idx, self._w.style).add_style_range(*ranges)
        return self


class Env:
    def __init__(
        self,
        lines: Lines,
        evt: Event | None = None,
        wrapper: ComponentWrapper | None = None,
    ) -> None:
        self._lines: Lines | None = lines
        self._evt = evt
        self._w = wrapper
        self._stopped = False

    def _check(self) -> None:
        if self._lines is None:
            raise LinesError("lines: env: used after its callback returned")

    def invalidate(self) -> None:
        self._lines = None
        self._w = None

    # ------------------------------------------------------------------

    @property
    def lines(self) -> Lines:
        self._check()
        assert self._lines is not None
        return self._lines

    @property
    def evt(self) -> Event | None:
        return self._evt

    def stop_bubbling(self) -> None:
        """Don't report the current event to further components."""
        self._stopped = True

    @property
    def is_bubbling_stopped(self) -> bool:
        return self._stopped

    def screen_size(self) -> tuple[int, int]:
        """``(width, height)`` of the screen."""
        return self.lines.screen.size

    def focused(self) -> Component | None:
        """The user component which has the keyboard focus."""
        return self.lines.screen.focused_component()

    @property
    def data(self) -> Any:
        """Payload of a reported update event."""
        return getattr(self._evt, "data", None)

    # ------------------------------------------------------------------
    # Writing content
    # ------------------------------------------------------------------

    def _wrapper(self) -> ComponentWrapper:
        self._check()
        if self._w is None:
            raise LinesError("lines: env: no component to write to")
        return self._w

    def write(self, text: str, style: Style | None = None) -> Env:
        """Write *text* to the reported component according to its mode.

        Overwriting replaces the content, appending and tailing add the
        lines of *text* after the existing ones.
        """
        w = self._wrapper()
        if w.src is not None:
            logger.debug(
                "%s: ignoring write to sourced component", type(w.user).__name__
            )
            return self
        if w.mode is ComponentMode.OVERWRITING:
            w.buffer.truncate(0)
        LineWriter(w, len(w.buffer), style=style).write(text)
        if w.mode is ComponentMode.TAILING:
            w.to_tail()
        return self

    def ll(self, idx: int) -> LineWriter:
        """Writer of content line *idx* of the reported component."""
        return LineWriter(self._wrapper(), idx)
