"""Content sources: components printing their lines on demand.

A component with a ``ContentSource`` only holds the lines currently on
screen; whenever it is scrolled or resized the source's ``Liner`` is asked
to print the visible content lines again.  Optional liner methods switch
on default features when the source is assigned:

* ``len()`` makes the component ``SCROLLABLE``,
* ``is_focusable(idx)`` and ``highlighted()`` make it ``LINES_FOCUSABLE``
  (or ``LINES_HIGHLIGHTED_FOCUSABLE``),
* ``on_edit(writer, edit)`` makes it ``EDITABLE`` (or
  ``HIGHLIGHTED_EDITABLE``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lines.env import LineWriter
from lines.features import Feature

if TYPE_CHECKING:
    from lines.component import ComponentWrapper
    from lines.editor import Edit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class Liner(Protocol):
    def print(self, idx: int, writer: LineWriter) -> bool:
        """Print content line *idx*; return ``True`` if more lines follow."""
        ...


@runtime_checkable
class ScrollableLiner(Liner, Protocol):
    def len(self) -> int: ...


@runtime_checkable
class FocusableLiner(ScrollableLiner, Protocol):
    def is_focusable(self, idx: int) -> bool: ...

    def highlighted(self) -> tuple[bool, bool]:
        """Return ``(highlighted, trimmed)`` highlighting of focused lines."""
        ...


@runtime_checkable
class EditLiner(FocusableLiner, Protocol):
    def on_edit(self, writer: LineWriter, edit: Edit) -> bool:
        """Return ``True`` to suppress the default handling of *edit*."""
        ...


# ---------------------------------------------------------------------------
# ContentSource
# ---------------------------------------------------------------------------


class ContentSource:
    def __init__(self, liner: Liner) -> None:
        self.liner = liner
        self.dirty = True

    @property
    def scrollable_liner(self) -> ScrollableLiner | None:
        return self.liner if isinstance(self.liner, ScrollableLiner) else None

    @property
    def focusable_liner(self) -> FocusableLiner | None:
        return self.liner if isinstance(self.liner, FocusableLiner) else None

    @property
    def edit_liner(self) -> EditLiner | None:
        return self.liner if isinstance(self.liner, EditLiner) else None

    def initialize(self, w: ComponentWrapper) -> None:
        """Add the features implied by the liner's optional methods."""
        edit_liner = self.edit_liner
        if edit_liner is not None:
            highlighted, trimmed = edit_liner.highlighted()
            w.add_features(
                Feature.HIGHLIGHTED_EDITABLE if highlighted else Feature.EDITABLE
            )
            w.focus.trimmed_highlight(highlighted and trimmed)
            return
        if self.scrollable_liner is not None:
            w.add_features(Feature.SCROLLABLE)
        focusable = self.focusable_liner
        if focusable is not None:
            highlighted, trimmed = focusable.highlighted()
            w.add_features(
                Feature.LINES_HIGHLIGHTED_FOCUSABLE
                if highlighted
                else Feature.LINES_FOCUSABLE
            )
            w.focus.trimmed_highlight(highlighted and trimmed)

    def len(self, w: ComponentWrapper) -> int:
        scrollable = self.scrollable_liner
        if scrollable is None:
            return len(w.buffer)
        return scrollable.len()

    def sync(self, w: ComponentWrapper) -> None:
        """Print the content lines visible at ``w.first`` into ``w.buffer``."""
        self.dirty = False
        height = w.height
        w.buffer.truncate(0)
        if height <= 0:
            return
        idx = w.first
        while idx - w.first < height:
            more = self.liner.print(idx, LineWriter(w, idx - w.first))
            if not more:
                break
            idx += 1
        logger.debug(
            "%s: printed lines %d..%d", type(w.user).__name__, w.first, idx
        )
        w.focus.content_changed()
