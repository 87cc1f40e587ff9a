"""Line editing of a cell focusable component.

An ``Editor`` is created when a component adds the ``EDITING`` feature.
It starts suspended; executing ``EDITING`` (Insert) resumes it.  While
active, typed runes and Backspace/Delete become ``Edit`` instances which
are first reported to ``on_edit`` of the component's ``EditLiner`` source
or of the component itself.  An ``on_edit`` returning ``True`` suppresses
the edit, otherwise the editor applies it to the line buffer.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lines.errors import guarded
from lines.keys import Key

if TYPE_CHECKING:
    from lines.component import ComponentWrapper

logger = logging.getLogger(__name__)


class EditType(enum.Enum):
    NO_EDIT = 0
    RESUME = 1
    SUSPEND = 2
    INS = 3
    REPLACE = 4
    DEL = 5
    JOIN_NEXT = 6
    JOIN_PREV = 7


@dataclass
class Edit:
    """An edit at screen *line* and *cell* of the editing component."""

    line: int
    cell: int
    type: EditType = EditType.NO_EDIT
    rune: str = ""


class Editor:
    def __init__(self, wrapper: ComponentWrapper) -> None:
        self._w = wrapper
        self._suspended = True
        self._replacing = False

    @property
    def is_active(self) -> bool:
        return not self._suspended

    @guarded
    def suspend(self) -> None:
        self._suspended = True

    @guarded
    def resume(self) -> None:
        """Activate the editor, focusing the first line if nothing is."""
        w = self._w
        self._suspended = False
        w.focus.eol_after_last_rune()
        if w.cursor_position()[2]:
            return
        if w.src is None:
            w.buffer.line(0, w.style)
        if w.focus._current < 0:
            w.focus.next()
        if not w.cursor_position()[2] and w.focus._current >= 0:
            w.set_cursor(w.focus._screen(), 0)

    @guarded
    def replacing(self, replacing: bool = True) -> None:
        """Let typed runes replace the rune under the cursor."""
        self._replacing = replacing

    @property
    def is_replacing(self) -> bool:
        return self._replacing

    # ------------------------------------------------------------------
    # Edit construction
    # ------------------------------------------------------------------

    def rune_edit(self, rune: str) -> Edit:
        line, cell, _ = self._w.cursor_position()
        kind = EditType.REPLACE if self._replacing else EditType.INS
        return Edit(line, cell, kind, rune)

    def key_edit(self, key: Key) -> Edit | None:
        """Edit triggered by *key*; ``None`` if *key* doesn't edit."""
        line, cell, has_cursor = self._w.cursor_position()
        if key == Key.INSERT:
            return Edit(line, cell, EditType.RESUME)
        if key == Key.ESC:
            return Edit(line, cell, EditType.SUSPEND)
        if key not in (Key.BACKSPACE, Key.DELETE) or not has_cursor:
            return None
        return self._delete_edit(key, line, cell)

    def _delete_edit(self, key: Key, line: int, cell: int) -> Edit | None:
        w = self._w
        bi = w.focus._buffer_index(w.focus._current)
        if bi < 0:
            return None
        length = len(w.buffer[bi])
        start = w.buffer[bi].start
        content_cell = cell + start
        last_line = bi + 1 >= len(w.buffer)
        if key == Key.BACKSPACE:
            if content_cell == 0:
                if bi == 0:
                    return None
                return Edit(line, cell, EditType.JOIN_PREV)
            return Edit(line, cell - 1, EditType.DEL)
        if content_cell >= length:
            if last_line:
                return None
            return Edit(line, cell, EditType.JOIN_NEXT)
        return Edit(line, cell, EditType.DEL)

    # ------------------------------------------------------------------
    # Applying edits
    # ------------------------------------------------------------------

    def apply(self, edit: Edit) -> None:
        """Apply *edit* to the line buffer and move the cursor."""
        w = self._w
        if edit.type is EditType.RESUME:
            self.resume()
            return
        if edit.type is EditType.SUSPEND:
            self.suspend()
            return
        bi = w.focus._buffer_index(w.focus._current)
        if bi < 0 or w.src is not None:
            # sourced content is only changed by the source itself
            return
        line = w.buffer[bi]
        cell = edit.cell + line.start
        if edit.type is EditType.INS:
            line.insert_rune(cell, edit.rune)
            w.focus.next_cell()
        elif edit.type is EditType.REPLACE:
            line.replace_rune(cell, edit.rune)
            w.focus.next_cell()
        elif edit.type is EditType.DEL:
            line.delete_rune(cell)
            if edit.cell < w.cursor_position()[1]:
                w.focus.previous_cell()
        elif edit.type is EditType.JOIN_NEXT:
            line.join(w.buffer.remove(bi + 1))
        elif edit.type is EditType.JOIN_PREV:
            prev = w.buffer[bi - 1]
            column = len(prev)
            w.focus._reset()
            prev.join(w.buffer.remove(bi))
            w.focus._focus(bi - 1)
            w.set_cursor(w.focus._screen(), 0)
            for _ in range(column):
                w.focus.next_cell()
        logger.debug("applied %s", edit)

