"""Line and cell focus of a component.

``LineFocus`` is the per component cursor over content lines.  Its
``current`` content index is either ``-1`` or the index of a focusable line.
With one of the cell focus features the focused line additionally carries
the screen cursor, which ``first_cell``/``previous_cell``/``next_cell``/
``last_cell`` move; a line wider than its component is panned by moving
its ``start``.

All coordinates returned are screen coordinates relative to the
component's content area, while ``current`` is a content index: the two
differ once content is scrolled.  A cursor column counts the cells of the
visible part of a line; it is translated to a screen column when painted,
so on a line with wide runes the two differ.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lines.errors import guarded
from lines.features import Feature
from lines.line import HIGHLIGHT_FLAGS, Line, LineFlags

if TYPE_CHECKING:
    from lines.component import ComponentWrapper

logger = logging.getLogger(__name__)


class LineFocus:
    def __init__(self, wrapper: ComponentWrapper) -> None:
        self._w = wrapper
        self._current = -1
        # cursor column of a focused line scrolled out of view
        self._cursor = -1
        self._eol_after = False
        self._trimmed = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current(self) -> int:
        """Content index of the focused line or ``-1``."""
        self._w.check_enabled("current")
        return self._current

    @guarded
    def screen(self) -> int:
        """Screen line of the focused line or ``-1`` if it isn't visible."""
        return self._screen()

    def _screen(self) -> int:
        if self._current < 0:
            return -1
        idx = self._current - self._w.first
        return idx if 0 <= idx < self._w.height else -1

    def _buffer_index(self, idx: int) -> int:
        """Index into the line buffer of content line *idx* or ``-1``."""
        w = self._w
        if idx < 0:
            return -1
        if w.src is None:
            return idx if idx < len(w.buffer) else -1
        bi = idx - w.first
        return bi if 0 <= bi < min(len(w.buffer), w.height) else -1

    @guarded
    def line(self) -> Line | None:
        """The focused line if it is in the line buffer."""
        return self._line()

    def _line(self) -> Line | None:
        bi = self._buffer_index(self._current)
        return self._w.buffer[bi] if bi >= 0 else None

    def _highlight_flag(self) -> LineFlags:
        if not self._w.has_feature(Feature.LINE_HIGHLIGHTING):
            return LineFlags.NONE
        if self._trimmed:
            return LineFlags.TRIMMED_HIGHLIGHTED
        return LineFlags.HIGHLIGHTED

    def _is_focusable(self, idx: int) -> bool:
        w = self._w
        liner = w.src.focusable_liner if w.src is not None else None
        if liner is not None:
            return bool(liner.is_focusable(idx))
        bi = self._buffer_index(idx)
        return bi >= 0 and w.buffer[bi].is_focusable

    def _len(self) -> int:
        w = self._w
        liner = w.src.focusable_liner if w.src is not None else None
        if liner is not None:
            return liner.len()
        return w.content_len()

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    @guarded
    def eol_after_last_rune(self) -> LineFocus:
        """Let the cursor move one cell past the last rune of a line."""
        self._eol_after = True
        return self

    @guarded
    def eol_at_last_rune(self) -> LineFocus:
        self._eol_after = False
        return self

    @property
    def is_eol_after_last_rune(self) -> bool:
        return self._eol_after

    @guarded
    def trimmed_highlight(self, trimmed: bool = True) -> LineFocus:
        """Highlight only the non-blank part of the focused line."""
        self._trimmed = trimmed
        return self

    # ------------------------------------------------------------------
    # Line focus
    # ------------------------------------------------------------------

    @guarded
    def next(self) -> tuple[int, int]:
        """Focus the next focusable line.

        Returns the focused content line and cursor column (``-1`` if
        there is no cursor).  If there is no next focusable line the
        focus is reset and the content scrolled to the bottom.
        """
        line = self._line()
        if line is not None:
            line.reset_line_focus()
        ln = self._find_next()
        if ln == self._current:
            self.reset()
            self._w.scroll.to_bottom()
            return self._current, -1
        _, column, _ = self._w.cursor_position()
        self._focus(ln)
        cl = self._adjust_line_end_cursor(column, Feature.NEXT_CELL_FOCUSABLE)
        if cl >= 0:
            self._w.set_cursor(self._screen(), cl)
        return ln, cl

    @guarded
    def previous(self) -> tuple[int, int]:
        """Focus the previous focusable line; see ``next``."""
        line = self._line()
        if line is not None:
            line.reset_line_focus()
        ln = self._find_previous()
        if ln == self._current:
            self.reset()
            self._w.scroll.to_top()
            return self._current, -1
        _, column, _ = self._w.cursor_position()
        self._focus(ln)
        cl = self._adjust_line_end_cursor(
            column, Feature.PREVIOUS_CELL_FOCUSABLE
        )
        if cl >= 0:
            self._w.set_cursor(self._screen(), cl)
        return ln, cl

    @guarded
    def at_coordinate(self, y: int) -> tuple[int, int]:
        """Focus the line displayed at screen line *y* if it is focusable."""
        idx = self._w.scroll.coordinate_to_index(y)
        if idx < 0 or idx == self._current or not self._is_focusable(idx):
            return self._current, self._w.cursor_position()[1]
        _, column, _ = self._w.cursor_position()
        self._focus(idx)
        cl = self._adjust_line_end_cursor(column, Feature.NEXT_CELL_FOCUSABLE)
        if cl >= 0:
            self._w.set_cursor(self._screen(), cl)
        return idx, cl

    def _find_next(self) -> int:
        for idx in range(self._current + 1, self._len()):
            if self._is_focusable(idx):
                return idx
        return self._current

    def _find_previous(self) -> int:
        start = self._current - 1 if self._current >= 0 else self._len() - 1
        for idx in range(start, -1, -1):
            if self._is_focusable(idx):
                return idx
        return self._current

    def _focus(self, idx: int) -> None:
        self.reset()
        self._w.scroll.to(idx)
        flag = self._highlight_flag()
        self._current = idx
        line = self._line()
        if flag and line is not None:
            line.flag(flag)

    def _adjust_line_end_cursor(self, column: int, f: Feature) -> int:
        if not self._w.has_feature(f):
            return -1
        if column < 0:
            return 0
        line = self._line()
        n = len(line) if line is not None else 0
        limit = n if self._eol_after else n - 1
        cl = max(0, min(column, limit))
        # the cursor cell has to end inside the content area
        width = self._w.width
        while cl > 0 and line is not None and line.column_of(cl + 1) > width:
            cl -= 1
        return cl

    @guarded
    def reset(self) -> None:
        """Unfocus the focused line, removing highlight and cursor.

        Always legal and idempotent.
        """
        self._reset()

    def _reset(self) -> None:
        if self._current == -1:
            return
        line = self._line()
        if line is not None:
            line.unflag(HIGHLIGHT_FLAGS)
            line.reset_line_focus()
        self._current = -1
        self._cursor = -1
        self._w.clear_cursor()

    # ------------------------------------------------------------------
    # Content and scrolling synchronization
    # ------------------------------------------------------------------

    def scrolled(self) -> None:
        """Keep the cursor on the focused line after a scroll.

        A cursor of a focused line scrolled out of view is removed and its
        column remembered; it is restored once the line is visible again.
        """
        if self._current < 0:
            return
        _, column, has_cursor = self._w.cursor_position()
        screen = self._screen()
        if screen < 0:
            if has_cursor:
                self._cursor = column
                self._w.clear_cursor()
            return
        if has_cursor:
            self._w.set_cursor(screen, column)
        elif self._cursor >= 0:
            self._w.set_cursor(screen, self._cursor)
            self._cursor = -1

    def content_changed(self) -> None:
        """Re-derive the focused line's highlight after its content changed.

        Focus is reset if the focused line no longer exists or turned
        unfocusable.
        """
        if self._current < 0:
            return
        if self._current >= self._w.content_len() or (
            self._buffer_index(self._current) >= 0
            and not self._is_focusable(self._current)
        ):
            logger.debug("focused line %d vanished; resetting", self._current)
            self._reset()
            return
        flag = self._highlight_flag()
        line = self._line()
        if flag and line is not None and not line.is_flagged(flag):
            line.flag(flag)

    # ------------------------------------------------------------------
    # Cell focus
    # ------------------------------------------------------------------

    def _is_eol(self, line: Line, column: int) -> bool:
        available = len(line) - line.start
        if self._eol_after:
            return column >= available
        return column + 1 >= available

    @guarded
    def is_eol(self) -> bool:
        """``True`` if the cursor is at the end of the focused line."""
        _, column, has_cursor = self._w.cursor_position()
        line = self._line()
        if not has_cursor or line is None:
            return False
        return self._is_eol(line, column)

    def _cell_state(self) -> tuple[int, int, Line] | None:
        sl, column, has_cursor = self._w.cursor_position()
        line = self._line()
        if self._current < 0 or not has_cursor or line is None:
            return None
        return sl, column, line

    @guarded
    def next_cell(self) -> tuple[int, int, bool]:
        """Move the cursor one cell right, panning at the right border.

        Returns screen line, column and whether the cursor moved.
        """
        state = self._cell_state()
        if state is None:
            return -1, -1, False
        sl, column, line = state
        if self._is_eol(line, column):
            return sl, column, False
        width = self._w.width
        if line.column_of(column + 2) <= width:
            self._w.set_cursor(sl, column + 1)
            return sl, column + 1, True
        idx = line.start + column + 1
        line.pan_to(idx, width)
        self._w.set_cursor(sl, idx - line.start)
        return sl, idx - line.start, False

    @guarded
    def previous_cell(self) -> tuple[int, int, bool]:
        """Move the cursor one cell left, panning at the left border."""
        state = self._cell_state()
        if state is None:
            return -1, -1, False
        sl, column, line = state
        if column > 0:
            self._w.set_cursor(sl, column - 1)
            return sl, column - 1, True
        line.decrement_start()
        return sl, column, False

    @guarded
    def first_cell(self) -> tuple[int, int, bool]:
        state = self._cell_state()
        if state is None:
            return -1, -1, False
        sl, column, line = state
        self._w.set_cursor(sl, 0)
        line.reset_line_focus()
        return sl, 0, column != 0

    @guarded
    def last_cell(self) -> tuple[int, int, bool]:
        """Move the cursor to the end of the focused line.

        With ``eol_after_last_rune`` the end is the cell after the last
        rune, otherwise the last rune itself.
        """
        state = self._cell_state()
        if state is None:
            return -1, -1, False
        sl, column, line = state
        if self._is_eol(line, column):
            return sl, column, False
        idx = len(line) if self._eol_after else len(line) - 1
        line.pan_to(idx, self._w.width)
        self._w.set_cursor(sl, idx - line.start)
        return sl, idx - line.start, True
