"""Terminal back end for raw-mode stdin/stdout interaction.

Provides the ``Terminal`` protocol the ``Lines`` event loop paints to, a
concrete ``ProcessTerminal`` managing raw mode, the alternate screen, mouse
reporting and SIGWINCH-based resize detection, and the ``InputDecoder``
turning raw input into key, rune and mouse events.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from lines.events import Event, KeyEvent, MouseEvent, MouseKind, RuneEvent
from lines.keys import ESC, Button, Key, parse_key, parse_mouse, split_sequences

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"

# button events, drag motion, any motion, SGR coordinates
_MOUSE_ENABLE = "\x1b[?1000h\x1b[?1002h\x1b[?1003h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l\x1b[?1002l\x1b[?1000l"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_RESET_CURSOR_STYLE = "\x1b[0 q"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def enable_mouse(self) -> None: ...

    def disable_mouse(self) -> None: ...


# ---------------------------------------------------------------------------
# Process terminal
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout.

    ``start`` switches stdin to raw mode and stdout to the alternate
    screen, installs a SIGWINCH handler and registers stdin with the
    running asyncio loop; ``stop`` undoes all of it in reverse order.
    """

    def __init__(self) -> None:
        self._on_data: Callable[[str], None] | None = None
        self._on_winch: Callable[[], None] | None = None
        self._saved_mode: list | None = None
        self._saved_winch: signal.Handlers | None = None
        self._reading = False
        self._mouse = False

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    @staticmethod
    def _size() -> os.terminal_size:
        try:
            return os.get_terminal_size(sys.stdout.fileno())
        except (ValueError, OSError):
            return os.terminal_size((80, 24))

    # -- lifecycle ------------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enter raw mode and the alternate screen; read stdin on the loop."""
        self._on_data, self._on_winch = on_input, on_resize
        fd = sys.stdin.fileno()
        self._saved_mode = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._emit(_ALT_SCREEN_ENABLE)
        self._saved_winch = signal.signal(signal.SIGWINCH, self._winch)
        asyncio.get_running_loop().add_reader(fd, self._read)
        self._reading = True
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Give the terminal back in the state ``start`` found it."""
        if self._mouse:
            self.disable_mouse()
        self._emit(_RESET_CURSOR_STYLE + _SHOW_CURSOR + _ALT_SCREEN_DISABLE)
        fd = sys.stdin.fileno()
        if self._reading:
            self._reading = False
            try:
                asyncio.get_running_loop().remove_reader(fd)
            except (RuntimeError, ValueError):
                logger.debug("stdin reader already gone")
        if self._saved_winch is not None:
            signal.signal(signal.SIGWINCH, self._saved_winch)
            self._saved_winch = None
        if self._saved_mode is not None:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None
        self._on_data = self._on_winch = None

    # -- output ---------------------------------------------------------------

    def write(self, data: str) -> None:
        self._emit(data)

    def hide_cursor(self) -> None:
        self._emit(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._emit(_SHOW_CURSOR)

    def clear_screen(self) -> None:
        self._emit(_CLEAR_SCREEN)

    def enable_mouse(self) -> None:
        self._mouse = True
        self._emit(_MOUSE_ENABLE)

    def disable_mouse(self) -> None:
        self._mouse = False
        self._emit(_MOUSE_DISABLE)

    def _emit(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as exc:
            logger.debug("terminal write failed: %s", exc)

    # -- callbacks ------------------------------------------------------------

    def _read(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if raw and self._on_data is not None:
            self._on_data(raw.decode("utf-8", errors="replace"))

    def _winch(self, signum: int, frame: object) -> None:
        if self._on_winch is not None:
            self._on_winch()


# ---------------------------------------------------------------------------
# Input decoding
# ---------------------------------------------------------------------------


class InputDecoder:
    """Turns raw terminal input into ``KeyEvent``/``RuneEvent``/``MouseEvent``.

    Sequences split across reads are kept until completed; a lone ESC is
    only reported as the Esc key by ``flush``.  Mouse reports are classified
    into clicks (press), drags (motion with a pressed button), drops (the
    release ending a drag) and moves (motion without a button).
    """

    def __init__(self) -> None:
        self._pending = ""
        self._drag_origin: tuple[int, int] | None = None
        self._pressed = Button.NONE

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def feed(self, data: str) -> list[Event]:
        seqs, self._pending = split_sequences(self._pending + data)
        events: list[Event] = []
        for seq in seqs:
            evt = self._decode(seq)
            if evt is not None:
                events.append(evt)
        return events

    def flush(self) -> list[Event]:
        """Report input still pending after the escape timeout."""
        pending, self._pending = self._pending, ""
        if pending == ESC:
            return [KeyEvent(key=Key.ESC)]
        if pending:
            logger.debug("dropping incomplete input %r", pending)
        return []

    def _decode(self, seq: str) -> Event | None:
        if seq.startswith("\x1b[<"):
            return self._decode_mouse(seq)
        parsed = parse_key(seq)
        if parsed is None:
            logger.debug("unknown input sequence %r", seq)
            return None
        if parsed.key == Key.RUNE:
            return RuneEvent(rune=parsed.rune, mod=parsed.mod)
        return KeyEvent(key=parsed.key, mod=parsed.mod)

    def _decode_mouse(self, seq: str) -> Event | None:
        m = parse_mouse(seq)
        if m is None:
            return None
        if m.release:
            origin, self._drag_origin = self._drag_origin, None
            button, self._pressed = self._pressed, Button.NONE
            if origin is None or origin == (m.x, m.y):
                return None
            return MouseEvent(
                button=button, x=m.x, y=m.y, mod=m.mod,
                kind=MouseKind.DROP, origin=origin,
            )
        if m.motion:
            if m.button == Button.NONE:
                return MouseEvent(
                    button=Button.NONE, x=m.x, y=m.y, mod=m.mod,
                    kind=MouseKind.MOVE,
                )
            origin = self._drag_origin or (m.x, m.y)
            return MouseEvent(
                button=m.button, x=m.x, y=m.y, mod=m.mod,
                kind=MouseKind.DRAG, origin=origin,
            )
        if m.button & (Button.PRIMARY | Button.SECONDARY | Button.MIDDLE):
            self._drag_origin = (m.x, m.y)
            self._pressed = m.button
        return MouseEvent(button=m.button, x=m.x, y=m.y, mod=m.mod)
