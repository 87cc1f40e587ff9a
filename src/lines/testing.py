"""Testing facility: an in-memory terminal and a ``Lines`` fixture.

``Fixture`` runs a ``Lines`` instance over a ``VirtualTerminal`` without a
loop thread: every ``fire_*`` method posts its event and processes the
queue on the calling thread, so when it returns the event and everything
it triggered has been reported and painted.

Component state is only accessible inside callbacks, so tests inspect it
through an update listener::

    fx = Fixture(cmp, width=20, height=3)
    fx.fire_key(Key.DOWN)
    fx.update(cmp, listener=lambda env: seen.append(cmp.focus.current))
"""

from __future__ import annotations

from typing import Any, Callable

from lines.component import Component
from lines.config import Config
from lines.env import Env
from lines.events import (
    Event,
    KeyEvent,
    Listener,
    MouseEvent,
    MouseKind,
    ResizeEvent,
    RuneEvent,
)
from lines.keys import Button, Key, Modifier
from lines.layout import LayerPos
from lines.style import Style
from lines.ui import Lines


class VirtualTerminal:
    """Terminal double recording everything painted to it.

    Satisfies ``lines.terminal.Terminal``; size changes and raw input are
    simulated through ``simulate_resize`` and ``simulate_input``.
    """

    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._started = False
        self._on_data: Callable[[str], None] | None = None
        self._on_winch: Callable[[], None] | None = None
        self.cursor_visible = True
        self.mouse = False

    # -- size -----------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @rows.setter
    def rows(self, value: int) -> None:
        self._rows = value

    @property
    def columns(self) -> int:
        return self._columns

    @columns.setter
    def columns(self, value: int) -> None:
        self._columns = value

    # -- lifecycle ------------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._on_data, self._on_winch = on_input, on_resize
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._on_data = self._on_winch = None

    @property
    def started(self) -> bool:
        return self._started

    # -- output ---------------------------------------------------------------

    def write(self, data: str) -> None:
        self._buffer.append(data)

    def hide_cursor(self) -> None:
        self.cursor_visible = False
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self.cursor_visible = True
        self.write("\x1b[?25h")

    def clear_screen(self) -> None:
        self.write("\x1b[2J\x1b[H")

    def enable_mouse(self) -> None:
        self.mouse = True

    def disable_mouse(self) -> None:
        self.mouse = False

    # -- inspection and simulation ----------------------------------------------

    @property
    def output(self) -> str:
        """Everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        return len(self._buffer)

    def clear_buffer(self) -> None:
        self._buffer.clear()

    def simulate_input(self, data: str) -> None:
        """Feed *data* into the registered input handler."""
        if self._on_data is None:
            raise RuntimeError("virtual terminal: input before start()")
        self._on_data(data)

    def simulate_resize(
        self, rows: int | None = None, columns: int | None = None
    ) -> None:
        """Change terminal dimensions and fire the resize callback."""
        if rows is not None:
            self._rows = rows
        if columns is not None:
            self._columns = columns
        if self._on_winch is not None:
            self._on_winch()


class Fixture:
    """A ``Lines`` instance over a ``VirtualTerminal`` for tests."""

    def __init__(
        self,
        root: Component,
        width: int = 80,
        height: int = 24,
        config: Config | None = None,
    ) -> None:
        self.terminal = VirtualTerminal(rows=height, columns=width)
        self.lines = Lines(root, self.terminal, config)
        self.root = root
        self.lines.process()

    def _fire(self, evt: Event) -> Event:
        self.lines.post(evt)
        self.lines.drain()
        return evt

    def _drain(self, evt: Event | None) -> Event | None:
        self.lines.drain()
        return evt

    # -- keyboard -------------------------------------------------------------

    def fire_key(self, key: Key, mod: Modifier = Modifier.NONE) -> Event:
        return self._fire(KeyEvent(key=key, mod=mod))

    def fire_keys(self, *keys: Key) -> None:
        for key in keys:
            self.fire_key(key)

    def fire_rune(self, rune: str, mod: Modifier = Modifier.NONE) -> Event:
        return self._fire(RuneEvent(rune=rune, mod=mod))

    def fire_runes(self, text: str) -> None:
        for rune in text:
            self.fire_rune(rune)

    def fire_input(self, data: str) -> None:
        """Decode raw terminal input as if typed."""
        decoder = self.lines._decoder
        for evt in decoder.feed(data) + decoder.flush():
            self._fire(evt)

    # -- mouse ------------------------------------------------------------------

    def fire_click(
        self,
        x: int,
        y: int,
        button: Button = Button.PRIMARY,
        mod: Modifier = Modifier.NONE,
    ) -> Event:
        return self._fire(MouseEvent(button=button, x=x, y=y, mod=mod))

    def fire_context(
        self, x: int, y: int, mod: Modifier = Modifier.NONE
    ) -> Event:
        return self.fire_click(x, y, Button.SECONDARY, mod)

    def fire_move(self, x: int, y: int) -> Event:
        return self._fire(
            MouseEvent(button=Button.NONE, x=x, y=y, kind=MouseKind.MOVE)
        )

    def fire_drag(
        self, origin: tuple[int, int], x: int, y: int, button: Button = Button.PRIMARY
    ) -> Event:
        return self._fire(
            MouseEvent(button=button, x=x, y=y, kind=MouseKind.DRAG, origin=origin)
        )

    def fire_drop(
        self, origin: tuple[int, int], x: int, y: int, button: Button = Button.PRIMARY
    ) -> Event:
        return self._fire(
            MouseEvent(button=button, x=x, y=y, kind=MouseKind.DROP, origin=origin)
        )

    # -- control surface ----------------------------------------------------------

    def fire_resize(self, width: int, height: int) -> Event:
        self.terminal.columns, self.terminal.rows = width, height
        return self._fire(ResizeEvent(width=width, height=height))

    def update(
        self,
        cmp: Component | None,
        data: Any = None,
        listener: Listener | None = None,
    ) -> Event | None:
        return self._drain(self.lines.update(cmp, data, listener))

    def focus(self, cmp: Component | None) -> Event | None:
        return self._drain(self.lines.focus(cmp))

    def layer(
        self, host: Component, overlay: Component, pos: LayerPos | None = None
    ) -> Event | None:
        return self._drain(self.lines.layer(host, overlay, pos))

    def remove_layer(self, host: Component) -> Event | None:
        return self._drain(self.lines.remove_layer(host))

    def quit(self) -> Event | None:
        return self._drain(self.lines.quit())

    # -- inspection -----------------------------------------------------------------

    def screen(self) -> list[str]:
        """Text of the painted screen, one string per row."""
        return self.lines.screen.rows()

    def screen_of(self, cmp: Component) -> list[str]:
        """Painted text of the rectangle of *cmp*."""
        w = self.lines.wrapper_of(cmp)
        if w is None:
            return []
        x, y, width, height = w.dim.rect
        return [
            "".join(r for r, _ in row[x : x + width])
            for row in self.lines.screen.cells()[y : y + height]
        ]

    def cell_styles(self) -> list[list[Style]]:
        """Painted style of every screen cell."""
        return [[s for _, s in row] for row in self.lines.screen.cells()]

    def cursor(self) -> tuple[int, int] | None:
        """Absolute ``(x, y)`` of the screen cursor if any."""
        c = self.lines.screen.cursor
        return c.absolute if c is not None else None

    def evaluate(self, cmp: Component, fn: Callable[[Env], Any]) -> Any:
        """Return ``fn(env)`` evaluated inside an update callback of *cmp*."""
        result: list[Any] = []
        self.update(cmp, listener=lambda env: result.append(fn(env)))
        return result[0] if result else None
