"""The ``Lines`` control surface and event loop.

``Lines`` owns a component tree, the terminal it is painted to and the
queue of events to process.  Any thread may post events through the
control surface (``focus``, ``update``, ``layer``, ``remove_layer``,
``quit``); the loop thread processes them one at a time:

1. the event is dispatched to the components it concerns,
2. components which were never reported ``on_init`` are initialized,
3. the tree is laid out and components whose rectangle changed get
   ``on_layout``,
4. content sources of resized or scrolled components print their lines,
5. the screen is painted,
6. the event's completion signal is set.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TYPE_CHECKING, Any

from lines.component import ComponentWrapper
from lines.config import Config
from lines.env import ComponentMode
from lines.errors import LinesError, QueueFullError
from lines.events import (
    Event,
    EventQueue,
    LayerEvent,
    Listener,
    MoveFocusEvent,
    QuitEvent,
    RemoveLayerEvent,
    ResizeEvent,
    UpdateEvent,
)
from lines.globals import Globals
from lines.layout import children_of
from lines.report import Dispatcher
from lines.screen import Screen
from lines.terminal import InputDecoder, ProcessTerminal

if TYPE_CHECKING:
    from lines.component import Component
    from lines.layout import LayerPos
    from lines.terminal import Terminal

logger = logging.getLogger(__name__)

# seconds a lone ESC waits for the rest of an escape sequence
_ESC_TIMEOUT = 0.01
_POLL_INTERVAL = 0.05


class Lines:
    """Drives a component tree rooted at *root* on *terminal*.

    Example::

        lines = Lines(App())
        lines.start()  # blocks until quit
    """

    def __init__(
        self,
        root: Component,
        terminal: Terminal | None = None,
        config: Config | None = None,
    ) -> None:
        self.config = config or Config()
        self.terminal: Terminal = terminal or ProcessTerminal()
        self.events = EventQueue(self.config.queue_size)
        self._wrappers: weakref.WeakSet[ComponentWrapper] = weakref.WeakSet()
        self.globals = Globals(
            self.config.tab_width,
            propagation=lambda: [w.globals for w in list(self._wrappers)],
        )
        self.root = self.wrap(root, None, is_root=True)
        self.screen = Screen(self.root, self.terminal.columns, self.terminal.rows)
        self.dispatcher = Dispatcher(self)
        self.quitting = False
        self._decoder = InputDecoder()
        self._painted_once = False

    # ------------------------------------------------------------------
    # Wrapping
    # ------------------------------------------------------------------

    def wrap(
        self,
        cmp: Component,
        parent: ComponentWrapper | None,
        is_root: bool = False,
    ) -> ComponentWrapper:
        """Return the wrapper of *cmp*, attaching it on first use."""
        w = cmp._wrapper
        if w is None:
            w = ComponentWrapper(cmp, self, root=is_root)
            cmp._wrapper = w
            self._wrappers.add(w)
            logger.debug("attached %s", type(cmp).__name__)
        elif w.lines is not self:
            raise LinesError(
                f"lines: component {type(cmp).__name__}: attached to another "
                "Lines instance"
            )
        w.parent = parent
        return w

    def wrapper_of(self, cmp: Component | None) -> ComponentWrapper | None:
        if cmp is None:
            return None
        w = cmp._wrapper
        if w is None or w.lines is not self:
            return None
        return w

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def post(self, evt: Event) -> Event:
        """Enqueue *evt*; raises ``QueueFullError`` if the queue is full."""
        return self.events.post(evt)

    def focus(self, cmp: Component | None) -> Event | None:
        """Move the keyboard focus to *cmp*; ``None`` is a no-op."""
        if cmp is None:
            return None
        return self.post(MoveFocusEvent(component=cmp))

    def update(
        self,
        cmp: Component | None,
        data: Any = None,
        listener: Listener | None = None,
    ) -> Event | None:
        """Report an update with *data* to *cmp*.

        *listener* is called instead of the component's ``on_update``.  A
        ``None`` component is a no-op.
        """
        if cmp is None:
            return None
        return self.post(UpdateEvent(component=cmp, data=data, listener=listener))

    def layer(
        self, host: Component, overlay: Component, pos: LayerPos | None = None
    ) -> Event:
        """Show *overlay* on a new layer above *host*."""
        return self.post(LayerEvent(host=host, overlay=overlay, pos=pos))

    def remove_layer(self, host: Component) -> Event:
        return self.post(RemoveLayerEvent(host=host))

    def quit(self) -> Event:
        return self.post(QuitEvent())

    def wait(self, evt: Event | None, timeout: float | None = None) -> bool:
        """Block until *evt* was processed.

        *timeout* defaults to the configured ``wait_timeout``; returns
        ``False`` if it expired.  A ``None`` event is trivially done.
        """
        if evt is None:
            return True
        if timeout is None:
            timeout = self.config.wait_timeout
        done = evt.wait(timeout)
        if not done:
            logger.warning(
                "%s not processed within %ss", type(evt).__name__, timeout
            )
        return done

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def process(self, evt: Event | None = None) -> None:
        """Dispatch *evt* and bring the screen up to date."""
        try:
            if evt is not None:
                logger.debug("processing %s", type(evt).__name__)
                self.dispatcher.dispatch(evt)
            if not self.quitting:
                self._sync()
        finally:
            if evt is not None:
                evt.done.set()

    def drain(self) -> int:
        """Process all queued events on the calling thread.

        Events posted while draining are processed too.  Returns the number
        of processed events.
        """
        n = 0
        while not self.quitting:
            evt = self.events.get_nowait()
            if evt is None:
                break
            self.process(evt)
            n += 1
        return n

    def _sync(self) -> None:
        self._initialize()
        d = self.dispatcher
        for w in self.screen.reflow(self.wrap):
            d.report(w, "on_layout", None)
            if w.src is not None:
                w.src.dirty = True
            elif w.mode is ComponentMode.TAILING:
                w.to_tail()
            cursor = self.screen.cursor
            if cursor is not None and cursor.owner is w:
                d.report(w, "on_cursor", None, True)
        for w in self.screen.wrappers():
            if w.src is not None and w.src.dirty:
                w.sync_source()
        if not self.screen.contains(self.screen.focus):
            d.move_focus(self.root, None)
        self.screen.paint(self.terminal, full=not self._painted_once)
        self._painted_once = True
        for w in self.screen.wrappers():
            w.clean()

    def _initialize(self) -> None:
        """Report ``on_init`` to components which weren't initialized yet."""
        pending = self.screen.user_trees()
        while pending:
            w = pending.pop(0)
            if not w.initialized:
                w.initialized = True
                self.dispatcher.report(w, "on_init", None)
            _, children = children_of(w.user)
            pending.extend(self.wrap(c, w) for c in children)

    # ------------------------------------------------------------------
    # Running on a terminal
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run the event loop until ``quit``; blocks the calling thread."""
        asyncio.run(self.run())

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self.terminal.start(self._on_input, self._on_resize)
        try:
            self.terminal.hide_cursor()
            if self.config.mouse:
                self.terminal.enable_mouse()
            self.process()
            while not self.quitting:
                evt = await loop.run_in_executor(
                    None, self.events.poll, _POLL_INTERVAL
                )
                if evt is not None:
                    self.process(evt)
        finally:
            self.terminal.stop()
            logger.debug("event loop ended")

    def _on_input(self, data: str) -> None:
        self._post_all(self._decoder.feed(data))
        if self._decoder.pending:
            asyncio.get_running_loop().call_later(_ESC_TIMEOUT, self._flush_input)

    def _flush_input(self) -> None:
        self._post_all(self._decoder.flush())

    def _on_resize(self) -> None:
        self._post_all(
            [ResizeEvent(width=self.terminal.columns, height=self.terminal.rows)]
        )

    def _post_all(self, events: list[Event]) -> None:
        for evt in events:
            try:
                self.post(evt)
            except QueueFullError:
                # already logged; input is dropped under back pressure
                return
