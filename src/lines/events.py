"""Events processed by the ``Lines`` event loop and the queue carrying them.

Every event is created when it is polled from the terminal or posted by
user code and consumed by exactly one dispatch pass.  After the pass and
the following screen synchronization the event's completion signal is set,
so a poster on another thread can ``wait()`` for it.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from lines.errors import QueueFullError
from lines.keys import Button, Key, Modifier

if TYPE_CHECKING:
    from lines.env import Env
    from lines.layout import LayerPos

logger = logging.getLogger(__name__)

Listener = Callable[["Env"], None]


# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class Event:
    """Base of all events."""

    when: float = field(default_factory=time.monotonic)
    done: threading.Event = field(
        default_factory=threading.Event, repr=False, compare=False
    )

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the event was processed; ``False`` on timeout."""
        return self.done.wait(timeout)


@dataclass(kw_only=True)
class KeyEvent(Event):
    key: Key
    mod: Modifier = Modifier.NONE


@dataclass(kw_only=True)
class RuneEvent(Event):
    rune: str
    mod: Modifier = Modifier.NONE


class MouseKind(enum.Enum):
    CLICK = "click"
    MOVE = "move"
    DRAG = "drag"
    DROP = "drop"


@dataclass(kw_only=True)
class MouseEvent(Event):
    """A mouse report in absolute screen coordinates.

    ``origin`` is the position a drag started at; it is only meaningful
    for ``DRAG`` and ``DROP`` events.
    """

    button: Button
    x: int
    y: int
    mod: Modifier = Modifier.NONE
    kind: MouseKind = MouseKind.CLICK
    origin: tuple[int, int] = (-1, -1)


@dataclass(kw_only=True)
class ResizeEvent(Event):
    width: int
    height: int


@dataclass(kw_only=True)
class UpdateEvent(Event):
    component: Any
    data: Any = None
    listener: Listener | None = None


@dataclass(kw_only=True)
class MoveFocusEvent(Event):
    component: Any


@dataclass(kw_only=True)
class QuitEvent(Event):
    pass


@dataclass(kw_only=True)
class LayerEvent(Event):
    host: Any
    overlay: Any
    pos: LayerPos | None = None


@dataclass(kw_only=True)
class RemoveLayerEvent(Event):
    host: Any


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


class EventQueue:
    """Bounded FIFO shared by the loop thread and posting threads."""

    def __init__(self, maxsize: int = 100) -> None:
        self._queue: queue.Queue[Event] = queue.Queue(maxsize)

    def post(self, event: Event) -> Event:
        """Enqueue *event* without blocking.

        Raises ``QueueFullError`` if the queue is at capacity.
        """
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.warning("dropping %s: event queue full", type(event).__name__)
            raise QueueFullError(event) from None
        return event

    def poll(self, timeout: float | None = None) -> Event | None:
        """Return the next event, or ``None`` if none arrived in *timeout*."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self) -> Event | None:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()
