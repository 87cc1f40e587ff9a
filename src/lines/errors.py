"""Exceptions raised by the lines toolkit.

Programmer errors raise; benign races between content mutation and queued
UI operations (out of range indices, scrolling past the content) are silent
no-ops and never show up here.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class LinesError(Exception):
    """Base class of all lines errors."""


class DisabledComponentError(LinesError, RuntimeError):
    """A component's state was accessed outside of one of its callbacks."""

    def __init__(self, component: object, attribute: str = "") -> None:
        name = type(component).__name__
        what = f".{attribute}" if attribute else ""
        super().__init__(
            f"lines: component {name}{what}: state accessed while disabled; "
            "component state is only available inside its own callbacks"
        )
        self.component = component
        self.attribute = attribute


class NotInitializedError(LinesError, RuntimeError):
    """A component was used before it was attached to a ``Lines`` instance."""

    def __init__(self, component: object) -> None:
        super().__init__(
            f"lines: component {type(component).__name__}: not attached "
            "to a Lines instance"
        )
        self.component = component


class QueueFullError(LinesError):
    """An event could not be posted because the event queue is full."""

    def __init__(self, event: object) -> None:
        super().__init__(
            f"can't post event: queue full: {type(event).__name__}"
        )
        self.event = event


def guarded(method: Callable[..., T]) -> Callable[..., T]:
    """Raise ``DisabledComponentError`` unless the owning component is enabled.

    Decorates methods of the per component state objects (line focus,
    scroller, feature and listener facades) which keep their component's
    wrapper in ``self._w``.
    """

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        self._w.check_enabled(method.__name__)
        return method(self, *args, **kwargs)

    return wrapper
