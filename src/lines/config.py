"""Configuration of a ``Lines`` instance."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default



def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    """Settings handed to ``Lines`` at construction.

    ``kiosk`` drops the default quit bindings of the root component so the
    application can only end through ``Lines.quit``.
    ``wait_timeout`` is the default number of seconds ``Lines.wait`` blocks
    for an event to be processed.
    """

    kiosk: bool = False
    queue_size: int = 100
    tab_width: int = 4
    mouse: bool = True
    wait_timeout: float = 5.0

    @classmethod
    def kiosk_config(cls, **overrides: object) -> Config:
        """Return the no-quit variant of the default configuration."""
        return replace(cls(kiosk=True), **overrides)  # type: ignore[arg-type]

    @classmethod
    def from_env(cls) -> Config:
        """Build a configuration from ``LINES_*`` environment variables."""
        dflt = cls()
        return cls(
            kiosk=_env_bool("LINES_KIOSK", dflt.kiosk),
            queue_size=max(1, _env_int("LINES_QUEUE_SIZE", dflt.queue_size)),
            tab_width=max(1, _env_int("LINES_TAB_WIDTH", dflt.tab_width)),
            mouse=_env_bool("LINES_MOUSE", dflt.mouse),
            wait_timeout=_env_float("LINES_WAIT_TIMEOUT", dflt.wait_timeout),
        )
