"""Explicit key and rune listeners of a component.

A listener registered for a key or rune is reported before the
component's ``on_key``/``on_rune`` while a key event bubbles through it.
Components implementing ``keys(register)`` or ``runes(register)`` get
their registrations collected when they are attached.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lines.errors import guarded
from lines.keys import Key, Modifier

if TYPE_CHECKING:
    from lines.component import ComponentWrapper
    from lines.events import Listener

logger = logging.getLogger(__name__)


class Listeners:
    def __init__(self, wrapper: ComponentWrapper) -> None:
        self._w = wrapper
        self._keys: dict[tuple[Key, Modifier], Listener] = {}
        self._runes: dict[str, Listener] = {}

    def register_key(
        self, key: Key, mod: Modifier, listener: Listener | None
    ) -> None:
        """Register (or with ``None`` remove) the listener of *key*."""
        if key == Key.NUL:
            logger.debug("ignoring listener registration for NUL key")
            return
        if listener is None:
            self._keys.pop((key, mod), None)
            return
        self._keys[(key, mod)] = listener

    def register_rune(self, rune: str, listener: Listener | None) -> None:
        if not rune or rune == "\x00":
            logger.debug("ignoring listener registration for zero rune")
            return
        if listener is None:
            self._runes.pop(rune, None)
            return
        self._runes[rune] = listener

    @guarded
    def key(
        self, key: Key, mod: Modifier = Modifier.NONE, listener: Listener | None = None
    ) -> None:
        self.register_key(key, mod, listener)

    @guarded
    def rune(self, rune: str, listener: Listener | None = None) -> None:
        self.register_rune(rune, listener)

    def of_key(self, key: Key, mod: Modifier = Modifier.NONE) -> Listener | None:
        return self._keys.get((key, mod))

    def of_rune(self, rune: str) -> Listener | None:
        return self._runes.get(rune)

    @guarded
    def has_key(self, key: Key, mod: Modifier = Modifier.NONE) -> bool:
        return (key, mod) in self._keys

    @guarded
    def has_rune(self, rune: str) -> bool:
        return rune in self._runes
