"""Feature flags and their key, rune and button bindings.

A feature is a default behaviour a component can opt into, e.g.
``SCROLLABLE`` makes PgUp/PgDn scroll its content.  Elementary features are
single bits of ``Feature``; groups like ``LINES_FOCUSABLE`` are unions of
elementary features.  A ``FeatureTable`` maps ``(key, modifier)``,
``(rune, modifier)`` and ``(button, modifier)`` bindings to at most one
elementary feature each.
"""

from __future__ import annotations

import enum
import logging
from typing import NamedTuple

from lines.keys import Button, Key, Modifier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Feature flags
# ---------------------------------------------------------------------------


class Feature(enum.Flag):
    NONE = 0
    QUITABLE = 1 << 0
    FOCUSABLE = 1 << 1
    PREVIOUS_SELECTABLE = 1 << 2
    NEXT_SELECTABLE = 1 << 3
    UP_SCROLLABLE = 1 << 4
    DOWN_SCROLLABLE = 1 << 5
    PREVIOUS_LINE_FOCUSABLE = 1 << 6
    NEXT_LINE_FOCUSABLE = 1 << 7
    LINE_UNFOCUSABLE = 1 << 8
    LINE_HIGHLIGHTING = 1 << 9
    LINE_SELECTABLE = 1 << 10
    PREVIOUS_CELL_FOCUSABLE = 1 << 11
    LAST_CELL_FOCUSABLE = 1 << 12
    NEXT_CELL_FOCUSABLE = 1 << 13
    FIRST_CELL_FOCUSABLE = 1 << 14
    EDITING = 1 << 15
    # marks a binding as inherited by all descendants
    RECURSIVE = 1 << 16

    SELECTABLE = PREVIOUS_SELECTABLE | NEXT_SELECTABLE
    SCROLLABLE = UP_SCROLLABLE | DOWN_SCROLLABLE
    LINES_FOCUSABLE = (
        PREVIOUS_LINE_FOCUSABLE | NEXT_LINE_FOCUSABLE | LINE_UNFOCUSABLE
    )
    LINES_HIGHLIGHTED_FOCUSABLE = LINES_FOCUSABLE | LINE_HIGHLIGHTING
    LINES_SELECTABLE = LINES_HIGHLIGHTED_FOCUSABLE | LINE_SELECTABLE
    CELL_FOCUSABLE = (
        LINES_FOCUSABLE
        | PREVIOUS_CELL_FOCUSABLE
        | NEXT_CELL_FOCUSABLE
        | FIRST_CELL_FOCUSABLE
        | LAST_CELL_FOCUSABLE
    )
    CELL_HIGHLIGHTED_FOCUSABLE = CELL_FOCUSABLE | LINE_HIGHLIGHTING
    EDITABLE = FOCUSABLE | CELL_FOCUSABLE | SCROLLABLE | EDITING
    HIGHLIGHTED_EDITABLE = (
        FOCUSABLE | CELL_HIGHLIGHTED_FOCUSABLE | SCROLLABLE | EDITING
    )


ELEMENTARY: tuple[Feature, ...] = tuple(
    f
    for f in Feature
    if f is not Feature.RECURSIVE and f.value and not f.value & (f.value - 1)
)

_ALL_ELEMENTARY = Feature.NONE
for _f in ELEMENTARY:
    _ALL_ELEMENTARY |= _f
del _f


def is_elementary(f: Feature) -> bool:
    """``True`` if *f* is exactly one feature bit."""
    v = f.value & ~Feature.RECURSIVE.value
    return v != 0 and v & (v - 1) == 0 and f.value == v


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------


class FeatureKey(NamedTuple):
    key: Key
    mod: Modifier = Modifier.NONE


class FeatureRune(NamedTuple):
    rune: str
    mod: Modifier = Modifier.NONE


class FeatureButton(NamedTuple):
    button: Button
    mod: Modifier = Modifier.NONE


class _Bindings(NamedTuple):
    keys: tuple[FeatureKey, ...] = ()
    runes: tuple[FeatureRune, ...] = ()
    buttons: tuple[FeatureButton, ...] = ()


DEFAULT_BINDINGS: dict[Feature, _Bindings] = {
    Feature.FOCUSABLE: _Bindings(
        buttons=(
            FeatureButton(Button.PRIMARY),
            FeatureButton(Button.SECONDARY),
            FeatureButton(Button.MIDDLE),
        )
    ),
    Feature.NEXT_SELECTABLE: _Bindings(keys=(FeatureKey(Key.TAB),)),
    Feature.PREVIOUS_SELECTABLE: _Bindings(
        keys=(FeatureKey(Key.TAB, Modifier.SHIFT),)
    ),
    Feature.UP_SCROLLABLE: _Bindings(keys=(FeatureKey(Key.PGUP),)),
    Feature.DOWN_SCROLLABLE: _Bindings(keys=(FeatureKey(Key.PGDN),)),
    Feature.PREVIOUS_LINE_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.UP),)),
    Feature.NEXT_LINE_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.DOWN),)),
    Feature.FIRST_CELL_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.HOME),)),
    Feature.PREVIOUS_CELL_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.LEFT),)),
    Feature.NEXT_CELL_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.RIGHT),)),
    Feature.LAST_CELL_FOCUSABLE: _Bindings(keys=(FeatureKey(Key.END),)),
    Feature.LINE_SELECTABLE: _Bindings(keys=(FeatureKey(Key.ENTER),)),
    Feature.LINE_UNFOCUSABLE: _Bindings(keys=(FeatureKey(Key.ESC),)),
    Feature.EDITING: _Bindings(keys=(FeatureKey(Key.INSERT),)),
    # features without a natural binding are bound to the NUL rune
    Feature.LINE_HIGHLIGHTING: _Bindings(runes=(FeatureRune("\x00"),)),
}

# quit bindings which can't be removed from the root component
IMMUTABLE_QUIT_KEYS: frozenset[FeatureKey] = frozenset(
    {FeatureKey(Key.CTRL_C), FeatureKey(Key.CTRL_D)}
)


# ---------------------------------------------------------------------------
# FeatureTable
# ---------------------------------------------------------------------------


class FeatureTable:
    """The bindings of one component.

    Tables are never shared: ``DEFAULT_TABLE`` and ``QUIT_TABLE`` are
    templates which are ``copy()``-ed when a component is attached.
    """

    def __init__(self) -> None:
        self._keys: dict[FeatureKey, Feature] = {}
        self._runes: dict[FeatureRune, Feature] = {}
        self._buttons: dict[FeatureButton, Feature] = {}
        self._have = Feature.NONE

    def copy(self) -> FeatureTable:
        cpy = FeatureTable()
        cpy._keys = dict(self._keys)
        cpy._runes = dict(self._runes)
        cpy._buttons = dict(self._buttons)
        cpy._have = self._have
        return cpy

    # -- lookup -------------------------------------------------------------

    def of_key(self, key: Key, mod: Modifier = Modifier.NONE) -> Feature:
        """Feature bound to *key*; may carry the ``RECURSIVE`` bit."""
        return self._keys.get(FeatureKey(key, mod), Feature.NONE)

    def of_rune(self, rune: str, mod: Modifier = Modifier.NONE) -> Feature:
        return self._runes.get(FeatureRune(rune, mod), Feature.NONE)

    def of_button(
        self, button: Button, mod: Modifier = Modifier.NONE
    ) -> Feature:
        return self._buttons.get(FeatureButton(button, mod), Feature.NONE)

    def key_quits(self, key: Key, mod: Modifier = Modifier.NONE) -> bool:
        return bool(self.of_key(key, mod) & Feature.QUITABLE)

    def rune_quits(self, rune: str, mod: Modifier = Modifier.NONE) -> bool:
        return bool(self.of_rune(rune, mod) & Feature.QUITABLE)

    def _bound(self) -> list[Feature]:
        return [
            *self._keys.values(),
            *self._runes.values(),
            *self._buttons.values(),
        ]

    def has(self, f: Feature) -> bool:
        """Report if all of *f* was added to this table.

        With the ``RECURSIVE`` bit set, report if a binding of *f* is
        marked recursive.
        """
        if not f & Feature.RECURSIVE:
            return (self._have & f) == f
        return any(bound & f == f for bound in self._bound())

    def all(self) -> Feature:
        """Union of all bound features without the ``RECURSIVE`` bit."""
        result = Feature.NONE
        for bound in self._bound():
            result |= bound
        return result & ~Feature.RECURSIVE

    def keys_of(self, f: Feature) -> list[FeatureKey]:
        return [k for k, bound in self._keys.items() if bound & f]

    def runes_of(self, f: Feature) -> list[FeatureRune]:
        return [r for r, bound in self._runes.items() if bound & f]

    def buttons_of(self, f: Feature) -> list[FeatureButton]:
        return [b for b, bound in self._buttons.items() if bound & f]

    # -- mutation -----------------------------------------------------------

    def add(self, f: Feature, recursive: bool = False) -> None:
        """Install default bindings of each elementary feature in *f*.

        Elementary features which already have bindings keep them.
        """
        f &= _ALL_ELEMENTARY
        if not f:
            return
        for elementary in ELEMENTARY:
            if not elementary & f:
                continue
            dflt = DEFAULT_BINDINGS.get(elementary)
            if dflt is None or self._is_bound(elementary):
                continue
            value = elementary | Feature.RECURSIVE if recursive else elementary
            for k in dflt.keys:
                self._keys[k] = value
            for r in dflt.runes:
                self._runes[r] = value
            for b in dflt.buttons:
                self._buttons[b] = value
        self._have |= f

    def _is_bound(self, elementary: Feature) -> bool:
        return any(bound & elementary for bound in self._bound())

    def delete(self, f: Feature) -> None:
        """Remove all bindings of *f* except the immutable quit keys."""
        f &= _ALL_ELEMENTARY
        if not f:
            return
        self._keys = {
            k: bound
            for k, bound in self._keys.items()
            if not bound & f
            or (bound & Feature.QUITABLE and k in IMMUTABLE_QUIT_KEYS)
        }
        self._runes = {r: b for r, b in self._runes.items() if not b & f}
        self._buttons = {
            b: bound for b, bound in self._buttons.items() if not bound & f
        }
        self._have &= ~f
        if self.keys_of(Feature.QUITABLE):
            self._have |= Feature.QUITABLE

    def _check_elementary(self, f: Feature, what: str) -> bool:
        if not is_elementary(f):
            logger.debug("ignoring %s of non-elementary feature %s", what, f)
            return False
        return True

    def set_keys_of(
        self, f: Feature, *keys: FeatureKey, recursive: bool = False
    ) -> None:
        """Replace the key bindings of the elementary feature *f*."""
        if not self._check_elementary(f, "key binding"):
            return
        self._keys = {
            k: bound
            for k, bound in self._keys.items()
            if not bound & f
            or (f == Feature.QUITABLE and k in IMMUTABLE_QUIT_KEYS)
        }
        value = f | Feature.RECURSIVE if recursive else f
        for k in keys:
            self._keys[FeatureKey(*k)] = value
        self._have = self.all()

    def set_runes_of(
        self, f: Feature, *runes: FeatureRune, recursive: bool = False
    ) -> None:
        """Replace the rune bindings of the elementary feature *f*."""
        if not self._check_elementary(f, "rune binding"):
            return
        self._runes = {r: b for r, b in self._runes.items() if not b & f}
        value = f | Feature.RECURSIVE if recursive else f
        for r in runes:
            self._runes[FeatureRune(*r)] = value
        self._have = self.all()

    def set_buttons_of(
        self, f: Feature, *buttons: FeatureButton, recursive: bool = False
    ) -> None:
        """Replace the button bindings of the elementary feature *f*."""
        if not self._check_elementary(f, "button binding"):
            return
        self._buttons = {
            b: bound for b, bound in self._buttons.items() if not bound & f
        }
        value = f | Feature.RECURSIVE if recursive else f
        for b in buttons:
            self._buttons[FeatureButton(*b)] = value
        self._have = self.all()


def _quit_table() -> FeatureTable:
    table = FeatureTable()
    table._keys[FeatureKey(Key.CTRL_C)] = Feature.QUITABLE
    table._keys[FeatureKey(Key.CTRL_D)] = Feature.QUITABLE
    table._runes[FeatureRune("q")] = Feature.QUITABLE
    table._have = Feature.QUITABLE
    return table


DEFAULT_TABLE = FeatureTable()
QUIT_TABLE = _quit_table()
