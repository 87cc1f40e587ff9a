"""User components and the wrapper guarding their state.

A user component subclasses ``Component`` and implements any of the
optional ``on_*`` callbacks (see ``HOOKS``).  Once attached to a ``Lines``
instance a ``ComponentWrapper`` holds its state: features, content lines,
line focus, scroll position, content source and editor.  That state is
only accessible while the component is *enabled*, i.e. during one of its
own callbacks; any other access raises ``DisabledComponentError``.

Example::

    class Hello(Component):
        def on_init(self, env):
            self.ff.add(Feature.LINES_FOCUSABLE)
            env.write("hello\\nworld")
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Sequence

from lines.editor import Editor
from lines.env import ComponentMode
from lines.errors import DisabledComponentError, NotInitializedError, guarded
from lines.features import (
    DEFAULT_TABLE,
    ELEMENTARY,
    QUIT_TABLE,
    Feature,
    FeatureButton,
    FeatureKey,
    FeatureRune,
    FeatureTable,
)
from lines.focus import LineFocus
from lines.gaps import Gaps, GapsWriter
from lines.globals import Globals, StyleType
from lines.keys import Button, Key, Modifier
from lines.layout import Dim, Rect
from lines.line import Line, LineBuffer
from lines.listeners import Listeners
from lines.scrolling import Scroller
from lines.source import ContentSource, Liner
from lines.style import Style

if TYPE_CHECKING:
    from lines.env import Env
    from lines.layout import LayerPos
    from lines.screen import CursorStyle, Layer, Screen
    from lines.ui import Lines

logger = logging.getLogger(__name__)

# Optional callbacks a user component may implement.
HOOKS: tuple[str, ...] = (
    "on_init",
    "on_layout",
    "on_update",
    "on_quit",
    "on_focus",
    "on_focus_lost",
    "on_key",
    "on_rune",
    "on_click",
    "on_context",
    "on_mouse",
    "on_move",
    "on_drag",
    "on_drop",
    "on_enter",
    "on_exit",
    "on_line_focus",
    "on_line_focus_lost",
    "on_line_overflowing",
    "on_line_selection",
    "on_cursor",
    "on_edit",
    "on_out_of_bound_click",
    "on_out_of_bound_move",
)


@dataclass(frozen=True)
class Capabilities:
    """The optional callbacks and registrations a component implements."""

    hooks: frozenset[str]
    registers_keys: bool
    registers_runes: bool
    stacking: bool
    chaining: bool

    @classmethod
    def resolve(cls, user: Any) -> Capabilities:
        return cls(
            hooks=frozenset(h for h in HOOKS if callable(getattr(user, h, None))),
            registers_keys=callable(getattr(user, "keys", None)),
            registers_runes=callable(getattr(user, "runes", None)),
            stacking=callable(getattr(user, "for_stacked", None)),
            chaining=callable(getattr(user, "for_chained", None)),
        )

    def has(self, hook: str) -> bool:
        return hook in self.hooks

    @property
    def is_modal(self) -> bool:
        return "on_out_of_bound_click" in self.hooks


# ---------------------------------------------------------------------------
# Features facade
# ---------------------------------------------------------------------------


class Features:
    """Feature access of a component: ``Component.ff``.

    Lookups consider the component's own bindings first and then
    recursive bindings of its ancestors.
    """

    def __init__(self, wrapper: ComponentWrapper) -> None:
        self._w = wrapper

    @guarded
    def add(self, f: Feature) -> None:
        """Add the default bindings of *f* unless already bound."""
        self._w.add_features(f)

    @guarded
    def set(self, f: Feature) -> None:
        self._w.add_features(f)

    @guarded
    def add_recursive(self, f: Feature) -> None:
        """Like ``add`` but the bindings are inherited by all descendants."""
        self._w.add_features(f, recursive=True)

    @guarded
    def delete(self, f: Feature) -> None:
        w = self._w
        w.ff.delete(f)
        if f & (Feature.LINES_FOCUSABLE | Feature.CELL_FOCUSABLE):
            w.focus._reset()

    @guarded
    def has(self, f: Feature) -> bool:
        return self._w.has_feature(f)

    @guarded
    def all(self) -> Feature:
        return self._w.ff.all()

    @guarded
    def of_key(self, key: Key, mod: Modifier = Modifier.NONE) -> Feature:
        return self._w.feature_of_key(key, mod)

    @guarded
    def of_rune(self, rune: str, mod: Modifier = Modifier.NONE) -> Feature:
        return self._w.feature_of_rune(rune, mod)

    @guarded
    def of_button(self, button: Button, mod: Modifier = Modifier.NONE) -> Feature:
        return self._w.feature_of_button(button, mod)

    @guarded
    def keys_of(self, f: Feature) -> list[FeatureKey]:
        return self._w.ff.keys_of(f)

    @guarded
    def runes_of(self, f: Feature) -> list[FeatureRune]:
        return self._w.ff.runes_of(f)

    @guarded
    def buttons_of(self, f: Feature) -> list[FeatureButton]:
        return self._w.ff.buttons_of(f)

    @guarded
    def set_keys_of(
        self, f: Feature, *keys: FeatureKey, recursive: bool = False
    ) -> None:
        self._w.ff.set_keys_of(f, *keys, recursive=recursive)

    @guarded
    def set_runes_of(
        self, f: Feature, *runes: FeatureRune, recursive: bool = False
    ) -> None:
        self._w.ff.set_runes_of(f, *runes, recursive=recursive)

    @guarded
    def set_buttons_of(
        self, f: Feature, *buttons: FeatureButton, recursive: bool = False
    ) -> None:
        self._w.ff.set_buttons_of(f, *buttons, recursive=recursive)


# ---------------------------------------------------------------------------
# ComponentWrapper
# ---------------------------------------------------------------------------


class ComponentWrapper:
    """Internal state of an attached component.

    Framework code works on the wrapper directly; user code reaches it only
    through the guarded ``Component`` accessors.
    """

    def __init__(self, user: Component, lines: Lines, root: bool = False) -> None:
        self.user = user
        self.lines = lines
        self.caps = Capabilities.resolve(user)
        self.parent: ComponentWrapper | None = None
        self.children: list[ComponentWrapper] = []
        self.layer: Layer | None = None
        self.initialized = False
        self._enabled = 0
        self._syncing = False

        template = QUIT_TABLE if root and not lines.config.kiosk else DEFAULT_TABLE
        self.ff: FeatureTable = template.copy()
        self.features = Features(self)
        self.buffer = LineBuffer()
        self.first = 0
        self.dim = Dim()
        self.gaps = Gaps()
        self.globals: Globals = lines.globals.clone(self._globals_updated)
        # default style lines were written in, restyled when it changes
        self._default_style = self.globals.style(StyleType.DEFAULT)
        self.mode = ComponentMode.OVERWRITING
        self.focus = LineFocus(self)
        self.scroll = Scroller(self)
        self.listeners = Listeners(self)
        self.src: ContentSource | None = None
        self.editor: Editor | None = None
        self.dirty = True

        if self.caps.registers_keys:
            user.keys(self.listeners.register_key)  # type: ignore[attr-defined]
        if self.caps.registers_runes:
            user.runes(self.listeners.register_rune)  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"<wrapper of {type(self.user).__name__} {self.dim!r}>"

    # ------------------------------------------------------------------
    # Enabling
    # ------------------------------------------------------------------

    @property
    def is_enabled(self) -> bool:
        return self._enabled > 0

    def check_enabled(self, attribute: str) -> None:
        if not self._enabled:
            raise DisabledComponentError(self.user, attribute)

    @contextlib.contextmanager
    def enabled(self) -> Iterator[Component]:
        """Make the component's state accessible for the ``with`` block."""
        self._enabled += 1
        try:
            yield self.user
        finally:
            self._enabled -= 1

    # ------------------------------------------------------------------
    # Geometry and content
    # ------------------------------------------------------------------

    @property
    def screen(self) -> Screen:
        return self.lines.screen

    def inner_area(self) -> Rect:
        """The screen rectangle inside the gaps."""
        x, y, width, height = self.dim.rect
        top, right, bottom, left = self.gaps.lengths()
        return (
            x + left,
            y + top,
            max(0, width - left - right),
            max(0, height - top - bottom),
        )

    def content_area(self) -> Rect:
        """The screen rectangle of the content: the inner area without the
        scroll bar column.
        """
        x, y, width, height = self.inner_area()
        if self.scroll.bar and width > 0:
            width -= 1
        return x, y, width, height

    def bar_area(self) -> Rect:
        """Scroll bar column relative to the component's origin."""
        x, y, width, height = self.content_area()
        if not self.scroll.bar or not self.inner_area()[2]:
            return 0, 0, 0, 0
        return x - self.dim.x + width, y - self.dim.y, 1, height

    @property
    def width(self) -> int:
        return self.content_area()[2]

    @property
    def height(self) -> int:
        return self.content_area()[3]

    # ------------------------------------------------------------------
    # Globals
    # ------------------------------------------------------------------

    @property
    def style(self) -> Style:
        return self.globals.style(StyleType.DEFAULT)

    @style.setter
    def style(self, value: Style) -> None:
        self.globals.set_style(StyleType.DEFAULT, value)

    @property
    def tab_width(self) -> int:
        return self.globals.tab_width

    def _globals_updated(self, key: object) -> None:
        if key is StyleType.DEFAULT:
            old, self._default_style = self._default_style, self.style
            for line in self.buffer:
                if line.style == old:
                    line.style = self._default_style
                    line.dirty = True
        self.dirty = True

    def content_len(self) -> int:
        if self.src is not None:
            return self.src.len(self)
        return len(self.buffer)

    def visible_lines(self) -> list[Line | None]:
        """The lines shown on the component's screen lines."""
        offset = 0 if self.src is not None else self.first
        return [
            self.buffer[offset + i] if offset + i < len(self.buffer) else None
            for i in range(self.height)
        ]

    def set_first(self, first: int) -> None:
        """Scroll to content line *first*; out of range values are ignored."""
        if first < 0 or first == self.first or first >= self.content_len():
            return
        self.first = first
        self.dirty = True
        if self.src is not None:
            self.sync_source()
        self.focus.scrolled()

    def to_tail(self) -> None:
        self.set_first(max(0, self.content_len() - self.height))

    def content_changed(self) -> None:
        self.dirty = True
        if not self._syncing:
            self.focus.content_changed()

    def sync_source(self) -> None:
        if self.src is None:
            return
        self._syncing = True
        try:
            self.src.sync(self)
        finally:
            self._syncing = False

    def set_source(self, src: ContentSource | None) -> None:
        self.focus._reset()
        self.src = src
        self.first = 0
        self.buffer.truncate(0)
        self.dirty = True
        if src is None:
            return
        with self.enabled():
            src.initialize(self)
        if self.height > 0:
            self.sync_source()

    def reset(self, idx: int = -1) -> None:
        if idx == -1:
            self.focus._reset()
            self.first = 0
        self.buffer.reset(idx)
        self.content_changed()

    @property
    def is_dirty(self) -> bool:
        return self.dirty or self.gaps.dirty or self.buffer.is_dirty

    def clean(self) -> None:
        self.dirty = False
        self.gaps.dirty = False
        self.buffer.clean()

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    def ancestors(self) -> Iterator[ComponentWrapper]:
        p = self.parent
        while p is not None:
            yield p
            p = p.parent

    def add_features(self, f: Feature, recursive: bool = False) -> None:
        nested = self.caps.stacking or self.caps.chaining
        if f & Feature.EDITING and self.editor is None and not nested:
            self.editor = Editor(self)
        self.ff.add(f, recursive)

    def has_feature(self, f: Feature) -> bool:
        for e in ELEMENTARY:
            if not e & f:
                continue
            if self.ff.has(e):
                continue
            if not any(a.ff.has(e | Feature.RECURSIVE) for a in self.ancestors()):
                return False
        return True

    def _inherited(self, own: Feature, lookup: str, *args: Any) -> Feature:
        if own:
            return own & ~Feature.RECURSIVE
        for a in self.ancestors():
            f = getattr(a.ff, lookup)(*args)
            if f & Feature.RECURSIVE:
                return f & ~Feature.RECURSIVE
        return Feature.NONE

    def feature_of_key(self, key: Key, mod: Modifier = Modifier.NONE) -> Feature:
        return self._inherited(self.ff.of_key(key, mod), "of_key", key, mod)

    def feature_of_rune(self, rune: str, mod: Modifier = Modifier.NONE) -> Feature:
        return self._inherited(self.ff.of_rune(rune, mod), "of_rune", rune, mod)

    def feature_of_button(
        self, button: Button, mod: Modifier = Modifier.NONE
    ) -> Feature:
        return self._inherited(
            self.ff.of_button(button, mod), "of_button", button, mod
        )

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def cursor_position(self) -> tuple[int, int, bool]:
        """``(line, column, True)`` if this component owns the cursor."""
        cursor = self.screen.cursor
        if cursor is None or cursor.owner is not self:
            return -1, -1, False
        return cursor.line, cursor.column, True

    def set_cursor(
        self, line: int, column: int, style: CursorStyle | None = None
    ) -> None:
        if line < 0 or column < 0:
            self.clear_cursor()
            return
        if line >= self.height:
            return
        if self.screen_column(line, column) >= self.width:
            return
        self.screen.set_cursor(self, line, column, style)

    def screen_column(self, line: int, column: int) -> int:
        """Content area column at which cell *column* of *line* is painted."""
        lines = self.visible_lines()
        ln = lines[line] if 0 <= line < len(lines) else None
        return column if ln is None else ln.column_of(column)

    def clear_cursor(self) -> None:
        cursor = self.screen.cursor
        if cursor is not None and cursor.owner is self:
            self.screen.clear_cursor()


# ---------------------------------------------------------------------------
# Component
# ---------------------------------------------------------------------------


class Component:
    """Base class of user components.

    Subclasses implement any of the optional callbacks listed in ``HOOKS``,
    e.g. ``on_init(self, env)`` or ``on_key(self, env, key, mod)``.
    """

    _wrapper: ComponentWrapper | None = None

    def _state(self, attribute: str) -> ComponentWrapper:
        w = self._wrapper
        if w is None:
            raise NotInitializedError(self)
        w.check_enabled(attribute)
        return w

    @property
    def is_enabled(self) -> bool:
        return self._wrapper is not None and self._wrapper.is_enabled

    @property
    def is_initialized(self) -> bool:
        return self._wrapper is not None and self._wrapper.initialized

    # -- state accessors ----------------------------------------------------

    @property
    def ff(self) -> Features:
        return self._state("ff").features

    @property
    def focus(self) -> LineFocus:
        return self._state("focus").focus

    @property
    def scroll(self) -> Scroller:
        return self._state("scroll").scroll

    @property
    def dim(self) -> Dim:
        return self._state("dim").dim

    @property
    def listeners(self) -> Listeners:
        return self._state("listeners").listeners

    @property
    def edit(self) -> Editor | None:
        return self._state("edit").editor

    @property
    def src(self) -> ContentSource | None:
        return self._state("src").src

    @src.setter
    def src(self, value: ContentSource | Liner | None) -> None:
        w = self._state("src")
        if value is not None and not isinstance(value, ContentSource):
            value = ContentSource(value)
        w.set_source(value)

    @property
    def mode(self) -> ComponentMode:
        return self._state("mode").mode

    @mode.setter
    def mode(self, value: ComponentMode) -> None:
        self._state("mode").mode = value

    @property
    def style(self) -> Style:
        return self._state("style").style

    @style.setter
    def style(self, value: Style) -> None:
        self._state("style").style = value

    @property
    def globals(self) -> Globals:
        """This component's display properties; see ``lines.globals``."""
        return self._state("globals").globals

    def gaps(self, level: int) -> GapsWriter:
        """Writer of the gap lines and corners of gap *level*."""
        return GapsWriter(self._state("gaps").gaps, level)

    @property
    def first(self) -> int:
        """Content index of the first displayed line."""
        return self._state("first").first

    def len(self) -> int:
        """Number of content lines."""
        return self._state("len").content_len()

    def content_screen_lines(self) -> int:
        return self._state("content_screen_lines").height

    def cursor_position(self) -> tuple[int, int, bool]:
        return self._state("cursor_position").cursor_position()

    def set_cursor(
        self, line: int, column: int, style: CursorStyle | None = None
    ) -> Component:
        """Set the screen cursor relative to the content area.

        *column* is a cell of the displayed *line*: on a line with wide
        runes the cursor is painted at the screen column of that rune.  A
        negative coordinate removes the cursor if this component has it;
        coordinates outside the content area are ignored.
        """
        self._state("set_cursor").set_cursor(line, column, style)
        return self

    def reset(self, idx: int = -1) -> None:
        """Blank content line *idx*; ``-1`` removes all content."""
        self._state("reset").reset(idx)

    @property
    def is_dirty(self) -> bool:
        return self._state("is_dirty").is_dirty

    def set_dirty(self) -> None:
        self._state("set_dirty").dirty = True

    # -- layers ---------------------------------------------------------------

    def layered(
        self, env: Env, overlay: Component, pos: LayerPos | None = None
    ) -> None:
        """Show *overlay* on a layer above this component."""
        self._state("layered")
        env.lines.layer(self, overlay, pos)

    def remove_layer(self, env: Env) -> None:
        self._state("remove_layer")
        env.lines.remove_layer(self)


class Stacking:
    """Mixin of components whose children ``cc`` are stacked vertically."""

    cc: Sequence[Component] = ()

    def for_stacked(self) -> Iterator[Component]:
        yield from self.cc


class Chaining:
    """Mixin of components whose children ``cc`` are chained horizontally."""

    cc: Sequence[Component] = ()

    def for_chained(self) -> Iterator[Component]:
        yield from self.cc
