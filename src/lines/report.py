"""Reporting events to components.

The ``Dispatcher`` translates one event into calls of user callbacks:

* keys and runes are reported to the focused component and bubble up to
  its ancestors.  At each component an explicitly registered listener is
  called before ``on_key``/``on_rune``.  If no callback stopped the
  bubbling, the feature bound to the key or rune on the focused component
  is executed, and in any case the root's quit bindings are checked
  afterwards;
* mouse events are reported innermost first to the components under the
  pointer with coordinates relative to each of them;
* updates, focus moves, layers and quitting target a single component.

Every callback runs with its component enabled.  Afterwards changes of the
component's line focus, cursor and line overflow are reported as the
derived ``on_line_focus``/``on_line_focus_lost``, ``on_cursor`` and
``on_line_overflowing`` callbacks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from lines.editor import Edit, EditType
from lines.env import Env, LineWriter
from lines.events import (
    Event,
    KeyEvent,
    LayerEvent,
    MouseEvent,
    MouseKind,
    MoveFocusEvent,
    QuitEvent,
    RemoveLayerEvent,
    ResizeEvent,
    RuneEvent,
    UpdateEvent,
)
from lines.features import Feature
from lines.keys import Button, Modifier, key_name
from lines.layout import LayerPos, Layout, walk
from lines.screen import Layer

if TYPE_CHECKING:
    from lines.component import ComponentWrapper
    from lines.screen import Screen
    from lines.ui import Lines

logger = logging.getLogger(__name__)

_Snapshot = tuple[int, tuple[int, int, bool]]


class Dispatcher:
    def __init__(self, lines: Lines) -> None:
        self.lines = lines
        self._handlers: dict[type[Event], Callable[[Any], None]] = {
            KeyEvent: self.key,
            RuneEvent: self.rune,
            MouseEvent: self.mouse,
            ResizeEvent: self.resize,
            UpdateEvent: self.update,
            MoveFocusEvent: self.focus,
            QuitEvent: self.quit,
            LayerEvent: self.layer,
            RemoveLayerEvent: self.remove_layer,
        }
        self._executors: dict[Feature, Callable[[ComponentWrapper, Event], bool]] = {
            Feature.QUITABLE: self._exec_quit,
            Feature.NEXT_SELECTABLE: lambda w, evt: self._cycle_focus(1, evt),
            Feature.PREVIOUS_SELECTABLE: lambda w, evt: self._cycle_focus(-1, evt),
            Feature.UP_SCROLLABLE: _scroll("up"),
            Feature.DOWN_SCROLLABLE: _scroll("down"),
            Feature.NEXT_LINE_FOCUSABLE: _focus("next"),
            Feature.PREVIOUS_LINE_FOCUSABLE: _focus("previous"),
            Feature.LINE_UNFOCUSABLE: _focus("reset"),
            Feature.LINE_SELECTABLE: self._exec_line_selection,
            Feature.FIRST_CELL_FOCUSABLE: _focus("first_cell"),
            Feature.PREVIOUS_CELL_FOCUSABLE: _focus("previous_cell"),
            Feature.NEXT_CELL_FOCUSABLE: _focus("next_cell"),
            Feature.LAST_CELL_FOCUSABLE: _focus("last_cell"),
            Feature.EDITING: self._exec_editing,
        }

    @property
    def screen(self) -> Screen:
        return self.lines.screen

    def dispatch(self, evt: Event) -> None:
        handler = self._handlers.get(type(evt))
        if handler is None:
            logger.debug("no handler for %s", type(evt).__name__)
            return
        handler(evt)

    # ------------------------------------------------------------------
    # Calling user code
    # ------------------------------------------------------------------

    def call(
        self, w: ComponentWrapper, fn: Callable[..., Any], evt: Event | None, *args: Any
    ) -> tuple[Env, Any]:
        """Call *fn* with a fresh ``Env`` while *w* is enabled.

        Returns the (invalidated) environment and *fn*'s return value.
        Exceptions propagate.
        """
        before = self._snapshot(w)
        env = Env(self.lines, evt, w)
        with w.enabled():
            try:
                result = fn(env, *args)
            finally:
                env.invalidate()
        self._derived(w, before, evt)
        return env, result

    def report(
        self, w: ComponentWrapper, hook: str, evt: Event | None, *args: Any
    ) -> Env | None:
        """Report *hook* to *w* if it implements it."""
        if not w.caps.has(hook):
            return None
        env, _ = self.call(w, getattr(w.user, hook), evt, *args)
        return env

    def _snapshot(self, w: ComponentWrapper) -> _Snapshot:
        return w.focus._current, w.cursor_position()

    def _derived(
        self, w: ComponentWrapper, before: _Snapshot, evt: Event | None
    ) -> None:
        current, cursor = before
        focus = w.focus
        if focus._current != current:
            if current >= 0:
                lost = current - w.first
                if not 0 <= lost < w.height:
                    lost = -1
                self.report(w, "on_line_focus_lost", evt, current, lost)
            if focus._current >= 0:
                self.report(
                    w, "on_line_focus", evt, focus._current, focus._screen()
                )
        if w.cursor_position() != cursor:
            self.report(w, "on_cursor", evt, False)
        line = focus._line()
        if line is not None and w.width > 0:
            left, right, changed = line.is_overflowing(w.width)
            if changed:
                self.report(w, "on_line_overflowing", evt, left, right)

    def _bubble(
        self,
        start: ComponentWrapper,
        evt: Event,
        hook: str,
        args: tuple[Any, ...],
        listener_of: Callable[[ComponentWrapper], Callable[[Env], None] | None],
    ) -> bool:
        """Report *hook* from *start* up to its root; ``True`` if stopped."""
        w: ComponentWrapper | None = start
        while w is not None:
            listener = listener_of(w)
            if listener is not None:
                env, _ = self.call(w, listener, evt)
                if env.is_bubbling_stopped:
                    return True
            env_ = self.report(w, hook, evt, *args)
            if env_ is not None and env_.is_bubbling_stopped:
                return True
            w = w.parent
        return False

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    def execute(self, w: ComponentWrapper, f: Feature, evt: Event) -> bool:
        """Execute the elementary feature *f* on *w*."""
        executor = self._executors.get(f)
        if executor is None:
            return False
        logger.debug("%s: executing %s", type(w.user).__name__, f)
        before = self._snapshot(w)
        with w.enabled():
            executed = executor(w, evt)
        self._derived(w, before, evt)
        return executed

    def _exec_quit(self, w: ComponentWrapper, evt: Event) -> bool:
        self.quit(evt)
        return True

    def _exec_line_selection(self, w: ComponentWrapper, evt: Event) -> bool:
        if w.focus._current < 0:
            return False
        self.report(
            w, "on_line_selection", evt, w.focus._current, w.focus._screen()
        )
        return True

    def _exec_editing(self, w: ComponentWrapper, evt: Event) -> bool:
        if w.editor is None:
            return False
        line, cell, _ = w.cursor_position()
        self.edit(w, Edit(line, cell, EditType.RESUME), evt)
        return True

    def _cycle_focus(self, step: int, evt: Event) -> bool:
        """Move the focus to the next/previous focusable component."""
        modal = self.screen.modal_layer()
        roots = [modal.root] if modal is not None else self.screen.user_trees()
        candidates = [
            c for root in roots for c in walk(root) if c.has_feature(Feature.FOCUSABLE)
        ]
        if not candidates:
            return False
        idx = next(
            (i for i, c in enumerate(candidates) if c is self.screen.focus), None
        )
        if idx is None:
            target = candidates[0] if step > 0 else candidates[-1]
        else:
            target = candidates[(idx + step) % len(candidates)]
        self.move_focus(target, evt)
        return True

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def key(self, evt: KeyEvent) -> None:
        w = self.screen.focus
        logger.debug(
            "key %s to %s", key_name(evt.key, evt.mod), type(w.user).__name__
        )
        if self._edit_key(w, evt):
            return
        if self._bubble(
            w,
            evt,
            "on_key",
            (evt.key, evt.mod),
            lambda c: c.listeners.of_key(evt.key, evt.mod),
        ):
            return
        f = w.feature_of_key(evt.key, evt.mod)
        if f:
            self.execute(w, f, evt)
        if self.lines.root.ff.key_quits(evt.key, evt.mod):
            self.quit(evt)

    def _edit_key(self, w: ComponentWrapper, evt: KeyEvent) -> bool:
        editor = w.editor
        if editor is None or not editor.is_active or evt.mod != Modifier.NONE:
            return False
        edit = editor.key_edit(evt.key)
        if edit is None:
            return False
        self.edit(w, edit, evt)
        return True

    def rune(self, evt: RuneEvent) -> None:
        w = self.screen.focus
        editor = w.editor
        if editor is not None and editor.is_active and evt.mod in (
            Modifier.NONE,
            Modifier.SHIFT,
        ):
            self.edit(w, editor.rune_edit(evt.rune), evt)
            return
        if self._bubble(
            w,
            evt,
            "on_rune",
            (evt.rune, evt.mod),
            lambda c: c.listeners.of_rune(evt.rune),
        ):
            return
        f = w.feature_of_rune(evt.rune, evt.mod)
        if f:
            self.execute(w, f, evt)
        if self.lines.root.ff.rune_quits(evt.rune, evt.mod):
            self.quit(evt)

    def edit(self, w: ComponentWrapper, edit: Edit, evt: Event) -> None:
        """Report *edit* to the edit source or ``on_edit``; then apply it."""
        editor = w.editor
        if editor is None:
            return
        liner = w.src.edit_liner if w.src is not None else None
        if liner is not None:
            _, suppressed = self.call(
                w, lambda env: liner.on_edit(LineWriter(w, edit.line), edit), evt
            )
            w.src.dirty = True  # type: ignore[union-attr]
        elif w.caps.has("on_edit"):
            on_edit = w.user.on_edit  # type: ignore[attr-defined]
            _, suppressed = self.call(w, on_edit, evt, edit)
        else:
            suppressed = False
        if suppressed:
            return
        before = self._snapshot(w)
        with w.enabled():
            editor.apply(edit)
        self._derived(w, before, evt)

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------

    def mouse(self, evt: MouseEvent) -> None:
        if evt.kind is MouseKind.MOVE:
            self._move(evt)
        elif evt.kind is MouseKind.CLICK:
            self._click(evt)
        else:
            self._drag_or_drop(evt)

    def _out_of_bound(self, evt: MouseEvent, hook: str) -> bool:
        """Report *evt* to a modal layer it missed; ``False`` stops it."""
        modal = self.screen.modal_layer()
        if modal is None or modal.contains(evt.x, evt.y):
            return True
        if not modal.root.caps.has(hook):
            return False
        _, report_further = self.call(
            modal.root, getattr(modal.root.user, hook), evt
        )
        return bool(report_further)

    def _click(self, evt: MouseEvent) -> None:
        if not self._out_of_bound(evt, "on_out_of_bound_click"):
            return
        path = self.screen.locate(evt.x, evt.y)
        if not path:
            return
        inner = path[-1]
        if self._bar_click(inner, evt):
            return
        f = inner.feature_of_button(evt.button, evt.mod)
        if f & Feature.FOCUSABLE:
            self.move_focus(inner, evt)
        if evt.button == Button.PRIMARY:
            self._focus_at(inner, evt)
        for w in reversed(path):
            x, y = evt.x - w.dim.x, evt.y - w.dim.y
            env = None
            if evt.button == Button.PRIMARY:
                env = self.report(w, "on_click", evt, x, y)
            elif evt.button == Button.SECONDARY:
                env = self.report(w, "on_context", evt, x, y)
            if env is not None and env.is_bubbling_stopped:
                return
            env = self.report(w, "on_mouse", evt, evt.button, x, y)
            if env is not None and env.is_bubbling_stopped:
                return
        f &= ~Feature.FOCUSABLE
        if f:
            self.execute(inner, f, evt)

    def _focus_at(self, w: ComponentWrapper, evt: MouseEvent) -> None:
        """Focus the line (and cell) under a primary click."""
        if not w.has_feature(Feature.NEXT_LINE_FOCUSABLE):
            return
        cx, cy, cw, ch = w.content_area()
        x, y = evt.x - cx, evt.y - cy
        if not (0 <= x < cw and 0 <= y < ch):
            return
        before = self._snapshot(w)
        with w.enabled():
            w.focus.at_coordinate(y)
            line = w.focus._line()
            if (
                line is not None
                and w.focus._screen() == y
                and w.has_feature(Feature.NEXT_CELL_FOCUSABLE)
            ):
                last = len(line) - line.start
                if not w.focus.is_eol_after_last_rune:
                    last -= 1
                w.set_cursor(y, max(0, min(line.cell_at(x), last)))
        self._derived(w, before, evt)

    def _bar_click(self, w: ComponentWrapper, evt: MouseEvent) -> bool:
        """Scroll *w* if its scroll bar was clicked.

        A primary click scrolls down, a secondary click up.  Bar clicks are
        not reported.
        """
        if not w.scroll.bar:
            return False
        with w.enabled():
            on_bar = w.scroll.bar_contains(evt.x - w.dim.x, evt.y - w.dim.y)
        if not on_bar:
            return False
        if evt.button == Button.PRIMARY:
            self.execute(w, Feature.DOWN_SCROLLABLE, evt)
        elif evt.button == Button.SECONDARY:
            self.execute(w, Feature.UP_SCROLLABLE, evt)
        return True


    def _move(self, evt: MouseEvent) -> None:
        if not self._out_of_bound(evt, "on_out_of_bound_move"):
            return
        path = self.screen.locate(evt.x, evt.y)
        inner = path[-1] if path else None
        old = self.screen.mouse_over
        if inner is not old:
            self.screen.mouse_over = inner
            if old is not None and self.screen.contains(old):
                self.report(old, "on_exit", evt)
            if inner is not None:
                self.report(inner, "on_enter", evt)
        for w in reversed(path):
            env = self.report(w, "on_move", evt, evt.x - w.dim.x, evt.y - w.dim.y)
            if env is not None and env.is_bubbling_stopped:
                return

    def _drag_or_drop(self, evt: MouseEvent) -> None:
        if evt.kind is MouseKind.DRAG:
            hook, path = "on_drag", self.screen.locate(*evt.origin)
        else:
            hook, path = "on_drop", self.screen.locate(evt.x, evt.y)
        for w in reversed(path):
            env = self.report(
                w, hook, evt, evt.button, evt.x - w.dim.x, evt.y - w.dim.y
            )
            if env is not None and env.is_bubbling_stopped:
                return

    # ------------------------------------------------------------------
    # Targeted events
    # ------------------------------------------------------------------

    def update(self, evt: UpdateEvent) -> None:
        w = self.lines.wrapper_of(evt.component)
        if w is None:
            logger.debug("ignoring update of unattached %r", evt.component)
            return
        if evt.listener is not None:
            self.call(w, evt.listener, evt)
            return
        self.report(w, "on_update", evt, evt.data)

    def focus(self, evt: MoveFocusEvent) -> None:
        w = self.lines.wrapper_of(evt.component)
        if w is None or not self.screen.contains(w):
            logger.debug("ignoring focus of %r: not on screen", evt.component)
            return
        self.move_focus(w, evt)

    def move_focus(self, w: ComponentWrapper, evt: Event | None) -> None:
        """Give *w* the keyboard focus, clearing other components' cursor."""
        screen = self.screen
        old = screen.focus
        if old is w:
            return
        logger.debug(
            "focus %s -> %s", type(old.user).__name__, type(w.user).__name__
        )
        cursor = screen.cursor
        if cursor is not None and cursor.owner is not w:
            screen.clear_cursor()
            self.report(cursor.owner, "on_cursor", evt, False)
        screen.focus = w
        if screen.contains(old):
            self.report(old, "on_focus_lost", evt)
        self.report(w, "on_focus", evt)

    def quit(self, evt: Event | None) -> None:
        """Report ``on_quit`` to every component and stop the loop."""
        if self.lines.quitting:
            return
        self.lines.quitting = True
        logger.debug("quitting")
        for w in list(self.screen.wrappers()):
            self.report(w, "on_quit", evt)

    def resize(self, evt: ResizeEvent) -> None:
        if self.screen.resize(evt.width, evt.height):
            logger.debug("resized to %dx%d", evt.width, evt.height)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def layer(self, evt: LayerEvent) -> None:
        screen = self.screen
        host = self.lines.wrapper_of(evt.host)
        if host is None or not screen.contains(host):
            logger.debug("ignoring layer of %r: host not on screen", evt.host)
            return
        existing = screen.layer_hosted_by(host)
        if existing is not None:
            self._remove(existing, evt)
        overlay = self.lines.wrap(evt.overlay, None)
        layer = Layer(
            host=host,
            root=overlay,
            pos=evt.pos or LayerPos(),
            layout=Layout(overlay, self.lines.wrap),
            pre_focus=screen.focus,
        )
        overlay.layer = layer
        screen.layers.append(layer)
        logger.debug(
            "layer %s over %s (modal=%s)",
            type(overlay.user).__name__,
            type(host.user).__name__,
            layer.is_modal,
        )
        if layer.is_modal:
            self.move_focus(overlay, evt)

    def remove_layer(self, evt: RemoveLayerEvent) -> None:
        host = self.lines.wrapper_of(evt.host)
        layer = self.screen.layer_hosted_by(host) if host is not None else None
        if layer is None:
            logger.debug("ignoring removal: %r hosts no layer", evt.host)
            return
        self._remove(layer, evt)

    def _remove(self, layer: Layer, evt: Event) -> None:
        screen = self.screen
        members = list(walk(layer.root))
        focus_inside = any(screen.focus is w for w in members)
        screen.layers.remove(layer)
        layer.root.layer = None
        if screen.mouse_over is not None and any(
            screen.mouse_over is w for w in members
        ):
            screen.mouse_over = None
        cursor = screen.cursor
        if cursor is not None and any(cursor.owner is w for w in members):
            screen.clear_cursor()
        if layer.is_modal or focus_inside:
            target = layer.host if screen.contains(layer.host) else screen.root
            self.move_focus(target, evt)
        logger.debug("removed layer %s", type(layer.root.user).__name__)


def _scroll(name: str) -> Callable[[ComponentWrapper, Event], bool]:
    def execute(w: ComponentWrapper, evt: Event) -> bool:
        first = w.first
        getattr(w.scroll, name)()
        return w.first != first

    return execute


def _focus(name: str) -> Callable[[ComponentWrapper, Event], bool]:
    def execute(w: ComponentWrapper, evt: Event) -> bool:
        getattr(w.focus, name)()
        return True

    return execute
