"""Tests for the component state guard, write modes and content helpers."""

from __future__ import annotations

import pytest

from lines.component import Capabilities, Component, Stacking
from lines.env import ComponentMode, Env
from lines.errors import DisabledComponentError, LinesError, NotInitializedError
from lines.style import Attr, Style
from lines.testing import Fixture, VirtualTerminal
from lines.ui import Lines


# ---------------------------------------------------------------------------
# Test components
# ---------------------------------------------------------------------------


class Text(Component):
    def __init__(self, text: str = "", mode: ComponentMode | None = None) -> None:
        self.text = text
        self.initial_mode = mode
        self.env: Env | None = None

    def on_init(self, env: Env) -> None:
        self.env = env
        if self.initial_mode is not None:
            self.mode = self.initial_mode
        if self.text:
            env.write(self.text)

    def on_update(self, env: Env, data: str) -> None:
        env.write(data)


class Stack(Stacking, Component):
    def __init__(self, *cc: Component) -> None:
        self.cc = list(cc)


def content(fx: Fixture, cmp: Component) -> list[str]:
    w = fx.lines.wrapper_of(cmp)
    assert w is not None
    return [line.text for line in w.buffer]


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


class TestGuard:
    def test_state_before_attaching_raises(self) -> None:
        cmp = Text()
        with pytest.raises(NotInitializedError):
            cmp.ff
        assert not cmp.is_initialized
        assert not cmp.is_enabled

    def test_state_outside_callback_raises(self) -> None:
        cmp = Text("hello")
        Fixture(cmp, 10, 2)
        assert cmp.is_initialized
        with pytest.raises(DisabledComponentError):
            cmp.ff
        with pytest.raises(DisabledComponentError):
            cmp.focus
        with pytest.raises(DisabledComponentError):
            cmp.len()

    def test_disabled_error_names_component_and_attribute(self) -> None:
        cmp = Text()
        Fixture(cmp, 10, 2)
        with pytest.raises(DisabledComponentError) as exc_info:
            cmp.scroll
        assert exc_info.value.component is cmp
        assert exc_info.value.attribute == "scroll"
        assert "Text.scroll" in str(exc_info.value)

    def test_state_objects_stay_guarded(self) -> None:
        cmp = Text("a\nb")
        fx = Fixture(cmp, 10, 2)
        focus = fx.evaluate(cmp, lambda env: cmp.focus)
        with pytest.raises(DisabledComponentError):
            focus.next()

    def test_state_inside_callback_is_accessible(self) -> None:
        cmp = Text("a\nb\nc")
        fx = Fixture(cmp, 10, 2)
        assert fx.evaluate(cmp, lambda env: cmp.is_enabled) is True
        assert fx.evaluate(cmp, lambda env: cmp.len()) == 3
        assert not cmp.is_enabled

    def test_other_component_is_disabled_in_callback(self) -> None:
        a, b = Text("a"), Text("b")
        fx = Fixture(Stack(a, b), 10, 2)

        def touch(env: Env) -> None:
            b.ff

        with pytest.raises(DisabledComponentError):
            fx.update(a, listener=touch)

    def test_env_is_invalid_after_callback(self) -> None:
        cmp = Text("x")
        Fixture(cmp, 10, 2)
        assert cmp.env is not None
        with pytest.raises(LinesError):
            cmp.env.write("late")

    def test_component_belongs_to_one_lines_instance(self) -> None:
        cmp = Text()
        Fixture(cmp, 10, 2)
        with pytest.raises(LinesError):
            Lines(cmp, VirtualTerminal())


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class TestCapabilities:
    def test_resolves_implemented_callbacks(self) -> None:
        caps = Capabilities.resolve(Text())
        assert caps.has("on_init")
        assert caps.has("on_update")
        assert not caps.has("on_key")
        assert not caps.is_modal
        assert not caps.stacking

    def test_stacking_and_modal(self) -> None:
        class Modal(Stacking, Component):
            def on_out_of_bound_click(self, env: Env) -> bool:
                return False

        caps = Capabilities.resolve(Modal())
        assert caps.stacking
        assert not caps.chaining
        assert caps.is_modal


# ---------------------------------------------------------------------------
# Write modes
# ---------------------------------------------------------------------------


class TestModes:
    def test_overwriting_replaces_content(self) -> None:
        cmp = Text("one\ntwo")
        fx = Fixture(cmp, 10, 3)
        fx.update(cmp, "three")
        assert content(fx, cmp) == ["three"]
        assert fx.screen_of(cmp)[0] == "three     "

    def test_appending_adds_lines(self) -> None:
        cmp = Text("one", ComponentMode.APPENDING)
        fx = Fixture(cmp, 10, 3)
        fx.update(cmp, "two\nthree")
        assert content(fx, cmp) == ["one", "two", "three"]

    def test_tailing_keeps_last_lines_visible(self) -> None:
        cmp = Text("1\n2\n3\n4\n5", ComponentMode.TAILING)
        fx = Fixture(cmp, 10, 2)
        assert fx.evaluate(cmp, lambda env: cmp.first) == 3
        fx.update(cmp, "6")
        assert fx.evaluate(cmp, lambda env: cmp.first) == 4
        assert fx.screen() == ["5" + " " * 9, "6" + " " * 9]

    def test_leading_tabs_are_expanded(self) -> None:
        cmp = Text("\t\tx")
        fx = Fixture(cmp, 10, 1)
        assert content(fx, cmp) == ["        x"]


# ---------------------------------------------------------------------------
# Content helpers
# ---------------------------------------------------------------------------


class TestContent:
    def test_reset_blanks_one_line(self) -> None:
        cmp = Text("a\nb\nc")
        fx = Fixture(cmp, 10, 3)
        fx.update(cmp, listener=lambda env: cmp.reset(1))
        assert content(fx, cmp) == ["a", "", "c"]

    def test_reset_removes_all_content(self) -> None:
        cmp = Text("a\nb\nc")
        fx = Fixture(cmp, 10, 3)
        fx.update(cmp, listener=lambda env: cmp.reset())
        assert content(fx, cmp) == []
        assert fx.screen()[0] == " " * 10

    def test_line_writer_writes_at_cell(self) -> None:
        cmp = Text("abcdef")
        fx = Fixture(cmp, 10, 1)
        fx.update(cmp, listener=lambda env: env.ll(0).at(2).write("XY"))
        assert content(fx, cmp) == ["abXY"]

    def test_line_writer_pads_missing_lines(self) -> None:
        cmp = Text()
        fx = Fixture(cmp, 10, 3)
        fx.update(cmp, listener=lambda env: env.ll(2).write("third"))
        assert content(fx, cmp) == ["", "", "third"]

    def test_style_applies_to_existing_lines(self) -> None:
        cmp = Text("ab")
        fx = Fixture(cmp, 4, 1)
        bold = Style(Attr.BOLD)

        def restyle(env: Env) -> None:
            cmp.style = bold

        fx.update(cmp, listener=restyle)
        assert all(s == bold for s in fx.cell_styles()[0])

    def test_dirty_after_write(self) -> None:
        cmp = Text("a")
        fx = Fixture(cmp, 4, 1)
        assert fx.evaluate(cmp, lambda env: cmp.is_dirty) is False
        assert fx.evaluate(cmp, lambda env: env.write("b") and cmp.is_dirty) is True
