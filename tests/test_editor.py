"""Tests for line editing of editable components."""

from __future__ import annotations

from lines.component import Component, Stacking
from lines.editor import Edit, EditType
from lines.env import Env
from lines.features import Feature
from lines.keys import Key, Modifier
from lines.testing import Fixture


class Note(Component):
    def __init__(self, text: str = "", suppress: bool = False) -> None:
        self.text = text
        self.suppress = suppress
        self.edits: list[Edit] = []

    def on_init(self, env: Env) -> None:
        self.ff.add(Feature.EDITABLE)
        if self.text:
            env.write(self.text)

    def on_edit(self, env: Env, edit: Edit) -> bool:
        self.edits.append(edit)
        return self.suppress and edit.type is EditType.INS


def text(fx: Fixture, cmp: Component) -> list[str]:
    w = fx.lines.wrapper_of(cmp)
    assert w is not None
    return [line.text for line in w.buffer]


def editing(text_: str = "abc", suppress: bool = False) -> tuple[Fixture, Note]:
    cmp = Note(text_, suppress)
    fx = Fixture(cmp, 10, 3)
    fx.fire_key(Key.INSERT)
    return fx, cmp


# ---------------------------------------------------------------------------
# Activation
# ---------------------------------------------------------------------------


class TestActivation:
    def test_editor_starts_suspended(self) -> None:
        cmp = Note("abc")
        fx = Fixture(cmp, 10, 3)
        assert fx.evaluate(cmp, lambda env: cmp.edit.is_active) is False
        fx.fire_rune("x")
        assert text(fx, cmp) == ["abc"]

    def test_insert_resumes_and_places_cursor(self) -> None:
        fx, cmp = editing()
        assert fx.evaluate(cmp, lambda env: cmp.edit.is_active) is True
        assert fx.cursor() == (0, 0)
        assert cmp.edits[0].type is EditType.RESUME

    def test_resume_on_empty_component_creates_line(self) -> None:
        fx, cmp = editing("")
        assert fx.cursor() == (0, 0)
        fx.fire_runes("hi")
        assert text(fx, cmp) == ["hi"]

    def test_escape_suspends(self) -> None:
        fx, cmp = editing()
        fx.fire_key(Key.ESC)
        assert fx.evaluate(cmp, lambda env: cmp.edit.is_active) is False
        fx.fire_rune("x")
        assert text(fx, cmp) == ["abc"]

    def test_quit_rune_is_typed_while_editing(self) -> None:
        fx, cmp = editing()
        fx.fire_rune("q")
        assert not fx.lines.quitting
        assert text(fx, cmp) == ["qabc"]

    def test_nested_component_gets_no_editor(self) -> None:
        class Panel(Stacking, Component):
            def __init__(self) -> None:
                self.cc = [Note("x")]

            def on_init(self, env: Env) -> None:
                self.ff.add(Feature.EDITABLE)

        cmp = Panel()
        fx = Fixture(cmp, 10, 3)
        assert fx.evaluate(cmp, lambda env: cmp.edit) is None


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class TestEditing:
    def test_typing_inserts_at_cursor(self) -> None:
        fx, cmp = editing()
        fx.fire_runes("xy")
        assert text(fx, cmp) == ["xyabc"]
        assert fx.cursor() == (2, 0)
        assert cmp.edits[-1] == Edit(0, 1, EditType.INS, "y")

    def test_shifted_runes_are_typed(self) -> None:
        fx, cmp = editing()
        fx.fire_rune("X", Modifier.SHIFT)
        assert text(fx, cmp) == ["Xabc"]

    def test_backspace_deletes_before_cursor(self) -> None:
        fx, cmp = editing()
        fx.fire_keys(Key.RIGHT, Key.RIGHT, Key.BACKSPACE)
        assert text(fx, cmp) == ["ac"]
        assert fx.cursor() == (1, 0)

    def test_backspace_at_start_of_first_line_is_noop(self) -> None:
        fx, cmp = editing()
        fx.fire_key(Key.BACKSPACE)
        assert text(fx, cmp) == ["abc"]

    def test_delete_removes_rune_under_cursor(self) -> None:
        fx, cmp = editing()
        fx.fire_keys(Key.RIGHT, Key.DELETE)
        assert text(fx, cmp) == ["ac"]
        assert fx.cursor() == (1, 0)

    def test_replacing(self) -> None:
        fx, cmp = editing()
        fx.update(cmp, listener=lambda env: cmp.edit.replacing())
        fx.fire_runes("xy")
        assert text(fx, cmp) == ["xyc"]
        assert cmp.edits[-1].type is EditType.REPLACE

    def test_backspace_joins_with_previous_line(self) -> None:
        fx, cmp = editing("ab\ncd")
        fx.fire_key(Key.DOWN)
        assert fx.cursor() == (0, 1)
        fx.fire_key(Key.BACKSPACE)
        assert text(fx, cmp) == ["abcd"]
        assert fx.cursor() == (2, 0)

    def test_delete_at_line_end_joins_next_line(self) -> None:
        fx, cmp = editing("ab\ncd")
        fx.fire_key(Key.END)
        assert fx.cursor() == (2, 0)
        fx.fire_key(Key.DELETE)
        assert text(fx, cmp) == ["abcd"]

    def test_delete_at_end_of_last_line_is_noop(self) -> None:
        fx, cmp = editing("ab")
        fx.fire_keys(Key.END, Key.DELETE)
        assert text(fx, cmp) == ["ab"]

    def test_on_edit_can_suppress(self) -> None:
        fx, cmp = editing(suppress=True)
        fx.fire_rune("x")
        assert text(fx, cmp) == ["abc"]
        assert cmp.edits[-1].rune == "x"

    def test_typing_past_width_pans_line(self) -> None:
        cmp = Note("")
        fx = Fixture(cmp, 4, 1)
        fx.fire_key(Key.INSERT)
        fx.fire_runes("abcdef")
        assert text(fx, cmp) == ["abcdef"]
        assert fx.cursor() == (3, 0)
        assert fx.screen() == ["def "]
