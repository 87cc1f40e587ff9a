"""Tests for line focus and cell focus of a component.

Covers moving the focus between lines, highlighting, scrolling the focused
line into view and moving the cursor through the cells of a focused line
which is wider than its component.
"""

from __future__ import annotations

from lines.component import Component
from lines.env import Env
from lines.features import Feature
from lines.keys import Key
from lines.line import LineFlags
from lines.style import Attr
from lines.testing import Fixture


# ---------------------------------------------------------------------------
# Test components
# ---------------------------------------------------------------------------


class Focusable(Component):
    """Writes *lines* and records the derived focus reports."""

    def __init__(
        self,
        *lines: str,
        ff: Feature = Feature.LINES_FOCUSABLE,
        not_focusable: tuple[int, ...] = (),
    ) -> None:
        self.lines = lines
        self.added = ff
        self.not_focusable = not_focusable
        self.reports: list[tuple] = []

    def on_init(self, env: Env) -> None:
        self.ff.add(self.added)
        for i, text in enumerate(self.lines):
            ll = env.ll(i).write(text)
            if i in self.not_focusable:
                ll.flag(LineFlags.NOT_FOCUSABLE)

    def on_line_focus(self, env: Env, c_idx: int, s_idx: int) -> None:
        self.reports.append(("focus", c_idx, s_idx))

    def on_line_focus_lost(self, env: Env, c_idx: int, s_idx: int) -> None:
        self.reports.append(("lost", c_idx, s_idx))

    def on_line_overflowing(self, env: Env, left: bool, right: bool) -> None:
        self.reports.append(("overflow", left, right))

    def on_cursor(self, env: Env, abs_only: bool) -> None:
        self.reports.append(("cursor",))


def current(fx: Fixture, cmp: Component) -> int:
    return fx.evaluate(cmp, lambda env: cmp.focus.current)


# ---------------------------------------------------------------------------
# Line focus
# ---------------------------------------------------------------------------


class TestLineFocus:
    def test_nothing_focused_initially(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        assert current(fx, cmp) == -1
        assert fx.evaluate(cmp, lambda env: cmp.focus.line()) is None

    def test_next_focuses_lines_in_order(self) -> None:
        cmp = Focusable("a", "b", "c")
        fx = Fixture(cmp, 10, 3)
        fx.fire_key(Key.DOWN)
        assert current(fx, cmp) == 0
        fx.fire_key(Key.DOWN)
        assert current(fx, cmp) == 1
        assert cmp.reports == [("focus", 0, 0), ("lost", 0, 0), ("focus", 1, 1)]

    def test_next_past_last_line_resets(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        fx.fire_keys(Key.DOWN, Key.DOWN, Key.DOWN)
        assert current(fx, cmp) == -1
        assert cmp.reports[-1] == ("lost", 1, 1)

    def test_previous_without_focus_focuses_last_line(self) -> None:
        cmp = Focusable("a", "b", "c")
        fx = Fixture(cmp, 10, 3)
        fx.fire_key(Key.UP)
        assert current(fx, cmp) == 2
        fx.fire_key(Key.UP)
        assert current(fx, cmp) == 1

    def test_previous_past_first_line_resets(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        fx.fire_keys(Key.DOWN, Key.UP)
        assert current(fx, cmp) == -1

    def test_skips_unfocusable_lines(self) -> None:
        cmp = Focusable("title", "a", "-", "b", not_focusable=(0, 2))
        fx = Fixture(cmp, 10, 4)
        fx.fire_key(Key.DOWN)
        assert current(fx, cmp) == 1
        fx.fire_key(Key.DOWN)
        assert current(fx, cmp) == 3
        fx.fire_key(Key.UP)
        assert current(fx, cmp) == 1

    def test_no_focusable_line_keeps_focus_reset(self) -> None:
        cmp = Focusable("x", not_focusable=(0,))
        fx = Fixture(cmp, 10, 2)
        fx.fire_key(Key.DOWN)
        assert current(fx, cmp) == -1
        assert cmp.reports == []

    def test_escape_resets_focus(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        fx.fire_key(Key.DOWN)
        fx.fire_key(Key.ESC)
        assert current(fx, cmp) == -1
        assert cmp.reports[-1] == ("lost", 0, 0)

    def test_lost_line_scrolled_out_has_no_screen_line(self) -> None:
        cmp = Focusable(*"abcdef", ff=Feature.LINES_FOCUSABLE | Feature.SCROLLABLE)
        fx = Fixture(cmp, 10, 2)
        fx.fire_key(Key.UP)
        assert cmp.reports[-1] == ("focus", 5, 1)
        fx.fire_keys(Key.PGUP, Key.PGUP, Key.ESC)
        assert cmp.reports[-1] == ("lost", 5, -1)


    def test_reset_is_idempotent(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        fx.fire_key(Key.DOWN)
        fx.update(cmp, listener=lambda env: cmp.focus.reset())
        fx.update(cmp, listener=lambda env: cmp.focus.reset())
        assert current(fx, cmp) == -1
        assert [r for r in cmp.reports if r[0] == "lost"] == [("lost", 0, 0)]

    def test_focus_scrolls_line_into_view(self) -> None:
        cmp = Focusable(*"abcdefgh", ff=Feature.LINES_FOCUSABLE)
        fx = Fixture(cmp, 10, 3)
        fx.fire_keys(*[Key.DOWN] * 5)
        assert current(fx, cmp) == 4
        top = fx.evaluate(cmp, lambda env: cmp.first)
        assert top <= 4 < top + 3
        assert fx.evaluate(cmp, lambda env: cmp.focus.screen()) == 4 - top
        assert cmp.reports[-1] == ("focus", 4, 4 - top)

    def test_focus_reset_when_line_vanishes(self) -> None:
        cmp = Focusable("a", "b", "c")
        fx = Fixture(cmp, 10, 3)
        fx.fire_keys(Key.DOWN, Key.DOWN, Key.DOWN)
        assert current(fx, cmp) == 2
        fx.update(cmp, listener=lambda env: env.write("only"))
        assert current(fx, cmp) == -1

    def test_focus_reset_when_line_turns_unfocusable(self) -> None:
        cmp = Focusable("a", "b")
        fx = Fixture(cmp, 10, 3)
        fx.fire_key(Key.DOWN)
        fx.update(
            cmp, listener=lambda env: env.ll(0).flag(LineFlags.NOT_FOCUSABLE)
        )
        assert current(fx, cmp) == -1


# ---------------------------------------------------------------------------
# Highlighting
# ---------------------------------------------------------------------------


class TestHighlighting:
    def test_focused_line_is_highlighted(self) -> None:
        cmp = Focusable("ab", "cd", ff=Feature.LINES_HIGHLIGHTED_FOCUSABLE)
        fx = Fixture(cmp, 4, 2)
        fx.fire_key(Key.DOWN)
        styles = fx.cell_styles()
        assert all(s.attrs & Attr.REVERSE for s in styles[0])
        assert not any(s.attrs & Attr.REVERSE for s in styles[1])

    def test_highlight_moves_with_focus(self) -> None:
        cmp = Focusable("ab", "cd", ff=Feature.LINES_HIGHLIGHTED_FOCUSABLE)
        fx = Fixture(cmp, 4, 2)
        fx.fire_keys(Key.DOWN, Key.DOWN)
        styles = fx.cell_styles()
        assert not any(s.attrs & Attr.REVERSE for s in styles[0])
        assert all(s.attrs & Attr.REVERSE for s in styles[1])

    def test_reset_removes_highlight(self) -> None:
        cmp = Focusable("ab", ff=Feature.LINES_HIGHLIGHTED_FOCUSABLE)
        fx = Fixture(cmp, 4, 1)
        fx.fire_keys(Key.DOWN, Key.ESC)
        assert not any(s.attrs & Attr.REVERSE for s in fx.cell_styles()[0])

    def test_trimmed_highlight_skips_blanks(self) -> None:
        cmp = Focusable("  ab  ", ff=Feature.LINES_HIGHLIGHTED_FOCUSABLE)
        fx = Fixture(cmp, 8, 1)
        fx.update(cmp, listener=lambda env: cmp.focus.trimmed_highlight())
        fx.fire_key(Key.DOWN)
        reversed_cells = [
            i for i, s in enumerate(fx.cell_styles()[0]) if s.attrs & Attr.REVERSE
        ]
        assert reversed_cells == [2, 3]

    def test_no_highlight_without_feature(self) -> None:
        cmp = Focusable("ab")
        fx = Fixture(cmp, 4, 1)
        fx.fire_key(Key.DOWN)
        assert not any(s.attrs & Attr.REVERSE for s in fx.cell_styles()[0])


# ---------------------------------------------------------------------------
# Cell focus
# ---------------------------------------------------------------------------


class TestCellFocus:
    def test_focusing_line_sets_cursor(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        assert fx.cursor() is None
        fx.fire_key(Key.DOWN)
        assert fx.cursor() == (0, 0)
        assert fx.evaluate(cmp, lambda env: cmp.cursor_position()) == (0, 0, True)

    def test_moving_right_pans_wide_line(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        fx.fire_key(Key.DOWN)
        fx.fire_keys(Key.RIGHT, Key.RIGHT, Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["234"]

    def test_moving_right_stops_at_last_rune(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        fx.fire_key(Key.DOWN)
        fx.fire_keys(*[Key.RIGHT] * 10)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["345"]
        assert fx.evaluate(cmp, lambda env: cmp.focus.is_eol())

    def test_moving_left_pans_back(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        fx.fire_key(Key.DOWN)
        fx.fire_keys(Key.RIGHT, Key.RIGHT, Key.RIGHT)
        fx.fire_keys(Key.LEFT, Key.LEFT)
        assert fx.cursor() == (0, 0)
        assert fx.screen() == ["234"]
        fx.fire_key(Key.LEFT)
        assert fx.cursor() == (0, 0)
        assert fx.screen() == ["123"]

    def test_end_and_home(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        fx.fire_keys(Key.DOWN, Key.END)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["345"]
        fx.fire_key(Key.HOME)
        assert fx.cursor() == (0, 0)
        assert fx.screen() == ["123"]

    def test_end_of_short_line(self) -> None:
        cmp = Focusable("ab", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 5, 1)
        fx.fire_keys(Key.DOWN, Key.END)
        assert fx.cursor() == (1, 0)

    def test_eol_after_last_rune(self) -> None:
        cmp = Focusable("ab", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 5, 1)
        fx.update(cmp, listener=lambda env: cmp.focus.eol_after_last_rune())
        fx.fire_keys(Key.DOWN, Key.RIGHT, Key.RIGHT, Key.RIGHT)
        assert fx.cursor() == (2, 0)

    def test_cursor_column_kept_between_lines(self) -> None:
        cmp = Focusable("abc", "a", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 5, 2)
        fx.fire_keys(Key.DOWN, Key.RIGHT, Key.RIGHT)
        assert fx.cursor() == (2, 0)
        fx.fire_key(Key.DOWN)
        # clamped to the last rune of the shorter line
        assert fx.cursor() == (0, 1)

    def test_overflow_is_reported(self) -> None:
        cmp = Focusable("12345", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 3, 1)
        fx.fire_key(Key.DOWN)
        assert ("overflow", False, True) in cmp.reports
        fx.fire_keys(Key.RIGHT, Key.RIGHT, Key.RIGHT)
        assert cmp.reports[-1] == ("overflow", True, True)

    def test_cursor_changes_are_reported(self) -> None:
        cmp = Focusable("123", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 5, 1)
        fx.fire_key(Key.DOWN)
        n = cmp.reports.count(("cursor",))
        fx.fire_key(Key.RIGHT)
        assert cmp.reports.count(("cursor",)) == n + 1

    def test_reset_clears_cursor(self) -> None:
        cmp = Focusable("123", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 5, 1)
        fx.fire_keys(Key.DOWN, Key.ESC)
        assert fx.cursor() is None

    def test_cursor_hidden_while_line_scrolled_out(self) -> None:
        cmp = Focusable(*"abcdef", ff=Feature.CELL_FOCUSABLE | Feature.SCROLLABLE)
        fx = Fixture(cmp, 5, 2)
        fx.fire_key(Key.DOWN)
        assert fx.cursor() == (0, 0)
        fx.fire_key(Key.PGDN)
        assert fx.cursor() is None
        fx.fire_key(Key.PGUP)
        assert fx.cursor() == (0, 0)


# ---------------------------------------------------------------------------
# Wide runes
# ---------------------------------------------------------------------------


class TestWideRunes:
    def test_cursor_lands_on_rune_start(self) -> None:
        cmp = Focusable("日本語x", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 10, 1)
        fx.fire_keys(Key.DOWN, Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.evaluate(cmp, lambda env: cmp.cursor_position()) == (0, 1, True)
        fx.fire_keys(Key.RIGHT, Key.RIGHT)
        assert fx.cursor() == (6, 0)

    def test_end_key_moves_to_last_rune_column(self) -> None:
        cmp = Focusable("日本語", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 10, 1)
        fx.fire_keys(Key.DOWN, Key.END)
        assert fx.cursor() == (4, 0)

    def test_panning_by_rune_widths(self) -> None:
        cmp = Focusable("日本語x", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 4, 1)
        fx.fire_keys(Key.DOWN, Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["日本"]
        fx.fire_key(Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["本語"]
        fx.fire_key(Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["語x "]
        assert fx.evaluate(cmp, lambda env: cmp.focus.is_eol())

    def test_wide_rune_at_border_is_not_cut(self) -> None:
        cmp = Focusable("a日本", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 4, 1)
        fx.fire_keys(Key.DOWN, Key.RIGHT)
        assert fx.cursor() == (1, 0)
        assert fx.screen() == ["a日 "]
        fx.fire_key(Key.RIGHT)
        assert fx.cursor() == (2, 0)
        assert fx.screen() == ["日本"]

    def test_click_on_continuation_cell_focuses_wide_rune(self) -> None:
        cmp = Focusable("日本語x", ff=Feature.CELL_FOCUSABLE)
        fx = Fixture(cmp, 10, 1)
        fx.fire_click(3, 0)
        assert fx.cursor() == (2, 0)
        assert fx.evaluate(cmp, lambda env: cmp.cursor_position()) == (0, 1, True)


# ---------------------------------------------------------------------------
# Focusing before layout
# ---------------------------------------------------------------------------


class FocusedEarly(Focusable):
    def on_init(self, env: Env) -> None:
        super().on_init(env)
        self.focus.next()
        self.focus.next()


class TestBeforeLayout:
    def test_focusing_in_on_init_does_not_scroll(self) -> None:
        cmp = FocusedEarly(*"abcdefghij", ff=Feature.LINES_HIGHLIGHTED_FOCUSABLE)
        fx = Fixture(cmp, 5, 5)
        assert current(fx, cmp) == 1
        assert fx.evaluate(cmp, lambda env: cmp.first) == 0
        assert [row.strip() for row in fx.screen()] == list("abcde")
        styles = fx.cell_styles()
        assert styles[1][0].attrs & Attr.REVERSE
        assert not styles[0][0].attrs & Attr.REVERSE

    def test_focus_reported_off_screen_before_layout(self) -> None:
        cmp = FocusedEarly(*"abcdefghij")
        Fixture(cmp, 5, 5)
        assert cmp.reports == [("focus", 1, -1)]
