"""Tests for composing and painting the screen to a terminal."""

from __future__ import annotations

import pytest

from lines.__main__ import App
from lines.component import Component
from lines.env import Env
from lines.keys import Key
from lines.screen import CursorStyle
from lines.style import Attr, Style
from lines.testing import Fixture, VirtualTerminal

CLEAR = "\x1b[2J\x1b[H"


class Text(Component):
    def __init__(self, text: str = "", style: Style | None = None) -> None:
        self.text = text
        self.text_style = style

    def on_init(self, env: Env) -> None:
        env.write(self.text, self.text_style)

    def on_update(self, env: Env, data: object) -> None:
        env.write(str(data))


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class TestStyle:
    def test_default_sgr_resets(self) -> None:
        assert Style().sgr() == "\x1b[0m"

    def test_attributes_and_colors(self) -> None:
        style = Style(Attr.BOLD | Attr.UNDERLINE, fg=1, bg=236)
        assert style.sgr() == "\x1b[0;1;4;38;5;1;48;5;236m"

    def test_highlighted_toggles_reverse(self) -> None:
        style = Style(Attr.BOLD)
        assert style.highlighted().attrs == Attr.BOLD | Attr.REVERSE
        assert style.highlighted().highlighted() == style


# ---------------------------------------------------------------------------
# Painting
# ---------------------------------------------------------------------------


class TestPaint:
    def test_first_paint_clears_screen(self) -> None:
        fx = Fixture(Text("hello"), 10, 2)
        out = fx.terminal.output
        assert out.startswith(CLEAR)
        assert "\x1b[1;1H" in out and "\x1b[2;1H" in out
        assert "hello" in out

    def test_only_changed_rows_are_repainted(self) -> None:
        cmp = Text("a\nb")
        fx = Fixture(cmp, 10, 2)
        fx.terminal.clear_buffer()
        fx.update(cmp, "a\nc")
        out = fx.terminal.output
        assert CLEAR not in out
        assert "\x1b[1;1H" not in out
        assert "\x1b[2;1H" in out
        assert fx.screen() == ["a" + " " * 9, "c" + " " * 9]

    def test_unchanged_screen_writes_no_rows(self) -> None:
        fx = Fixture(Text("a"), 10, 2)
        fx.terminal.clear_buffer()
        fx.fire_key(Key.F1)
        assert fx.terminal.output == "\x1b[?25l"

    def test_resize_repaints_everything(self) -> None:
        fx = Fixture(Text("a"), 10, 2)
        fx.terminal.clear_buffer()
        fx.fire_resize(10, 3)
        assert fx.terminal.output.startswith(CLEAR)
        assert len(fx.screen()) == 3

    def test_styled_runes(self) -> None:
        fx = Fixture(Text("x", Style(Attr.BOLD, fg=1)), 4, 2)
        assert "\x1b[0;1;38;5;1mx" in fx.terminal.output
        assert fx.cell_styles()[0][0] == Style(Attr.BOLD, fg=1)
        # the line's style pads the line, not the rows below it
        assert fx.cell_styles()[0][3] == Style(Attr.BOLD, fg=1)
        assert fx.cell_styles()[1][0] == Style()

    def test_styled_cells(self) -> None:
        cmp = Text("abcd")
        fx = Fixture(cmp, 4, 1)
        bold = Style(Attr.BOLD)
        fx.update(cmp, listener=lambda env: env.ll(0).at(2).styled(bold).write("X"))
        assert fx.screen() == ["abX "]
        assert fx.cell_styles()[0] == [Style(), Style(), bold, Style()]

    def test_component_style_pads_lines(self) -> None:
        cmp = Text("x")
        fx = Fixture(cmp, 3, 2)

        def restyle(env: Env) -> None:
            cmp.style = Style(bg=4)

        fx.update(cmp, listener=restyle)
        assert fx.cell_styles()[1][0] == Style(bg=4)


class TestWideRunes:
    def test_wide_runes_take_two_cells(self) -> None:
        fx = Fixture(Text("日本"), 5, 1)
        assert fx.screen() == ["日本 "]
        assert [r for r, _ in fx.lines.screen.cells()[0]] == [
            "日",
            "",
            "本",
            "",
            " ",
        ]

    def test_wide_rune_not_split_at_right_edge(self) -> None:
        fx = Fixture(Text("日本"), 3, 1)
        assert fx.screen() == ["日 "]


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


class TestCursor:
    def test_cursor_is_positioned_and_styled(self) -> None:
        cmp = Text("abc")
        fx = Fixture(cmp, 10, 2)
        fx.terminal.clear_buffer()
        fx.update(cmp, listener=lambda env: cmp.set_cursor(1, 2, CursorStyle.BAR))
        assert fx.cursor() == (2, 1)
        assert fx.terminal.output.endswith("\x1b[2;3H\x1b[6 q\x1b[?25h")
        assert fx.evaluate(cmp, lambda env: cmp.cursor_position()) == (1, 2, True)

    def test_cursor_outside_component_is_ignored(self) -> None:
        cmp = Text("abc")
        fx = Fixture(cmp, 10, 2)
        fx.update(cmp, listener=lambda env: cmp.set_cursor(5, 0))
        assert fx.cursor() is None

    def test_negative_position_removes_cursor(self) -> None:
        cmp = Text("abc")
        fx = Fixture(cmp, 10, 2)
        fx.update(cmp, listener=lambda env: cmp.set_cursor(0, 0))
        fx.update(cmp, listener=lambda env: cmp.set_cursor(-1, -1))
        assert fx.cursor() is None
        assert fx.evaluate(cmp, lambda env: cmp.cursor_position()) == (-1, -1, False)


# ---------------------------------------------------------------------------
# VirtualTerminal
# ---------------------------------------------------------------------------


class TestVirtualTerminal:
    def test_input_requires_start(self) -> None:
        term = VirtualTerminal()
        with pytest.raises(RuntimeError):
            term.simulate_input("a")

    def test_input_and_resize_handlers(self) -> None:
        term = VirtualTerminal(rows=2, columns=5)
        received: list[str] = []
        resized: list[tuple[int, int]] = []
        term.start(received.append, lambda: resized.append((term.columns, term.rows)))
        term.simulate_input("abc")
        term.simulate_resize(rows=4)
        assert received == ["abc"]
        assert resized == [(5, 4)]
        term.stop()
        assert not term.started

    def test_records_writes(self) -> None:
        term = VirtualTerminal()
        term.hide_cursor()
        term.write("x")
        assert term.output == "\x1b[?25lx"
        assert term.write_count == 2
        assert not term.cursor_visible
        term.clear_buffer()
        assert term.output == ""


# ---------------------------------------------------------------------------
# Demo application
# ---------------------------------------------------------------------------


class TestDemo:
    def test_selecting_an_item_opens_a_dialog(self) -> None:
        fx = Fixture(App(), 40, 10)
        assert fx.screen()[0].startswith("items (Enter shows")
        assert fx.screen()[0][20:].startswith("press Insert")
        fx.fire_click(1, 2)
        fx.fire_key(Key.ENTER)
        assert len(fx.lines.screen.layers) == 1
        assert any("selected item 2" in row for row in fx.screen())
        fx.fire_click(0, 0)
        assert fx.lines.screen.layers == []
