"""Tests for raw terminal input parsing and decoding."""

from __future__ import annotations

import pytest

from lines.events import KeyEvent, MouseEvent, MouseKind, RuneEvent
from lines.keys import (
    ESC,
    Button,
    Key,
    Modifier,
    key_name,
    parse_key,
    parse_mouse,
    split_sequences,
)
from lines.terminal import InputDecoder


# ---------------------------------------------------------------------------
# split_sequences
# ---------------------------------------------------------------------------


class TestSplitSequences:
    def test_plain_text(self) -> None:
        assert split_sequences("abc") == (["a", "b", "c"], "")

    def test_csi_sequences(self) -> None:
        assert split_sequences("\x1b[Aa\x1b[5~") == (["\x1b[A", "a", "\x1b[5~"], "")

    def test_ss3_sequence(self) -> None:
        assert split_sequences("\x1bOP") == (["\x1bOP"], "")

    def test_incomplete_csi_is_remainder(self) -> None:
        assert split_sequences("a\x1b[1;") == (["a"], "\x1b[1;")

    def test_lone_escape_is_remainder(self) -> None:
        assert split_sequences("a" + ESC) == (["a"], ESC)

    def test_alt_rune(self) -> None:
        assert split_sequences("\x1bx") == (["\x1bx"], "")

    def test_double_escape(self) -> None:
        assert split_sequences("\x1b\x1b[A") == ([ESC, "\x1b[A"], "")

    def test_mouse_report(self) -> None:
        seq = "\x1b[<0;10;5M"
        assert split_sequences(seq + "z") == ([seq, "z"], "")


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


class TestParseKey:
    @pytest.mark.parametrize(
        "seq, key",
        [
            ("\x1b[A", Key.UP),
            ("\x1bOB", Key.DOWN),
            ("\x1b[5~", Key.PGUP),
            ("\x1b[6~", Key.PGDN),
            ("\x1b[2~", Key.INSERT),
            ("\x1b[3~", Key.DELETE),
            ("\x1b[H", Key.HOME),
            ("\x1b[4~", Key.END),
            ("\x1bOP", Key.F1),
            ("\x1b[24~", Key.F12),
            ("\r", Key.ENTER),
            ("\n", Key.ENTER),
            ("\t", Key.TAB),
            ("\x7f", Key.BACKSPACE),
            ("\x08", Key.BACKSPACE),
            ("\x03", Key.CTRL_C),
            (ESC, Key.ESC),
        ],
    )
    def test_named_keys(self, seq: str, key: Key) -> None:
        assert parse_key(seq) == (key, Modifier.NONE, "")

    def test_shift_tab(self) -> None:
        assert parse_key("\x1b[Z") == (Key.TAB, Modifier.SHIFT, "")

    def test_modified_arrow(self) -> None:
        assert parse_key("\x1b[1;5A") == (Key.UP, Modifier.CTRL, "")
        assert parse_key("\x1b[1;4C") == (
            Key.RIGHT,
            Modifier.SHIFT | Modifier.ALT,
            "",
        )

    def test_modified_tilde(self) -> None:
        assert parse_key("\x1b[3;5~") == (Key.DELETE, Modifier.CTRL, "")

    def test_rune(self) -> None:
        assert parse_key("a") == (Key.RUNE, Modifier.NONE, "a")
        assert parse_key("ü") == (Key.RUNE, Modifier.NONE, "ü")

    def test_alt_rune(self) -> None:
        assert parse_key("\x1bx") == (Key.RUNE, Modifier.ALT, "x")

    def test_unknown(self) -> None:
        assert parse_key("") is None
        assert parse_key("\x1b[99~") is None
        assert parse_key("\x1c") is None


# ---------------------------------------------------------------------------
# parse_mouse
# ---------------------------------------------------------------------------


class TestParseMouse:
    def test_press(self) -> None:
        m = parse_mouse("\x1b[<0;10;5M")
        assert m is not None
        assert (m.button, m.x, m.y, m.motion, m.release) == (
            Button.PRIMARY,
            9,
            4,
            False,
            False,
        )

    def test_release(self) -> None:
        m = parse_mouse("\x1b[<2;1;1m")
        assert m is not None
        assert m.button == Button.SECONDARY
        assert m.release

    def test_modifiers_and_motion(self) -> None:
        m = parse_mouse("\x1b[<52;3;3M")
        assert m is not None
        assert m.mod == Modifier.SHIFT | Modifier.CTRL
        assert m.motion
        assert m.button == Button.PRIMARY

    def test_wheel(self) -> None:
        m = parse_mouse("\x1b[<65;1;1M")
        assert m is not None
        assert m.button == Button.WHEEL_DOWN

    def test_not_a_mouse_report(self) -> None:
        assert parse_mouse("\x1b[A") is None


def test_key_name() -> None:
    assert key_name(Key.UP) == "up"
    assert key_name(Key.UP, Modifier.CTRL | Modifier.SHIFT) == "ctrl+shift+up"


# ---------------------------------------------------------------------------
# InputDecoder
# ---------------------------------------------------------------------------


class TestInputDecoder:
    def test_keys_and_runes(self) -> None:
        events = InputDecoder().feed("a\x1b[B")
        assert isinstance(events[0], RuneEvent) and events[0].rune == "a"
        assert isinstance(events[1], KeyEvent) and events[1].key == Key.DOWN

    def test_sequence_split_across_reads(self) -> None:
        dec = InputDecoder()
        assert dec.feed("\x1b[") == []
        assert dec.pending
        events = dec.feed("A")
        assert [e.key for e in events] == [Key.UP]  # type: ignore[attr-defined]
        assert not dec.pending

    def test_lone_escape_flushed_as_key(self) -> None:
        dec = InputDecoder()
        assert dec.feed(ESC) == []
        events = dec.flush()
        assert len(events) == 1
        assert isinstance(events[0], KeyEvent) and events[0].key == Key.ESC
        assert dec.flush() == []

    def test_unknown_sequence_dropped(self) -> None:
        assert InputDecoder().feed("\x1b[99~") == []

    def test_click(self) -> None:
        (evt,) = InputDecoder().feed("\x1b[<0;3;2M")
        assert isinstance(evt, MouseEvent)
        assert (evt.kind, evt.button, evt.x, evt.y) == (
            MouseKind.CLICK,
            Button.PRIMARY,
            2,
            1,
        )

    def test_release_in_place_is_dropped(self) -> None:
        dec = InputDecoder()
        dec.feed("\x1b[<0;3;2M")
        assert dec.feed("\x1b[<0;3;2m") == []

    def test_drag_and_drop(self) -> None:
        dec = InputDecoder()
        dec.feed("\x1b[<0;1;1M")
        (drag,) = dec.feed("\x1b[<32;4;1M")
        (drop,) = dec.feed("\x1b[<0;5;1m")
        assert isinstance(drag, MouseEvent) and isinstance(drop, MouseEvent)
        assert (drag.kind, drag.origin, drag.x) == (MouseKind.DRAG, (0, 0), 3)
        assert (drop.kind, drop.origin, drop.x) == (MouseKind.DROP, (0, 0), 4)
        assert drop.button == Button.PRIMARY

    def test_move(self) -> None:
        (evt,) = InputDecoder().feed("\x1b[<35;7;3M")
        assert isinstance(evt, MouseEvent)
        assert (evt.kind, evt.x, evt.y) == (MouseKind.MOVE, 6, 2)
