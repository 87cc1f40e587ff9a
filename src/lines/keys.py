"""Keyboard and mouse constants plus raw terminal input parsing.

``Key``, ``Modifier`` and ``Button`` are the vocabulary of feature bindings
and listener registrations.  ``split_sequences`` cuts raw terminal input into
single sequences and ``parse_key`` / ``parse_mouse`` classify them.
"""

from __future__ import annotations

import re
from enum import IntEnum, IntFlag
from typing import NamedTuple

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ESC = "\x1b"


class Key(IntEnum):
    """Named keys.  Control keys carry their ASCII code."""

    NUL = 0
    TAB = 9
    ENTER = 13
    ESC = 27
    BACKSPACE = 127

    CTRL_A = 1
    CTRL_B = 2
    CTRL_C = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    CTRL_H = 8
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26

    RUNE = 256
    UP = 257
    DOWN = 258
    RIGHT = 259
    LEFT = 260
    PGUP = 261
    PGDN = 262
    HOME = 263
    END = 264
    INSERT = 265
    DELETE = 266
    CLEAR = 267
    F1 = 268
    F2 = 269
    F3 = 270
    F4 = 271
    F5 = 272
    F6 = 273
    F7 = 274
    F8 = 275
    F9 = 276
    F10 = 277
    F11 = 278
    F12 = 279


class Modifier(IntFlag):
    """Modifier keys held while a key, rune or button event happened."""

    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4
    META = 8


class Button(IntFlag):
    """Mouse buttons and wheel directions."""

    NONE = 0
    BUTTON1 = 1 << 0
    BUTTON2 = 1 << 1
    BUTTON3 = 1 << 2
    BUTTON4 = 1 << 3
    BUTTON5 = 1 << 4
    WHEEL_UP = 1 << 8
    WHEEL_DOWN = 1 << 9
    WHEEL_LEFT = 1 << 10
    WHEEL_RIGHT = 1 << 11

    PRIMARY = BUTTON1
    SECONDARY = BUTTON2
    MIDDLE = BUTTON3


# Legacy escape sequences -> key
_LEGACY_KEYS: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1b[H": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
    "\x1bOH": Key.HOME,
    "\x1bOF": Key.END,
    "\x1b[1~": Key.HOME,
    "\x1b[2~": Key.INSERT,
    "\x1b[3~": Key.DELETE,
    "\x1b[4~": Key.END,
    "\x1b[5~": Key.PGUP,
    "\x1b[6~": Key.PGDN,
    "\x1b[7~": Key.HOME,
    "\x1b[8~": Key.END,
    "\x1b[E": Key.CLEAR,
    "\x1bOP": Key.F1,
    "\x1bOQ": Key.F2,
    "\x1bOR": Key.F3,
    "\x1bOS": Key.F4,
    "\x1b[15~": Key.F5,
    "\x1b[17~": Key.F6,
    "\x1b[18~": Key.F7,
    "\x1b[19~": Key.F8,
    "\x1b[20~": Key.F9,
    "\x1b[21~": Key.F10,
    "\x1b[23~": Key.F11,
    "\x1b[24~": Key.F12,
}

# Final bytes of xterm style "CSI 1 ; <mod> <final>" sequences
_CSI_FINALS: dict[str, Key] = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
    "P": Key.F1,
    "Q": Key.F2,
    "R": Key.F3,
    "S": Key.F4,
}

# Numbers of "CSI <n> ; <mod> ~" sequences
_TILDE_NUMBERS: dict[int, Key] = {
    1: Key.HOME,
    2: Key.INSERT,
    3: Key.DELETE,
    4: Key.END,
    5: Key.PGUP,
    6: Key.PGDN,
    7: Key.HOME,
    8: Key.END,
    15: Key.F5,
    17: Key.F6,
    18: Key.F7,
    19: Key.F8,
    20: Key.F9,
    21: Key.F10,
    23: Key.F11,
    24: Key.F12,
}

_MODIFIED_CSI_RE = re.compile(r"^\x1b\[1;(\d+)([A-Z])$")
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")
_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")


# ---------------------------------------------------------------------------
# Parsed input
# ---------------------------------------------------------------------------


class ParsedKey(NamedTuple):
    """A key or rune.  ``key`` is ``Key.RUNE`` for printable input."""

    key: Key
    mod: Modifier
    rune: str = ""


class ParsedMouse(NamedTuple):
    """An SGR mouse report in zero based cell coordinates."""

    button: Button
    mod: Modifier
    x: int
    y: int
    motion: bool
    release: bool


def _xterm_modifier(code: int) -> Modifier:
    """Translate the xterm modifier parameter (1 + bits) into ``Modifier``."""
    bits = max(0, code - 1)
    mod = Modifier.NONE
    if bits & 1:
        mod |= Modifier.SHIFT
    if bits & 2:
        mod |= Modifier.ALT
    if bits & 4:
        mod |= Modifier.CTRL
    if bits & 8:
        mod |= Modifier.META
    return mod


def split_sequences(data: str) -> tuple[list[str], str]:
    """Split raw input into complete sequences.

    Returns the complete sequences and the trailing remainder which may be
    the beginning of an escape sequence still in transit.
    """
    out: list[str] = []
    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        if ch != ESC:
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            return out, data[i:]
        nxt = data[i + 1]
        if nxt == "[":
            j = i + 2
            while j < n and not (0x40 <= ord(data[j]) <= 0x7E):
                j += 1
            if j >= n:
                return out, data[i:]
            out.append(data[i : j + 1])
            i = j + 1
            continue
        if nxt == "O":
            if i + 2 >= n:
                return out, data[i:]
            out.append(data[i : i + 3])
            i += 3
            continue
        if nxt == ESC:
            out.append(ESC)
            i += 1
            continue
        out.append(data[i : i + 2])
        i += 2
    return out, ""


def parse_key(seq: str) -> ParsedKey | None:
    """Classify a single sequence as key or rune; ``None`` if unknown."""
    if not seq:
        return None
    if seq in _LEGACY_KEYS:
        return ParsedKey(_LEGACY_KEYS[seq], Modifier.NONE)
    if seq == "\x1b[Z":
        return ParsedKey(Key.TAB, Modifier.SHIFT)
    m = _MODIFIED_CSI_RE.match(seq)
    if m is not None and m.group(2) in _CSI_FINALS:
        return ParsedKey(_CSI_FINALS[m.group(2)], _xterm_modifier(int(m.group(1))))
    m = _MODIFIED_TILDE_RE.match(seq)
    if m is not None and int(m.group(1)) in _TILDE_NUMBERS:
        return ParsedKey(
            _TILDE_NUMBERS[int(m.group(1))], _xterm_modifier(int(m.group(2)))
        )
    if len(seq) == 1:
        code = ord(seq)
        if code == 0x7F or code == 0x08:
            return ParsedKey(Key.BACKSPACE, Modifier.NONE)
        if code == 0x0A:
            return ParsedKey(Key.ENTER, Modifier.NONE)
        if code < 0x20:
            if code not in Key._value2member_map_:
                return None
            return ParsedKey(Key(code), Modifier.NONE)
        return ParsedKey(Key.RUNE, Modifier.NONE, seq)
    if len(seq) == 2 and seq[0] == ESC:
        inner = parse_key(seq[1])
        if inner is None:
            return None
        return ParsedKey(inner.key, inner.mod | Modifier.ALT, inner.rune)
    return None


def parse_mouse(seq: str) -> ParsedMouse | None:
    """Parse an SGR (mode 1006) mouse report."""
    m = _SGR_MOUSE_RE.match(seq)
    if m is None:
        return None
    code, x, y = int(m.group(1)), int(m.group(2)) - 1, int(m.group(3)) - 1
    release = m.group(4) == "m"
    mod = Modifier.NONE
    if code & 4:
        mod |= Modifier.SHIFT
    if code & 8:
        mod |= Modifier.ALT
    if code & 16:
        mod |= Modifier.CTRL
    motion = bool(code & 32)
    if code & 64:
        button = (
            Button.WHEEL_UP,
            Button.WHEEL_DOWN,
            Button.WHEEL_LEFT,
            Button.WHEEL_RIGHT,
        )[code & 3]
    else:
        button = {
            0: Button.PRIMARY,
            1: Button.MIDDLE,
            2: Button.SECONDARY,
            3: Button.NONE,
        }[code & 3]
    return ParsedMouse(button, mod, max(0, x), max(0, y), motion, release)


def key_name(key: Key, mod: Modifier = Modifier.NONE) -> str:
    """Human readable name like ``ctrl+up`` used in log records."""
    parts = [
        name
        for flag, name in (
            (Modifier.CTRL, "ctrl"),
            (Modifier.ALT, "alt"),
            (Modifier.SHIFT, "shift"),
            (Modifier.META, "meta"),
        )
        if mod & flag
    ]
    parts.append(key.name.lower())
    return "+".join(parts)
