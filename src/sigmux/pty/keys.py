"""Keyboard input events and their terminal byte encodings."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Key(enum.StrEnum):
    ENTER = "enter"
    BACKSPACE = "backspace"
    TAB = "tab"
    ESCAPE = "escape"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    INSERT = "insert"
    DELETE = "delete"
    CHAR = "char"  # a character key pressed together with a modifier


@dataclass(frozen=True)
class Modifiers:
    ctrl: bool = False
    alt: bool = False
    shift: bool = False


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class KeyEvent:
    """A named key press (``char`` is set only for ``Key.CHAR``)."""

    key: Key
    modifiers: Modifiers = field(default=NO_MODIFIERS)
    char: str = ""

    @classmethod
    def ctrl(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, Modifiers(ctrl=True), char)

    @property
    def is_interrupt(self) -> bool:
        return (
            self.key == Key.CHAR
            and self.modifiers.ctrl
            and self.char.lower() == "c"
        )


@dataclass(frozen=True)
class TextEvent:
    """Printable text typed by the user."""

    text: str


InputEvent = KeyEvent | TextEvent

INTERRUPT = b"\x03"

_KEY_SEQUENCES: dict[Key, bytes] = {
    Key.ENTER: b"\r",
    Key.BACKSPACE: b"\x7f",
    Key.TAB: b"\t",
    Key.ESCAPE: b"\x1b",
    Key.UP: b"\x1b[A",
    Key.DOWN: b"\x1b[B",
    Key.RIGHT: b"\x1b[C",
    Key.LEFT: b"\x1b[D",
    Key.HOME: b"\x1b[H",
    Key.END: b"\x1b[F",
    Key.PAGE_UP: b"\x1b[5~",
    Key.PAGE_DOWN: b"\x1b[6~",
    Key.INSERT: b"\x1b[2~",
    Key.DELETE: b"\x1b[3~",
}

_BACKTAB = b"\x1b[Z"


def _control_code(char: str) -> bytes | None:
    if len(char) != 1:
        return None
    if char.isascii() and char.isalpha():
        return bytes([ord(char.lower()) & 0x1F])
    # ^@ ^[ ^\ ^] ^^ ^_
    if char in "@[\\]^_":
        return bytes([ord(char) & 0x1F])
    if char == " ":
        return b"\x00"
    return None


def encode_raw(event: InputEvent) -> bytes | None:
    """Translate an input event into the bytes a terminal would send.

    Returns ``None`` for keys with no mapping; the caller drops them.
    """
    if isinstance(event, TextEvent):
        return event.text.encode("utf-8") if event.text else None

    mods = event.modifiers
    if event.key == Key.CHAR:
        if mods.ctrl:
            code = _control_code(event.char)
        elif event.char:
            code = event.char.encode("utf-8")
        else:
            code = None
        if code is not None and mods.alt:
            code = b"\x1b" + code
        return code

    if event.key == Key.TAB and mods.shift:
        return _BACKTAB

    seq = _KEY_SEQUENCES.get(event.key)
    if seq is not None and mods.alt:
        seq = b"\x1b" + seq
    return seq
