"""Tests for sigmux.pty.keys and sigmux.tui.keymap."""

from __future__ import annotations

from sigmux.pty.keys import Key, KeyEvent, Modifiers, TextEvent, encode_raw
from sigmux.tui.keymap import to_input_event


# ---------------------------------------------------------------------------
# encode_raw
# ---------------------------------------------------------------------------


class TestEncodeRaw:
    def test_named_keys(self) -> None:
        expected = {
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
            Key.DELETE: b"\x1b[3~",
        }
        for key, seq in expected.items():
            assert encode_raw(KeyEvent(key)) == seq

    def test_ctrl_letters(self) -> None:
        assert encode_raw(KeyEvent.ctrl("c")) == b"\x03"
        assert encode_raw(KeyEvent.ctrl("a")) == b"\x01"
        assert encode_raw(KeyEvent.ctrl("Z")) == b"\x1a"

    def test_ctrl_punctuation(self) -> None:
        assert encode_raw(KeyEvent.ctrl("[")) == b"\x1b"
        assert encode_raw(KeyEvent.ctrl("\\")) == b"\x1c"

    def test_alt_prefixes_escape(self) -> None:
        event = KeyEvent(Key.CHAR, Modifiers(alt=True), "b")
        assert encode_raw(event) == b"\x1bb"

    def test_shift_tab(self) -> None:
        assert encode_raw(KeyEvent(Key.TAB, Modifiers(shift=True))) == b"\x1b[Z"

    def test_text_is_utf8(self) -> None:
        assert encode_raw(TextEvent("é")) == "é".encode()

    def test_unmapped_returns_none(self) -> None:
        assert encode_raw(KeyEvent.ctrl("1")) is None
        assert encode_raw(TextEvent("")) is None

    def test_is_interrupt(self) -> None:
        assert KeyEvent.ctrl("c").is_interrupt
        assert KeyEvent.ctrl("C").is_interrupt
        assert not KeyEvent.ctrl("d").is_interrupt
        assert not KeyEvent(Key.ENTER).is_interrupt


# ---------------------------------------------------------------------------
# Textual key names
# ---------------------------------------------------------------------------


class TestToInputEvent:
    def test_printable(self) -> None:
        assert to_input_event("a", "a") == TextEvent("a")
        assert to_input_event("space", " ") == TextEvent(" ")

    def test_named(self) -> None:
        assert to_input_event("enter", "\r") == KeyEvent(Key.ENTER)
        assert to_input_event("pageup", None) == KeyEvent(Key.PAGE_UP)

    def test_ctrl_letter(self) -> None:
        assert to_input_event("ctrl+c", "\x03") == KeyEvent.ctrl("c")

    def test_modified_named_key(self) -> None:
        assert to_input_event("shift+tab", None) == KeyEvent(
            Key.TAB, Modifiers(shift=True)
        )

    def test_unmapped(self) -> None:
        assert to_input_event("f12", None) is None
