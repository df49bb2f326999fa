"""Translate Textual key names into pane input events."""

from __future__ import annotations

from sigmux.pty.keys import InputEvent, Key, KeyEvent, Modifiers, TextEvent

_NAMED_KEYS: dict[str, Key] = {
    "enter": Key.ENTER,
    "backspace": Key.BACKSPACE,
    "tab": Key.TAB,
    "escape": Key.ESCAPE,
    "up": Key.UP,
    "down": Key.DOWN,
    "left": Key.LEFT,
    "right": Key.RIGHT,
    "home": Key.HOME,
    "end": Key.END,
    "pageup": Key.PAGE_UP,
    "pagedown": Key.PAGE_DOWN,
    "insert": Key.INSERT,
    "delete": Key.DELETE,
}

_MODIFIER_NAMES = {"ctrl", "alt", "meta", "shift"}


def to_input_event(key: str, character: str | None) -> InputEvent | None:
    """Map a Textual ``Key`` event (``key`` name + ``character``) to an input event.

    Returns ``None`` for keys a pane has no use for (function keys, bare
    modifiers).
    """
    parts = key.split("+")
    name = parts[-1]
    mods = {p for p in parts[:-1] if p in _MODIFIER_NAMES}
    modifiers = Modifiers(
        ctrl="ctrl" in mods,
        alt="alt" in mods or "meta" in mods,
        shift="shift" in mods,
    )

    if name in _NAMED_KEYS:
        return KeyEvent(_NAMED_KEYS[name], modifiers)

    if (modifiers.ctrl or modifiers.alt) and len(name) == 1:
        return KeyEvent(Key.CHAR, modifiers, name)

    if character and character.isprintable():
        return TextEvent(character)
    return None
