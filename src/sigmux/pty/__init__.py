"""PTY sessions — one managed shell per pane.

Each pane runs its shell on a non-blocking pseudo-terminal, keeps a bounded
buffer of raw output, and routes keys either through a local line editor
with history or straight to the child in raw mode.
"""

from sigmux.pty.buffer import OutputBuffer
from sigmux.pty.history import CommandHistory
from sigmux.pty.keys import InputEvent, Key, KeyEvent, Modifiers, TextEvent, encode_raw
from sigmux.pty.process import PtyProcess
from sigmux.pty.session import LineEdit, PaneSession, PaneSignal, Raw, RenderSnapshot

__all__ = [
    "CommandHistory",
    "InputEvent",
    "Key",
    "KeyEvent",
    "LineEdit",
    "Modifiers",
    "OutputBuffer",
    "PaneSession",
    "PaneSignal",
    "PtyProcess",
    "Raw",
    "RenderSnapshot",
    "TextEvent",
    "encode_raw",
]
