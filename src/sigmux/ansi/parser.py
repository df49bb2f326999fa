"""ANSI output parser — turn raw shell output into styled text segments.

Only the subset of VT escapes a line-oriented pane needs is interpreted:
SGR bold/reset and the six standard foreground colours. Every other control
sequence (cursor movement, OSC titles, charset switches) is consumed and
dropped. The parser is stateless across calls; callers re-parse the whole
bounded output buffer on every render.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sigmux.palette import Palette

ESC = "\x1b"
BEL = "\x07"

# SGR code -> palette role
_SGR_COLOR_ROLES: dict[str, str] = {
    "31": "alert",  # red
    "32": "primary",  # green
    "33": "warning",  # yellow
    "34": "alternate_1",  # blue
    "35": "alternate_2",  # magenta
    "36": "alternate_3",  # cyan
}

_SGR_RESET = ("0", "00")
_SGR_BOLD = ("1", "01")

_SGR_PARAMS_RE = re.compile(r"[0-9;]*")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class StyledSegment:
    """A run of text sharing one colour and weight."""

    text: str
    color: Any
    bold: bool = False


def _scan(raw: str) -> Iterator[tuple[str, str]]:
    """Tokenize ``raw`` into ``("text", chunk)`` and ``("sgr", params)`` pairs.

    A ``("break", "")`` token marks every escape sequence so callers can
    flush the pending run even when the sequence has no visual effect.
    """
    i = 0
    n = len(raw)
    while i < n:
        esc = raw.find(ESC, i)
        if esc == -1:
            yield "text", raw[i:]
            return
        if esc > i:
            yield "text", raw[i:esc]
        yield "break", ""

        i = esc + 1
        if i >= n:
            return
        intro = raw[i]
        if intro == "[":
            # CSI: parameters run until the first ASCII letter
            j = i + 1
            while j < n and not (raw[j].isascii() and raw[j].isalpha()):
                j += 1
            params = raw[i + 1 : j]
            i = j + 1
            if _SGR_PARAMS_RE.fullmatch(params):
                yield "sgr", params
        elif intro == "]":
            # OSC: skip to BEL or ESC \
            j = i + 1
            while j < n:
                if raw[j] == BEL:
                    j += 1
                    break
                if raw[j] == ESC and j + 1 < n and raw[j + 1] == "\\":
                    j += 2
                    break
                j += 1
            i = j
        else:
            i += 1


def parse_ansi_output(
    raw: str,
    palette: Palette,
    default_color: Any,
) -> list[StyledSegment]:
    """Decode ``raw`` into an ordered list of :class:`StyledSegment`.

    Args:
        raw: Decoded shell output, escapes included.
        palette: Supplies the colour for each SGR colour role.
        default_color: Colour used before any SGR code and after a reset.

    Returns:
        Segments in input order. Empty runs are never emitted.
    """
    segments: list[StyledSegment] = []
    color = default_color
    bold = False
    pending: list[str] = []

    def flush() -> None:
        if pending:
            segments.append(StyledSegment("".join(pending), color, bold))
            pending.clear()

    for kind, value in _scan(raw):
        if kind == "text":
            pending.append(value)
        elif kind == "break":
            flush()
        else:
            for code in value.split(";"):
                if code in _SGR_RESET:
                    color = default_color
                    bold = False
                elif code in _SGR_BOLD:
                    bold = True
                elif code in _SGR_COLOR_ROLES:
                    color = getattr(palette, _SGR_COLOR_ROLES[code])

    flush()
    return segments


def strip_ansi(raw: str) -> str:
    """Return ``raw`` with every escape sequence removed."""
    return "".join(value for kind, value in _scan(raw) if kind == "text")


def split_lines(segments: list[StyledSegment]) -> list[list[StyledSegment]]:
    """Split segments into display lines.

    ``\\r\\n``, lone ``\\r`` and ``\\n`` all end a line. Style carries across the
    split. An empty output line is represented by an empty list.
    """
    lines: list[list[StyledSegment]] = [[]]
    for seg in segments:
        parts = _LINE_BREAK_RE.split(seg.text)
        for idx, part in enumerate(parts):
            if idx > 0:
                lines.append([])
            if part:
                lines[-1].append(StyledSegment(part, seg.color, seg.bold))
    return lines
