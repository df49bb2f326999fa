"""ANSI output decoding — escape sequences to styled text segments."""

from sigmux.ansi.parser import (
    StyledSegment,
    parse_ansi_output,
    split_lines,
    strip_ansi,
)

__all__ = [
    "StyledSegment",
    "parse_ansi_output",
    "split_lines",
    "strip_ansi",
]
