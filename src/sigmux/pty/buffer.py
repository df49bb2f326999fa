"""Bounded output buffer for PTY sessions."""

from __future__ import annotations


class OutputBuffer:
    """Accumulates decoded PTY output up to ``cap`` characters.

    Output is kept raw, escape sequences included, because the pane
    re-parses the whole buffer on every render. When an append pushes the
    length past ``cap`` the oldest characters are evicted, so the buffer
    always holds the most recent output.

    Only the render tick touches a buffer, so there is no locking.
    """

    def __init__(self, cap: int = 100_000) -> None:
        if cap <= 0:
            raise ValueError("cap must be positive")
        self._cap = cap
        self._text = ""
        self._total_written = 0  # Total characters ever appended

    def append(self, text: str) -> None:
        """Append text, evicting from the front past the cap."""
        if not text:
            return
        self._total_written += len(text)
        combined = self._text + text
        overflow = len(combined) - self._cap
        if overflow > 0:
            combined = combined[overflow:]
        self._text = combined

    @property
    def text(self) -> str:
        return self._text

    @property
    def total_written(self) -> int:
        """Total characters ever appended."""
        return self._total_written

    def __len__(self) -> int:
        return len(self._text)
