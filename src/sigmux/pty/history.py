"""In-memory command history for a pane."""

from __future__ import annotations


class CommandHistory:
    """Append-only list of submitted command lines.

    The browsing cursor lives with the caller (the line editor); this class
    only answers "what is older/newer than this position".
    """

    def __init__(self) -> None:
        self._entries: list[str] = []

    def append(self, line: str) -> bool:
        """Record ``line`` unless it is blank. Returns True if stored."""
        if not line.strip():
            return False
        self._entries.append(line)
        return True

    def older(self, cursor: int | None) -> int | None:
        """Cursor one step towards the oldest entry.

        Starts from the newest entry when not browsing, and stays on the
        oldest entry once reached. ``None`` if there is no history.
        """
        if not self._entries:
            return None
        if cursor is None:
            return len(self._entries) - 1
        return max(cursor - 1, 0)

    def newer(self, cursor: int | None) -> int | None:
        """Cursor one step towards the newest entry.

        ``None`` once the walk moves past the newest entry (or was not
        browsing at all).
        """
        if cursor is None or cursor >= len(self._entries) - 1:
            return None
        return cursor + 1

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)
