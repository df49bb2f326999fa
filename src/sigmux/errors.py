"""Exception types shared across sigmux."""

from __future__ import annotations


class SigmuxError(Exception):
    """Base class for all sigmux errors."""


class SpawnError(SigmuxError):
    """The child shell could not be started."""


class TransientIOError(SigmuxError):
    """A PTY read or write failed for a reason other than "would block".

    Callers treat this as "no data this tick" and keep the session alive.
    """


class TerminationError(SigmuxError):
    """The child did not exit cleanly when asked to terminate."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code
