"""Shared fixtures: a scripted stand-in for the PTY process."""

from __future__ import annotations

import functools

import pytest

from sigmux.config import SessionConfig, SigmuxConfig
from sigmux.errors import TerminationError
from sigmux.pty.session import PaneSession


class FakeProcess:
    """Plays back queued reads and records writes, resizes and terminations."""

    def __init__(self, command: list[str], cols: int = 80, rows: int = 24) -> None:
        self.command = command
        self.sizes: list[tuple[int, int]] = [(cols, rows)]
        self.reads: list[bytes | Exception] = []
        self.written: list[bytes] = []
        self.write_error: Exception | None = None
        self.terminate_error: TerminationError | None = None
        self.terminate_calls = 0
        self.exit_code: int | None = 0

    def feed(self, data: bytes | str) -> None:
        self.reads.append(data.encode() if isinstance(data, str) else data)

    def read_nonblocking(self, size: int = 4096) -> bytes | None:
        if not self.reads:
            return None
        item = self.reads.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def write(self, data: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)

    def resize(self, cols: int, rows: int) -> None:
        self.sizes.append((cols, rows))

    def terminate(self, force: bool = False, grace: float = 1.0) -> int | None:
        self.terminate_calls += 1
        if self.terminate_error is not None:
            raise self.terminate_error
        return self.exit_code


@pytest.fixture
def spawned() -> list[FakeProcess]:
    """Every FakeProcess created by ``process_factory``, in spawn order."""
    return []


@pytest.fixture
def process_factory(spawned: list[FakeProcess]):
    def factory(command: list[str], cols: int = 80, rows: int = 24, **kwargs) -> FakeProcess:
        proc = FakeProcess(command, cols, rows)
        spawned.append(proc)
        return proc

    return factory


@pytest.fixture
def make_session(process_factory):
    def make(**overrides) -> PaneSession:
        config = overrides.pop("config", None) or SessionConfig(shell=["fake-sh"])
        kwargs = dict(pane_id=0, slot=0, width=80.0, height=24.0, hue=180.0)
        kwargs.update(overrides)
        return PaneSession.spawn(
            config=config, process_factory=process_factory, **kwargs
        )

    return make


@pytest.fixture
def mux_config() -> SigmuxConfig:
    config = SigmuxConfig()
    config.session.shell = ["fake-sh"]
    config.layout.border_allowance = 2.0
    return config


@pytest.fixture
def session_factory(process_factory):
    return functools.partial(PaneSession.spawn, process_factory=process_factory)
