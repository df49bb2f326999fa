"""Tests for sigmux.pty.process.PtyProcess against a real /bin/sh."""

from __future__ import annotations

import os
import time

import pytest

from sigmux.errors import SpawnError
from sigmux.pty.process import PtyProcess

pytestmark = pytest.mark.skipif(
    not os.path.exists("/bin/sh"), reason="needs a POSIX shell"
)


def read_until(proc: PtyProcess, needle: bytes, timeout: float = 5.0) -> bytes:
    data = b""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        chunk = proc.read_nonblocking()
        if chunk is None:
            time.sleep(0.02)
            continue
        if not chunk:
            break
        data += chunk
        if needle in data:
            break
    return data


class TestPtyProcess:
    def test_echo_roundtrip(self) -> None:
        proc = PtyProcess.spawn(["/bin/sh"])
        try:
            assert proc.alive
            proc.write(b"echo sigmux-$((40 + 2))\n")
            assert b"sigmux-42" in read_until(proc, b"sigmux-42")
        finally:
            proc.terminate()
        assert not proc.alive

    def test_read_would_block(self) -> None:
        proc = PtyProcess.spawn(["/bin/sh", "-c", "sleep 5"])
        try:
            assert proc.read_nonblocking() is None
        finally:
            proc.terminate()

    def test_resize_reaches_child(self) -> None:
        proc = PtyProcess.spawn(["/bin/sh"], cols=80, rows=24)
        try:
            proc.resize(132, 43)
            proc.write(b"stty size\n")
            assert b"43 132" in read_until(proc, b"43 132")
        finally:
            proc.terminate()

    def test_terminate_returns_after_exit(self) -> None:
        proc = PtyProcess.spawn(["/bin/sh", "-c", "exit 3"])
        deadline = time.monotonic() + 5.0
        while proc.alive and time.monotonic() < deadline:
            time.sleep(0.02)
        assert proc.terminate() == 3
        # fd closed: reads report end of output
        assert proc.read_nonblocking() == b""

    def test_spawn_missing_command(self) -> None:
        with pytest.raises(SpawnError):
            PtyProcess.spawn(["/nonexistent/sigmux-shell"])
