"""Tests for sigmux.pty.buffer.OutputBuffer."""

from __future__ import annotations

import pytest

from sigmux.pty.buffer import OutputBuffer


class TestOutputBufferAppend:
    def test_append_and_read(self) -> None:
        buf = OutputBuffer()
        buf.append("hello ")
        buf.append("world")
        assert buf.text == "hello world"
        assert len(buf) == 11

    def test_empty_append_is_noop(self) -> None:
        buf = OutputBuffer()
        buf.append("")
        assert buf.text == ""
        assert buf.total_written == 0

    def test_total_written(self) -> None:
        buf = OutputBuffer(cap=4)
        buf.append("abc")
        buf.append("def")
        assert buf.total_written == 6


class TestOutputBufferCap:
    def test_exactly_at_cap_keeps_everything(self) -> None:
        buf = OutputBuffer(cap=5)
        buf.append("12345")
        assert buf.text == "12345"

    def test_overflow_keeps_most_recent(self) -> None:
        buf = OutputBuffer(cap=10)
        buf.append("0123456789ABCDE")
        assert len(buf) == 10
        assert buf.text == "56789ABCDE"

    def test_eviction_across_appends(self) -> None:
        buf = OutputBuffer(cap=6)
        for chunk in ("abc", "def", "ghi"):
            buf.append(chunk)
        assert buf.text == "defghi"

    def test_never_exceeds_cap(self) -> None:
        buf = OutputBuffer(cap=7)
        for i in range(50):
            buf.append(f"line {i}\n")
            assert len(buf) <= 7

    def test_invalid_cap(self) -> None:
        with pytest.raises(ValueError):
            OutputBuffer(cap=0)
