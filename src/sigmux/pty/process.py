"""PTY process — a child program attached to a non-blocking pseudo-terminal."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import pty
import signal
import struct
import subprocess
import termios

from sigmux.errors import SpawnError, TerminationError, TransientIOError

logger = logging.getLogger(__name__)


def _acquire_controlling_tty() -> None:
    # Runs in the child after setsid(): make the pty slave (fd 0) the
    # controlling terminal so ^C and job control reach the shell.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class PtyProcess:
    """A child process whose stdio is a pseudo-terminal we hold the master of.

    The child runs in its own session and process group so that terminate()
    can signal the whole tree. The master fd is non-blocking: reads never
    stall the render tick.
    """

    def __init__(self, proc: subprocess.Popen, master_fd: int) -> None:
        self._proc = proc
        self._master_fd = master_fd
        self._pgid = os.getpgid(proc.pid)
        self._closed = False

    @classmethod
    def spawn(
        cls,
        command: list[str],
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        cols: int = 80,
        rows: int = 24,
    ) -> PtyProcess:
        """Start ``command`` on a fresh pty.

        Raises:
            SpawnError: if the pty could not be opened or the command failed
                to start.
        """
        try:
            master_fd, slave_fd = pty.openpty()
        except OSError as e:
            raise SpawnError(f"could not open pty: {e}") from e

        child_env = {**os.environ, **(env or {})}
        child_env["TERM"] = "xterm-256color"

        try:
            _set_winsize(slave_fd, cols, rows)
            proc = subprocess.Popen(
                command,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                start_new_session=True,
                preexec_fn=_acquire_controlling_tty,
                env=child_env,
                cwd=cwd,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise SpawnError(f"could not start {' '.join(command)}: {e}") from e
        finally:
            os.close(slave_fd)

        flags = fcntl.fcntl(master_fd, fcntl.F_GETFL)
        fcntl.fcntl(master_fd, fcntl.F_SETFL, flags | os.O_NONBLOCK)

        logger.info("PTY spawned: pid=%d cmd=%s", proc.pid, " ".join(command))
        return cls(proc, master_fd)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def alive(self) -> bool:
        return not self._closed and self._proc.poll() is None

    def read_nonblocking(self, size: int = 4096) -> bytes | None:
        """Read whatever the child has written.

        Returns:
            The bytes read, ``b""`` at end of output, or ``None`` if nothing is
            available right now.

        Raises:
            TransientIOError: on any other read failure.
        """
        if self._closed:
            return b""
        try:
            return os.read(self._master_fd, size)
        except BlockingIOError:
            return None
        except OSError as e:
            # Linux reports EIO on the master once the slave side is gone
            if e.errno == errno.EIO:
                return b""
            raise TransientIOError(f"pty read failed: {e}") from e

    def write(self, data: bytes) -> None:
        if self._closed or not data:
            return
        try:
            os.write(self._master_fd, data)
        except OSError as e:
            raise TransientIOError(f"pty write failed: {e}") from e

    def resize(self, cols: int, rows: int) -> None:
        if self._closed:
            return
        try:
            _set_winsize(self._master_fd, cols, rows)
        except OSError as e:
            logger.debug("PTY resize failed for pid=%d: %s", self.pid, e)

    def terminate(self, force: bool = False, grace: float = 1.0) -> int | None:
        """Ask the child's process group to exit and reap it.

        Sends SIGHUP (SIGKILL if ``force``), waits up to ``grace`` seconds,
        then escalates to SIGKILL. The master fd is closed in every case.

        Returns:
            The child's exit code.

        Raises:
            TerminationError: if the child could not be reaped.
        """
        try:
            if self._proc.poll() is not None:
                return self._proc.returncode

            self._signal_group(signal.SIGKILL if force else signal.SIGHUP)
            try:
                return self._proc.wait(timeout=grace)
            except subprocess.TimeoutExpired:
                logger.warning("PTY pid=%d ignored SIGHUP, killing", self.pid)

            self._signal_group(signal.SIGKILL)
            try:
                return self._proc.wait(timeout=grace)
            except subprocess.TimeoutExpired as e:
                raise TerminationError(
                    f"pid {self.pid} did not exit after SIGKILL"
                ) from e
        finally:
            self._close_fd()

    def _signal_group(self, sig: signal.Signals) -> None:
        try:
            os.killpg(self._pgid, sig)
        except ProcessLookupError:
            logger.debug("Process group already gone: %d", self._pgid)

    def _close_fd(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            os.close(self._master_fd)
        except OSError:
            logger.debug("master fd %d already closed", self._master_fd)


def _set_winsize(fd: int, cols: int, rows: int) -> None:
    winsize = struct.pack("HHHH", max(rows, 1), max(cols, 1), 0, 0)
    fcntl.ioctl(fd, termios.TIOCSWINSZ, winsize)
