"""Pane session — one shell on a PTY, with line editing and raw passthrough."""

from __future__ import annotations

import codecs
import enum
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sigmux.ansi.parser import StyledSegment, parse_ansi_output, strip_ansi
from sigmux.config import SessionConfig
from sigmux.errors import SpawnError, TerminationError, TransientIOError
from sigmux.palette import ColorMode, Palette
from sigmux.pty.buffer import OutputBuffer
from sigmux.pty.history import CommandHistory
from sigmux.pty.keys import INTERRUPT, InputEvent, Key, KeyEvent, TextEvent, encode_raw
from sigmux.pty.process import PtyProcess

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Terminal"

# Private-mode escapes that full-screen programs toggle. The pane is in raw
# passthrough while the alternate screen is up or the cursor is hidden.
_MODE_ESCAPE = re.compile(r"\x1b\[\?(1049|1047|47|25)([hl])")
_ALT_SCREEN_MODES = ("1049", "1047", "47")
_ALL_MARKERS = tuple(
    f"\x1b[?{mode}{flag}" for mode in (*_ALT_SCREEN_MODES, "25") for flag in "hl"
)
_MARKER_TAIL = max(len(m) for m in _ALL_MARKERS) - 1

ProcessFactory = Callable[..., PtyProcess]


class PaneSignal(enum.Enum):
    """Requests a pane makes of the multiplexer, at most one per tick."""

    ACTIVATED = "activated"
    CLOSE_REQUESTED = "close_requested"
    MAXIMIZE_REQUESTED = "maximize_requested"
    MINIMIZE_REQUESTED = "minimize_requested"


@dataclass
class LineEdit:
    """Local line editing: keys build ``buffer``, Enter submits it."""

    history: CommandHistory
    buffer: str = ""
    cursor: int | None = None  # History position while browsing


@dataclass(frozen=True)
class Raw:
    """Keys go straight to the child as terminal byte sequences."""


InputMode = LineEdit | Raw


@dataclass(frozen=True)
class RenderSnapshot:
    """Everything the presentation layer needs to draw one pane."""

    pane_id: int
    slot: int
    title: str
    segments: list[StyledSegment]
    input_buffer: str
    cursor_visible: bool
    raw_mode: bool
    active: bool
    exited: bool
    width: float
    height: float
    palette: Palette
    background: Any
    text_color: Any


@dataclass
class ScreenModeTracker:
    """Raw-mode hint from the private-mode escapes a child emits.

    Alternate-screen set/reset and cursor hide/show are applied in order.
    Full-screen programs hide and show the cursor around every redraw, so
    showing the cursor only ends raw mode when no alternate screen is up.
    Leaving the alternate screen also forgets a hidden cursor. This is a
    substring heuristic, not terminal emulation.
    """

    alt_screen: bool = False
    cursor_hidden: bool = False

    @property
    def raw(self) -> bool:
        return self.alt_screen or self.cursor_hidden

    def feed(self, text: str) -> bool | None:
        """Apply the markers in ``text``; None if it contains none."""
        seen = False
        for match in _MODE_ESCAPE.finditer(text):
            seen = True
            mode, enabled = match.group(1), match.group(2) == "h"
            if mode in _ALT_SCREEN_MODES:
                self.alt_screen = enabled
                if not enabled:
                    self.cursor_hidden = False
            else:
                self.cursor_hidden = not enabled
        return self.raw if seen else None


def _partial_marker(text: str) -> str:
    """Trailing incomplete marker in ``text``, kept for the next chunk."""
    idx = text.rfind("\x1b", max(len(text) - _MARKER_TAIL, 0))
    if idx == -1:
        return ""
    rest = text[idx:]
    if any(m != rest and m.startswith(rest) for m in _ALL_MARKERS):
        return rest
    return ""


@dataclass
class PaneSession:
    """A managed shell in one pane.

    Owns the child process and its pty exclusively. All I/O is non-blocking
    and driven from the render tick: :meth:`snapshot_for_render` drains any
    pending output, re-parses the bounded output buffer, and returns what to
    draw. If the shell could not be spawned the session is inert: it renders
    an empty buffer and ignores input.
    """

    pane_id: int
    slot: int
    width: float = 80.0
    height: float = 24.0
    hue: float = 180.0
    config: SessionConfig = field(default_factory=SessionConfig)
    title: str = DEFAULT_TITLE

    # Internal state
    buffer: OutputBuffer = field(init=False)
    history: CommandHistory = field(default_factory=CommandHistory, init=False)
    palette: Palette = field(init=False)
    color_mode: ColorMode = field(default=ColorMode.DARK, init=False)
    _mode: InputMode = field(init=False)
    _process: PtyProcess | None = field(default=None, init=False)
    _active: bool = field(default=False, init=False)
    _exited: bool = field(default=False, init=False)
    _editing_title: bool = field(default=False, init=False)
    _cursor_visible: bool = field(default=True, init=False)
    _last_cursor_toggle: float = field(default_factory=time.monotonic, init=False)
    _signal: PaneSignal | None = field(default=None, init=False)
    _scan_tail: str = field(default="", init=False)
    _screen: ScreenModeTracker = field(default_factory=ScreenModeTracker, init=False)
    _decoder: codecs.IncrementalDecoder = field(init=False)

    def __post_init__(self) -> None:
        self.buffer = OutputBuffer(self.config.output_cap)
        self.palette = Palette.from_hue(self.hue)
        self._mode = LineEdit(self.history)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @classmethod
    def spawn(
        cls,
        pane_id: int,
        slot: int,
        width: float,
        height: float,
        hue: float,
        config: SessionConfig | None = None,
        process_factory: ProcessFactory = PtyProcess.spawn,
    ) -> PaneSession:
        """Create a session bound to a freshly started shell.

        Never raises on spawn failure; the returned session is inert instead.
        """
        session = cls(
            pane_id=pane_id,
            slot=slot,
            width=width,
            height=height,
            hue=hue,
            config=config or SessionConfig(),
        )
        cols, rows = session._grid_size()
        try:
            session._process = process_factory(
                session.config.shell, cols=cols, rows=rows
            )
        except SpawnError as e:
            logger.warning("Pane %d: %s; pane is inert", pane_id, e)
        return session

    # --- State ---

    @property
    def raw_mode(self) -> bool:
        return isinstance(self._mode, Raw)

    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def input_buffer(self) -> str:
        return self._mode.buffer if isinstance(self._mode, LineEdit) else ""

    @property
    def history_cursor(self) -> int | None:
        return self._mode.cursor if isinstance(self._mode, LineEdit) else None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def inert(self) -> bool:
        """True when no child process is attached (spawn failed or terminated)."""
        return self._process is None

    @property
    def exited(self) -> bool:
        return self._exited

    @property
    def editing_title(self) -> bool:
        return self._editing_title

    def set_active(self, active: bool) -> None:
        self._active = active
        if not active:
            self._editing_title = False

    def set_dark_mode(self, dark_mode: bool) -> None:
        self.color_mode = ColorMode.DARK if dark_mode else ColorMode.LIGHT

    def set_raw_mode(self, raw: bool) -> None:
        if raw == self.raw_mode:
            return
        self._mode = Raw() if raw else LineEdit(self.history)
        logger.debug("Pane %d: %s mode", self.pane_id, "raw" if raw else "line-edit")

    def begin_title_edit(self) -> None:
        self._editing_title = True

    def stop_title_edit(self) -> None:
        self._editing_title = False

    def rename(self, title: str) -> None:
        self.title = title.strip() or DEFAULT_TITLE
        self._editing_title = False

    def resize(self, width: float, height: float) -> None:
        """Set the pane geometry and propagate it to the pty window size."""
        if (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        if self._process is not None:
            cols, rows = self._grid_size()
            self._process.resize(cols, rows)

    def _grid_size(self) -> tuple[int, int]:
        cols = max(int(self.width), 1)
        rows = max(int(self.height) - self.config.chrome_rows, 1)
        return cols, rows

    # --- Signals ---

    def request_activate(self) -> None:
        self._signal = PaneSignal.ACTIVATED

    def request_close(self) -> None:
        self._signal = PaneSignal.CLOSE_REQUESTED

    def request_maximize(self) -> None:
        self._signal = PaneSignal.MAXIMIZE_REQUESTED

    def request_minimize(self) -> None:
        self._signal = PaneSignal.MINIMIZE_REQUESTED

    def take_signal(self) -> PaneSignal | None:
        """Pop the pending outbound signal, if any."""
        sig, self._signal = self._signal, None
        return sig

    # --- Output ---

    def poll_output(self) -> int:
        """Drain available pty output into the buffer.

        Returns:
            Number of characters appended this call.
        """
        if self._process is None or self._exited:
            return 0

        appended = 0
        for _ in range(self.config.max_reads_per_poll):
            try:
                data = self._process.read_nonblocking(self.config.read_size)
            except TransientIOError as e:
                logger.debug("Pane %d: %s", self.pane_id, e)
                break
            if data is None:
                break
            if not data:
                self._exited = True
                logger.info(
                    "Pane %d: shell exited after %d chars of output",
                    self.pane_id,
                    self.buffer.total_written,
                )
                break
            text = self._decoder.decode(data)
            if text:
                self._feed(text)
                appended += len(text)
        return appended

    def _feed(self, text: str) -> None:
        self.buffer.append(text)
        scan = self._scan_tail + text
        self._scan_tail = _partial_marker(scan)
        raw = self._screen.feed(scan)
        if raw is not None and raw != self.raw_mode:
            shown = strip_ansi(scan).strip().splitlines()
            logger.debug(
                "Pane %d: mode escape after %r",
                self.pane_id,
                shown[-1][-40:] if shown else "",
            )
            self.set_raw_mode(raw)

    # --- Input ---

    def submit_input(self, event: InputEvent) -> None:
        """Route one key or text event according to the current mode."""
        if self._editing_title:
            return

        if isinstance(self._mode, Raw):
            data = encode_raw(event)
            if data is not None:
                self._write(data)
            return

        line = self._mode
        if isinstance(event, TextEvent):
            line.buffer += event.text
            line.cursor = None
            return

        if event.is_interrupt:
            self._write(INTERRUPT)
            line.buffer = ""
            line.cursor = None
        elif event.key == Key.ENTER:
            command = line.buffer
            self.history.append(command)
            line.buffer = ""
            line.cursor = None
            self._write((command + "\n").encode("utf-8"))
        elif event.key == Key.BACKSPACE:
            line.buffer = line.buffer[:-1]
            line.cursor = None
        elif event.key == Key.UP:
            cursor = self.history.older(line.cursor)
            if cursor is not None:
                line.cursor = cursor
                line.buffer = self.history[cursor]
        elif event.key == Key.DOWN:
            if line.cursor is None:
                return
            cursor = self.history.newer(line.cursor)
            line.cursor = cursor
            line.buffer = self.history[cursor] if cursor is not None else ""

    def _write(self, data: bytes) -> None:
        if self._process is None or self._exited:
            return
        try:
            self._process.write(data)
        except TransientIOError as e:
            logger.debug("Pane %d: %s", self.pane_id, e)

    # --- Render ---

    def _tick_cursor(self, now: float) -> None:
        if (now - self._last_cursor_toggle) * 1000 > self.config.cursor_blink_ms:
            self._cursor_visible = not self._cursor_visible
            self._last_cursor_toggle = now

    def snapshot_for_render(self, now: float | None = None) -> RenderSnapshot:
        """Poll output and return the current render state."""
        self.poll_output()
        self._tick_cursor(time.monotonic() if now is None else now)
        text_color = self.palette.text(self.color_mode)
        return RenderSnapshot(
            pane_id=self.pane_id,
            slot=self.slot,
            title=self.title,
            segments=parse_ansi_output(self.buffer.text, self.palette, text_color),
            input_buffer=self.input_buffer,
            cursor_visible=self._cursor_visible,
            raw_mode=self.raw_mode,
            active=self._active,
            exited=self._exited,
            width=self.width,
            height=self.height,
            palette=self.palette,
            background=self.palette.background(self.color_mode),
            text_color=text_color,
        )

    # --- Lifecycle ---

    def terminate(self) -> None:
        """Ask the child to exit and release the pty. Idempotent."""
        process, self._process = self._process, None
        if process is None:
            return
        try:
            exit_code = process.terminate(grace=self.config.terminate_grace)
        except TerminationError as e:
            logger.warning("Pane %d: child did not exit cleanly: %s", self.pane_id, e)
            return
        logger.info("Pane %d terminated (code=%s)", self.pane_id, exit_code)
