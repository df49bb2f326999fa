"""Main Textual application for sigmux."""

from __future__ import annotations

import logging

from rich.style import Style
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.timer import Timer
from textual.widgets import Footer, Input, Static

from sigmux.ansi.parser import split_lines
from sigmux.config import SigmuxConfig
from sigmux.mux.manager import CapacityRejected, DisplayMode, PaneMultiplexer, PaneView
from sigmux.pty.keys import KeyEvent
from sigmux.pty.session import PaneSession
from sigmux.tui.keymap import to_input_event

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1 / 30
CURSOR_ON = "█"
CURSOR_OFF = "▂"
INACTIVE_BORDER = "#646464"


class TUILogHandler(logging.Handler):
    """Keeps the latest log record for the status bar.

    Writing to stderr would corrupt the Textual display, so records are only
    stored; the status bar picks the latest one up on the next tick.
    """

    def __init__(self) -> None:
        super().__init__()
        self.last_message: str = ""

    def emit(self, record: logging.LogRecord) -> None:
        self.last_message = self.format(record)


class PaneWidget(Static, can_focus=True):
    """Draws one pane snapshot and forwards keys to its session."""

    def __init__(self, session: PaneSession, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session = session

    def show_view(self, view: PaneView, border_allowance: float) -> None:
        snap = view.snapshot
        self.styles.width = max(int(snap.width + border_allowance), 1)
        self.styles.height = max(int(snap.height), 1)
        self.styles.background = snap.background
        border_color = snap.palette.primary if snap.active else INACTIVE_BORDER
        self.styles.border = ("heavy" if snap.active else "round", border_color)
        self.border_title = snap.title
        subtitle = "raw" if snap.raw_mode else ""
        if snap.exited:
            subtitle = "exited"
        self.border_subtitle = subtitle

        background = snap.background.rich_color
        rows = max(int(snap.height) - self.session.config.chrome_rows, 1)
        lines = split_lines(snap.segments)[-rows:]

        # Lines are cropped rather than wrapped so the newest output stays visible
        text = Text(no_wrap=True, overflow="crop")
        for idx, line in enumerate(lines):
            if idx:
                text.append("\n")
            for seg in line:
                text.append(
                    seg.text,
                    Style(color=seg.color.rich_color, bgcolor=background, bold=seg.bold),
                )
        if snap.active and not snap.raw_mode:
            style = Style(color=snap.text_color.rich_color, bgcolor=background)
            text.append(snap.input_buffer, style)
            text.append(CURSOR_ON if snap.cursor_visible else CURSOR_OFF, style)
        self.update(text)

    def on_click(self, event: events.Click) -> None:
        self.session.request_activate()

    def on_key(self, event: events.Key) -> None:
        input_event = to_input_event(event.key, event.character)
        if input_event is None:
            return
        event.stop()
        event.prevent_default()
        self.session.submit_input(input_event)


class TitleInput(Input):
    """Pane title editor. Escape or losing focus abandons the edit."""

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False)]

    class Cancelled(Message):
        pass

    def action_cancel(self) -> None:
        self.post_message(self.Cancelled())

    def on_blur(self, event: events.Blur) -> None:
        self.post_message(self.Cancelled())


class SigmuxApp(App):
    """sigmux — a grid of shells in one terminal."""

    TITLE = "sigmux"
    CSS = """
    #panes {
        height: 1fr;
    }

    .pane-row {
        height: auto;
    }

    PaneWidget {
        padding: 0;
        overflow: hidden;
    }

    #rename {
        dock: bottom;
        display: none;
    }

    #rename.visible {
        display: block;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("f2", "new_pane", "New", priority=True),
        Binding("f3", "rename", "Rename", priority=True),
        Binding("f4", "close_pane", "Close", priority=True),
        Binding("f5", "toggle_maximize", "Max/Grid", priority=True),
        Binding("f6", "toggle_dark", "Light/Dark", priority=True),
        Binding("f7", "cycle(-1)", "Prev", priority=True),
        Binding("f8", "cycle(1)", "Next", priority=True),
        Binding("ctrl+c", "interrupt", "Interrupt", show=False, priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, config: SigmuxConfig, mux: PaneMultiplexer | None = None) -> None:
        super().__init__()
        self.config = config
        self.mux = mux or PaneMultiplexer(config)
        self._log_handler: TUILogHandler | None = None
        self._tick_timer: Timer | None = None
        self._widgets: dict[int, PaneWidget] = {}
        self._layout_key: tuple[tuple[int, int], ...] = ()
        self._renaming: PaneSession | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="panes"):
            yield Horizontal(id="top-row", classes="pane-row")
            yield Horizontal(id="bottom-row", classes="pane-row")
        yield TitleInput(id="rename", placeholder="Pane title")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self._install_log_handler()
        self.call_after_refresh(self._spawn_initial_panes)
        self._tick_timer = self.set_interval(TICK_INTERVAL, self._tick)

    def on_unmount(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.stop()
        if self._log_handler is not None:
            logging.getLogger().removeHandler(self._log_handler)
        self.mux.shutdown()

    def _install_log_handler(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            if not isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
        self._log_handler = TUILogHandler()
        self._log_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(self._log_handler)

    def _area(self) -> tuple[float, float]:
        size = self.query_one("#panes", Vertical).size
        return float(size.width), float(size.height)

    def _spawn_initial_panes(self) -> None:
        width, height = self._area()
        for _ in range(self.config.layout.initial_panes):
            if isinstance(self.mux.add(width, height), CapacityRejected):
                break

    # --- Tick ---

    def _tick(self) -> None:
        width, height = self._area()
        if width <= 0 or height <= 0:
            return
        views = self.mux.tick(width, height)
        self._sync_widgets(views)
        border = self.config.layout.border_allowance
        for view in views:
            self._widgets[view.snapshot.pane_id].show_view(view, border)
        self._focus_active()
        self._update_status()

    def _sync_widgets(self, views: list[PaneView]) -> None:
        """Remount pane widgets when the set of visible panes or their rows change."""
        layout_key = tuple((v.snapshot.pane_id, v.row) for v in views)
        if layout_key == self._layout_key:
            return
        self._layout_key = layout_key

        for widget in self._widgets.values():
            widget.remove()
        self._widgets.clear()

        sessions = {s.pane_id: s for s in self.mux.sessions}
        rows = (
            self.query_one("#top-row", Horizontal),
            self.query_one("#bottom-row", Horizontal),
        )
        for pane_id, row in layout_key:
            session = sessions.get(pane_id)
            if session is None:
                continue
            widget = PaneWidget(session)
            self._widgets[pane_id] = widget
            rows[row].mount(widget)

        # Drop views whose pane went away during signal dispatch
        views[:] = [v for v in views if v.snapshot.pane_id in self._widgets]

    def _focus_active(self) -> None:
        if self._renaming is not None:
            return
        session = self.mux.active_session
        if session is None:
            return
        widget = self._widgets.get(session.pane_id)
        if widget is not None and self.focused is not widget:
            widget.focus()

    def _update_status(self) -> None:
        status = self.query_one("#status-bar", Static)
        active = self.mux.active_slot
        parts = [
            f"Panes: {len(self.mux)}/{self.mux.max_panes}",
            f"Mode: {self.mux.display_mode.value}",
            f"Active: {'-' if active is None else active}",
        ]
        last_log = self._log_handler.last_message if self._log_handler else ""
        if last_log:
            if len(last_log) > 80:
                last_log = last_log[:77] + "..."
            parts.append(f"[dim]{last_log}[/dim]")
        status.update(" | ".join(parts))

    # --- Actions ---

    def action_new_pane(self) -> None:
        width, height = self._area()
        result = self.mux.add(width, height)
        if isinstance(result, CapacityRejected):
            self.notify(f"At most {result.limit} panes", severity="warning")

    def action_close_pane(self) -> None:
        session = self.mux.active_session
        if session is not None:
            session.request_close()

    def action_toggle_maximize(self) -> None:
        session = self.mux.active_session
        if session is None:
            return
        if self.mux.display_mode == DisplayMode.GRID:
            session.request_maximize()
        else:
            session.request_minimize()

    def action_toggle_dark(self) -> None:
        self.mux.set_dark_mode(not self.mux.dark_mode)

    def action_cycle(self, step: int) -> None:
        self.mux.cycle(step)

    def action_rename(self) -> None:
        session = self.mux.active_session
        if session is None:
            return
        session.begin_title_edit()
        self._renaming = session
        rename = self.query_one("#rename", TitleInput)
        rename.value = session.title
        rename.add_class("visible")
        rename.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "rename":
            return
        if self._renaming is not None:
            self._renaming.rename(event.value)
        self._end_rename()

    def on_title_input_cancelled(self, event: TitleInput.Cancelled) -> None:
        if self._renaming is None:
            return
        self._renaming.stop_title_edit()
        self._end_rename()

    def _end_rename(self) -> None:
        self._renaming = None
        self.query_one("#rename", TitleInput).remove_class("visible")
        self._focus_active()

    def action_interrupt(self) -> None:
        """Send Ctrl+C to the active pane instead of quitting."""
        session = self.mux.active_session
        if session is None or self._renaming is not None:
            return
        session.submit_input(KeyEvent.ctrl("c"))
