"""Pane multiplexer — arranges pane sessions into a grid or a single view."""

from __future__ import annotations

import enum
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sigmux.config import SigmuxConfig
from sigmux.pty.session import PaneSession, PaneSignal, RenderSnapshot

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., PaneSession]


class DisplayMode(enum.StrEnum):
    GRID = "grid"
    SINGLE = "single"


@dataclass(frozen=True)
class CapacityRejected:
    """Returned by :meth:`PaneMultiplexer.add` when no more panes fit."""

    limit: int


@dataclass(frozen=True)
class PaneView:
    """One visible pane for this tick: where it sits and what to draw."""

    slot: int
    row: int  # 0 = top, 1 = bottom
    snapshot: RenderSnapshot


class PaneMultiplexer:
    """Owns every pane session and decides where each one is drawn.

    Sessions live in an arena keyed by a stable pane id; a pane's slot is its
    position in creation order and is renumbered densely on removal. The
    active pane is tracked by id, so removing an earlier pane shifts its
    slot down without any bookkeeping.

    All methods run on the single render thread.
    """

    def __init__(
        self,
        config: SigmuxConfig | None = None,
        session_factory: SessionFactory = PaneSession.spawn,
    ) -> None:
        self._config = config or SigmuxConfig()
        self._session_factory = session_factory
        self._sessions: dict[int, PaneSession] = {}
        self._order: list[int] = []  # pane ids, index = slot
        self._ids = itertools.count()
        self._active_id: int | None = None
        self._mode = DisplayMode.GRID
        self._hue = self._config.layout.initial_hue
        self._dark_mode = self._config.layout.dark_mode
        self._top_row: list[int] = []
        self._bottom_row: list[int] = []
        self._width = 0.0
        self._height = 0.0

    # --- Queries ---

    @property
    def max_panes(self) -> int:
        return self._config.layout.max_panes

    @property
    def display_mode(self) -> DisplayMode:
        return self._mode

    @property
    def active_slot(self) -> int | None:
        if self._active_id is None:
            return None
        return self._order.index(self._active_id)

    @property
    def active_session(self) -> PaneSession | None:
        if self._active_id is None:
            return None
        return self._sessions[self._active_id]

    @property
    def top_row(self) -> list[int]:
        return list(self._top_row)

    @property
    def bottom_row(self) -> list[int]:
        return list(self._bottom_row)

    @property
    def sessions(self) -> list[PaneSession]:
        """Live sessions in slot order."""
        return [self._sessions[pid] for pid in self._order]

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    def session(self, slot: int) -> PaneSession | None:
        if 0 <= slot < len(self._order):
            return self._sessions[self._order[slot]]
        return None

    def visible_slots(self) -> list[int]:
        if self._mode == DisplayMode.SINGLE:
            active = self.active_slot
            return [] if active is None else [active]
        return self._top_row + self._bottom_row

    def __len__(self) -> int:
        return len(self._order)

    # --- Pane lifecycle ---

    def add(self, width: float, height: float) -> int | CapacityRejected:
        """Spawn a new pane.

        Returns:
            The new pane's slot, or :class:`CapacityRejected` if the pane
            limit is reached (live set unchanged).
        """
        if len(self._order) >= self.max_panes:
            logger.warning("Pane limit reached (%d), not adding", self.max_panes)
            return CapacityRejected(self.max_panes)

        pane_id = next(self._ids)
        slot = len(self._order)
        session = self._session_factory(
            pane_id=pane_id,
            slot=slot,
            width=width,
            height=height,
            hue=self._hue % 360.0,
            config=self._config.session,
        )
        session.set_dark_mode(self._dark_mode)
        self._hue += self._config.layout.hue_step

        self._sessions[pane_id] = session
        self._order.append(pane_id)
        if self._active_id is None:
            self._activate(pane_id)

        self.arrange()
        self.resize(width, height)
        logger.info("Added pane %d at slot %d", pane_id, slot)
        return slot

    def remove(self, slot: int, width: float, height: float) -> bool:
        """Terminate and drop the pane at ``slot``. Returns False if no such slot."""
        if not 0 <= slot < len(self._order):
            return False

        pane_id = self._order.pop(slot)
        session = self._sessions.pop(pane_id)
        session.terminate()

        for new_slot, pid in enumerate(self._order):
            self._sessions[pid].slot = new_slot

        if self._active_id == pane_id:
            self._active_id = None
            if self._order:
                self._activate(self._order[0])
        if not self._order:
            self._mode = DisplayMode.GRID

        self.arrange()
        self.resize(width, height)
        logger.info("Removed pane %d from slot %d", pane_id, slot)
        return True

    def shutdown(self) -> None:
        """Terminate every pane. Called on exit."""
        for pane_id in list(self._order):
            self._sessions.pop(pane_id).terminate()
        self._order.clear()
        self._active_id = None
        self._mode = DisplayMode.GRID
        self.arrange()
        logger.info("All panes shut down")

    # --- Layout ---

    def arrange(self) -> None:
        """Partition slots into the top and bottom rows."""
        n = len(self._order)
        if n <= 2:
            self._top_row = list(range(n))
            self._bottom_row = []
        else:
            mid = n // 2
            self._top_row = list(range(mid))
            self._bottom_row = list(range(mid, n))

    def resize(self, width: float, height: float) -> None:
        """Recompute every pane's geometry for the available area."""
        self._width = width
        self._height = height
        border = self._config.layout.border_allowance

        single = self._active_id if self._mode == DisplayMode.SINGLE else None
        if single is not None:
            self._sessions[single].resize(max(width - border, 0.0), height)

        rows = [row for row in (self._top_row, self._bottom_row) if row]
        row_height = height / max(len(rows), 1)
        for row in rows:
            pane_width = max(width / len(row) - border, 0.0)
            for slot in row:
                pane_id = self._order[slot]
                if pane_id != single:
                    self._sessions[pane_id].resize(pane_width, row_height)

    # --- Activation and display mode ---

    def _activate(self, pane_id: int) -> None:
        for pid, session in self._sessions.items():
            session.set_active(pid == pane_id)
        self._active_id = pane_id

    def select(self, slot: int) -> bool:
        """Make ``slot`` the active pane; in single mode it takes over the view."""
        if not 0 <= slot < len(self._order):
            return False
        self._activate(self._order[slot])
        self.resize(self._width, self._height)
        return True

    def cycle(self, step: int = 1) -> bool:
        """Select the pane ``step`` slots after the active one, wrapping."""
        if not self._order:
            return False
        current = self.active_slot or 0
        return self.select((current + step) % len(self._order))

    def maximize(self, slot: int) -> bool:
        if not self.select(slot):
            return False
        self._mode = DisplayMode.SINGLE
        self.resize(self._width, self._height)
        return True

    def minimize(self) -> None:
        self._mode = DisplayMode.GRID
        self.resize(self._width, self._height)

    def set_dark_mode(self, dark_mode: bool) -> None:
        self._dark_mode = dark_mode
        for session in self._sessions.values():
            session.set_dark_mode(dark_mode)

    def dispatch(self, slot: int, signal: PaneSignal) -> None:
        """Apply a signal emitted by the pane at ``slot``."""
        if not 0 <= slot < len(self._order):
            logger.debug("Dropping %s for unknown slot %d", signal.value, slot)
            return
        if signal is PaneSignal.ACTIVATED:
            self.select(slot)
        elif signal is PaneSignal.CLOSE_REQUESTED:
            self.remove(slot, self._width, self._height)
        elif signal is PaneSignal.MAXIMIZE_REQUESTED:
            self.maximize(slot)
        elif signal is PaneSignal.MINIMIZE_REQUESTED:
            self.minimize()

    # --- Tick ---

    def tick(
        self, width: float, height: float, now: float | None = None
    ) -> list[PaneView]:
        """Run one render tick.

        Resizes, snapshots every visible pane (draining output of hidden
        panes too so their children never block on a full pty), then applies
        the signals panes raised. Signals are handled after the walk so the
        pane set never changes mid-iteration.
        """
        self.resize(width, height)

        visible = set(self.visible_slots())
        views: list[PaneView] = []
        for slot, pane_id in enumerate(self._order):
            session = self._sessions[pane_id]
            if slot not in visible:
                session.poll_output()
                continue
            row = 0 if slot in self._top_row or self._mode == DisplayMode.SINGLE else 1
            views.append(PaneView(slot, row, session.snapshot_for_render(now)))

        pending = [
            (pane_id, sig)
            for pane_id in list(self._order)
            if (sig := self._sessions[pane_id].take_signal()) is not None
        ]
        for pane_id, sig in pending:
            if pane_id in self._sessions:
                self.dispatch(self._order.index(pane_id), sig)

        return views
