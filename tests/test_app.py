"""Tests for sigmux.tui.app.SigmuxApp, driven headless through Textual's pilot."""

from __future__ import annotations

import asyncio

from sigmux.mux.manager import PaneMultiplexer
from sigmux.tui.app import PaneWidget, SigmuxApp, TitleInput


def run_app(mux_config, session_factory, steps) -> SigmuxApp:
    mux = PaneMultiplexer(mux_config, session_factory=session_factory)
    app = SigmuxApp(mux_config, mux=mux)

    async def drive() -> None:
        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.pause(0.2)
            await steps(app, pilot)

    asyncio.run(drive())
    return app


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestInterrupt:
    def test_ctrl_c_reaches_active_pane(
        self, mux_config, session_factory, spawned
    ) -> None:
        async def steps(app, pilot) -> None:
            await pilot.press("ctrl+c")
            await pilot.pause()
            assert app.is_running
            assert spawned[0].written == [b"\x03"]
            assert spawned[1].written == []

        run_app(mux_config, session_factory, steps)


# ---------------------------------------------------------------------------
# Renaming
# ---------------------------------------------------------------------------


class TestRename:
    def test_enter_renames(self, mux_config, session_factory) -> None:
        async def steps(app, pilot) -> None:
            session = app.mux.active_session
            await pilot.press("f3")
            rename = app.query_one("#rename", TitleInput)
            assert rename.has_class("visible")
            assert session.editing_title
            rename.value = "build"
            await pilot.press("enter")
            await pilot.pause()
            assert session.title == "build"
            assert not session.editing_title
            assert not rename.has_class("visible")

        run_app(mux_config, session_factory, steps)

    def test_escape_cancels(self, mux_config, session_factory) -> None:
        async def steps(app, pilot) -> None:
            session = app.mux.active_session
            title = session.title
            await pilot.press("f3")
            app.query_one("#rename", TitleInput).value = "discarded"
            await pilot.press("escape")
            await pilot.pause()
            assert session.title == title
            assert not session.editing_title
            assert not app.query_one("#rename", TitleInput).has_class("visible")
            assert isinstance(app.focused, PaneWidget)

        run_app(mux_config, session_factory, steps)

    def test_focus_loss_cancels(self, mux_config, session_factory) -> None:
        async def steps(app, pilot) -> None:
            session = app.mux.active_session
            await pilot.press("f3")
            assert session.editing_title
            app.query(PaneWidget).last().focus()
            await pilot.pause()
            assert not session.editing_title
            assert not app.query_one("#rename", TitleInput).has_class("visible")
            # keys reach panes again once the edit is abandoned
            await pilot.press("x")
            await pilot.pause()
            assert any(s.input_buffer == "x" for s in app.mux.sessions)

        run_app(mux_config, session_factory, steps)
