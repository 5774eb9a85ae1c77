"""Tests for the Textual app driving polls and window commands."""

import pytest
from conftest import FakeBackend, make_window

from agentpanel.backends.base import TransportError
from agentpanel.models.config import AppConfig
from agentpanel.models.interaction import Panel
from agentpanel.models.session import SessionStatus
from agentpanel.services.session_poller import PollResult
from agentpanel.tui.app import PollCompleted, PollFailed, SessionMonitorApp


@pytest.fixture
def backend():
    return FakeBackend(
        windows=[
            make_window(1, ["claude"], title="alpha"),
            make_window(2, ["codex"], title="beta"),
        ],
        texts={1: "> \n", 2: "working\nesc to interrupt\n"},
    )


@pytest.fixture
def app(backend):
    return SessionMonitorApp(AppConfig(poll_interval=60), backend)


async def settle(app, pilot):
    """Wait for worker threads and the messages they post."""
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestPolling:
    """Tests for applying poll results."""

    @pytest.mark.asyncio
    async def test_first_poll_populates_sessions(self, app):
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            assert [s.window_id for s in app.repository.sessions] == [1, 2]
            assert set(app.fingerprints) == {1, 2}
            assert app.repository.get(2).status == SessionStatus.RUNNING
            assert app.last_update is not None

    @pytest.mark.asyncio
    async def test_failed_poll_keeps_snapshot(self, app, backend):
        """A failed poll shows the error and keeps the last sessions."""
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)
            backend.list_error = TransportError("remote control disabled")

            app.request_poll()
            await settle(app, pilot)

            assert app.error_message == "remote control disabled"
            assert len(app.repository) == 2

    @pytest.mark.asyncio
    async def test_stale_poll_dropped(self, app):
        """A result older than the applied one is ignored."""
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            app.on_poll_completed(PollCompleted(0, PollResult(sessions=[], fingerprints={})))

            assert len(app.repository) == 2

    @pytest.mark.asyncio
    async def test_stale_failure_ignored(self, app):
        """A failure from a poll older than the applied snapshot shows no error."""
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            app.on_poll_failed(PollFailed(0, TransportError("late failure")))

            assert app.error_message is None

    @pytest.mark.asyncio
    async def test_bracketed_title_renders(self, backend):
        """Window titles containing markup characters are shown literally."""
        backend.windows = [make_window(1, ["claude"], title="fix [/x] bug")]
        app = SessionMonitorApp(AppConfig(poll_interval=60), backend)
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            assert app.is_running
            assert app.repository.get(1).title == "fix [/x] bug"
            assert "[/x] bug" in str(app.query_one("#output").border_title)


class TestKeyboard:
    """Tests for key handling end to end."""

    @pytest.mark.asyncio
    async def test_enter_focuses_selected_window(self, app, backend):
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            await pilot.press("down")
            await pilot.press("enter")
            await settle(app, pilot)

            assert backend.focused == [2]

    @pytest.mark.asyncio
    async def test_rename_flow(self, app, backend):
        """r opens the prompt, edits apply, enter renames the window."""
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            await pilot.press("r")
            assert app.interaction.rename_buffer == "alpha"
            await pilot.press("backspace", "q", "space", "2")
            assert app.interaction.rename_buffer == "alphq 2"
            await pilot.press("enter")
            await settle(app, pilot)

            assert backend.renamed == [(1, "alphq 2")]
            assert not app.interaction.renaming

    @pytest.mark.asyncio
    async def test_rename_cancel(self, app, backend):
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            await pilot.press("r", "x", "escape")
            await settle(app, pilot)

            assert backend.renamed == []
            assert not app.interaction.renaming

    @pytest.mark.asyncio
    async def test_status_filter(self, app):
        """tab, down, enter filters by the second status present."""
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)

            await pilot.press("tab")
            assert app.interaction.panel == Panel.STATUS
            await pilot.press("down", "enter")

            assert app.interaction.status_filter == SessionStatus.IDLE
            assert app.interaction.panel == Panel.SESSIONS
            await pilot.pause()
            assert "[IDLE]" in str(app.query_one("#sessions").border_title)
            selected = app.machine.selected_session(app.interaction, app.repository.sessions)
            assert selected.window_id == 1

            await pilot.press("escape")
            assert app.interaction.status_filter is None
            assert "[IDLE]" not in str(app.query_one("#sessions").border_title)

    @pytest.mark.asyncio
    async def test_command_failure_shown(self, app, backend):
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)
            backend.command_error = TransportError("no such window")

            await pilot.press("enter")
            await settle(app, pilot)

            assert app.error_message == "no such window"

    @pytest.mark.asyncio
    async def test_quit(self, app):
        async with app.run_test(size=(100, 30)) as pilot:
            await settle(app, pilot)
            await pilot.press("q")
            await pilot.pause()

        assert app.return_code in (None, 0)
