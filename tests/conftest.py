"""Pytest configuration and shared fixtures for Agent Panel tests."""

import pytest

from agentpanel.backends.base import (
    ProcessRecord,
    TerminalBackend,
    TransportError,
    WindowSnapshot,
)
from agentpanel.models.session import Session, SessionStatus


def make_window(
    window_id: int,
    *cmdlines: list[str],
    tab_id: int = 1,
    title: str = "",
    tab_title: str = "",
    cwd: str = "",
) -> WindowSnapshot:
    """Build a WindowSnapshot with one process per command line."""
    return WindowSnapshot(
        window_id=window_id,
        tab_id=tab_id,
        title=title,
        tab_title=tab_title,
        cwd=cwd,
        processes=tuple(
            ProcessRecord(pid=1000 + i, cmdline=tuple(c)) for i, c in enumerate(cmdlines)
        ),
    )


def make_session(
    window_id: int,
    ai: str = "claude",
    title: str = "",
    status: SessionStatus = SessionStatus.IDLE,
    tab_id: int | None = None,
    cwd: str = "",
    lines: list[str] | None = None,
) -> Session:
    """Build a Session with sensible defaults."""
    return Session(
        window_id=window_id,
        tab_id=window_id if tab_id is None else tab_id,
        title=title or f"win-{window_id}",
        cwd=cwd,
        ai=ai,
        status=status,
        lines=lines or [],
    )


class FakeBackend(TerminalBackend):
    """In-memory backend recording the commands it receives."""

    def __init__(self, windows=None, texts=None):
        self.windows = list(windows or [])
        self.texts = dict(texts or {})
        self.list_error: TransportError | None = None
        self.command_error: TransportError | None = None
        self.focused: list[int] = []
        self.renamed: list[tuple[int, str]] = []

    @property
    def backend_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return True

    def list_windows(self) -> list[WindowSnapshot]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.windows)

    def get_window_text(self, window_id: int) -> str:
        text = self.texts.get(window_id, "")
        if isinstance(text, TransportError):
            raise text
        return text

    def focus_window(self, window_id: int) -> None:
        if self.command_error is not None:
            raise self.command_error
        self.focused.append(window_id)

    def rename_window(self, window_id: int, title: str) -> None:
        if self.command_error is not None:
            raise self.command_error
        self.renamed.append((window_id, title))


@pytest.fixture
def fake_backend():
    """An empty FakeBackend."""
    return FakeBackend()
