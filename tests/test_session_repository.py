"""Tests for SessionRepository and its ordering/filtering helpers."""

import pytest
from conftest import make_session, make_window

from agentpanel.models.session import SessionStatus
from agentpanel.services.session_repository import (
    SessionRepository,
    available_statuses,
    build_session,
    filter_by_status,
    sort_sessions,
)


@pytest.fixture
def mixed_sessions():
    """Sessions in discovery order with varied AI names and statuses."""
    return [
        make_session(1, ai="codex", title="beta", status=SessionStatus.RUNNING),
        make_session(2, ai="claude", title="zeta", status=SessionStatus.IDLE),
        make_session(3, ai="claude", title="alpha", status=SessionStatus.WAITING),
        make_session(4, ai="gemini", title="alpha", status=SessionStatus.IDLE),
        make_session(5, ai="codex", title="alpha", status=SessionStatus.IDLE),
    ]


class TestBuildSession:
    """Tests for building a Session from a window."""

    def test_uses_window_title(self):
        """The window title wins when present."""
        window = make_window(7, tab_id=3, title="win", tab_title="tab", cwd="/src/app")
        session = build_session(window, "claude", ["x"], SessionStatus.IDLE, "x")
        assert session.title == "win"
        assert session.window_id == 7
        assert session.tab_id == 3
        assert session.cwd == "/src/app"
        assert session.fingerprint == "x"

    def test_falls_back_to_tab_title(self):
        """The tab title is used when the window title is empty."""
        window = make_window(7, title="", tab_title="tab", cwd="/src/app")
        assert build_session(window, "claude", [], SessionStatus.IDLE, "").title == "tab"

    def test_falls_back_to_cwd(self):
        """The cwd is used when both titles are empty."""
        window = make_window(7, cwd="/src/app")
        assert build_session(window, "claude", [], SessionStatus.IDLE, "").title == "/src/app"


class TestSortSessions:
    """Tests for deterministic ordering."""

    def test_orders_by_ai_then_title(self, mixed_sessions):
        """AI name is the primary key, title the secondary key."""
        ordered = sort_sessions(mixed_sessions)
        assert [(s.ai, s.title) for s in ordered] == [
            ("claude", "alpha"),
            ("claude", "zeta"),
            ("codex", "alpha"),
            ("codex", "beta"),
            ("gemini", "alpha"),
        ]

    def test_ties_keep_discovery_order(self):
        """Equal keys keep the order windows were discovered in."""
        sessions = [make_session(9, title="same"), make_session(2, title="same")]
        assert [s.window_id for s in sort_sessions(sessions)] == [9, 2]

    def test_sorting_twice_is_stable(self, mixed_sessions):
        """Sorting an ordered list changes nothing."""
        once = sort_sessions(mixed_sessions)
        assert sort_sessions(once) == once


class TestFilterByStatus:
    """Tests for status filtering."""

    def test_no_filter_returns_all(self, mixed_sessions):
        """None and "" both mean no filtering."""
        assert filter_by_status(mixed_sessions, None) == mixed_sessions
        assert filter_by_status(mixed_sessions, "") == mixed_sessions

    def test_filter_preserves_order(self, mixed_sessions):
        """Matching sessions keep their relative order."""
        idle = filter_by_status(mixed_sessions, SessionStatus.IDLE)
        assert [s.window_id for s in idle] == [2, 4, 5]

    def test_filter_accepts_string(self, mixed_sessions):
        """A status value string works as a filter."""
        assert [s.window_id for s in filter_by_status(mixed_sessions, "WAITING")] == [3]

    def test_filter_is_idempotent(self, mixed_sessions):
        """Filtering twice by the same status gives the same list."""
        once = filter_by_status(mixed_sessions, SessionStatus.IDLE)
        assert filter_by_status(once, SessionStatus.IDLE) == once

    def test_filter_without_matches(self, mixed_sessions):
        """A status with no sessions yields an empty list."""
        assert filter_by_status(mixed_sessions, SessionStatus.DONE) == []


class TestAvailableStatuses:
    """Tests for the distinct status list."""

    def test_fixed_order(self, mixed_sessions):
        """Statuses come out in RUNNING, IDLE, WAITING, DONE order."""
        assert available_statuses(mixed_sessions) == [
            SessionStatus.RUNNING,
            SessionStatus.IDLE,
            SessionStatus.WAITING,
        ]

    def test_empty(self):
        """No sessions, no statuses."""
        assert available_statuses([]) == []


class TestSessionRepository:
    """Tests for the repository container."""

    def test_sorts_on_replace(self, mixed_sessions):
        """replace() stores sessions in display order."""
        repo = SessionRepository()
        repo.replace(mixed_sessions)
        assert [s.window_id for s in repo.sessions] == [3, 2, 5, 1, 4]

    def test_replace_is_wholesale(self, mixed_sessions):
        """A new snapshot drops sessions that disappeared."""
        repo = SessionRepository(mixed_sessions)
        repo.replace([make_session(42)])
        assert [s.window_id for s in repo.sessions] == [42]
        assert len(repo) == 1

    def test_counts(self, mixed_sessions):
        """Per-status and per-tab counts."""
        sessions = mixed_sessions + [make_session(6, tab_id=1, status=SessionStatus.IDLE)]
        repo = SessionRepository(sessions)
        assert repo.status_counts()[SessionStatus.IDLE] == 4
        assert repo.tab_counts()[1] == 2

    def test_get(self, mixed_sessions):
        """Lookup by window id."""
        repo = SessionRepository(mixed_sessions)
        assert repo.get(4).ai == "gemini"
        assert repo.get(99) is None

    def test_filtered_and_statuses(self, mixed_sessions):
        """Repository delegates to the filter helpers."""
        repo = SessionRepository(mixed_sessions)
        assert [s.window_id for s in repo.filtered(SessionStatus.IDLE)] == [2, 5, 4]
        assert repo.available_statuses()[0] == SessionStatus.RUNNING
