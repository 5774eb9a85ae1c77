"""SessionRepository - the ordered set of sessions detected in one poll."""

from collections import Counter
from collections.abc import Iterable, Sequence

from agentpanel.backends.base import WindowSnapshot
from agentpanel.models.session import STATUS_ORDER, Session, SessionStatus


def build_session(
    window: WindowSnapshot,
    ai: str,
    lines: list[str],
    status: SessionStatus,
    fingerprint: str,
) -> Session:
    """Create the Session for a window that matched an AI tool."""
    return Session(
        window_id=window.window_id,
        tab_id=window.tab_id,
        title=window.display_title,
        cwd=window.cwd,
        ai=ai,
        status=status,
        lines=lines,
        fingerprint=fingerprint,
    )


def sort_sessions(sessions: Iterable[Session]) -> list[Session]:
    """Order sessions by AI name, then by title.

    The sort is stable, so sessions with equal keys keep discovery order.
    """
    return sorted(sessions, key=lambda s: (s.ai, s.title))


def filter_by_status(
    sessions: Sequence[Session], status: SessionStatus | str | None
) -> list[Session]:
    """Project the sessions whose status equals the filter.

    Args:
        sessions: Sessions in display order.
        status: Active filter. None or "" returns every session.

    Returns:
        Matching sessions, relative order preserved.
    """
    if not status:
        return list(sessions)
    wanted = SessionStatus(status)
    return [s for s in sessions if s.status == wanted]


def available_statuses(sessions: Iterable[Session]) -> list[SessionStatus]:
    """Distinct statuses present, in the fixed RUNNING/IDLE/WAITING/DONE order."""
    present = {s.status for s in sessions}
    return [status for status in STATUS_ORDER if status in present]


class SessionRepository:
    """Holds the session snapshot from the most recent applied poll.

    The snapshot is replaced wholesale, never merged.
    """

    def __init__(self, sessions: Iterable[Session] = ()):
        """Initialize the repository.

        Args:
            sessions: Initial sessions; they are sorted on the way in.
        """
        self._sessions: tuple[Session, ...] = tuple(sort_sessions(sessions))

    @property
    def sessions(self) -> tuple[Session, ...]:
        """All sessions in display order."""
        return self._sessions

    def replace(self, sessions: Iterable[Session]) -> None:
        """Replace the snapshot with a new poll's sessions."""
        self._sessions = tuple(sort_sessions(sessions))

    def filtered(self, status: SessionStatus | str | None) -> list[Session]:
        """Sessions matching the status filter (all when the filter is empty)."""
        return filter_by_status(self._sessions, status)

    def available_statuses(self) -> list[SessionStatus]:
        """Distinct statuses present in the snapshot."""
        return available_statuses(self._sessions)

    def status_counts(self) -> dict[SessionStatus, int]:
        """Number of sessions per status."""
        return dict(Counter(s.status for s in self._sessions))

    def tab_counts(self) -> dict[int, int]:
        """Number of sessions per tab id."""
        return dict(Counter(s.tab_id for s in self._sessions))

    def get(self, window_id: int) -> Session | None:
        """Find a session by window id."""
        for session in self._sessions:
            if session.window_id == window_id:
                return session
        return None

    def __len__(self) -> int:
        return len(self._sessions)
