"""SessionPoller - builds one session snapshot per poll cycle.

For every window the backend lists it runs the AIIdentifier, captures the
window's text, classifies it against the fingerprint remembered from the
previous poll, and returns the ordered sessions together with the new
fingerprint table. The poller keeps no state of its own between polls; the
caller owns the FingerprintTable and hands it back in on the next cycle.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from agentpanel.backends.base import TerminalBackend, TransportError, WindowSnapshot
from agentpanel.models.config import AppConfig
from agentpanel.models.session import FingerprintTable, Session
from agentpanel.services.ai_identifier import AIIdentifier
from agentpanel.services.session_repository import build_session, sort_sessions
from agentpanel.services.status_classifier import (
    StatusClassifier,
    compute_fingerprint,
    normalize_lines,
)

logger = logging.getLogger(__name__)


@dataclass
class PollResult:
    """A complete, self-contained snapshot from one poll."""

    sessions: list[Session]
    fingerprints: FingerprintTable
    window_count: int = 0
    completed_at: datetime = field(default_factory=datetime.now)


class SessionPoller:
    """Polling driver for AI sessions.

    Responsibilities:
    1. List windows via the terminal backend
    2. Identify which windows run a configured AI tool
    3. Capture and normalize each matching window's text
    4. Classify status using the previous poll's fingerprints
    5. Return the ordered snapshot and the replacement fingerprint table
    """

    def __init__(
        self,
        backend: TerminalBackend,
        config: AppConfig,
        identifier: AIIdentifier | None = None,
        classifier: StatusClassifier | None = None,
    ):
        """Initialize the poller.

        Args:
            backend: Terminal backend used to list windows and read text.
            config: Application configuration (prefixes, max_lines).
            identifier: AI identifier. Built from config.prefixes if not provided.
            classifier: Status classifier. Created if not provided.
        """
        self._backend = backend
        self._config = config
        self._identifier = identifier or AIIdentifier(config.prefixes)
        self._classifier = classifier or StatusClassifier()

    def poll(self, previous: FingerprintTable | None = None) -> PollResult:
        """Run one poll cycle.

        Args:
            previous: Fingerprints from the last applied poll, keyed by window id.

        Returns:
            PollResult with sorted sessions and the new fingerprint table.

        Raises:
            TransportError: If the window listing fails (ParseError included).
        """
        previous = previous or {}
        windows = self._backend.list_windows()
        logger.debug(f"Poll: backend returned {len(windows)} windows")

        sessions: list[Session] = []
        fingerprints: FingerprintTable = {}
        for window in windows:
            session = self._process_window(window, previous)
            if session is None:
                continue
            sessions.append(session)
            fingerprints[session.window_id] = session.fingerprint

        logger.debug(f"Poll: detected {len(sessions)} sessions")
        return PollResult(
            sessions=sort_sessions(sessions),
            fingerprints=fingerprints,
            window_count=len(windows),
        )

    def _process_window(
        self, window: WindowSnapshot, previous: FingerprintTable
    ) -> Session | None:
        """Build a Session for one window, or None if no AI tool runs there."""
        ai, found = self._identifier.identify(window)
        if not found:
            return None

        text = self._read_text(window.window_id)
        lines = normalize_lines(text, self._config.max_lines)
        fingerprint = compute_fingerprint(lines)
        status = self._classifier.classify(
            lines,
            previous_fingerprint=previous.get(window.window_id),
            current_fingerprint=fingerprint,
        )
        logger.debug(f"Window {window.window_id}: ai={ai} status={status.value} lines={len(lines)}")
        return build_session(window, ai, lines, status, fingerprint)

    def _read_text(self, window_id: int) -> str:
        """Capture window text, treating a failed capture as no content."""
        try:
            return self._backend.get_window_text(window_id)
        except TransportError as e:
            logger.warning(f"get-text failed for window {window_id}: {e}")
            return ""
