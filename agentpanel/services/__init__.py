"""Services for Agent Panel."""

from agentpanel.services.ai_identifier import AIIdentifier, token_matches
from agentpanel.services.config_service import (
    ConfigService,
    parse_duration,
    resolve_kitty_socket,
)
from agentpanel.services.interaction_machine import (
    InteractionMachine,
    TransitionResult,
    event_for_key,
)
from agentpanel.services.session_poller import PollResult, SessionPoller
from agentpanel.services.session_repository import (
    SessionRepository,
    available_statuses,
    build_session,
    filter_by_status,
    sort_sessions,
)
from agentpanel.services.status_classifier import (
    StatusClassifier,
    compute_fingerprint,
    normalize_lines,
)

__all__ = [
    # Identification
    "AIIdentifier",
    "token_matches",
    # Classification
    "StatusClassifier",
    "compute_fingerprint",
    "normalize_lines",
    # Repository
    "SessionRepository",
    "available_statuses",
    "build_session",
    "filter_by_status",
    "sort_sessions",
    # Polling
    "PollResult",
    "SessionPoller",
    # Interaction
    "InteractionMachine",
    "TransitionResult",
    "event_for_key",
    # Config
    "ConfigService",
    "parse_duration",
    "resolve_kitty_socket",
]
