"""Domain models for Agent Panel."""

from agentpanel.models.config import (
    AppConfig,
    KittyConfig,
    LoggingConfig,
    UIConfig,
)
from agentpanel.models.interaction import (
    Action,
    Command,
    CommandKind,
    InputEvent,
    InteractionState,
    Panel,
)
from agentpanel.models.session import STATUS_ORDER, FingerprintTable, Session, SessionStatus

__all__ = [
    # Session
    "FingerprintTable",
    "STATUS_ORDER",
    "Session",
    "SessionStatus",
    # Interaction
    "Action",
    "Command",
    "CommandKind",
    "InputEvent",
    "InteractionState",
    "Panel",
    # Config
    "AppConfig",
    "KittyConfig",
    "LoggingConfig",
    "UIConfig",
]
