"""Terminal backend implementations."""

from agentpanel.backends.base import (
    ParseError,
    ProcessRecord,
    TerminalBackend,
    TransportError,
    WindowSnapshot,
)
from agentpanel.backends.kitty import KittyBackend

__all__ = [
    "KittyBackend",
    "ParseError",
    "ProcessRecord",
    "TerminalBackend",
    "TransportError",
    "WindowSnapshot",
]
