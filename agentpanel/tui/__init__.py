"""Terminal UI for Agent Panel."""

from agentpanel.tui.app import SessionMonitorApp

__all__ = ["SessionMonitorApp"]
