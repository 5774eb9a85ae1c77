"""Session model - an AI assistant detected in a terminal window."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Coarse activity status inferred from a window's visible text."""

    RUNNING = "RUNNING"
    """Output is changing or the tool shows an interrupt hint."""

    IDLE = "IDLE"
    """Prompt is showing, or the screen is static."""

    WAITING = "WAITING"
    """The tool is asking for approval or confirmation."""

    DONE = "DONE"
    """The tool reported that it finished (first poll only)."""


# Fixed display order for the status panel
STATUS_ORDER: tuple[SessionStatus, ...] = (
    SessionStatus.RUNNING,
    SessionStatus.IDLE,
    SessionStatus.WAITING,
    SessionStatus.DONE,
)

# window_id -> fingerprint computed on the previous poll
FingerprintTable = dict[int, str]


class Session(BaseModel):
    """A terminal window running a recognized AI tool.

    Sessions are rebuilt from scratch on every poll; only the fingerprint
    survives between polls (in the poller's FingerprintTable).
    """

    window_id: int = Field(..., description="Terminal window id (join key across polls)")
    tab_id: int = Field(..., description="Tab id, used for grouping")
    title: str = Field(default="", description="Window title, else tab title, else cwd")
    cwd: str = Field(default="", description="Working directory of the window")
    ai: str = Field(..., description="Matched AI prefix, lower-cased")
    status: SessionStatus = Field(default=SessionStatus.IDLE)
    lines: list[str] = Field(
        default_factory=list,
        description="Most recent non-empty output lines, oldest first",
    )
    fingerprint: str = Field(default="", description="Change-detection value for this poll")
    updated_at: datetime = Field(default_factory=datetime.now)
