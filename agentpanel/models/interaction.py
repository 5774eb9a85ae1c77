"""Interaction models: UI state, input events and side-effect commands."""

from dataclasses import dataclass
from enum import Enum

from agentpanel.models.session import SessionStatus


class Panel(str, Enum):
    """Which panel has keyboard focus while browsing."""

    SESSIONS = "sessions"
    STATUS = "status"


class Action(str, Enum):
    """Abstract input events accepted by the interaction state machine."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    CONFIRM = "confirm"
    RENAME_START = "rename_start"
    SWITCH_PANEL = "switch_panel"
    CLEAR = "clear"
    """Clear the status filter (browsing)."""

    CANCEL = "cancel"
    """Discard the rename buffer (renaming)."""

    DELETE_CHAR = "delete_char"
    APPEND_CHAR = "append_char"
    APPEND_SPACE = "append_space"
    QUIT = "quit"


@dataclass(frozen=True)
class InputEvent:
    """One input event, with the typed text for APPEND_CHAR."""

    action: Action
    text: str = ""


class CommandKind(str, Enum):
    """Side effects requested by a transition."""

    FOCUS_WINDOW = "focus_window"
    RENAME_WINDOW = "rename_window"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    """A side-effecting command for the outer driver to execute."""

    kind: CommandKind
    window_id: int | None = None
    title: str | None = None


@dataclass(frozen=True)
class InteractionState:
    """UI-facing selection, filter and rename state.

    Instances are immutable; every transition returns a new one. The rename
    buffer is a str, so edits always operate on whole characters.
    """

    panel: Panel = Panel.SESSIONS
    selected: int = 0
    status_selected: int = 0
    status_filter: SessionStatus | None = None
    rename_buffer: str | None = None
    rename_target: int | None = None  # window_id selected when renaming started

    @property
    def renaming(self) -> bool:
        """True while the modal rename prompt is open."""
        return self.rename_buffer is not None
