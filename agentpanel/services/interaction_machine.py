"""Interaction state machine for the session panels.

Two modes:

```
Browsing (focus: Sessions <-> Status) --r--> Renaming --enter/esc--> Browsing
```

Transitions are pure: they take the current InteractionState, one
InputEvent and the unfiltered session snapshot, and return a new state plus
the commands (focus, rename, quit) the outer driver should execute.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from agentpanel.models.interaction import (
    Action,
    Command,
    CommandKind,
    InputEvent,
    InteractionState,
    Panel,
)
from agentpanel.models.session import Session
from agentpanel.services.session_repository import available_statuses, filter_by_status

# Key name -> action while browsing
BROWSING_KEYS: dict[str, Action] = {
    "up": Action.MOVE_UP,
    "k": Action.MOVE_UP,
    "down": Action.MOVE_DOWN,
    "j": Action.MOVE_DOWN,
    "enter": Action.CONFIRM,
    "r": Action.RENAME_START,
    "tab": Action.SWITCH_PANEL,
    "escape": Action.CLEAR,
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
}

# Key name -> action while renaming; printable characters are appended
RENAMING_KEYS: dict[str, Action] = {
    "enter": Action.CONFIRM,
    "escape": Action.CANCEL,
    "backspace": Action.DELETE_CHAR,
    "space": Action.APPEND_SPACE,
}


def event_for_key(key: str, character: str | None, renaming: bool) -> InputEvent | None:
    """Translate a key press into an InputEvent.

    Args:
        key: Key name (e.g. "enter", "up", "q").
        character: The printable character for the key, if any.
        renaming: Whether the rename prompt is open.

    Returns:
        The InputEvent, or None when the key means nothing in this mode.
    """
    if renaming:
        action = RENAMING_KEYS.get(key)
        if action is not None:
            return InputEvent(action)
        if character and character.isprintable():
            return InputEvent(Action.APPEND_CHAR, character)
        return None

    action = BROWSING_KEYS.get(key)
    return InputEvent(action) if action is not None else None


def clamp_index(index: int, length: int) -> int:
    """Clamp an index into [0, length), falling back to 0 for empty lists."""
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


@dataclass(frozen=True)
class TransitionResult:
    """Result of handling one input event."""

    state: InteractionState
    commands: tuple[Command, ...] = ()


class InteractionMachine:
    """Keyboard-driven selection, filter and rename state machine.

    Browsing, Sessions panel:
    - move up/down: move the selection, clamped, no wraparound
    - confirm: focus the selected session's window
    - rename start: open the rename prompt seeded with the session title
    - switch panel: focus the Status panel

    Browsing, Status panel:
    - move up/down: move among present statuses, wrapping at both ends
    - confirm: toggle that status as the filter, reset selection, back to Sessions
    - switch panel: back to Sessions

    Browsing, either panel:
    - clear: drop the filter, back to Sessions
    - quit: request exit

    Renaming:
    - confirm: rename the window chosen when renaming began
    - cancel: close the prompt without renaming
    - delete char / append char / append space: edit the buffer
    """

    def handle(
        self,
        state: InteractionState,
        event: InputEvent,
        sessions: Sequence[Session],
    ) -> TransitionResult:
        """Apply one input event.

        Args:
            state: Current interaction state.
            event: The input event.
            sessions: Unfiltered sessions in display order.

        Returns:
            TransitionResult with the new state and any commands.
        """
        if state.renaming:
            return self._handle_renaming(state, event)
        if event.action == Action.QUIT:
            return TransitionResult(state, (Command(CommandKind.QUIT),))
        if event.action == Action.CLEAR:
            return TransitionResult(replace(state, status_filter=None, panel=Panel.SESSIONS))
        if state.panel == Panel.STATUS:
            return self._handle_status_panel(state, event, sessions)
        return self._handle_sessions_panel(state, event, sessions)

    def reconcile(self, state: InteractionState, sessions: Sequence[Session]) -> InteractionState:
        """Clamp selection indices after a new snapshot arrives."""
        filtered = filter_by_status(sessions, state.status_filter)
        statuses = available_statuses(sessions)
        selected = clamp_index(state.selected, len(filtered))
        status_selected = clamp_index(state.status_selected, len(statuses))
        if selected == state.selected and status_selected == state.status_selected:
            return state
        return replace(state, selected=selected, status_selected=status_selected)

    def selected_session(
        self, state: InteractionState, sessions: Sequence[Session]
    ) -> Session | None:
        """The session under the Sessions-panel cursor, if any."""
        filtered = filter_by_status(sessions, state.status_filter)
        if 0 <= state.selected < len(filtered):
            return filtered[state.selected]
        return None

    def _handle_sessions_panel(
        self,
        state: InteractionState,
        event: InputEvent,
        sessions: Sequence[Session],
    ) -> TransitionResult:
        filtered = filter_by_status(sessions, state.status_filter)
        selected = clamp_index(state.selected, len(filtered))
        action = event.action

        if action in (Action.MOVE_UP, Action.MOVE_DOWN):
            step = -1 if action == Action.MOVE_UP else 1
            moved = clamp_index(selected + step, len(filtered))
            return TransitionResult(replace(state, selected=moved))
        if action == Action.SWITCH_PANEL:
            return TransitionResult(replace(state, panel=Panel.STATUS))
        if action == Action.CONFIRM:
            if not filtered:
                return TransitionResult(state)
            target = filtered[selected]
            return TransitionResult(
                replace(state, selected=selected),
                (Command(CommandKind.FOCUS_WINDOW, window_id=target.window_id),),
            )
        if action == Action.RENAME_START:
            if not filtered:
                return TransitionResult(state)
            target = filtered[selected]
            return TransitionResult(
                replace(
                    state,
                    selected=selected,
                    rename_buffer=target.title,
                    rename_target=target.window_id,
                )
            )
        return TransitionResult(state)

    def _handle_status_panel(
        self,
        state: InteractionState,
        event: InputEvent,
        sessions: Sequence[Session],
    ) -> TransitionResult:
        statuses = available_statuses(sessions)
        action = event.action

        if action == Action.SWITCH_PANEL:
            return TransitionResult(replace(state, panel=Panel.SESSIONS))
        if not statuses:
            return TransitionResult(state)

        if action == Action.MOVE_UP:
            index = (clamp_index(state.status_selected, len(statuses)) - 1) % len(statuses)
            return TransitionResult(replace(state, status_selected=index))
        if action == Action.MOVE_DOWN:
            index = (clamp_index(state.status_selected, len(statuses)) + 1) % len(statuses)
            return TransitionResult(replace(state, status_selected=index))
        if action == Action.CONFIRM:
            index = clamp_index(state.status_selected, len(statuses))
            chosen = statuses[index]
            new_filter = None if state.status_filter == chosen else chosen
            return TransitionResult(
                replace(
                    state,
                    status_filter=new_filter,
                    status_selected=index,
                    selected=0,
                    panel=Panel.SESSIONS,
                )
            )
        return TransitionResult(state)

    def _handle_renaming(self, state: InteractionState, event: InputEvent) -> TransitionResult:
        buffer = state.rename_buffer or ""
        action = event.action

        if action == Action.CONFIRM:
            closed = replace(state, rename_buffer=None, rename_target=None)
            if state.rename_target is None:
                return TransitionResult(closed)
            rename = Command(CommandKind.RENAME_WINDOW, window_id=state.rename_target, title=buffer)
            return TransitionResult(closed, (rename,))
        if action == Action.CANCEL:
            return TransitionResult(replace(state, rename_buffer=None, rename_target=None))
        if action == Action.DELETE_CHAR:
            return TransitionResult(replace(state, rename_buffer=buffer[:-1]))
        if action == Action.APPEND_SPACE:
            return TransitionResult(replace(state, rename_buffer=buffer + " "))
        if action == Action.APPEND_CHAR and event.text:
            return TransitionResult(replace(state, rename_buffer=buffer + event.text))
        return TransitionResult(state)
