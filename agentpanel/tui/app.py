"""Textual application hosting the session panels.

The app owns all mutable state (session snapshot, fingerprint table,
interaction state) on the event loop. Polls and window commands run in
thread workers and report back as messages, so a slow kitty call never
blocks keyboard handling.
"""

import logging
from datetime import datetime

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.markup import escape
from textual.message import Message
from textual.widgets import Static
from textual.worker import Worker, WorkerState

from agentpanel.backends.base import TerminalBackend, TransportError
from agentpanel.models.config import AppConfig
from agentpanel.models.interaction import (
    Action,
    Command,
    CommandKind,
    InputEvent,
    InteractionState,
    Panel,
)
from agentpanel.models.session import FingerprintTable
from agentpanel.services.interaction_machine import InteractionMachine, event_for_key
from agentpanel.services.session_poller import PollResult, SessionPoller
from agentpanel.services.session_repository import SessionRepository
from agentpanel.tui.formatting import (
    display_name,
    session_row,
    status_row,
    tail_lines,
)

logger = logging.getLogger(__name__)

SESSIONS_HELP = "↑↓: nav  enter: focus  r: rename  tab: filter  q: quit"
STATUS_HELP = "↑↓: nav  enter: select  esc: back  q: quit"


class PollCompleted(Message):
    """A poll finished with a fresh snapshot."""

    def __init__(self, seq: int, result: PollResult) -> None:
        self.seq = seq
        self.result = result
        super().__init__()


class PollFailed(Message):
    """A poll failed before producing a snapshot."""

    def __init__(self, seq: int, error: TransportError) -> None:
        self.seq = seq
        self.error = error
        super().__init__()


class CommandFinished(Message):
    """A focus or rename command completed."""

    def __init__(self, command: Command, error: TransportError | None = None) -> None:
        self.command = command
        self.error = error
        super().__init__()


class SessionMonitorApp(App):
    """Sessions / Status / Output panels over the polling driver."""

    TITLE = "agentpanel"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #left {
        width: 1fr;
        min-width: 35;
    }
    #sessions {
        height: 1fr;
        border: round $panel;
    }
    #status {
        height: 7;
        border: round $panel;
    }
    #output {
        width: 1fr;
        height: 1fr;
        border: round $panel;
    }
    #sessions.focused, #status.focused {
        border: round $accent;
    }
    #help {
        height: 1;
    }
    """

    def __init__(
        self,
        config: AppConfig,
        backend: TerminalBackend,
        poller: SessionPoller | None = None,
        machine: InteractionMachine | None = None,
    ):
        """Initialize the app.

        Args:
            config: Resolved application configuration.
            backend: Terminal backend for polls and window commands.
            poller: Polling driver. Built from backend and config if not provided.
            machine: Interaction state machine. Created if not provided.
        """
        super().__init__()
        self.app_config = config
        self.backend = backend
        self.poller = poller or SessionPoller(backend, config)
        self.machine = machine or InteractionMachine()
        self.repository = SessionRepository()
        self.interaction = InteractionState()
        self.fingerprints: FingerprintTable = {}
        self.error_message: str | None = None
        self.last_update: datetime | None = None
        self._issued_seq = 0
        self._applied_seq = 0

    def compose(self) -> ComposeResult:
        with Horizontal():
            with Vertical(id="left"):
                yield Static(id="sessions")
                yield Static(id="status")
            yield Static(id="output")
        yield Static(id="help")

    def on_mount(self) -> None:
        """Start polling."""
        self.query_one("#sessions", Static).border_title = "Sessions"
        self.query_one("#status", Static).border_title = "Status"
        self.query_one("#output", Static).border_title = "Output"
        self.request_poll()
        self.set_interval(self.app_config.poll_interval, self.request_poll)
        self.render_panels()

    # -- polling ---------------------------------------------------------

    def request_poll(self) -> None:
        """Issue a poll; earlier polls may still be in flight."""
        self._issued_seq += 1
        self._run_poll(self._issued_seq, dict(self.fingerprints))

    @work(thread=True, group="poll", exit_on_error=False)
    def _run_poll(self, seq: int, fingerprints: FingerprintTable) -> None:
        try:
            result = self.poller.poll(fingerprints)
        except TransportError as e:
            self.post_message(PollFailed(seq, e))
            return
        self.post_message(PollCompleted(seq, result))

    def on_poll_completed(self, message: PollCompleted) -> None:
        """Apply a snapshot unless a newer poll was applied already."""
        if message.seq <= self._applied_seq:
            logger.debug(f"Dropping stale poll {message.seq} (applied {self._applied_seq})")
            return
        self._applied_seq = message.seq
        self.repository.replace(message.result.sessions)
        self.fingerprints = message.result.fingerprints
        self.interaction = self.machine.reconcile(self.interaction, self.repository.sessions)
        self.last_update = message.result.completed_at
        self.error_message = None
        self.render_panels()

    def on_poll_failed(self, message: PollFailed) -> None:
        """Keep the previous snapshot and show the error."""
        if message.seq <= self._applied_seq:
            logger.debug(f"Ignoring failure of stale poll {message.seq}")
            return
        logger.warning(f"Poll {message.seq} failed: {message.error}")
        self.error_message = str(message.error)
        self.last_update = datetime.now()
        self.render_panels()

    # -- input -----------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        """Route key presses through the interaction state machine."""
        input_event = event_for_key(event.key, event.character, self.interaction.renaming)
        event.prevent_default()
        event.stop()
        if input_event is not None:
            self.dispatch_input(input_event)

    def on_paste(self, event: events.Paste) -> None:
        """Pasted text goes into the rename buffer."""
        if self.interaction.renaming:
            text = " ".join(event.text.splitlines())
            self.dispatch_input(InputEvent(Action.APPEND_CHAR, text))

    def dispatch_input(self, input_event: InputEvent) -> None:
        """Apply one input event and execute the resulting commands."""
        result = self.machine.handle(self.interaction, input_event, self.repository.sessions)
        self.interaction = result.state
        for command in result.commands:
            self.execute_command(command)
        self.render_panels()

    # -- commands --------------------------------------------------------

    def execute_command(self, command: Command) -> None:
        """Run a command from the state machine."""
        if command.kind == CommandKind.QUIT:
            self.exit()
            return
        logger.info(f"Dispatching {command.kind.value} for window {command.window_id}")
        self._run_command(command)

    @work(thread=True, group="commands", exit_on_error=False)
    def _run_command(self, command: Command) -> None:
        try:
            if command.kind == CommandKind.FOCUS_WINDOW:
                self.backend.focus_window(command.window_id)
            elif command.kind == CommandKind.RENAME_WINDOW:
                self.backend.rename_window(command.window_id, command.title or "")
        except TransportError as e:
            self.post_message(CommandFinished(command, e))
            return
        self.post_message(CommandFinished(command))

    def on_command_finished(self, message: CommandFinished) -> None:
        """Record command failures; refresh titles after a rename."""
        if message.error is not None:
            logger.error(f"{message.command.kind.value} failed: {message.error}")
            self.error_message = str(message.error)
        elif message.command.kind == CommandKind.RENAME_WINDOW:
            self.request_poll()
        self.last_update = datetime.now()
        self.render_panels()

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Surface unexpected worker failures without stopping the app."""
        if event.state == WorkerState.ERROR:
            logger.error(f"Worker {event.worker.name} failed: {event.worker.error!r}")
            self.error_message = str(event.worker.error)
            self.render_panels()

    # -- rendering -------------------------------------------------------

    def render_panels(self) -> None:
        """Redraw every panel from the repository and interaction state."""
        try:
            self._render_sessions()
            self._render_status()
            self._render_output()
            self._render_help()
        except NoMatches:
            return

    def _render_sessions(self) -> None:
        widget = self.query_one("#sessions", Static)
        widget.set_class(self.interaction.panel == Panel.SESSIONS, "focused")
        status_filter = self.interaction.status_filter
        title = f"Sessions [{status_filter.value}]" if status_filter else "Sessions"
        widget.border_title = escape(title)

        filtered = self.repository.filtered(status_filter)
        if not filtered:
            empty = " (no matching sessions)" if status_filter else " (no sessions)"
            widget.update(Text(empty, style="grey50"))
            return
        tab_counts = self.repository.tab_counts()
        focused = self.interaction.panel == Panel.SESSIONS
        rows = [
            session_row(session, tab_counts, focused and i == self.interaction.selected)
            for i, session in enumerate(filtered)
        ]
        widget.update(Text("\n").join(rows))

    def _render_status(self) -> None:
        widget = self.query_one("#status", Static)
        widget.set_class(self.interaction.panel == Panel.STATUS, "focused")
        statuses = self.repository.available_statuses()
        if not statuses:
            widget.update(Text(" (no sessions)", style="grey50"))
            return
        counts = self.repository.status_counts()
        focused = self.interaction.panel == Panel.STATUS
        rows = [
            status_row(
                status,
                counts.get(status, 0),
                self.interaction.status_filter,
                focused and i == self.interaction.status_selected,
            )
            for i, status in enumerate(statuses)
        ]
        widget.update(Text("\n").join(rows))

    def _render_output(self) -> None:
        widget = self.query_one("#output", Static)
        session = self.machine.selected_session(self.interaction, self.repository.sessions)
        if session is None:
            widget.border_title = "Output"
            widget.update(Text(" (no output)", style="grey50"))
            return
        name = display_name(session, self.repository.tab_counts())
        widget.border_title = escape(f"Output: {name}")
        if not session.lines:
            widget.update(Text(" (empty)", style="grey50"))
            return
        size = widget.content_size
        lines = tail_lines(session.lines, size.height, size.width - 1)
        widget.update(Text("\n".join(f" {line}" for line in lines)))

    def _render_help(self) -> None:
        widget = self.query_one("#help", Static)
        if self.interaction.renaming:
            widget.update(
                Text.assemble(
                    ("Rename: ", "cyan"),
                    self.interaction.rename_buffer or "",
                    "█",
                    (" (enter: confirm, esc: cancel)", "grey50"),
                )
            )
            return

        hint = SESSIONS_HELP if self.interaction.panel == Panel.SESSIONS else STATUS_HELP
        line = Text(hint, style="grey50")
        if self.error_message:
            line.append(f"  error: {self.error_message}", style="red")
        if self.last_update is not None:
            line.append(f"  {self.last_update:%H:%M:%S}", style="grey50")
        widget.update(line)
