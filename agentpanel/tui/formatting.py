"""Display helpers for the session panels.

Pure string/Text builders; no state lives here.
"""

import posixpath
from collections.abc import Mapping

from rich.text import Text

from agentpanel.models.session import Session, SessionStatus

STATUS_STYLES: dict[SessionStatus, str] = {
    SessionStatus.RUNNING: "green",
    SessionStatus.IDLE: "grey50",
    SessionStatus.WAITING: "yellow",
    SessionStatus.DONE: "cyan",
}

SHORT_AI_NAMES = {
    "claude": "CL",
    "codex": "CO",
    "gemini": "GE",
}

SELECTED_STYLE = "white on dark_cyan"
NAME_WIDTH = 20


def short_ai(ai: str) -> str:
    """Two-letter code for an AI name."""
    return SHORT_AI_NAMES.get(ai.lower(), ai[:2].upper())


def truncate(text: str, max_len: int) -> str:
    """Truncate by characters, ending with "..." when there is room for it."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."


def display_name(session: Session, tab_counts: Mapping[int, int]) -> str:
    """Session label for the list.

    Falls back to tab-<id> for an empty title, and appends the cwd basename
    when several sessions share a tab.
    """
    name = session.title or f"tab-{session.tab_id}"
    if tab_counts.get(session.tab_id, 0) > 1 and session.cwd:
        name = f"{name}/{posixpath.basename(session.cwd.rstrip('/'))}"
    return truncate(name, NAME_WIDTH)


def session_row(session: Session, tab_counts: Mapping[int, int], selected: bool) -> Text:
    """One row of the Sessions panel: name (AI)  STATUS."""
    row = Text.assemble(
        f" {display_name(session, tab_counts)} ({short_ai(session.ai)})  ",
        (f"{session.status.value:<7}", STATUS_STYLES.get(session.status, "")),
    )
    if selected:
        row.stylize(SELECTED_STYLE)
    return row


def status_row(
    status: SessionStatus, count: int, active_filter: SessionStatus | None, selected: bool
) -> Text:
    """One row of the Status panel; "*" marks the active filter."""
    marker = "*" if active_filter == status else " "
    row = Text.assemble(marker, (f"{status.value}: {count}", STATUS_STYLES.get(status, "")))
    if selected:
        row.stylize(SELECTED_STYLE)
    return row


def tail_lines(lines: list[str], height: int, width: int) -> list[str]:
    """The last lines that fit a panel, each truncated to the panel width."""
    height = max(height, 1)
    return [truncate(line, max(width, 1)) for line in lines[-height:]]
