"""StatusClassifier for inferring an AI session's activity from its screen.

Uses change detection between polls plus substring heuristics over the most
recent output lines. Every input maps to a status; nothing here raises.
"""

from collections.abc import Sequence

from agentpanel.models.session import SessionStatus

# Number of trailing lines that make up a fingerprint
FINGERPRINT_LINES = 5


def normalize_lines(text: str, max_lines: int = 0) -> list[str]:
    """Split captured terminal text into trimmed, non-empty lines.

    Args:
        text: Raw window text.
        max_lines: Keep only the most recent N lines (0 keeps everything).

    Returns:
        Lines oldest first, with trailing whitespace removed.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip(" \t") for line in text.split("\n")]
    lines = [line for line in lines if line]
    if max_lines > 0 and len(lines) > max_lines:
        lines = lines[-max_lines:]
    return lines


def compute_fingerprint(lines: Sequence[str]) -> str:
    """Derive the change-detection fingerprint from the last few lines.

    Two screens with equal fingerprints have unchanged visible output.
    """
    recent = [line for line in lines if line.strip()][-FINGERPRINT_LINES:]
    return "\n".join(recent)


class StatusClassifier:
    """Infers RUNNING / IDLE / WAITING / DONE from terminal output.

    Decision order (first match wins):
    1. Output changed since the previous poll, or an interrupt hint is
       visible -> RUNNING
    2. Approval / confirmation wording -> WAITING
    3. Prompt on the last non-blank line, or a tool's idle hint -> IDLE
    4. First poll (no previous fingerprint): completion wording -> DONE,
       otherwise RUNNING
    5. Unchanged output with no recognizable marker -> IDLE

    Empty content is always IDLE.
    """

    # How many trailing lines the wording heuristics look at
    LOOKBACK = 20

    # Interrupt hints only live on the last few lines while a tool streams
    BUSY_LOOKBACK = 10

    BUSY_MARKERS = (
        "esc to interrupt",
        "ctrl+c to interrupt",
        "esc to cancel",
    )

    WAITING_MARKERS = (
        "waiting",
        "approval",
        "confirm",
        "press enter",
    )

    IDLE_MARKERS = (
        "context left",  # codex footer
        "? for shortcuts",  # claude / codex footer
        "/help for help",
        "type your message",  # gemini input box
    )

    DONE_MARKERS = (
        "done",
        "finished",
        "complete",
    )

    PROMPT_PREFIXES = ("> ", "$ ", "% ")
    PROMPT_EXACT = (">", ">>")

    def classify(
        self,
        lines: Sequence[str],
        previous_fingerprint: str | None = None,
        current_fingerprint: str | None = None,
    ) -> SessionStatus:
        """Classify a session's activity.

        Args:
            lines: Current non-empty output lines, oldest first.
            previous_fingerprint: Fingerprint from the previous poll, or None
                on the first poll of a window.
            current_fingerprint: Fingerprint of `lines`; computed if omitted.

        Returns:
            The inferred SessionStatus.
        """
        if not lines:
            return SessionStatus.IDLE

        if current_fingerprint is None:
            current_fingerprint = compute_fingerprint(lines)

        recent = self._lower_chunk(lines, self.LOOKBACK)

        if previous_fingerprint is not None and previous_fingerprint != current_fingerprint:
            return SessionStatus.RUNNING
        if self._contains_any(self._lower_chunk(lines, self.BUSY_LOOKBACK), self.BUSY_MARKERS):
            return SessionStatus.RUNNING

        if self._contains_any(recent, self.WAITING_MARKERS):
            return SessionStatus.WAITING

        last_line = next((line for line in reversed(lines) if line.strip()), "")
        if self.is_prompt(last_line) or self._contains_any(recent, self.IDLE_MARKERS):
            return SessionStatus.IDLE

        if previous_fingerprint is None:
            if self._contains_any(recent, self.DONE_MARKERS):
                return SessionStatus.DONE
            return SessionStatus.RUNNING

        return SessionStatus.IDLE

    def is_prompt(self, line: str) -> bool:
        """Check whether a line looks like a shell or tool input prompt."""
        stripped = line.strip()
        if not stripped:
            return False
        if stripped in self.PROMPT_EXACT:
            return True
        return line.lstrip().startswith(self.PROMPT_PREFIXES) or line.endswith(self.PROMPT_PREFIXES)

    @staticmethod
    def _lower_chunk(lines: Sequence[str], count: int) -> str:
        return " ".join(lines[-count:]).lower()

    @staticmethod
    def _contains_any(text: str, needles: Sequence[str]) -> bool:
        return any(needle in text for needle in needles)
