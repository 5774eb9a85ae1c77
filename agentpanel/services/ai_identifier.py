"""AIIdentifier for recognizing AI tools from foreground processes."""

from collections.abc import Iterable

from agentpanel.backends.base import WindowSnapshot


def _basename(token: str) -> str:
    """Return the part of a path after the last '/'."""
    return token.rsplit("/", 1)[-1]


def token_matches(token: str, prefix: str) -> bool:
    """Check whether a command-line token names the given AI tool.

    A token matches when its lower-cased basename equals the prefix
    (`/usr/local/bin/claude`), or when the prefix appears as a path
    component (`.../@openai/codex/vendor/...`, `.../bin/codex`). The second
    form catches tools launched as a script passed to an interpreter.

    Args:
        token: One command-line token.
        prefix: A lower-cased AI name.

    Returns:
        True if the token identifies the tool.
    """
    lowered = token.lower()
    if _basename(lowered) == prefix:
        return True
    component = f"/{prefix}"
    return f"{component}/" in lowered or lowered.endswith(component)


class AIIdentifier:
    """Decides whether a window is running one of the configured AI tools.

    Processes are scanned in the window's listed order and tokens left to
    right; the first matching token wins.
    """

    def __init__(self, prefixes: Iterable[str]):
        """Initialize the identifier.

        Args:
            prefixes: AI names to detect. Normalized to lower case.
        """
        self.prefixes = [p.strip().lower() for p in prefixes if p and p.strip()]

    def identify(self, window: WindowSnapshot) -> tuple[str, bool]:
        """Identify the AI tool running in a window.

        Args:
            window: The window snapshot to inspect.

        Returns:
            Tuple of (ai_name, found). ai_name is "" when nothing matched.
        """
        for process in window.processes:
            if not process.cmdline:
                continue
            for token in process.cmdline:
                if not token:
                    continue
                for prefix in self.prefixes:
                    if token_matches(token, prefix):
                        return (prefix, True)
        return ("", False)
