"""Abstract base class for terminal backend implementations.

Defines the interface the monitor needs from a terminal emulator's
remote-control channel, plus the per-poll window snapshots it returns.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class TransportError(Exception):
    """Raised when a remote-control command fails."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ParseError(TransportError):
    """Raised when the backend's structured output cannot be parsed."""


@dataclass(frozen=True)
class ProcessRecord:
    """A foreground process inside a terminal window."""

    pid: int | None = None
    cwd: str = ""
    cmdline: tuple[str, ...] = ()  # Program path followed by its arguments


@dataclass(frozen=True)
class WindowSnapshot:
    """One terminal window as seen at poll time."""

    window_id: int
    tab_id: int
    title: str = ""
    tab_title: str = ""
    cwd: str = ""
    processes: tuple[ProcessRecord, ...] = field(default_factory=tuple)

    @property
    def display_title(self) -> str:
        """Window title, else tab title, else working directory."""
        return self.title or self.tab_title or self.cwd


class TerminalBackend(ABC):
    """Abstract interface for terminal backends.

    Terminal backends provide the ability to:
    - List windows with their foreground processes
    - Capture a window's visible text
    - Focus a window
    - Set a window's title

    Every operation raises TransportError on failure.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier (e.g., 'kitty')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend is installed.

        Returns:
            True if the backend can be used, False otherwise.
        """

    @abstractmethod
    def list_windows(self) -> list[WindowSnapshot]:
        """List all windows in discovery order.

        Returns:
            List of WindowSnapshot for each window.

        Raises:
            TransportError: If the listing command fails.
            ParseError: If the listing output is malformed.
        """

    @abstractmethod
    def get_window_text(self, window_id: int) -> str:
        """Capture the visible text of a window.

        Args:
            window_id: The window identifier.

        Returns:
            Terminal content as a string.

        Raises:
            TransportError: If the capture command fails.
        """

    @abstractmethod
    def focus_window(self, window_id: int) -> None:
        """Bring the window to the foreground.

        Args:
            window_id: The window identifier.

        Raises:
            TransportError: If the focus command fails.
        """

    @abstractmethod
    def rename_window(self, window_id: int, title: str) -> None:
        """Set a window's title.

        Args:
            window_id: The window identifier.
            title: The new title.

        Raises:
            TransportError: If the rename command fails.
        """
