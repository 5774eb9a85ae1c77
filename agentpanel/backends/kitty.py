"""kitty terminal backend for Agent Panel.

Implements the TerminalBackend interface using kitty's remote control
protocol (`kitty @ ...`). Requires `allow_remote_control` in kitty.conf,
and `listen_on` when the panel runs outside kitty itself.
"""

import logging
import shutil
import subprocess

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from agentpanel.backends.base import (
    ParseError,
    ProcessRecord,
    TerminalBackend,
    TransportError,
    WindowSnapshot,
)

logger = logging.getLogger(__name__)


class KittyProcess(BaseModel):
    """A foreground process as reported by `kitty @ ls`."""

    pid: int | None = None
    cwd: str = ""
    cmdline: list[str] = Field(default_factory=list)


class KittyWindow(BaseModel):
    """A kitty window (pane) as reported by `kitty @ ls`."""

    id: int
    title: str = ""
    cwd: str = ""
    foreground_processes: list[KittyProcess] = Field(default_factory=list)


class KittyTab(BaseModel):
    """A kitty tab as reported by `kitty @ ls`."""

    id: int
    title: str = ""
    windows: list[KittyWindow] = Field(default_factory=list)


class KittyOSWindow(BaseModel):
    """A top-level kitty OS window as reported by `kitty @ ls`."""

    id: int | None = None
    tabs: list[KittyTab] = Field(default_factory=list)


_LS_ADAPTER = TypeAdapter(list[KittyOSWindow])


def _run_kitty(*args: str, timeout: float | None = None) -> tuple[int, str, str]:
    """Run a kitty remote control command.

    Args:
        *args: Arguments to pass after `kitty @`.
        timeout: Command timeout in seconds, or None to wait indefinitely.

    Returns:
        Tuple of (return_code, stdout, stderr).
    """
    cmd = ["kitty", "@", *args]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
        return (result.returncode, result.stdout or "", result.stderr or "")
    except subprocess.TimeoutExpired:
        return (1, "", "Command timed out")
    except FileNotFoundError:
        return (1, "", "kitty not found")


def parse_ls_output(raw: str) -> list[KittyOSWindow]:
    """Parse and validate the JSON printed by `kitty @ ls`.

    Args:
        raw: The command's stdout.

    Returns:
        Validated OS windows.

    Raises:
        ParseError: If the output is not JSON or has an unexpected shape.
    """
    try:
        return _LS_ADAPTER.validate_json(raw)
    except ValidationError as e:
        count = e.error_count()
        raise ParseError(f"Malformed kitty @ ls output: {count} validation error(s)") from e


def flatten_windows(os_windows: list[KittyOSWindow]) -> list[WindowSnapshot]:
    """Flatten the OS window / tab / window tree into snapshots.

    Order is preserved: OS windows, then tabs, then windows within a tab.
    """
    snapshots = []
    for os_window in os_windows:
        for tab in os_window.tabs:
            for window in tab.windows:
                processes = tuple(
                    ProcessRecord(pid=proc.pid, cwd=proc.cwd, cmdline=tuple(proc.cmdline))
                    for proc in window.foreground_processes
                )
                snapshots.append(
                    WindowSnapshot(
                        window_id=window.id,
                        tab_id=tab.id,
                        title=window.title,
                        tab_title=tab.title,
                        cwd=window.cwd,
                        processes=processes,
                    )
                )
    return snapshots


class KittyBackend(TerminalBackend):
    """kitty-based terminal backend.

    Uses `kitty @` remote control commands to list windows, capture their
    text, focus them and set their titles.
    """

    def __init__(self, socket: str | None = None, command_timeout: float | None = None):
        """Initialize the kitty backend.

        Args:
            socket: Remote control address (e.g. "unix:/tmp/kitty-123").
                When None, kitty is reached through the controlling terminal.
            command_timeout: Per-command timeout in seconds, or None.
        """
        self.socket = socket
        self.command_timeout = command_timeout
        self._available: bool | None = None

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "kitty"

    def is_available(self) -> bool:
        """Check if the kitty executable is on PATH.

        Returns:
            True if kitty is available, False otherwise.
        """
        if self._available is None:
            self._available = shutil.which("kitty") is not None
        return self._available

    def _command(self, *args: str) -> tuple[list[str], str]:
        """Run a kitty @ command and return (args, stdout).

        Raises:
            TransportError: On a non-zero exit status.
        """
        full_args = ["--to", self.socket, *args] if self.socket else list(args)
        returncode, stdout, stderr = _run_kitty(*full_args, timeout=self.command_timeout)
        logger.debug(
            f"kitty @ {args[0]}: socket={self.socket!r} rc={returncode} out_len={len(stdout)}"
        )
        if returncode != 0:
            raise TransportError(
                f"kitty @ {args[0]} failed: {stderr.strip() or f'exit status {returncode}'}",
                command=["kitty", "@", *full_args],
                returncode=returncode,
                stderr=stderr,
            )
        return full_args, stdout

    def list_raw(self) -> list[KittyOSWindow]:
        """Return the validated `kitty @ ls` tree (used by the diagnostic dump)."""
        _, stdout = self._command("ls")
        return parse_ls_output(stdout)

    def list_windows(self) -> list[WindowSnapshot]:
        """List all kitty windows.

        Uses 'kitty @ ls' to get the OS window / tab / window tree.

        Returns:
            List of WindowSnapshot in discovery order.
        """
        return flatten_windows(self.list_raw())

    def get_window_text(self, window_id: int) -> str:
        """Capture the visible text of a kitty window.

        Uses 'kitty @ get-text --match id:N'.
        """
        _, stdout = self._command("get-text", "--match", f"id:{window_id}")
        return stdout

    def focus_window(self, window_id: int) -> None:
        """Focus a kitty window.

        Uses 'kitty @ focus-window --match id:N'.
        """
        self._command("focus-window", "--match", f"id:{window_id}")

    def rename_window(self, window_id: int, title: str) -> None:
        """Set a kitty window's title.

        Uses 'kitty @ set-window-title --match id:N -- TITLE'.
        """
        self._command("set-window-title", "--match", f"id:{window_id}", "--", title)
