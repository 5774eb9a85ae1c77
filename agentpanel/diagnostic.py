"""Agent Panel diagnostic dump.

Prints what each layer of the monitor sees, then exits:

1. The configured prefixes
2. The raw kitty OS window / tab / window / process tree, with the AI
   identifier's verdict for every window
3. The sessions a poll would produce

Usage:
    agentpanel --debug
    python -m agentpanel.diagnostic
"""

import sys
from typing import TextIO

from agentpanel.backends.base import TransportError
from agentpanel.backends.kitty import KittyBackend, flatten_windows
from agentpanel.models.config import AppConfig
from agentpanel.services.ai_identifier import AIIdentifier
from agentpanel.services.config_service import resolve_kitty_socket
from agentpanel.services.session_poller import SessionPoller


def run_debug(config: AppConfig, backend: KittyBackend, out: TextIO = sys.stdout) -> int:
    """Dump the window tree and detected sessions.

    Args:
        config: Resolved configuration.
        backend: kitty backend to query.
        out: Stream to print to.

    Returns:
        Process exit status (0 on success, 1 if kitty could not be queried).
    """
    print("=== agentpanel debug ===", file=out)
    print(f"prefixes: {config.prefixes}", file=out)
    print(f"kitty socket: {config.kitty.socket or '(controlling terminal)'}", file=out)
    print(file=out)

    # =========================================================================
    # LAYER 1: What does kitty report?
    # =========================================================================
    try:
        os_windows = backend.list_raw()
    except TransportError as e:
        print(f"kitty @ ls error: {e}", file=out)
        return 1

    identifier = AIIdentifier(config.prefixes)
    windows = {w.window_id: w for w in flatten_windows(os_windows)}

    print("=== parsed windows ===", file=out)
    for i, os_window in enumerate(os_windows):
        print(f"OS Window {i}:", file=out)
        for j, tab in enumerate(os_window.tabs):
            print(f"  Tab {j} (id={tab.id}, title={tab.title!r}):", file=out)
            for k, window in enumerate(tab.windows):
                print(f"    Window {k} (id={window.id}, title={window.title!r}):", file=out)
                print(f"      Cwd: {window.cwd}", file=out)
                print(f"      ForegroundProcesses: {len(window.foreground_processes)}", file=out)
                for n, proc in enumerate(window.foreground_processes):
                    print(f"        [{n}] pid={proc.pid} cmdline={proc.cmdline}", file=out)
                ai, found = identifier.identify(windows[window.id])
                print(f"      identify result: ai={ai!r} found={found}", file=out)
    print(file=out)

    # =========================================================================
    # LAYER 2: What would a poll produce?
    # =========================================================================
    try:
        result = SessionPoller(backend, config, identifier=identifier).poll()
    except TransportError as e:
        print(f"poll error: {e}", file=out)
        return 1

    print(f"=== detected sessions: {len(result.sessions)} ===", file=out)
    for i, session in enumerate(result.sessions):
        print(
            f"  [{i}] AI={session.ai} Title={session.title!r} "
            f"Status={session.status.value} WindowID={session.window_id}",
            file=out,
        )
    return 0


def main() -> int:
    """Run the dump with default settings and an auto-detected socket."""
    config = AppConfig()
    socket = resolve_kitty_socket()
    return run_debug(config, KittyBackend(socket=socket))


if __name__ == "__main__":
    sys.exit(main())
