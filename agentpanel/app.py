"""Command-line entry point for Agent Panel.

Wires the configuration, kitty backend, polling driver and Textual UI
together:

- ConfigService: config.yaml loading plus flag overrides
- KittyBackend: kitty remote control transport
- SessionPoller: per-interval window scan and classification
- SessionMonitorApp: panels and keyboard handling

Usage:
    agentpanel
    agentpanel --poll 500ms --prefixes claude,codex
    agentpanel --debug
"""

import argparse
import logging
import logging.handlers
import sys
from pathlib import Path

from agentpanel.backends.kitty import KittyBackend
from agentpanel.models.config import AppConfig
from agentpanel.services.config_service import DEFAULT_CONFIG_PATH, ConfigService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="agentpanel",
        description="Monitor AI assistant sessions running in kitty windows.",
    )
    parser.add_argument("--poll", help="poll interval, e.g. 1s or 500ms")
    parser.add_argument("--prefixes", help="comma-separated process names to detect")
    parser.add_argument("--max-lines", type=int, help="max lines to keep per session")
    parser.add_argument("--kitty-socket", help="kitty socket path (e.g. unix:/tmp/mykitty)")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="path to config.yaml (default: %(default)s)",
    )
    parser.add_argument("--log-file", help="debug log path")
    parser.add_argument("--debug", action="store_true", help="dump debug info and exit")
    parser.add_argument(
        "--no-alt-screen",
        action="store_true",
        help="run without the alternate screen",
    )
    return parser


def configure_logging(config: AppConfig) -> None:
    """Send logs to a rotating file; the TUI owns the terminal.

    Args:
        config: Resolved configuration.
    """
    root = logging.getLogger()
    if not config.logging.enabled:
        root.addHandler(logging.NullHandler())
        return

    log_path = Path(config.logging.file).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.logging.max_log_size_mb * 1024 * 1024,
            backupCount=config.logging.max_log_files,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"failed to create debug log: {e}", file=sys.stderr)
        root.addHandler(logging.NullHandler())
        return

    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    root.setLevel(config.logging.level)


def load_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file and apply command-line overrides.

    Raises:
        ValueError: If a flag value is invalid.
    """
    service = ConfigService(args.config)
    return service.apply_overrides(
        service.load(),
        poll=args.poll,
        prefixes=args.prefixes,
        max_lines=args.max_lines,
        kitty_socket=args.kitty_socket,
        log_file=args.log_file,
        inline=args.no_alt_screen,
    )


def main(argv: list[str] | None = None) -> int:
    """Run Agent Panel."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ValueError as e:
        parser.error(str(e))

    backend = KittyBackend(
        socket=config.kitty.socket,
        command_timeout=config.kitty.command_timeout,
    )

    if args.debug:
        from agentpanel.diagnostic import run_debug

        return run_debug(config, backend)

    configure_logging(config)
    logger.info(
        f"Starting agentpanel: prefixes={config.prefixes} poll={config.poll_interval}s "
        f"socket={config.kitty.socket!r}"
    )

    from agentpanel.tui.app import SessionMonitorApp

    app = SessionMonitorApp(config, backend)
    try:
        app.run(inline=config.ui.inline)
    except Exception as e:
        logger.exception("UI failed")
        print(e, file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
