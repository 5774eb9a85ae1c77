"""Configuration loading service.

Handles loading config.yaml, normalizing flag-style keys, applying
command-line overrides, and discovering the kitty remote control socket.
"""

import logging
import os
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml

from agentpanel.models.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/agentpanel/config.yaml")

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}


def parse_duration(value: str | float | int) -> float:
    """Parse a poll interval such as "500ms", "2s", "1m" or a bare number of seconds.

    Raises:
        ValueError: If the value is not a recognizable duration.
    """
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    return float(match.group(1)) * _DURATION_UNITS[match.group(2)]


def resolve_kitty_socket(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
    path_exists: Callable[[str], bool] = os.path.exists,
) -> str | None:
    """Work out which kitty remote control address to use.

    Priority: explicit value, KITTY_LISTEN_ON, then /tmp/kitty-<KITTY_PID>
    when that socket exists.

    Args:
        explicit: Address from the command line or config file.
        environ: Environment mapping. Defaults to os.environ.
        path_exists: Existence check for the derived socket path.

    Returns:
        The address (e.g. "unix:/tmp/kitty-123"), or None to use the tty.
    """
    if explicit:
        return explicit
    environ = os.environ if environ is None else environ
    listen_on = environ.get("KITTY_LISTEN_ON")
    if listen_on:
        return listen_on
    pid = environ.get("KITTY_PID")
    if pid:
        socket_path = f"/tmp/kitty-{pid}"
        if path_exists(socket_path):
            return f"unix:{socket_path}"
    return None


class ConfigService:
    """Service for loading and managing application configuration.

    Handles:
    - Loading config from a YAML file
    - Validating against the Pydantic schema
    - Normalizing flag-style keys (poll, max-lines, kitty-socket)
    - Applying command-line overrides
    - Saving config
    """

    def __init__(self, config_path: str | Path = DEFAULT_CONFIG_PATH):
        """Initialize the config service.

        Args:
            config_path: Path to the config file.
        """
        self.config_path = Path(config_path).expanduser()
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load and validate configuration.

        Returns:
            Validated AppConfig instance. Defaults when the file is missing
            or invalid.
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            self._config = AppConfig()
            return self._config

        try:
            with open(self.config_path) as f:
                raw_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Error reading config file: {e}, using defaults")
            self._config = AppConfig()
            return self._config

        if not isinstance(raw_config, dict):
            logger.warning(f"Config file {self.config_path} is not a mapping, using defaults")
            self._config = AppConfig()
            return self._config

        try:
            self._config = AppConfig(**self._migrate_config(raw_config))
        except (ValueError, TypeError) as e:
            logger.warning(f"Config validation error: {e}, using defaults")
            self._config = AppConfig()

        return self._config

    def save(self, config: AppConfig | None = None) -> bool:
        """Save configuration to disk.

        Args:
            config: Config to save. Uses current config if not provided.

        Returns:
            True if save succeeded.
        """
        config = config or self._config
        if config is None:
            return False

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            config_dict = config.model_dump(mode="json")
            with open(self.config_path, "w") as f:
                yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def apply_overrides(
        self,
        config: AppConfig,
        *,
        poll: str | None = None,
        prefixes: str | None = None,
        max_lines: int | None = None,
        kitty_socket: str | None = None,
        log_file: str | None = None,
        inline: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> AppConfig:
        """Return a copy of config with command-line values applied.

        The kitty socket is resolved here, so the returned config carries
        the final address.

        Raises:
            ValueError: If an override value is invalid.
        """
        data = config.model_dump()
        if poll is not None:
            data["poll_interval"] = parse_duration(poll)
        if prefixes is not None:
            data["prefixes"] = prefixes
        if max_lines is not None:
            data["max_lines"] = max_lines
        if log_file is not None:
            data["logging"]["file"] = log_file
        if inline:
            data["ui"]["inline"] = True
        data["kitty"]["socket"] = resolve_kitty_socket(
            kitty_socket or config.kitty.socket, environ=environ
        )
        return AppConfig(**data)

    def _migrate_config(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Normalize flag-style keys to the schema's field names.

        Handles:
        - `poll` / `poll_interval` given as a duration string
        - `max-lines` -> `max_lines`
        - `kitty-socket` / `kitty_socket` -> `kitty.socket`
        - comma-separated `prefixes`

        Args:
            raw: Raw config dictionary from YAML.

        Returns:
            Migrated config dictionary.
        """
        migrated = {key.replace("-", "_"): value for key, value in raw.items()}

        if "poll" in migrated:
            migrated.setdefault("poll_interval", migrated.pop("poll"))
        if isinstance(migrated.get("poll_interval"), str):
            migrated["poll_interval"] = parse_duration(migrated["poll_interval"])

        if "kitty_socket" in migrated:
            socket = migrated.pop("kitty_socket")
            kitty = dict(migrated.get("kitty") or {})
            kitty.setdefault("socket", socket)
            migrated["kitty"] = kitty

        return migrated
