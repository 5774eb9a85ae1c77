"""Application configuration models with Pydantic validation."""

from pydantic import BaseModel, Field, field_validator

DEFAULT_PREFIXES = ["codex", "claude", "gemini"]


class KittyConfig(BaseModel):
    """kitty remote control configuration."""

    socket: str | None = Field(
        default=None,
        description="Remote control address, e.g. unix:/tmp/mykitty (auto-detected when empty)",
    )
    command_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout in seconds for each kitty @ command (none by default)",
    )


class LoggingConfig(BaseModel):
    """Debug log configuration.

    The TUI owns the terminal, so logs always go to a file.
    """

    enabled: bool = Field(
        default=True,
        description="Write a debug log file",
    )
    file: str = Field(
        default="/tmp/agentpanel.log",
        description="Path of the log file",
    )
    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Minimum log level",
    )
    max_log_size_mb: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Rotate log when file exceeds this size (MB)",
    )
    max_log_files: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Number of rotated log files to keep",
    )


class UIConfig(BaseModel):
    """Terminal UI configuration."""

    inline: bool = Field(
        default=False,
        description="Render inline instead of using the alternate screen",
    )


class AppConfig(BaseModel):
    """Root application configuration.

    Loaded from config.yaml, then overridden by command-line flags.
    """

    poll_interval: float = Field(
        default=1.0,
        gt=0,
        le=60,
        description="Seconds between window polls",
    )
    prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PREFIXES),
        description="AI tool names to detect in foreground process command lines",
    )
    max_lines: int = Field(
        default=200,
        ge=0,
        description="Maximum output lines kept per session (0 = unlimited)",
    )
    kitty: KittyConfig = Field(
        default_factory=KittyConfig,
        description="kitty remote control settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Debug log settings",
    )
    ui: UIConfig = Field(
        default_factory=UIConfig,
        description="Terminal UI settings",
    )

    @field_validator("prefixes", mode="before")
    @classmethod
    def _normalize_prefixes(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [str(p).strip().lower() for p in value if str(p).strip()]
