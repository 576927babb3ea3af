"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `TINYLOG_*` environment variables into a typed Pydantic model.
- Validating values and providing actionable error messages.
"""

import os
import dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dispatcher import DEFAULT_SINK_CAPACITY
from .models import InvalidLevelError, LogLevel, parse_level

def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_int(name: str, default: int) -> int:
    """Read an integer env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer. Got: {raw!r}") from exc


def _get_env_level(name: str, default: LogLevel) -> LogLevel:
    """Read a level name (or 0-5) env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse_level(raw)
    except InvalidLevelError as exc:
        raise ValueError(f"{name} must be one of TRACE, DEBUG, INFO, WARN, ERROR, FATAL. Got: {raw!r}") from exc


class LogConfig(BaseModel):
    """Settings applied to a dispatcher by `tinylog.configure`."""

    model_config = ConfigDict(frozen=True)

    level: LogLevel = Field(default=LogLevel.TRACE, description="Global minimum level for the console sink")
    quiet: bool = Field(default=False, description="Mute the built-in console sink")
    use_color: bool = Field(default=False, description="ANSI-colorize the built-in console sink")
    strict: bool = Field(default=False, description="Raise SinkWriteError when a sink fails")
    sink_capacity: int = Field(default=DEFAULT_SINK_CAPACITY, description="Number of sink slots")

    # Optional file sink, opened in append mode by `tinylog.configure`.
    file_path: str | None = Field(default=None, description="Log file path")
    file_level: LogLevel = Field(default=LogLevel.TRACE, description="Minimum level for the file sink")

    @field_validator("level", "file_level", mode="before")
    def validate_level(cls, v: object) -> LogLevel:
        """Accept level names as well as numbers."""
        try:
            return parse_level(v)
        except InvalidLevelError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("sink_capacity")
    def validate_sink_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"sink_capacity must be >= 1. Got: {v}")
        return v

    @field_validator("file_path")
    def validate_file_path(cls, v: str | None) -> str | None:
        """Treat a blank path as no file sink."""
        if v is None or not v.strip():
            return None
        return v.strip()


def load_config() -> LogConfig:
    """Load logging configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process;
      the search starts in the current working directory.
    - Raises `ValueError` with actionable messages for malformed values.
    """
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))

    return LogConfig(
        level=_get_env_level("TINYLOG_LEVEL", LogLevel.TRACE),
        quiet=_get_env_bool("TINYLOG_QUIET", False),
        use_color=_get_env_bool("TINYLOG_COLOR", False),
        strict=_get_env_bool("TINYLOG_STRICT", False),
        sink_capacity=_get_env_int("TINYLOG_SINK_CAPACITY", DEFAULT_SINK_CAPACITY),
        file_path=os.getenv("TINYLOG_FILE") or None,
        file_level=_get_env_level("TINYLOG_FILE_LEVEL", LogLevel.TRACE),
    )
