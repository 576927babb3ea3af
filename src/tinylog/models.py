"""Log severity levels and the per-dispatch event value.

Events are designed to be:
- Transient: one value per dispatch, never retained by the dispatcher.
- Cheap to re-target: each sink receives a copy carrying its own context.
- Rendered once: every sink shares the same message text and timestamp.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class InvalidLevelError(ValueError):
    """Raised when a value cannot be interpreted as a log severity."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid log level: {value!r}. Expected one of {', '.join(LEVEL_NAMES)} or 0-5.")


class LogLevel(IntEnum):
    """Ordered severity; higher values are more severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


LEVEL_NAMES: tuple[str, ...] = ("TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL")

_LEVEL_ALIASES = {"WARNING": LogLevel.WARN}


def local_now() -> datetime:
    """Return the current local wall-clock time."""
    return datetime.now()


def parse_level(value: Any) -> LogLevel:
    """Coerce a level, an int in range, or a level name into a `LogLevel`.

    Names are case-insensitive; `WARNING` is accepted as an alias of `WARN`.
    Booleans are rejected even though they are ints.
    """
    if isinstance(value, LogLevel):
        return value
    if isinstance(value, bool):
        raise InvalidLevelError(value)
    if isinstance(value, int):
        if LogLevel.TRACE <= value <= LogLevel.FATAL:
            return LogLevel(value)
        raise InvalidLevelError(value)
    if isinstance(value, str):
        name = value.strip().upper()
        if name in LEVEL_NAMES:
            return LogLevel[name]
        if name in _LEVEL_ALIASES:
            return _LEVEL_ALIASES[name]
        if name.isdigit():
            return parse_level(int(name))
    raise InvalidLevelError(value)


def level_name(level: Any) -> str:
    """Return the fixed display name for a severity."""
    return LEVEL_NAMES[parse_level(level)]


def safe_repr(value: Any) -> str:
    """`repr()` that falls back to the default object repr when it raises."""
    try:
        return repr(value)
    except Exception:  # noqa: BLE001 - a broken __repr__ must not lose the event
        return object.__repr__(value)


def safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:  # noqa: BLE001
        return safe_repr(value)


def render_message(fmt: Any, args: tuple[Any, ...]) -> str:
    """Render a printf-style template once for all sinks.

    Rendering never raises: on a template/argument mismatch, or an argument
    whose `__str__` fails, the raw template is kept and the arguments are
    appended as reprs.
    """
    if not args:
        return safe_str(fmt)
    try:
        # A single mapping argument feeds `%(name)s` templates.
        values: Any = args
        if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
            values = args[0]
        return str(fmt) % values
    except Exception:  # noqa: BLE001 - fall back to the raw template
        return " ".join([safe_str(fmt), *(safe_repr(a) for a in args)])


class LogEvent(BaseModel):
    """A single dispatch as seen by one sink."""

    model_config = ConfigDict(frozen=True)

    level: LogLevel
    source_file: str
    source_line: int

    # Original template and arguments; `message` is the shared rendering.
    format: str
    args: tuple[Any, ...] = ()
    message: str

    # Captured on first use within a dispatch, then shared.
    time: datetime | None = None

    # Opaque handle of the sink being invoked (stream, file, callable, ...).
    context: Any = None

    @property
    def level_name(self) -> str:
        return LEVEL_NAMES[self.level]

    def with_context(self, context: Any) -> LogEvent:
        """Return a copy addressed to another sink context."""
        return self.model_copy(update={"context": context})
