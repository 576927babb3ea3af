"""Minimal, embeddable, synchronous logging.

This package provides:
- A `Dispatcher` gating leveled log calls and fanning them out, in
  registration order, to a bounded table of sinks.
- Built-in formatters for the console (plain or colorized), files and the
  platform debug console.
- A process-wide default dispatcher behind `trace()` .. `fatal()`.

Dispatchers can also be created and passed around explicitly; the default one
is just a shared instance of the same class.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from .config import LogConfig, load_config
from .dispatcher import CapacityExceededError, Dispatcher, Sink, SinkTable, SinkWriteError
from .formatters import (
    MemorySink,
    colorized_console_formatter,
    console_formatter,
    debug_console_formatter,
    default_debug_output,
    file_formatter,
    memory_formatter,
    stderr_debug_output,
    windows_debug_output,
)
from .models import InvalidLevelError, LogEvent, LogLevel, level_name, parse_level

TRACE = LogLevel.TRACE
DEBUG = LogLevel.DEBUG
INFO = LogLevel.INFO
WARN = LogLevel.WARN
ERROR = LogLevel.ERROR
FATAL = LogLevel.FATAL

_default = Dispatcher()


def get_dispatcher() -> Dispatcher:
    """Return the process-wide default dispatcher."""
    return _default


def init(dispatcher: Dispatcher | None = None) -> int | None:
    """Register the platform debug-console sink where the platform has one.

    The sink uses the dispatcher's current global level. Returns the slot, or
    None on platforms without a debug channel.
    """
    target = dispatcher or _default
    output = default_debug_output()
    if output is None:
        return None
    return target.register_sink(debug_console_formatter, output, target.level)


def configure(config: LogConfig | None = None, dispatcher: Dispatcher | None = None) -> TextIO | None:
    """Apply a `LogConfig` to a dispatcher, replacing its sinks.

    When `config.file_path` is set the file is opened for appending and
    registered as a file sink. The open handle is returned; the caller owns it
    and must close it.
    """
    cfg = config if config is not None else load_config()
    target = dispatcher or _default

    target.reset(capacity=cfg.sink_capacity)
    target.set_level(cfg.level)
    target.set_quiet(cfg.quiet)
    target.set_color(cfg.use_color)
    target.set_strict(cfg.strict)

    if cfg.file_path is None:
        return None
    fp = open(cfg.file_path, "a", encoding="utf-8")
    try:
        target.add_file(fp, cfg.file_level)
    except Exception:
        fp.close()
        raise
    return fp


def set_level(level: Any) -> None:
    _default.set_level(level)


def set_quiet(enabled: bool) -> None:
    _default.set_quiet(enabled)


def add_sink(formatter: Any, context: Any, min_level: Any = LogLevel.TRACE) -> int:
    """Register a sink on the default dispatcher (see `Dispatcher.register_sink`)."""
    return _default.register_sink(formatter, context, min_level)


def add_file(fp: TextIO, min_level: Any = LogLevel.TRACE) -> int:
    return _default.add_file(fp, min_level)


def log(level: Any, source_file: str, source_line: int, fmt: str, *args: Any) -> None:
    """Dispatch through the default dispatcher with an explicit call site."""
    _default.log(level, source_file, source_line, fmt, *args)


def _log_from_caller(level: LogLevel, fmt: str, args: tuple[Any, ...]) -> None:
    # Two frames up: past this helper and the public wrapper.
    frame = sys._getframe(2)
    _default.log(level, frame.f_code.co_filename, frame.f_lineno, fmt, *args)


def trace(fmt: str, *args: Any) -> None:
    _log_from_caller(LogLevel.TRACE, fmt, args)


def debug(fmt: str, *args: Any) -> None:
    _log_from_caller(LogLevel.DEBUG, fmt, args)


def info(fmt: str, *args: Any) -> None:
    _log_from_caller(LogLevel.INFO, fmt, args)


def warn(fmt: str, *args: Any) -> None:
    _log_from_caller(LogLevel.WARN, fmt, args)


def error(fmt: str, *args: Any) -> None:
    _log_from_caller(LogLevel.ERROR, fmt, args)


def fatal(fmt: str, *args: Any) -> None:
    """Log at FATAL. The process keeps running; what FATAL means is up to the caller."""
    _log_from_caller(LogLevel.FATAL, fmt, args)


__all__ = [
    "CapacityExceededError",
    "DEBUG",
    "Dispatcher",
    "ERROR",
    "FATAL",
    "INFO",
    "InvalidLevelError",
    "LogConfig",
    "LogEvent",
    "LogLevel",
    "MemorySink",
    "Sink",
    "SinkTable",
    "SinkWriteError",
    "TRACE",
    "WARN",
    "add_file",
    "add_sink",
    "colorized_console_formatter",
    "configure",
    "console_formatter",
    "debug",
    "debug_console_formatter",
    "error",
    "fatal",
    "file_formatter",
    "get_dispatcher",
    "info",
    "init",
    "level_name",
    "load_config",
    "log",
    "memory_formatter",
    "parse_level",
    "set_level",
    "set_quiet",
    "stderr_debug_output",
    "trace",
    "warn",
    "windows_debug_output",
]
