"""Built-in sink formatters.

A formatter is any callable taking a `LogEvent` and writing it to
`event.context`. The dispatcher guarantees `event.time` is set before a
formatter runs.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Sequence
from typing import Protocol, TextIO

from .models import LogEvent, local_now

RESET = "\x1b[0m"
DIM = "\x1b[90m"

# Positionally aligned with LEVEL_NAMES.
LEVEL_COLORS: tuple[str, ...] = (
    "\x1b[94m",
    "\x1b[36m",
    "\x1b[32m",
    "\x1b[33m",
    "\x1b[31m",
    "\x1b[35m",
)

DEBUG_BUFFER_SIZE = 1024

DebugOutput = Callable[[str], None]


class Formatter(Protocol):
    """Renders one event into the sink context carried by the event."""

    def __call__(self, event: LogEvent) -> None:
        """Write the event to `event.context`."""


def _stamp(event: LogEvent, fmt: str) -> str:
    # Formatters called outside a dispatch fall back to the current time.
    return (event.time or local_now()).strftime(fmt)


def _plain_line(event: LogEvent) -> str:
    return "%s %-6s %s:%d: %s\n" % (
        _stamp(event, "%H:%M:%S"),
        event.level_name,
        event.source_file,
        event.source_line,
        event.message,
    )


def console_formatter(event: LogEvent) -> None:
    """Write `HH:MM:SS LEVEL  file:line: message` and flush."""
    stream: TextIO = event.context
    stream.write(_plain_line(event))
    stream.flush()


def colorized_console_formatter(event: LogEvent) -> None:
    """Console layout with the level colored by severity and a dim location."""
    stream: TextIO = event.context
    stream.write(
        "%s %s%-5s%s %s%s:%d:%s %s\n"
        % (
            _stamp(event, "%H:%M:%S"),
            LEVEL_COLORS[event.level],
            event.level_name,
            RESET,
            DIM,
            event.source_file,
            event.source_line,
            RESET,
            event.message,
        )
    )
    stream.flush()


def file_formatter(event: LogEvent) -> None:
    """Write `YYYY-MM-DD HH:MM:SS LEVEL  file:line: message`.

    No explicit flush; the file object's own buffering decides when bytes
    reach the disk.
    """
    event.context.write(
        "%s %-6s %s:%d: %s\n"
        % (
            _stamp(event, "%Y-%m-%d %H:%M:%S"),
            event.level_name,
            event.source_file,
            event.source_line,
            event.message,
        )
    )


def truncate_line(line: str, size: int = DEBUG_BUFFER_SIZE) -> str:
    """Fit a newline-terminated line into a `size`-byte buffer.

    One byte is kept for the terminator and one for the newline. Truncation
    never splits a UTF-8 sequence; characters UTF-8 cannot encode (lone
    surrogates) become "?".
    """
    body = line[:-1] if line.endswith("\n") else line
    limit = size - 2
    encoded = body.encode("utf-8", errors="replace")
    return encoded[:limit].decode("utf-8", errors="ignore") + "\n"


def debug_console_formatter(event: LogEvent) -> None:
    """Render the console layout into a bounded buffer and forward it.

    `event.context` is a debug-output callable such as `windows_debug_output`.
    """
    output: DebugOutput = event.context
    output(truncate_line(_plain_line(event)))


def windows_debug_output(text: str) -> None:
    """Send text to the attached debugger via `OutputDebugStringW`."""
    import ctypes

    ctypes.windll.kernel32.OutputDebugStringW(text)  # type: ignore[attr-defined]


def stderr_debug_output(text: str) -> None:
    """Portable stand-in for the platform debug channel."""
    sys.stderr.write(text)
    sys.stderr.flush()


def default_debug_output() -> DebugOutput | None:
    """Return the platform debug channel, or None where there is none."""
    if sys.platform == "win32":
        return windows_debug_output
    return None


class MemorySink:
    """In-memory sink context for tests and local debugging."""

    def __init__(self) -> None:
        """Create an empty in-memory sink."""
        self._lock = threading.Lock()
        self._events: list[LogEvent] = []

    def append(self, event: LogEvent) -> None:
        """Append an event to the in-memory list (thread-safe)."""
        with self._lock:
            self._events.append(event)

    def snapshot(self) -> Sequence[LogEvent]:
        """Return a point-in-time copy of all delivered events."""
        with self._lock:
            return list(self._events)

    def messages(self) -> list[str]:
        return [e.message for e in self.snapshot()]


def memory_formatter(event: LogEvent) -> None:
    """Store the event (without its context) in the `MemorySink` context."""
    sink: MemorySink = event.context
    sink.append(event.with_context(None))
