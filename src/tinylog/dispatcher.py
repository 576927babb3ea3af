"""Synchronous dispatcher that gates log calls and fans them out to sinks.

One `log()` call is one dispatch:

- The level is checked against the global threshold and the quiet flag for
  the built-in console sink.
- Registered sinks are then visited once, in registration order, each gated
  only by its own threshold.
- The message is rendered and the timestamp captured at most once, on the
  first sink that fires, and both are shared by every sink in the dispatch.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TextIO

from .formatters import Formatter, colorized_console_formatter, console_formatter, file_formatter
from .models import LogEvent, LogLevel, local_now, parse_level, render_message, safe_str

DEFAULT_SINK_CAPACITY = 2

# Faults of the facility itself go to stdlib logging, never back through a dispatcher.
_logger = logging.getLogger("tinylog")


class CapacityExceededError(RuntimeError):
    """Raised when registering a sink into a full sink table."""

    def __init__(self, *, capacity: int):
        """Create an error capturing the table capacity."""
        self.capacity = capacity
        super().__init__(f"Sink table is full (capacity {capacity})")


class SinkWriteError(RuntimeError):
    """One or more sinks failed while rendering a single dispatch.

    `failures` holds `(slot, exception)` pairs; slot is None for the built-in
    console sink.
    """

    def __init__(self, failures: list[tuple[int | None, BaseException]]):
        """Create an error from the failures collected during one dispatch."""
        self.failures = failures
        described = ", ".join(
            f"{'console' if slot is None else f'slot {slot}'}: {exc!r}" for slot, exc in failures
        )
        super().__init__(f"{len(failures)} sink(s) failed: {described}")


@dataclass(frozen=True)
class Sink:
    """A registered formatter, its caller-owned context and its threshold."""

    formatter: Formatter
    context: Any
    min_level: LogLevel


class SinkTable:
    """Fixed-capacity, append-only table of sinks.

    Slots are filled by first-empty-slot scanning and never released.
    """

    def __init__(self, capacity: int = DEFAULT_SINK_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1. Got: {capacity}")
        self._slots: list[Sink | None] = [None] * capacity

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def add(self, sink: Sink) -> int:
        """Store the sink in the first empty slot and return its index."""
        for index, current in enumerate(self._slots):
            if current is None:
                self._slots[index] = sink
                return index
        raise CapacityExceededError(capacity=self.capacity)

    def occupied(self) -> list[tuple[int, Sink]]:
        """Return `(slot, sink)` pairs in slot order."""
        return [(index, sink) for index, sink in enumerate(self._slots) if sink is not None]

    def __len__(self) -> int:
        return sum(1 for sink in self._slots if sink is not None)


class _Dispatch:
    """Per-call state: the shared event, built on first use."""

    def __init__(self, level: LogLevel, source_file: Any, source_line: Any, fmt: Any, args: tuple[Any, ...]):
        self.level = level
        self.source_file = source_file
        self.source_line = source_line
        self.fmt = fmt
        self.args = args
        self._event: LogEvent | None = None
        self.failures: list[tuple[int | None, BaseException]] = []

    @property
    def event(self) -> LogEvent:
        """The shared event; the clock is read and the message rendered once."""
        if self._event is None:
            self._event = LogEvent(
                level=self.level,
                source_file=safe_str(self.source_file),
                source_line=_line_number(self.source_line),
                format=safe_str(self.fmt),
                args=self.args,
                message=render_message(self.fmt, self.args),
                time=local_now(),
            )
        return self._event


def _line_number(value: Any) -> int:
    # A bad line number must not cost the event.
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


class Dispatcher:
    """Process-wide log configuration plus the sink table.

    Every operation holds one re-entrant lock, so a dispatcher can be shared
    between threads; a slow sink therefore stalls every caller.
    """

    def __init__(
        self,
        *,
        level: Any = LogLevel.TRACE,
        quiet: bool = False,
        use_color: bool = False,
        strict: bool = False,
        console: TextIO | None = None,
        capacity: int = DEFAULT_SINK_CAPACITY,
    ) -> None:
        """Create a dispatcher.

        Args:
            level: Global minimum level for the built-in console sink.
            quiet: Mute the built-in console sink (registered sinks still fire).
            use_color: Use the colorized console formatter for the built-in sink.
            strict: Raise `SinkWriteError` from `log()` after a sink fails.
            console: Built-in console destination; None means the current
                `sys.stderr` at call time.
            capacity: Number of sink slots.
        """
        self._lock = threading.RLock()
        self._level = parse_level(level)
        self._quiet = bool(quiet)
        self._use_color = bool(use_color)
        self._strict = bool(strict)
        self._console = console
        self._table = SinkTable(capacity)

        self._write_failures = 0
        self._first_failure_at: datetime | None = None
        self._last_failure_at: datetime | None = None

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def use_color(self) -> bool:
        return self._use_color

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def capacity(self) -> int:
        return self._table.capacity

    @property
    def sinks(self) -> tuple[Sink, ...]:
        """Registered sinks in invocation order."""
        with self._lock:
            return tuple(sink for _, sink in self._table.occupied())

    def set_level(self, level: Any) -> None:
        """Set the global minimum level."""
        parsed = parse_level(level)
        with self._lock:
            self._level = parsed

    def set_quiet(self, enabled: bool) -> None:
        """Mute or unmute the built-in console sink only."""
        with self._lock:
            self._quiet = bool(enabled)

    def set_color(self, enabled: bool) -> None:
        with self._lock:
            self._use_color = bool(enabled)

    def set_strict(self, enabled: bool) -> None:
        with self._lock:
            self._strict = bool(enabled)

    def set_console(self, console: TextIO | None) -> None:
        with self._lock:
            self._console = console

    def register_sink(self, formatter: Formatter, context: Any, min_level: Any = LogLevel.TRACE) -> int:
        """Register a sink and return its slot.

        Raises:
        - `CapacityExceededError` when every slot is taken (nothing changes)
        - `InvalidLevelError` for an unknown `min_level`
        """
        sink = Sink(formatter=formatter, context=context, min_level=parse_level(min_level))
        with self._lock:
            return self._table.add(sink)

    def add_file(self, fp: TextIO, min_level: Any = LogLevel.TRACE) -> int:
        """Register the file formatter for an already-open text file.

        The caller keeps ownership of `fp` and must close it.
        """
        return self.register_sink(file_formatter, fp, min_level)

    def log(self, level: Any, source_file: str, source_line: int, fmt: str, *args: Any) -> None:
        """Dispatch one log call to the console and every eligible sink."""
        dispatch = _Dispatch(parse_level(level), source_file, source_line, fmt, args)

        with self._lock:
            if not self._quiet and dispatch.level >= self._level:
                console = self._console if self._console is not None else sys.stderr
                formatter = colorized_console_formatter if self._use_color else console_formatter
                self._invoke(dispatch, None, formatter, console)

            for slot, sink in self._table.occupied():
                if dispatch.level >= sink.min_level:
                    self._invoke(dispatch, slot, sink.formatter, sink.context)

            strict = self._strict

        if dispatch.failures and strict:
            raise SinkWriteError(dispatch.failures)

    def _invoke(self, dispatch: _Dispatch, slot: int | None, formatter: Formatter, context: Any) -> None:
        """Run one formatter; failures are recorded and never stop the fan-out."""
        event = dispatch.event.with_context(context)
        try:
            formatter(event)
        except Exception as exc:  # noqa: BLE001 - best-effort fan-out
            dispatch.failures.append((slot, exc))
            # Reuse the dispatch time.
            now = event.time or local_now()
            self._write_failures += 1
            self._first_failure_at = self._first_failure_at or now
            self._last_failure_at = now
            _logger.warning(
                "tinylog sink %s failed: %r",
                "console" if slot is None else f"slot {slot}",
                exc,
            )

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        with self._lock:
            return {
                "write_failures": self._write_failures,
                "first_failure_at": self._first_failure_at,
                "last_failure_at": self._last_failure_at,
            }

    def reset(self, *, capacity: int | None = None) -> None:
        """Restore zero-value defaults and drop every registered sink.

        Sink contexts are not closed; they belong to whoever registered them.
        """
        with self._lock:
            self._level = LogLevel.TRACE
            self._quiet = False
            self._use_color = False
            self._strict = False
            self._console = None
            self._table = SinkTable(capacity if capacity is not None else self._table.capacity)
            self._write_failures = 0
            self._first_failure_at = None
            self._last_failure_at = None
