from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from tinylog.models import LEVEL_NAMES, InvalidLevelError, LogEvent, LogLevel, level_name, parse_level, render_message


def test_levels_are_ordered() -> None:
    assert LogLevel.TRACE < LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN < LogLevel.ERROR < LogLevel.FATAL
    assert [lvl.name for lvl in LogLevel] == list(LEVEL_NAMES)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (LogLevel.INFO, "INFO"),
        (0, "TRACE"),
        (5, "FATAL"),
        ("warn", "WARN"),
        ("Warning", "WARN"),
        (" error ", "ERROR"),
        ("3", "WARN"),
    ],
)
def test_level_name_accepts_levels_ints_and_names(value: object, expected: str) -> None:
    assert level_name(value) == expected


@pytest.mark.parametrize("bad", [-1, 6, 100, "", "verbose", None, 1.0, False, object()])
def test_parse_level_rejects_everything_else(bad: object) -> None:
    with pytest.raises(InvalidLevelError) as exc_info:
        parse_level(bad)
    assert exc_info.value.value is bad
    assert isinstance(exc_info.value, ValueError)


def test_render_message() -> None:
    assert render_message("plain", ()) == "plain"
    assert render_message("100%", ()) == "100%"
    assert render_message("disk %s at %d%%", ("full", 99)) == "disk full at 99%"
    assert render_message("%(k)s", ({"k": "v"},)) == "v"
    assert render_message("no placeholders", ("extra",)) == "no placeholders 'extra'"


class _BrokenStr:
    def __str__(self) -> str:
        raise RuntimeError("boom")

    def __repr__(self) -> str:
        return "<broken>"


def test_render_message_never_raises_on_broken_arguments() -> None:
    assert render_message("val %s", (_BrokenStr(),)) == "val %s <broken>"
    assert render_message(_BrokenStr(), ()) == "<broken>"


def test_event_is_frozen_and_retargetable() -> None:
    ev = LogEvent(
        level=LogLevel.WARN,
        source_file="app.py",
        source_line=3,
        format="x %s",
        args=("y",),
        message="x y",
        time=datetime(2024, 1, 1),
    )
    with pytest.raises(ValidationError):
        ev.message = "changed"  # type: ignore[misc]

    moved = ev.with_context("ctx")
    assert moved.context == "ctx"
    assert ev.context is None
    assert moved.time == ev.time
    assert moved.level_name == "WARN"
