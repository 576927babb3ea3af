from __future__ import annotations

from datetime import datetime

import pytest

import tinylog

FIXED_TIME = datetime(2024, 1, 2, 12, 34, 56)


@pytest.fixture(autouse=True)
def _fresh_default_dispatcher():
    """Give every unit test a default dispatcher with zero-value defaults.

    The default dispatcher is process-wide, so settings and sinks registered by
    one test would otherwise leak into the next.
    """
    tinylog.get_dispatcher().reset(capacity=2)
    yield
    tinylog.get_dispatcher().reset(capacity=2)


@pytest.fixture
def fixed_clock(monkeypatch: pytest.MonkeyPatch) -> datetime:
    """Freeze dispatch time at 2024-01-02 12:34:56."""
    monkeypatch.setattr("tinylog.dispatcher.local_now", lambda: FIXED_TIME)
    return FIXED_TIME
