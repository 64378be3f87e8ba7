"""Shared fixtures for recourse engine tests."""

from __future__ import annotations

import os
from typing import Iterator

import pytest

from packages.recourse.handler import ErrorHandler, HandlerConfig
from tests.recourse.helpers import FakeSleeper, RecordSink


@pytest.fixture
def sink() -> RecordSink:
    """Return an empty record sink."""
    return RecordSink()


@pytest.fixture
def sleeper() -> FakeSleeper:
    """Return a non-blocking sleeper."""
    return FakeSleeper()


@pytest.fixture
def handler(sink: RecordSink) -> ErrorHandler:
    """Return a handler that publishes into ``sink`` with logging disabled."""
    return ErrorHandler(HandlerConfig(log_errors=False, on_error=sink))


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove ambient ``RECOURSE_*`` variables for settings tests."""
    for key in list(os.environ):
        if key.startswith("RECOURSE_"):
            monkeypatch.delenv(key, raising=False)
    yield
