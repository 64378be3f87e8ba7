"""Test doubles shared across recourse engine tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from packages.recourse.errors import ErrorRecord


@dataclass(slots=True)
class RecordSink:
    """Collects records passed to ``on_error`` callbacks."""

    records: list[ErrorRecord] = field(default_factory=list)

    def __call__(self, record: ErrorRecord) -> None:
        self.records.append(record)


@dataclass(slots=True)
class FakeSleeper:
    """Async sleeper that records requested delays instead of waiting."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
