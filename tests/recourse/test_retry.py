"""Tests for the retry budget and backoff controller."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from packages.recourse.config import RetrySettings
from packages.recourse.errors import RetryExhaustedError, codes, create_error
from packages.recourse.retry import RetryController, RetryPhase, RetryState
from tests.recourse.helpers import FakeSleeper


def _sequence(values: list[float]) -> Iterator[float]:
    yield from values


@pytest.mark.asyncio
async def test_retry_allows_exactly_max_attempts(sleeper: FakeSleeper) -> None:
    """Three retries succeed, the fourth is rejected without invoking the op."""
    controller = RetryController(3, sleeper=sleeper)
    calls: list[int] = []

    async def op() -> str:
        calls.append(controller.attempt)
        return "ok"

    for _ in range(3):
        assert await controller.retry(op) == "ok"

    with pytest.raises(RetryExhaustedError) as exc_info:
        await controller.retry(op)

    assert calls == [1, 2, 3]
    assert exc_info.value.attempt == 3
    assert exc_info.value.max_attempts == 3
    assert controller.can_retry() is False
    assert controller.phase is RetryPhase.EXHAUSTED


@pytest.mark.asyncio
async def test_retry_counts_attempt_when_operation_fails(sleeper: FakeSleeper) -> None:
    """A failing operation still consumes budget and its error propagates."""
    controller = RetryController(2, sleeper=sleeper)

    async def op() -> None:
        raise ConnectionError("still down")

    with pytest.raises(ConnectionError):
        await controller.retry(op)

    assert controller.attempt == 1
    assert controller.can_retry() is True


@pytest.mark.asyncio
async def test_retry_sleeps_exponential_backoff_before_each_attempt(
    sleeper: FakeSleeper,
) -> None:
    """Delays double from the base delay and are passed to the sleeper in seconds."""
    controller = RetryController(3, base_delay_ms=1000, sleeper=sleeper)

    async def op() -> None:
        return None

    for _ in range(3):
        await controller.retry(op)

    assert sleeper.delays == [1.0, 2.0, 4.0]


def test_next_delay_is_capped() -> None:
    """Delays never exceed the configured maximum."""
    controller = RetryController(10, base_delay_ms=1000, max_delay_ms=5000)

    delays = []
    for _ in range(6):
        delays.append(controller.next_delay())
        controller._attempt += 1

    assert delays == [1000, 2000, 4000, 5000, 5000, 5000]


def test_next_delay_with_jitter_never_decreases() -> None:
    """Jitter may not make a later delay shorter than an earlier one."""
    rolls = _sequence([1.0, 0.0, 1.0, 0.0, 0.5, 0.0])
    controller = RetryController(
        10,
        base_delay_ms=1000,
        max_delay_ms=4000,
        jitter=True,
        jitter_ratio=0.5,
        rand=lambda: next(rolls),
    )

    delays = []
    for _ in range(6):
        delays.append(controller.next_delay())
        controller._attempt += 1

    assert delays == sorted(delays)
    assert all(delay <= 4000 for delay in delays)
    assert delays[0] == 1500


def test_next_delay_survives_huge_budgets() -> None:
    """Very large attempt counts should stay at the cap instead of overflowing."""
    controller = RetryController(10_000, base_delay_ms=1, max_delay_ms=30000)
    controller._attempt = 5000

    assert controller.next_delay() == 30000


@pytest.mark.asyncio
async def test_reset_restores_budget_and_backoff(sleeper: FakeSleeper) -> None:
    """After reset the controller is READY with the base delay again."""
    controller = RetryController(1, base_delay_ms=500, sleeper=sleeper)

    async def op() -> int:
        return 1

    await controller.retry(op)
    assert controller.can_retry() is False

    controller.reset()

    assert controller.attempt == 0
    assert controller.last_delay_ms == 0
    assert controller.can_retry() is True
    await controller.retry(op)
    assert sleeper.delays == [0.5, 0.5]


@pytest.mark.asyncio
async def test_zero_budget_rejects_first_retry(sleeper: FakeSleeper) -> None:
    """A zero budget is exhausted from the start."""
    controller = RetryController(0, sleeper=sleeper)
    invoked = False

    async def op() -> None:
        nonlocal invoked
        invoked = True

    with pytest.raises(RetryExhaustedError):
        await controller.retry(op)

    assert invoked is False
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_zero_base_delay_skips_sleep(sleeper: FakeSleeper) -> None:
    """No sleep is requested when the computed delay is zero."""
    controller = RetryController(2, base_delay_ms=0, max_delay_ms=0, sleeper=sleeper)

    async def op() -> str:
        return "ok"

    await controller.retry(op)

    assert sleeper.delays == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": -1},
        {"base_delay_ms": -5},
        {"base_delay_ms": 2000, "max_delay_ms": 1000},
        {"jitter_ratio": 1.5},
        {"jitter_ratio": -0.1},
    ],
)
def test_invalid_configuration_is_rejected(kwargs: dict[str, float]) -> None:
    """Nonsensical budgets and delays fail fast."""
    with pytest.raises(ValueError):
        RetryController(**kwargs)


def test_state_snapshot_reflects_bookkeeping() -> None:
    """``state`` returns an immutable snapshot of the counters."""
    controller = RetryController(2, base_delay_ms=100)
    controller.next_delay()
    controller._attempt = 2

    assert controller.state == RetryState(
        attempt=2,
        max_attempts=2,
        last_delay_ms=100,
        phase=RetryPhase.EXHAUSTED,
    )


def test_from_settings_uses_configured_defaults() -> None:
    """Settings seed the budget and delays."""
    settings = RetrySettings(max_attempts=5, base_delay_ms=250, max_delay_ms=1000)

    controller = RetryController.from_settings(settings)

    assert controller.max_attempts == 5
    assert controller.next_delay() == 250


def test_for_record_uses_registry_retry_override() -> None:
    """Retryable records with ``max_retries`` use that budget."""
    record = create_error(codes.NETWORK_OFFLINE)

    controller = RetryController.for_record(record)

    assert controller.max_attempts == record.max_retries


def test_for_record_without_override_uses_settings() -> None:
    """Retryable records without an override use the configured budget."""
    record = create_error(codes.UNKNOWN_ERROR)

    controller = RetryController.for_record(record, RetrySettings(max_attempts=7))

    assert record.max_retries is None
    assert controller.max_attempts == 7


def test_for_record_non_retryable_gets_zero_budget() -> None:
    """Non-retryable records never permit a retry."""
    record = create_error(codes.AUTH_FORBIDDEN)

    controller = RetryController.for_record(record)

    assert controller.max_attempts == 0
    assert controller.can_retry() is False
