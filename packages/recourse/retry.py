"""Per-operation retry budget and exponential backoff state machine.

Each retryable action owns one ``RetryController``. The controller is READY
while ``attempt < max_attempts`` and EXHAUSTED once the budget is spent; it
stays EXHAUSTED until ``reset`` is called. There is no cancellation primitive:
callers that want to abandon a pending retry build that into the operation.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from packages.recourse.config import RetrySettings
from packages.recourse.errors import ErrorRecord, RetryExhaustedError
from packages.recourse.logging import fields, get_logger, log_context

logger = get_logger(__name__)

T = TypeVar("T")

# Keeps ``2**attempt`` within float range for very large budgets.
_MAX_EXPONENT = 64


class RetryPhase(str, Enum):
    """Lifecycle phase of one retry controller."""

    READY = "ready"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class RetryState:
    """Inspectable snapshot of one controller's retry bookkeeping."""

    attempt: int
    max_attempts: int
    last_delay_ms: float
    phase: RetryPhase


class RetryController:
    """Bounded retry gate with non-decreasing exponential backoff."""

    def __init__(
        self,
        max_attempts: int = 3,
        *,
        base_delay_ms: float = 1000,
        max_delay_ms: float = 30000,
        jitter: bool = False,
        jitter_ratio: float = 0.1,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0.")
        if base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0.")
        if max_delay_ms < base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms.")
        if not 0 <= jitter_ratio <= 1:
            raise ValueError("jitter_ratio must be within [0, 1].")

        self._max_attempts = int(max_attempts)
        self._base_delay_ms = float(base_delay_ms)
        self._max_delay_ms = float(max_delay_ms)
        self._jitter = jitter
        self._jitter_ratio = jitter_ratio
        self._sleeper = sleeper
        self._rand = rand
        self._attempt = 0
        self._last_delay_ms = 0.0

    @classmethod
    def from_settings(cls, settings: RetrySettings, **kwargs: object) -> RetryController:
        """Build a controller from the configured retry defaults."""
        return cls(
            settings.max_attempts,
            base_delay_ms=settings.base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            jitter=settings.jitter,
            **kwargs,
        )

    @classmethod
    def for_record(
        cls,
        record: ErrorRecord,
        settings: RetrySettings | None = None,
        **kwargs: object,
    ) -> RetryController:
        """Build a controller sized by one record's retry policy.

        Non-retryable records get a zero budget; retryable records use the
        registry ``max_retries`` override when present.
        """
        resolved = settings or RetrySettings()
        if not record.retryable:
            max_attempts = 0
        elif record.max_retries is not None:
            max_attempts = record.max_retries
        else:
            max_attempts = resolved.max_attempts
        return cls(
            max_attempts,
            base_delay_ms=resolved.base_delay_ms,
            max_delay_ms=resolved.max_delay_ms,
            jitter=resolved.jitter,
            **kwargs,
        )

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def last_delay_ms(self) -> float:
        return self._last_delay_ms

    @property
    def phase(self) -> RetryPhase:
        if self._attempt < self._max_attempts:
            return RetryPhase.READY
        return RetryPhase.EXHAUSTED

    @property
    def state(self) -> RetryState:
        """Return an immutable snapshot of current bookkeeping."""
        return RetryState(
            attempt=self._attempt,
            max_attempts=self._max_attempts,
            last_delay_ms=self._last_delay_ms,
            phase=self.phase,
        )

    def can_retry(self) -> bool:
        """Return whether another retry is permitted."""
        return self.phase is RetryPhase.READY

    def next_delay(self) -> float:
        """Compute the next backoff delay in milliseconds.

        The delay is ``base * 2**attempt`` capped at ``max_delay_ms``, plus
        optional jitter, and never lower than the previously returned delay
        until ``reset``.
        """
        exponent = min(self._attempt, _MAX_EXPONENT)
        delay = min(self._base_delay_ms * (2**exponent), self._max_delay_ms)
        if self._jitter and delay > 0:
            delay = min(delay + delay * self._jitter_ratio * self._rand(), self._max_delay_ms)
        delay = max(delay, self._last_delay_ms)
        self._last_delay_ms = delay
        return delay

    async def retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` once more if the budget allows.

        The attempt is counted before the operation is awaited, so a failure
        or cancellation during it still consumes budget. Failures propagate
        unchanged for the caller to report.
        """
        if not self.can_retry():
            raise RetryExhaustedError(
                message=(
                    f"retry budget exhausted after {self._attempt} of "
                    f"{self._max_attempts} attempts"
                ),
                attempt=self._attempt,
                max_attempts=self._max_attempts,
            )

        delay_ms = self.next_delay()
        self._attempt += 1
        with log_context(
            {
                fields.ATTEMPT: self._attempt,
                fields.MAX_ATTEMPTS: self._max_attempts,
                fields.DELAY_MS: delay_ms,
            }
        ):
            logger.debug("retrying operation")

        if delay_ms > 0:
            await self._sleeper(delay_ms / 1000)
        return await operation()

    def reset(self) -> None:
        """Return to READY with a fresh budget and backoff curve."""
        self._attempt = 0
        self._last_delay_ms = 0.0
