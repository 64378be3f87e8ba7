"""Render-failure boundary glue for host UI frameworks.

A host framework wraps its render entry point in ``RenderBoundary.render``.
Failures raised while rendering are reported with ``source="render"`` and the
fallback view is returned instead. The host then asks ``should_remount`` and
either calls ``remount`` (bounded by a ``RetryController``) or keeps showing
the fallback; once the remount budget is spent the failure escalates to the
full-page state.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, Generic, Mapping, TypeVar

from packages.recourse.errors import ErrorRecord, ErrorUIState
from packages.recourse.handler import ErrorHandler
from packages.recourse.logging import fields, get_logger
from packages.recourse.retry import RetryController

logger = get_logger(__name__)

SOURCE_RENDER = "render"

V = TypeVar("V")


class RenderBoundary(Generic[V]):
    """Catch render failures, report them, and gate remounts."""

    def __init__(
        self,
        handler: ErrorHandler,
        *,
        fallback: Callable[[ErrorRecord], V],
        retry: RetryController | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self._handler = handler
        self._fallback = fallback
        self._retry = retry
        self._context = dict(context or {})
        self._failure: ErrorRecord | None = None

    @property
    def failure(self) -> ErrorRecord | None:
        """Return the record for the current failure, if any."""
        return self._failure

    @property
    def retry_controller(self) -> RetryController | None:
        return self._retry

    def render(self, view: Callable[[], V]) -> V:
        """Render ``view`` or the fallback for its failure."""
        try:
            result = view()
        except Exception as exc:
            return self._fail(exc)
        self._failure = None
        return result

    def should_remount(self) -> bool:
        """Return whether the current failure may be retried by remounting."""
        if self._failure is None or not self._failure.retryable:
            return False
        return self._controller_for(self._failure).can_retry()

    async def remount(self, view: Callable[[], V]) -> V:
        """Retry rendering once, escalating when no remount is allowed."""
        failure = self._failure
        if failure is None:
            return self.render(view)
        if not self.should_remount():
            return self._escalate(failure)

        async def attempt() -> V:
            return view()

        try:
            result = await self._controller_for(failure).retry(attempt)
        except Exception as exc:
            return self._fail(exc)

        self._failure = None
        self._controller_for(failure).reset()
        return result

    def reset(self) -> None:
        """Clear the current failure and restore the remount budget."""
        self._failure = None
        if self._retry is not None:
            self._retry.reset()

    def _fail(self, exc: Exception) -> V:
        context = {**self._context, fields.SOURCE: SOURCE_RENDER}
        self._failure = self._handler.report(exc, None, context)
        return self._fallback(self._failure)

    def _escalate(self, failure: ErrorRecord) -> V:
        escalated = dataclasses.replace(failure, ui_state=ErrorUIState.FULL_PAGE)
        self._failure = escalated
        logger.debug("render failure escalated to full page: %s", escalated.code)
        return self._fallback(escalated)

    def _controller_for(self, failure: ErrorRecord) -> RetryController:
        if self._retry is None:
            self._retry = RetryController.for_record(failure)
        return self._retry
