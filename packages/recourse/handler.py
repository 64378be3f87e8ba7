"""Error handler facade: normalization, policy lookup and report side effects.

The handler is the single reporting entry point. It owns the process-wide
``HandlerConfig`` (replaced wholesale through ``configure``) and confines its
side effects to developer logging and one external ``on_error`` callback.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from packages.recourse.config import RecourseSettings
from packages.recourse.errors import (
    DEFAULT_REGISTRY,
    ClassifiedError,
    ErrorRecord,
    ErrorRegistry,
    ErrorSeverity,
    normalize,
)
from packages.recourse.logging import fields, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[ErrorRecord], None]

# Only CRITICAL escalates above WARNING.
_SEVERITY_LOG_LEVEL: dict[ErrorSeverity, int] = {
    ErrorSeverity.INFO: logging.WARNING,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.WARNING,
    ErrorSeverity.CRITICAL: logging.ERROR,
}


@dataclass(frozen=True, slots=True)
class HandlerConfig:
    """Process-wide handler behavior; replaced wholesale, never mutated."""

    log_errors: bool = False
    on_error: ErrorCallback | None = None

    @classmethod
    def from_settings(
        cls,
        settings: RecourseSettings,
        *,
        on_error: ErrorCallback | None = None,
    ) -> HandlerConfig:
        """Seed ``log_errors`` from the development-build flag."""
        return cls(log_errors=settings.is_development, on_error=on_error)


def log_level_for(severity: ErrorSeverity) -> int:
    """Return the stdlib log level used for one severity."""
    return _SEVERITY_LOG_LEVEL[severity]


class ErrorHandler:
    """Report failures and enrich failing async operations with their record.

    Config writes are last-write-wins with no locking; ``configure`` is meant
    to be called from startup code, not concurrently.
    """

    def __init__(
        self,
        config: HandlerConfig | None = None,
        *,
        registry: ErrorRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._config = config or HandlerConfig()
        self._registry = registry

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def registry(self) -> ErrorRegistry:
        return self._registry

    def configure(self, config: HandlerConfig) -> None:
        """Replace the handler config wholesale."""
        self._config = config

    def report(
        self,
        raw: object,
        code: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorRecord:
        """Normalize, log and publish one failure, returning its record.

        Never raises: a failing ``on_error`` callback is caught and discarded
        so the primary failure is still classified and returned.
        """
        record = normalize(raw, code, context, registry=self._registry)
        config = self._config

        if config.log_errors:
            _log_record(record)

        if config.on_error is not None:
            try:
                config.on_error(record)
            except Exception:
                logger.debug(
                    "error report callback failed",
                    exc_info=True,
                    extra={fields.EVENT: fields.REPORT_CALLBACK_FAILURE_EVENT},
                )

        return record

    async def wrap(
        self,
        operation: Callable[[], Awaitable[T]],
        code: str,
        context: Mapping[str, Any] | None = None,
    ) -> T:
        """Await ``operation`` and re-raise failures as ``ClassifiedError``.

        ``code`` applies to failures that are not already classified; a
        ``ClassifiedError`` from a nested ``wrap`` keeps its own code and only
        gains ``context``.
        """
        try:
            return await operation()
        except Exception as exc:
            explicit = None if isinstance(exc, ClassifiedError) else code
            record = self.report(exc, explicit, context)
            raise ClassifiedError.from_record(record) from exc


def build_error_handler(
    settings: RecourseSettings,
    *,
    on_error: ErrorCallback | None = None,
    registry: ErrorRegistry = DEFAULT_REGISTRY,
) -> ErrorHandler:
    """Construct a handler whose logging default follows the environment."""
    return ErrorHandler(
        HandlerConfig.from_settings(settings, on_error=on_error),
        registry=registry,
    )


def _log_record(record: ErrorRecord) -> None:
    """Emit one developer log line carrying the record fields as ``extra``."""
    payload: dict[str, object] = {
        fields.EVENT: fields.ERROR_REPORTED_EVENT,
        fields.ERROR_CODE: record.code,
        fields.ERROR_CATEGORY: record.category.value,
        fields.SEVERITY: record.severity.value,
        fields.UI_STATE: record.ui_state.value,
        fields.RETRYABLE: record.retryable,
    }
    original = record.original_error
    if original is not None:
        payload[fields.EXCEPTION_TYPE] = type(original).__name__
    source = record.metadata.get(fields.SOURCE)
    if source is not None:
        payload[fields.SOURCE] = source

    exc_info = None
    if isinstance(original, BaseException):
        exc_info = (type(original), original, original.__traceback__)

    logger.log(
        log_level_for(record.severity),
        "[%s] %s",
        record.code,
        record.message,
        exc_info=exc_info,
        extra=payload,
    )
