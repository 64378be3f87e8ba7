"""Read-only helpers for presentation layers and call sites.

Presentation code reads ``ui_state``, ``severity``, ``user_message`` and
``retryable`` from records; these helpers accept either a record or any raw
failure so call sites do not need to normalize first.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import Any, Mapping, ParamSpec, TypeVar

from packages.recourse.errors import (
    DEFAULT_REGISTRY,
    ErrorRecord,
    ErrorSeverity,
    ErrorUIState,
    normalize,
)
from packages.recourse.handler import ErrorHandler

P = ParamSpec("P")
T = TypeVar("T")

_SEVERITY_CLASS: dict[ErrorSeverity, str] = {
    ErrorSeverity.INFO: "severity-info",
    ErrorSeverity.WARNING: "severity-warning",
    ErrorSeverity.ERROR: "severity-error",
    ErrorSeverity.CRITICAL: "severity-critical",
}


def handle_unknown_error(
    handler: ErrorHandler,
    value: object,
    context: Mapping[str, Any] | None = None,
) -> ErrorRecord:
    """Report a value of unknown shape without an explicit code."""
    return handler.report(value, None, context)


def get_error_message(error: object) -> str:
    """Return the end-user message for a record or raw failure."""
    return _as_record(error).user_message


def get_severity_class(error: object) -> str:
    """Return a stable style token for the failure severity."""
    return _SEVERITY_CLASS[_as_record(error).severity]


def get_error_ui_state(error: object) -> ErrorUIState:
    """Return the presentation mode for a record or raw failure."""
    return _as_record(error).ui_state


def should_show_retry(error: object) -> bool:
    """Return whether a retry affordance should be offered."""
    return _as_record(error).retryable


def is_critical_error(error: object) -> bool:
    """Return whether the failure resolves to CRITICAL severity."""
    return _as_record(error).is_critical()


def format_error_for_logging(error: object) -> dict[str, Any]:
    """Return a JSON-friendly mapping suitable for external log shipping."""
    return _as_record(error).to_dict()


def with_error_handling(
    handler: ErrorHandler,
    code: str,
    context: Mapping[str, Any] | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorate a coroutine function so failures go through ``handler.wrap``."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await handler.wrap(lambda: func(*args, **kwargs), code, context)

        return wrapper

    return decorator


def _as_record(error: object) -> ErrorRecord:
    if isinstance(error, ErrorRecord):
        return error
    return normalize(error, registry=DEFAULT_REGISTRY)
