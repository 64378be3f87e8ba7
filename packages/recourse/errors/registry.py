"""Static error-code policy registry with a guaranteed fallback entry."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from . import codes
from .types import (
    ErrorCategory,
    ErrorSeverity,
    ErrorUIState,
    RegistryEntry,
    RegistryError,
)

FALLBACK_CODE = codes.UNKNOWN_ERROR

ERROR_REGISTRY: Mapping[str, RegistryEntry] = MappingProxyType(
    {
        codes.UNKNOWN_ERROR: RegistryEntry(
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.CRITICAL,
            ui_state=ErrorUIState.FULL_PAGE,
            retryable=True,
            user_message="Something went wrong. Please try again.",
        ),
        codes.NETWORK_TIMEOUT: RegistryEntry(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.WARNING,
            ui_state=ErrorUIState.INLINE,
            retryable=True,
            user_message="The request took too long. Please try again.",
            max_retries=3,
        ),
        codes.NETWORK_OFFLINE: RegistryEntry(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.TOAST,
            retryable=True,
            user_message="You appear to be offline. Check your connection.",
            max_retries=5,
        ),
        codes.NETWORK_SERVER_ERROR: RegistryEntry(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.TOAST,
            retryable=True,
            user_message="The server had a problem. Please try again shortly.",
        ),
        codes.NETWORK_RATE_LIMITED: RegistryEntry(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.WARNING,
            ui_state=ErrorUIState.TOAST,
            retryable=True,
            user_message="Too many requests. Please wait a moment.",
            max_retries=2,
        ),
        codes.AUTH_UNAUTHORIZED: RegistryEntry(
            category=ErrorCategory.AUTH,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.MODAL,
            retryable=False,
            user_message="Please sign in to continue.",
        ),
        codes.AUTH_SESSION_EXPIRED: RegistryEntry(
            category=ErrorCategory.AUTH,
            severity=ErrorSeverity.WARNING,
            ui_state=ErrorUIState.MODAL,
            retryable=False,
            user_message="Your session has expired. Please sign in again.",
        ),
        codes.AUTH_FORBIDDEN: RegistryEntry(
            category=ErrorCategory.AUTH,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.FULL_PAGE,
            retryable=False,
            user_message="You do not have permission to view this.",
        ),
        codes.VALIDATION_FAILED: RegistryEntry(
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.INFO,
            ui_state=ErrorUIState.INLINE,
            retryable=False,
            user_message="Please check the highlighted fields.",
        ),
        codes.VALIDATION_REQUIRED_FIELD: RegistryEntry(
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.INFO,
            ui_state=ErrorUIState.INLINE,
            retryable=False,
            user_message="This field is required.",
        ),
        codes.STREAM_DISCONNECTED: RegistryEntry(
            category=ErrorCategory.STREAM,
            severity=ErrorSeverity.WARNING,
            ui_state=ErrorUIState.TOAST,
            retryable=True,
            user_message="Live updates were interrupted. Reconnecting...",
            max_retries=5,
        ),
        codes.STREAM_PARSE_ERROR: RegistryEntry(
            category=ErrorCategory.STREAM,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.TOAST,
            retryable=False,
            user_message="We received an update we could not read.",
        ),
        codes.DATA_FETCH_FAILED: RegistryEntry(
            category=ErrorCategory.DATA_LAYER,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.INLINE,
            retryable=True,
            user_message="We could not load this data.",
            max_retries=3,
        ),
        codes.DATA_NOT_FOUND: RegistryEntry(
            category=ErrorCategory.DATA_LAYER,
            severity=ErrorSeverity.WARNING,
            ui_state=ErrorUIState.INLINE,
            retryable=False,
            user_message="The requested item could not be found.",
        ),
        codes.DATA_SAVE_FAILED: RegistryEntry(
            category=ErrorCategory.DATA_LAYER,
            severity=ErrorSeverity.ERROR,
            ui_state=ErrorUIState.TOAST,
            retryable=True,
            user_message="Your changes could not be saved.",
            max_retries=2,
        ),
    }
)


def _fallback_problems(entry: RegistryEntry) -> list[str]:
    """Return the fallback contract clauses ``entry`` violates."""
    problems = []
    if entry.category is not ErrorCategory.UNKNOWN:
        problems.append("category UNKNOWN")
    if entry.severity is not ErrorSeverity.CRITICAL:
        problems.append("severity CRITICAL")
    if entry.ui_state is not ErrorUIState.FULL_PAGE:
        problems.append("ui_state FULL_PAGE")
    if not entry.retryable:
        problems.append("retryable")
    return problems


class ErrorRegistry:
    """Read-only code-to-policy table whose lookups never fail."""

    def __init__(
        self,
        entries: Mapping[str, RegistryEntry],
        *,
        fallback_code: str = FALLBACK_CODE,
    ) -> None:
        fallback = entries.get(fallback_code)
        if fallback is None:
            raise RegistryError(
                message=f"registry is missing fallback entry '{fallback_code}'"
            )
        problems = _fallback_problems(fallback)
        if problems:
            raise RegistryError(
                message=(
                    f"fallback entry '{fallback_code}' must be "
                    + " and ".join(problems)
                )
            )
        self._entries: Mapping[str, RegistryEntry] = MappingProxyType(dict(entries))
        self._fallback_code = fallback_code
        self._fallback = fallback

    @property
    def fallback_code(self) -> str:
        return self._fallback_code

    @property
    def fallback(self) -> RegistryEntry:
        return self._fallback

    def lookup(self, code: object) -> RegistryEntry:
        """Return the entry for ``code`` or the fallback entry on miss."""
        if not isinstance(code, str):
            return self._fallback
        return self._entries.get(code, self._fallback)

    def contains(self, code: object) -> bool:
        """Return whether ``code`` has an exact entry."""
        return isinstance(code, str) and code in self._entries

    def codes(self) -> tuple[str, ...]:
        """Return all registered codes in sorted order."""
        return tuple(sorted(self._entries))


DEFAULT_REGISTRY = ErrorRegistry(ERROR_REGISTRY)


def lookup(code: object) -> RegistryEntry:
    """Resolve ``code`` against the default registry."""
    return DEFAULT_REGISTRY.lookup(code)
