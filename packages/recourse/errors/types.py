"""Canonical error types for the recourse engine.

This module defines the closed taxonomy (category, severity, UI state), the
static policy shape stored in the registry, and the immutable record every
failure is normalized into.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ErrorCategory(str, Enum):
    """High-level failure categories."""

    NETWORK = "network"
    AUTH = "auth"
    VALIDATION = "validation"
    STREAM = "stream"
    DATA_LAYER = "data-layer"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Ordered severity levels: INFO < WARNING < ERROR < CRITICAL."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Return the ordinal position of this severity."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    ErrorSeverity.INFO: 0,
    ErrorSeverity.WARNING: 1,
    ErrorSeverity.ERROR: 2,
    ErrorSeverity.CRITICAL: 3,
}


class ErrorUIState(str, Enum):
    """Presentation mode a consumer should use for one failure."""

    INLINE = "inline"
    TOAST = "toast"
    MODAL = "modal"
    FULL_PAGE = "full_page"


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """Static policy describing how one error code is classified and shown."""

    category: ErrorCategory
    severity: ErrorSeverity
    ui_state: ErrorUIState
    retryable: bool
    user_message: str
    max_retries: int | None = None


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """Canonical normalized failure with its resolved policy attached."""

    code: str
    category: ErrorCategory
    severity: ErrorSeverity
    ui_state: ErrorUIState
    retryable: bool
    message: str
    user_message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: Mapping[str, Any] = field(default_factory=dict)
    original_error: object | None = None
    max_retries: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def is_critical(self) -> bool:
        """Return whether this record carries CRITICAL severity."""
        return self.severity is ErrorSeverity.CRITICAL

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view; the raw original error is summarized."""
        original = self.original_error
        return {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "ui_state": self.ui_state.value,
            "retryable": self.retryable,
            "max_retries": self.max_retries,
            "message": self.message,
            "user_message": self.user_message,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
            "original_error_type": (
                type(original).__name__ if original is not None else None
            ),
        }


@dataclass(eq=False)
class RecourseError(Exception):
    """Base error type for recourse engine failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(eq=False)
class ClassifiedError(RecourseError):
    """Failure re-raised by ``wrap`` carrying its normalized record."""

    record: ErrorRecord

    @classmethod
    def from_record(cls, record: ErrorRecord) -> ClassifiedError:
        """Build a classified failure whose message is the record message."""
        return cls(message=f"[{record.code}] {record.message}", record=record)


@dataclass(eq=False)
class RegistryError(RecourseError):
    """Raised when a registry table violates its fallback contract."""


@dataclass(eq=False)
class RetryExhaustedError(RecourseError):
    """Raised when ``retry`` is called with no attempts left."""

    attempt: int = 0
    max_attempts: int = 0
