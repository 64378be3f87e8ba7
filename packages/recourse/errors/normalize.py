"""Normalization of arbitrary raised values into canonical ``ErrorRecord``s.

Raw failures arrive in several shapes: records that were already normalized,
``ClassifiedError`` exceptions carrying a record, structured failures that
expose their own ``code`` (and optionally ``category``), plain exceptions, and
non-exception values such as strings or ``None``. ``normalize`` checks for
each capability explicitly, in that order, and never raises: anything it
cannot inspect degrades to the registry fallback entry.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Protocol, runtime_checkable

from packages.recourse.logging import get_logger

from .registry import DEFAULT_REGISTRY, ErrorRegistry
from .types import ClassifiedError, ErrorCategory, ErrorRecord

logger = get_logger(__name__)

UNKNOWN_FAILURE_MESSAGE = "unknown failure"

_NETWORK_MARKERS = (
    "timeout",
    "timed out",
    "network",
    "connection",
    "offline",
    "unreachable",
    "econnrefused",
    "econnreset",
    "dns",
)


@runtime_checkable
class CodedFailure(Protocol):
    """A raised value that carries its own machine-readable code."""

    code: str


def normalize(
    raw: object,
    code: str | None = None,
    context: Mapping[str, Any] | None = None,
    *,
    registry: ErrorRegistry = DEFAULT_REGISTRY,
) -> ErrorRecord:
    """Normalize ``raw`` into one ``ErrorRecord`` with its policy resolved.

    ``code`` takes precedence over any code inferred from ``raw``. ``context``
    is merged into the record metadata, with caller keys winning on conflict.
    """
    try:
        return _normalize(raw, code, context, registry)
    except Exception:
        logger.debug("error normalization degraded to fallback", exc_info=True)
        return _fallback_record(raw, context, registry)


def _normalize(
    raw: object,
    code: str | None,
    context: Mapping[str, Any] | None,
    registry: ErrorRegistry,
) -> ErrorRecord:
    explicit_code = code if isinstance(code, str) and code else None
    extra = dict(context) if context else {}

    carried = _carried_record(raw)
    if carried is not None:
        return _merge_record(carried, explicit_code, extra, registry)

    inferred_code, category_hint = _structured_shape(raw)
    if category_hint is None:
        category_hint = classify(raw)

    return build_record(
        explicit_code or inferred_code or registry.fallback_code,
        message=_message_of(raw),
        category_hint=category_hint,
        metadata=extra,
        original_error=raw,
        registry=registry,
    )


def build_record(
    code: str,
    *,
    message: str,
    category_hint: ErrorCategory | None = None,
    metadata: Mapping[str, Any] | None = None,
    original_error: object | None = None,
    registry: ErrorRegistry = DEFAULT_REGISTRY,
) -> ErrorRecord:
    """Build a record for ``code`` with policy fields sourced from the registry.

    Registered codes take the registry category. The fallback code and
    unknown codes use ``category_hint`` when given, since the fallback entry
    has no category of its own beyond UNKNOWN.
    """
    entry = registry.lookup(code)
    category = entry.category
    if category_hint is not None and _takes_hint(code, registry):
        category = category_hint
    return ErrorRecord(
        code=code,
        category=category,
        severity=entry.severity,
        ui_state=entry.ui_state,
        retryable=entry.retryable,
        message=message,
        user_message=entry.user_message,
        metadata=metadata or {},
        original_error=original_error,
        max_retries=entry.max_retries,
    )


def _takes_hint(code: str, registry: ErrorRegistry) -> bool:
    return code == registry.fallback_code or not registry.contains(code)


def classify(raw: object) -> ErrorCategory:
    """Classify an unstructured failure by type and message heuristics."""
    if isinstance(raw, PermissionError):
        return ErrorCategory.AUTH
    if isinstance(raw, (TimeoutError, ConnectionError)):
        return ErrorCategory.NETWORK
    if isinstance(raw, (BaseException, str)):
        text = str(raw).lower()
        if any(marker in text for marker in _NETWORK_MARKERS):
            return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def _carried_record(raw: object) -> ErrorRecord | None:
    """Return an already-normalized record carried by ``raw``, if any."""
    if isinstance(raw, ErrorRecord):
        return raw
    if isinstance(raw, ClassifiedError):
        return raw.record
    return None


def _merge_record(
    record: ErrorRecord,
    code: str | None,
    extra: Mapping[str, Any],
    registry: ErrorRegistry,
) -> ErrorRecord:
    """Pass one record through, merging metadata and re-resolving a new code."""
    metadata = {**record.metadata, **extra}
    if code is None or code == record.code:
        return dataclasses.replace(record, metadata=metadata)

    rebuilt = build_record(
        code,
        message=record.message,
        category_hint=record.category,
        metadata=metadata,
        original_error=record.original_error,
        registry=registry,
    )
    return dataclasses.replace(rebuilt, timestamp=record.timestamp)


def _structured_shape(raw: object) -> tuple[str | None, ErrorCategory | None]:
    """Extract a carried code and category from structured failures."""
    if isinstance(raw, Mapping):
        code = raw.get("code")
        if isinstance(code, str) and code:
            return code, _coerce_category(raw.get("category"))
        return None, None

    if isinstance(raw, CodedFailure) and isinstance(raw.code, str) and raw.code:
        return raw.code, _coerce_category(getattr(raw, "category", None))
    return None, None


def _coerce_category(value: object) -> ErrorCategory | None:
    """Map a carried category (enum, value, or name) onto the taxonomy."""
    if isinstance(value, ErrorCategory):
        return value
    if not isinstance(value, str):
        return None
    lowered = value.strip().lower()
    for category in ErrorCategory:
        if lowered in (category.value, category.name.lower()):
            return category
    return None


def _message_of(raw: object) -> str:
    """Derive a developer-facing message from any raised value."""
    if raw is None:
        return UNKNOWN_FAILURE_MESSAGE
    if isinstance(raw, BaseException):
        return str(raw) or type(raw).__name__
    if isinstance(raw, str):
        return raw or UNKNOWN_FAILURE_MESSAGE
    if isinstance(raw, Mapping):
        message = raw.get("message")
        if isinstance(message, str) and message:
            return message
    return repr(raw)


def _fallback_record(
    raw: object,
    context: Mapping[str, Any] | None,
    registry: ErrorRegistry,
) -> ErrorRecord:
    """Build the fallback record without touching ``raw`` beyond identity."""
    metadata: dict[str, Any] = {}
    try:
        metadata.update(context or {})
    except Exception:
        metadata = {}
    return build_record(
        registry.fallback_code,
        message=UNKNOWN_FAILURE_MESSAGE,
        metadata=metadata,
        original_error=raw,
        registry=registry,
    )
