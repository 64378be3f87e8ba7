"""Factory helpers for creating records directly from registry codes."""

from __future__ import annotations

from typing import Any, Mapping

from .normalize import build_record
from .registry import DEFAULT_REGISTRY, ErrorRegistry
from .types import ErrorRecord


def create_error(
    code: str,
    message: str | None = None,
    *,
    metadata: Mapping[str, Any] | None = None,
    original_error: object | None = None,
    registry: ErrorRegistry = DEFAULT_REGISTRY,
) -> ErrorRecord:
    """Create a record for ``code`` without a raised value behind it.

    The developer message defaults to the registry user message so records
    created ahead of time still carry readable text.
    """
    entry = registry.lookup(code)
    return build_record(
        code,
        message=message or entry.user_message,
        metadata=_meta(metadata),
        original_error=original_error,
        registry=registry,
    )


def _meta(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    """Normalize optional metadata into a mutable plain dict."""
    if metadata is None:
        return {}
    return dict(metadata)
