"""Per-task structured fields attached to every engine log line.

Fields live in a ``ContextVar`` so concurrent asyncio tasks reporting
different failures never see each other's error code or retry attempt.
JSON scalars keep their type; anything else is stored as its string form.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Union

Scalar = Union[str, int, float, bool]

_EMPTY: Mapping[str, Scalar] = MappingProxyType({})
_FIELDS: ContextVar[Mapping[str, Scalar]] = ContextVar("recourse_log_fields", default=_EMPTY)


def get_context() -> dict[str, Scalar]:
    """Return the fields bound in the current task."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Bind fields for the rest of the current task; ``None`` values are skipped."""
    merged = _merged(_FIELDS.get(), values)
    if merged is not None:
        _FIELDS.set(merged)


def clear_context(*keys: str) -> None:
    """Drop the given fields, or every field when no keys are given."""
    if not keys:
        _FIELDS.set(_EMPTY)
        return
    current = _FIELDS.get()
    _FIELDS.set(
        MappingProxyType({key: value for key, value in current.items() if key not in keys})
    )


@contextmanager
def log_context(
    values: Mapping[str, object] | None = None, **more: object
) -> Iterator[Mapping[str, Scalar]]:
    """Bind fields for one block and restore the previous set on exit."""
    merged = _merged(_FIELDS.get(), {**(values or {}), **more})
    token = _FIELDS.set(merged if merged is not None else _FIELDS.get())
    try:
        yield _FIELDS.get()
    finally:
        _FIELDS.reset(token)


def _merged(
    current: Mapping[str, Scalar], values: Mapping[str, object]
) -> Mapping[str, Scalar] | None:
    kept = {str(key): _scalar(value) for key, value in values.items() if value is not None}
    if not kept:
        return None
    return MappingProxyType({**current, **kept})


def _scalar(value: object) -> Scalar:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
