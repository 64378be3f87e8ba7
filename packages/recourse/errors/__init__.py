"""Public error taxonomy, registry and normalization API."""

from . import codes
from .factories import create_error
from .normalize import CodedFailure, build_record, classify, normalize
from .registry import DEFAULT_REGISTRY, ERROR_REGISTRY, FALLBACK_CODE, ErrorRegistry, lookup
from .types import (
    ClassifiedError,
    ErrorCategory,
    ErrorRecord,
    ErrorSeverity,
    ErrorUIState,
    RecourseError,
    RegistryEntry,
    RegistryError,
    RetryExhaustedError,
)

__all__ = [
    "ClassifiedError",
    "CodedFailure",
    "DEFAULT_REGISTRY",
    "ERROR_REGISTRY",
    "ErrorCategory",
    "ErrorRecord",
    "ErrorRegistry",
    "ErrorSeverity",
    "ErrorUIState",
    "FALLBACK_CODE",
    "RecourseError",
    "RegistryEntry",
    "RegistryError",
    "RetryExhaustedError",
    "build_record",
    "classify",
    "codes",
    "create_error",
    "lookup",
    "normalize",
]
