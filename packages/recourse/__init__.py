"""Public API for the recourse error classification and recovery engine."""

from .boundary import RenderBoundary
from .config import RecourseSettings, RetrySettings, load_settings
from .errors import (
    DEFAULT_REGISTRY,
    ERROR_REGISTRY,
    FALLBACK_CODE,
    ClassifiedError,
    ErrorCategory,
    ErrorRecord,
    ErrorRegistry,
    ErrorSeverity,
    ErrorUIState,
    RecourseError,
    RegistryEntry,
    RetryExhaustedError,
    codes,
    create_error,
    lookup,
    normalize,
)
from .handler import ErrorHandler, HandlerConfig, build_error_handler
from .listeners import GlobalErrorListener
from .presentation import (
    format_error_for_logging,
    get_error_message,
    get_error_ui_state,
    get_severity_class,
    handle_unknown_error,
    is_critical_error,
    should_show_retry,
    with_error_handling,
)
from .retry import RetryController, RetryPhase, RetryState

__all__ = [
    "ClassifiedError",
    "DEFAULT_REGISTRY",
    "ERROR_REGISTRY",
    "ErrorCategory",
    "ErrorHandler",
    "ErrorRecord",
    "ErrorRegistry",
    "ErrorSeverity",
    "ErrorUIState",
    "FALLBACK_CODE",
    "GlobalErrorListener",
    "HandlerConfig",
    "RecourseError",
    "RecourseSettings",
    "RegistryEntry",
    "RenderBoundary",
    "RetryController",
    "RetryExhaustedError",
    "RetryPhase",
    "RetrySettings",
    "RetryState",
    "build_error_handler",
    "codes",
    "create_error",
    "format_error_for_logging",
    "get_error_message",
    "get_error_ui_state",
    "get_severity_class",
    "handle_unknown_error",
    "is_critical_error",
    "load_settings",
    "lookup",
    "normalize",
    "should_show_retry",
    "with_error_handling",
]
