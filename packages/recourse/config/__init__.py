"""Public API for recourse configuration utilities."""

from .loader import load_settings
from .models import DEFAULT_CONFIG_PATH, LoggingSettings, RecourseSettings, RetrySettings

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LoggingSettings",
    "RecourseSettings",
    "RetrySettings",
    "load_settings",
]
