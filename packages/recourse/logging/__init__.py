"""Logging surface for the recourse error engine.

Engine modules log through ``get_logger`` with record fields passed as
``extra=``; hosts opt into rendered output with ``configure_logging``.
"""

from . import fields
from .config import (
    HANDLER_NAME,
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
    get_logger,
    structured_fields,
)
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "ContextFilter",
    "fields",
    "get_context",
    "get_logger",
    "HANDLER_NAME",
    "JsonFormatter",
    "log_context",
    "PlainFormatter",
    "structured_fields",
]
