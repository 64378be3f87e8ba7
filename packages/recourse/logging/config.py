"""Log output for hosts that want the engine's error reports rendered.

The engine only emits through ``get_logger``. Error reports carry their record
fields (code, category, severity, UI state, ...) as ``extra=`` attributes and
task-scoped fields come from ``log_context``; both formatters here render the
two together. Hosts call ``configure_logging(settings)`` once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from packages.recourse.config import RecourseSettings

from . import fields
from .context import bind_context, get_context

HANDLER_NAME = "recourse"


def structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return context fields overlaid with record fields passed via ``extra=``."""
    values: dict[str, Any] = dict(getattr(record, "context", None) or {})
    for name in fields.RECORD_FIELDS:
        if hasattr(record, name):
            values[name] = getattr(record, name)
    if record.exc_info and record.exc_info[0] is not None:
        values.setdefault(fields.EXCEPTION_TYPE, record.exc_info[0].__name__)
    return values


class ContextFilter(logging.Filter):
    """Snapshot the task's bound fields onto the record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; error reports nest their fields under ``error``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        values = structured_fields(record)
        if fields.ERROR_CODE in values:
            payload["error"] = {
                name: values.pop(name)
                for name in fields.RECORD_FIELDS
                if name in values and name != fields.EVENT
            }
        payload.update(values)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Console line with the error code up front and remaining fields sorted."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        values = structured_fields(record)
        code = values.pop(fields.ERROR_CODE, None)
        if code is not None:
            line = f"{line} code={code}"
        if values:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(values.items()))
        return line


def configure_logging(
    settings: RecourseSettings | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install the engine's log handler on the root logger from ``settings``.

    Level, output format and service name come from ``settings.logging`` and
    the build environment is bound as a field on every line. Calling this
    again replaces the handler installed by the previous call and leaves
    any other root handlers alone.
    """
    resolved = settings if settings is not None else RecourseSettings()
    options = resolved.logging

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(options.level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if options.json_output else PlainFormatter())
    root.addHandler(handler)
    root.setLevel(options.level)

    bind_context(
        **{fields.SERVICE: options.service, fields.ENVIRONMENT: resolved.environment}
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger in the standard hierarchy."""
    return logging.getLogger(name)
