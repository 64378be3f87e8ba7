"""Canonical logging field names for error reports.

Keeping names centralized prevents drift between the handler, the global
listeners and any log shipper the host application plugs in.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Error report fields.
ERROR_CODE = "error_code"
ERROR_CATEGORY = "error_category"
SEVERITY = "severity"
UI_STATE = "ui_state"
RETRYABLE = "retryable"
EXCEPTION_TYPE = "exception_type"
SOURCE = "source"
ERROR_REPORTED_EVENT = "error_reported"
REPORT_CALLBACK_FAILURE_EVENT = "error_report_callback_failure"

# Retry fields.
ATTEMPT = "attempt"
MAX_ATTEMPTS = "max_attempts"
DELAY_MS = "delay_ms"

# Common process-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

# Fields the formatters lift from ``extra=`` on a log call, in output order.
RECORD_FIELDS = (
    EVENT,
    ERROR_CODE,
    ERROR_CATEGORY,
    SEVERITY,
    UI_STATE,
    RETRYABLE,
    EXCEPTION_TYPE,
    SOURCE,
    ATTEMPT,
    MAX_ATTEMPTS,
    DELAY_MS,
)
