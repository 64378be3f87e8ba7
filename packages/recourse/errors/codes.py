"""Error code constants.

These constants are the stable machine-readable keys into the policy registry.
Host applications that need extra codes build their own ``ErrorRegistry``
rather than mutating the shared table.
"""

# Fallback
UNKNOWN_ERROR = "UNKNOWN_ERROR"

# Network
NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
NETWORK_OFFLINE = "NETWORK_OFFLINE"
NETWORK_SERVER_ERROR = "NETWORK_SERVER_ERROR"
NETWORK_RATE_LIMITED = "NETWORK_RATE_LIMITED"

# Auth
AUTH_UNAUTHORIZED = "AUTH_UNAUTHORIZED"
AUTH_SESSION_EXPIRED = "AUTH_SESSION_EXPIRED"
AUTH_FORBIDDEN = "AUTH_FORBIDDEN"

# Validation
VALIDATION_FAILED = "VALIDATION_FAILED"
VALIDATION_REQUIRED_FIELD = "VALIDATION_REQUIRED_FIELD"

# Stream
STREAM_DISCONNECTED = "STREAM_DISCONNECTED"
STREAM_PARSE_ERROR = "STREAM_PARSE_ERROR"

# Data layer
DATA_FETCH_FAILED = "DATA_FETCH_FAILED"
DATA_NOT_FOUND = "DATA_NOT_FOUND"
DATA_SAVE_FAILED = "DATA_SAVE_FAILED"
