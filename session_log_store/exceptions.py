"""
Custom exceptions for the session log store.

All store operations raise these exceptions so callers can tell
configuration problems, I/O failures and size-limit refusals apart.
"""


class LogStoreError(Exception):
    """Base exception for all log store errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoreConfigurationError(LogStoreError):
    """Raised when a store is constructed with an unusable configuration."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Invalid configuration for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class StorageIOError(LogStoreError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        if cause:
            message += f" ({cause})"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class LogSizeLimitError(LogStoreError):
    """Raised when a session log is larger than the configured read limit."""

    def __init__(self, session_id: str, size_bytes: int, max_bytes: int):
        details = {
            "session_id": session_id,
            "size_bytes": size_bytes,
            "max_bytes": max_bytes,
        }
        super().__init__(
            f"Session log {session_id} exceeds maximum allowed size: "
            f"{size_bytes} > {max_bytes} bytes",
            details,
        )
        self.session_id = session_id
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class RecordDecodeError(LogStoreError):
    """Raised when a single serialized record cannot be decoded."""

    def __init__(self, reason: str, line: str | None = None):
        details = {"reason": reason}
        if line is not None:
            # Records can be very large; keep the details readable
            details["line"] = line[:200]
        super().__init__(f"Could not decode record: {reason}", details)
        self.reason = reason
        self.line = line
