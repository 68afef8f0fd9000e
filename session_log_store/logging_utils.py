"""
Logging helpers for the log store.

Store components log through `get_store_logger()`, so every record lands
under the `session_log_store` namespace and carries the active format
and, for per-session calls, the session id (see `StoreLoggerAdapter`).

Applications that want single-line JSON output for the store call
`configure_structured_logging()` once at startup, or set `log_level` in
`LogStoreConfig` and build the store with `LogStore.from_config()`:

    configure_structured_logging("DEBUG")
    # {"timestamp": "...", "level": "INFO", "logger": "session_log_store.store",
    #  "session_id": "chat-42", "format": "jsonl", "message": "Created session log"}
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

STORE_LOGGER_NAME = "session_log_store"

# Context fields emitted right after the fixed header fields
CONTEXT_FIELDS = ("session_id", "format")

# Everything a bare LogRecord carries; other attributes came in through `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class StructuredJsonFormatter(logging.Formatter):
    """
    Render records as one JSON object per line.

    Field order is stable: timestamp, level, logger, the store context
    fields that are present, message, then any other `extra` fields.
    Records at WARNING and above also carry their source location.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        for field in CONTEXT_FIELDS:
            if field in record.__dict__:
                entry[field] = record.__dict__[field]
        entry["message"] = record.getMessage()

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in entry or key.startswith("_"):
                continue
            entry[key] = value if _is_json(value) else str(value)

        if record.levelno >= logging.WARNING:
            entry["source"] = f"{record.module}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _is_json(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def configure_structured_logging(
    level: int | str = logging.INFO,
    logger_name: str | None = STORE_LOGGER_NAME,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Send a logger's records to a stream as JSON lines.

    Calling it again replaces the handler instead of adding another.

    Args:
        level: Level name or number (default: INFO)
        logger_name: Logger to configure; defaults to the store namespace,
            None configures the root logger
        stream: Output stream (default: stdout)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    for handler in list(logger.handlers):
        if isinstance(handler.formatter, StructuredJsonFormatter):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return logger


def get_store_logger(name: str) -> logging.Logger:
    """Return the logger `session_log_store.<name>` for a store component."""
    return logging.getLogger(f"{STORE_LOGGER_NAME}.{name}")


class StoreLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds store context to all log messages.

    Used to attach the active format and the session id to every
    record emitted while serving one call.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add extra context to log record."""
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def for_session(self, session_id: str) -> "StoreLoggerAdapter":
        """Return an adapter that also tags records with a session id."""
        return StoreLoggerAdapter(self.logger, {**self.extra, "session_id": session_id})
