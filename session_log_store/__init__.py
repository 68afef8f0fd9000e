"""
Session Log Store

Durable conversation history for agent sessions.

Provides:
- One append-only log file per session id
- Structured JSONL records for replaying history into a model
- Markdown transcripts for people to read
- Per-session reader/writer locking for concurrent callers
- Bounded reads that refuse oversized logs

Usage:

    >>> from session_log_store import LogStore, Message, Role
    >>> store = LogStore("/var/lib/agent/sessions")
    >>> store.write("chat-42", Message(Role.USER, "What is 6 x 7?"))
    >>> store.append("chat-42", [
    ...     Message(Role.TOOL, "42", tool_call_id="call_1"),
    ...     Message(Role.ASSISTANT, "6 x 7 = 42"),
    ... ])
    >>> [m.content for m in store.get_last_n("chat-42", 2)]
    ['42', '6 x 7 = 42']

Formats:

    # Human-readable transcripts
    store = LogStore(base_dir, LogFormat.TRANSCRIPT)

    # Entries with write timestamps and metadata
    store = LogStore(base_dir, entry_wrapper=True)

Asyncio:

    store = AsyncLogStore.create(base_dir)
    await store.write("chat-42", Message(Role.USER, "Hello"))

Logging:

    # JSON lines for the session_log_store namespace
    configure_structured_logging("INFO")
"""

from .config import LogStoreConfig

# Exceptions
from .exceptions import (
    LogSizeLimitError,
    LogStoreError,
    RecordDecodeError,
    StorageIOError,
    StoreConfigurationError,
)
from .formats import LogFormat, TranscriptParser
from .logging_utils import (
    StoreLoggerAdapter,
    StructuredJsonFormatter,
    configure_structured_logging,
    get_store_logger,
)
from .store import AsyncLogStore, LogStore, PathResolver, SessionHandle, format_bytes
from .types import Entry, Message, ReadResult, Role, SessionInfo

__all__ = [
    # Store
    "LogStore",
    "AsyncLogStore",
    "SessionHandle",
    "PathResolver",
    "LogStoreConfig",
    "format_bytes",
    # Formats
    "LogFormat",
    "TranscriptParser",
    # Types
    "Message",
    "Entry",
    "Role",
    "ReadResult",
    "SessionInfo",
    # Logging
    "StructuredJsonFormatter",
    "StoreLoggerAdapter",
    "configure_structured_logging",
    "get_store_logger",
    # Exceptions
    "LogStoreError",
    "StoreConfigurationError",
    "StorageIOError",
    "LogSizeLimitError",
    "RecordDecodeError",
]

__version__ = "0.1.0"
