"""
Local file-backed log store.

Key classes:
- LogStore: Per-session append-only history in JSONL or markdown
- AsyncLogStore: Awaitable wrapper running LogStore calls in worker threads
- SessionHandle: Handle returned by LogStore.get_or_create()
- SessionLocks / ReadWriteLock: In-process locking used by the store
"""

from .async_store import AsyncLogStore
from .locks import ReadWriteLock, SessionLocks
from .log_store import LogStore, format_bytes
from .paths import PathResolver
from .session import SessionHandle

__all__ = [
    "LogStore",
    "AsyncLogStore",
    "SessionHandle",
    "PathResolver",
    "ReadWriteLock",
    "SessionLocks",
    "format_bytes",
]
