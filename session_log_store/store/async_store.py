"""
Asyncio front end for LogStore.

The store does blocking file I/O behind thread locks. AsyncLogStore
runs each call in the default executor via `aiofiles.os.wrap`, so event
loop code can await history operations without stalling the loop, while
the per-session locks keep working across the worker threads.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import aiofiles.os

from ..config import LogStoreConfig
from ..formats import LogFormat
from ..types import Entry, Message, ReadResult, SessionInfo
from .log_store import LogStore
from .session import SessionHandle


class AsyncLogStore:
    """Awaitable wrapper around a LogStore.

    Example:
        store = AsyncLogStore(LogStore(base_dir))
        await store.write("chat-42", Message(Role.USER, "Hello"))
        history = await store.read("chat-42")
    """

    def __init__(self, store: LogStore):
        self.store = store

    @classmethod
    def create(
        cls,
        base_dir: str | Path,
        format: LogFormat | str | None = None,
        *,
        max_file_size: int | None = None,
        entry_wrapper: bool = False,
    ) -> AsyncLogStore:
        """Create a LogStore and wrap it."""
        return cls(
            LogStore(
                base_dir,
                format,
                max_file_size=max_file_size,
                entry_wrapper=entry_wrapper,
            )
        )

    @classmethod
    def from_config(cls, config: LogStoreConfig) -> AsyncLogStore:
        return cls(LogStore.from_config(config))

    @property
    def format(self) -> LogFormat:
        return self.store.format

    @property
    def base_dir(self) -> Path:
        return self.store.base_dir

    async def write(self, session_id: str, message: Message | Entry) -> None:
        await aiofiles.os.wrap(self.store.write)(session_id, message)

    async def append(self, session_id: str, messages: Iterable[Message | Entry]) -> None:
        # Materialize here so a lazy iterable is not consumed on a worker thread
        await aiofiles.os.wrap(self.store.append)(session_id, list(messages))

    async def read(self, session_id: str) -> list[Message]:
        return await aiofiles.os.wrap(self.store.read)(session_id)

    async def read_entries(self, session_id: str) -> list[Entry]:
        return await aiofiles.os.wrap(self.store.read_entries)(session_id)

    async def read_with_stats(self, session_id: str) -> ReadResult:
        return await aiofiles.os.wrap(self.store.read_with_stats)(session_id)

    async def get_last_n(self, session_id: str, n: int) -> list[Message]:
        return await aiofiles.os.wrap(self.store.get_last_n)(session_id, n)

    async def message_count(self, session_id: str) -> int:
        return await aiofiles.os.wrap(self.store.message_count)(session_id)

    async def clear(self, session_id: str) -> None:
        await aiofiles.os.wrap(self.store.clear)(session_id)

    async def delete(self, session_id: str) -> bool:
        return await aiofiles.os.wrap(self.store.delete)(session_id)

    async def exists(self, session_id: str) -> bool:
        return await aiofiles.os.wrap(self.store.exists)(session_id)

    async def get_or_create(self, session_id: str) -> tuple[SessionHandle, bool]:
        return await aiofiles.os.wrap(self.store.get_or_create)(session_id)

    async def get_sessions(self) -> list[str]:
        return await aiofiles.os.wrap(self.store.get_sessions)()

    async def session_info(self, session_id: str) -> SessionInfo | None:
        return await aiofiles.os.wrap(self.store.session_info)(session_id)

    async def session_status(self, session_id: str) -> dict[str, Any]:
        return await aiofiles.os.wrap(self.store.session_status)(session_id)

    async def cleanup(self, **kwargs: Any) -> list[str]:
        """See LogStore.cleanup() for the accepted keyword arguments."""
        return await aiofiles.os.wrap(self.store.cleanup)(**kwargs)
