"""Tests for AsyncLogStore."""

import asyncio
from pathlib import Path

import pytest

from session_log_store import (
    AsyncLogStore,
    LogFormat,
    LogSizeLimitError,
    LogStore,
    LogStoreConfig,
    Message,
    Role,
)


class TestAsyncLogStore:
    """Tests for the awaitable store wrapper."""

    @pytest.fixture
    def async_store(self, temp_dir: Path) -> AsyncLogStore:
        return AsyncLogStore.create(temp_dir)

    async def test_write_and_read(self, async_store: AsyncLogStore, conversation):
        """Messages written through the wrapper read back in order."""
        for message in conversation:
            await async_store.write("s1", message)

        assert await async_store.read("s1") == conversation
        assert await async_store.message_count("s1") == len(conversation)

    async def test_append_generator(self, async_store: AsyncLogStore):
        """Lazy iterables are accepted by append()."""
        await async_store.append("s1", (Message(Role.USER, str(i)) for i in range(5)))

        last = await async_store.get_last_n("s1", 2)
        assert [m.content for m in last] == ["3", "4"]

    async def test_shares_state_with_sync_store(self, temp_dir: Path):
        """The wrapper and its LogStore see the same files."""
        store = LogStore(temp_dir)
        async_store = AsyncLogStore(store)

        store.write("s1", Message(Role.USER, "sync"))
        await async_store.write("s1", Message(Role.ASSISTANT, "async"))

        assert [m.content for m in store.read("s1")] == ["sync", "async"]

    async def test_lifecycle(self, async_store: AsyncLogStore):
        handle, created = await async_store.get_or_create("s1")
        assert created
        assert handle.id == "s1"
        assert await async_store.exists("s1")

        await async_store.write("s1", Message(Role.USER, "hi"))
        await async_store.clear("s1")
        assert await async_store.read("s1") == []
        assert await async_store.exists("s1")

        assert await async_store.delete("s1") is True
        assert not await async_store.exists("s1")

    async def test_sessions_and_status(self, async_store: AsyncLogStore):
        await async_store.write("a", Message(Role.USER, "1"))
        await async_store.write("b", Message(Role.USER, "2"))

        assert await async_store.get_sessions() == ["a", "b"]
        info = await async_store.session_info("a")
        assert info is not None and info.line_count == 1
        status = await async_store.session_status("b")
        assert status["message_count"] == 1

    async def test_cleanup(self, async_store: AsyncLogStore):
        await async_store.write("big", Message(Role.USER, "x" * 500))
        assert await async_store.cleanup(max_size_bytes=100) == ["big"]

    async def test_concurrent_tasks(self, async_store: AsyncLogStore):
        """Many tasks writing at once lose no records."""

        async def writer(task_id: int):
            for i in range(10):
                await async_store.write("shared", Message(Role.USER, f"{task_id}:{i}"))

        await asyncio.gather(*(writer(t) for t in range(10)))

        result = await async_store.read_with_stats("shared")
        assert len(result.messages) == 100
        assert result.skipped == 0

    async def test_errors_propagate(self, temp_dir: Path):
        """Exceptions from the worker thread reach the awaiting caller."""
        async_store = AsyncLogStore.create(temp_dir, max_file_size=10)
        await async_store.write("s1", Message(Role.USER, "x" * 100))

        with pytest.raises(LogSizeLimitError):
            await async_store.read("s1")

    async def test_from_config(self, temp_dir: Path):
        async_store = AsyncLogStore.from_config(
            LogStoreConfig(base_dir=temp_dir, format="markdown", entry_wrapper=True)
        )

        assert async_store.format is LogFormat.TRANSCRIPT
        assert async_store.base_dir == temp_dir
        await async_store.write("s1", Message(Role.USER, "hello"))
        entries = await async_store.read_entries("s1")
        assert entries[0].message == Message(Role.USER, "hello")
