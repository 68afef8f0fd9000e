"""
Shared test configuration and fixtures.

Provides temporary base directories, stores for both formats and a
small sample conversation.
"""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from session_log_store import LogFormat, LogStore, Message, Role


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir: Path) -> LogStore:
    """Structured (JSONL) store."""
    return LogStore(temp_dir)


@pytest.fixture
def transcript_store(temp_dir: Path) -> LogStore:
    """Transcript (markdown) store."""
    return LogStore(temp_dir, LogFormat.TRANSCRIPT)


@pytest.fixture
def conversation() -> list[Message]:
    """A short conversation without tool results."""
    return [
        Message(Role.SYSTEM, "You are a helpful assistant."),
        Message(Role.USER, "What is the capital of France?"),
        Message(Role.ASSISTANT, "The capital of France is Paris."),
        Message(Role.USER, "And of Italy?\nPlease answer briefly."),
        Message(Role.ASSISTANT, "Rome."),
    ]
