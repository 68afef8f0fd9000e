"""
In-process reader/writer locks.

`ReadWriteLock` admits many readers or one writer. Writers are
preferred: once a writer is waiting, new readers queue behind it so a
steady stream of reads cannot starve appends.

`SessionLocks` hands out one lock per session id so traffic on one
session never waits on file I/O for another. A separate directory lock
covers whole-store operations.

These locks coordinate threads of one process only.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Condition, Lock


class ReadWriteLock:
    """Writer-preferring reader/writer lock."""

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a held read lock")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a held write lock")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock shared for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_held(self) -> bool:
        return self._writer


class SessionLocks:
    """Registry of per-session locks plus one directory-wide lock.

    Per-session operations hold the directory lock shared and their
    session lock shared or exclusive; whole-store operations that remove
    files hold the directory lock exclusively.
    """

    def __init__(self) -> None:
        self.directory = ReadWriteLock()
        self._guard = Lock()
        self._locks: dict[str, ReadWriteLock] = {}

    def get(self, session_id: str) -> ReadWriteLock:
        """Return the lock for a session, creating it on first use."""
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = ReadWriteLock()
                self._locks[session_id] = lock
            return lock

    @contextmanager
    def reading(self, session_id: str) -> Iterator[None]:
        """Shared access to one session."""
        with self.directory.read_locked(), self.get(session_id).read_locked():
            yield

    @contextmanager
    def writing(self, session_id: str) -> Iterator[None]:
        """Exclusive access to one session."""
        with self.directory.read_locked(), self.get(session_id).write_locked():
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
