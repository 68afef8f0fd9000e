"""Session handles returned by `LogStore.get_or_create()`."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ..types import Entry, Message

if TYPE_CHECKING:
    from .log_store import LogStore


class SessionHandle:
    """
    A conversation thread bound to one store.

    The handle holds no file handle and no cached messages; every call
    goes back through the store, so it sees the same locking and the
    same missing-file policy as direct store calls.
    """

    def __init__(self, store: LogStore, session_id: str, *, created: bool = False):
        self._store = store
        self.id = session_id
        self.created = created

    def __repr__(self) -> str:
        return f"SessionHandle(id={self.id!r}, path={str(self.path)!r})"

    @property
    def path(self) -> Path:
        return self._store.path_for(self.id)

    def append(self, message: Message | Entry) -> None:
        """Append one message to the session."""
        self._store.write(self.id, message)

    def extend(self, messages: list[Message | Entry]) -> None:
        """Append several messages as one batch."""
        self._store.append(self.id, messages)

    def read(self) -> list[Message]:
        """All messages in the order they were appended."""
        return self._store.read(self.id)

    def read_entries(self) -> list[Entry]:
        return self._store.read_entries(self.id)

    def message_count(self) -> int:
        return self._store.message_count(self.id)

    def clear(self) -> None:
        """Remove all messages; the log file stays."""
        self._store.clear(self.id)

    def delete(self) -> bool:
        """Remove the log file. Later appends recreate it."""
        return self._store.delete(self.id)

    def exists(self) -> bool:
        return self._store.exists(self.id)
