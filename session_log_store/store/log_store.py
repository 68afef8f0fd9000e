"""
Durable per-session conversation logs.

LogStore keeps one append-only file per session under a base directory,
in either the structured (JSONL) or the transcript (markdown) format:

    {base_dir}/{session_id}.jsonl
    {base_dir}/{session_id}.markdown

Every call opens the session file, does its work and closes it again.
Calls are serialized per session by an in-process reader/writer lock,
so unrelated sessions never wait on each other's file I/O. There is no
coordination between processes sharing a base directory.

Missing files are treated as empty sessions by every query (read,
get_last_n, message_count, exists, ...). Records that fail to decode
are skipped; `read_with_stats()` reports how many.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from ..config import LogStoreConfig
from ..exceptions import RecordDecodeError, StorageIOError, StoreConfigurationError
from ..formats import LogFormat, TranscriptParser, structured
from ..logging_utils import StoreLoggerAdapter, configure_structured_logging, get_store_logger
from ..types import Entry, Message, ReadResult, SessionInfo
from . import file_ops
from .locks import SessionLocks
from .paths import PathResolver
from .session import SessionHandle

logger = get_store_logger("store")


def format_bytes(size: int) -> str:
    """Format a byte count for people: 512 B, 1.5 KB, 3.0 MB, ..."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


class LogStore:
    """
    Append-only conversation history keyed by session id.

    Contract:
    - Inputs: session_id (str, used verbatim as the file stem), Message/Entry
    - Outputs: messages in on-disk order
    - Side Effects: creates, appends to, truncates and removes files in base_dir
    - Errors: StoreConfigurationError at construction, StorageIOError for
      file failures, LogSizeLimitError when a log exceeds max_file_size

    Example:
        store = LogStore("/var/lib/agent/sessions")
        store.write("chat-42", Message(Role.USER, "Hello"))
        store.append("chat-42", [Message(Role.ASSISTANT, "Hi!")])
        store.get_last_n("chat-42", 10)
    """

    def __init__(
        self,
        base_dir: str | Path,
        format: LogFormat | str | None = None,
        *,
        max_file_size: int | None = None,
        entry_wrapper: bool = False,
    ):
        """Initialize the store, creating base_dir if needed.

        Args:
            base_dir: Directory holding the session logs. Required.
            format: Serialization format; defaults to structured JSONL.
            max_file_size: Reads of logs larger than this many bytes fail
                with LogSizeLimitError. None or 0 disables the limit.
            entry_wrapper: Store structured records as entries carrying a
                write timestamp and optional metadata.

        Raises:
            StoreConfigurationError: If base_dir is empty or cannot be created
        """
        config = LogStoreConfig(
            base_dir=base_dir,
            format=format,
            max_file_size=max_file_size,
            entry_wrapper=entry_wrapper,
        )

        try:
            file_ops.ensure_directory(config.base_dir)
        except StorageIOError as e:
            raise StoreConfigurationError(
                "base_dir", f"failed to create base directory: {e.cause}", value=str(config.base_dir)
            ) from e

        self.config = config
        self._paths = PathResolver(config.base_dir, config.format)
        self._locks = SessionLocks()
        self._log = StoreLoggerAdapter(logger, {"format": config.format.value})

    @classmethod
    def from_config(cls, config: LogStoreConfig) -> LogStore:
        """Create a store from a LogStoreConfig.

        When the config sets `log_level`, the store namespace is switched
        to JSON-line logging at that level.
        """
        if config.log_level:
            configure_structured_logging(config.log_level)
        return cls(
            config.base_dir,
            config.format,
            max_file_size=config.max_file_size,
            entry_wrapper=config.entry_wrapper,
        )

    @property
    def base_dir(self) -> Path:
        return self._paths.base_dir

    @property
    def format(self) -> LogFormat:
        return self._paths.format

    @property
    def max_file_size(self) -> int | None:
        return self.config.max_file_size

    @property
    def entry_wrapper(self) -> bool:
        return self.config.entry_wrapper

    def path_for(self, session_id: str) -> Path:
        """Path of the log file backing a session."""
        return self._paths.path_for(session_id)

    # =========================================================================
    # Writes
    # =========================================================================

    def write(self, session_id: str, message: Message | Entry) -> None:
        """Append one message to a session, creating its log if needed.

        Raises:
            StorageIOError: If the log cannot be opened or written
        """
        self.append(session_id, [message])

    def append(self, session_id: str, messages: Iterable[Message | Entry]) -> None:
        """Append several messages, in order, as one batch.

        The batch is written under a single exclusive lock acquisition,
        so no other caller's records interleave with it. It is not atomic
        across a crash: a failure part-way leaves the earlier records.

        Raises:
            StorageIOError: If the log cannot be opened or written
        """
        records = [self._encode(item) for item in messages]
        if not records:
            return

        path = self.path_for(session_id)
        with self._locks.writing(session_id):
            file_ops.append_records(path, records)

        self._log.for_session(session_id).debug("Appended %d record(s)", len(records))

    def _encode(self, item: Message | Entry) -> str:
        if self.entry_wrapper:
            entry = item if isinstance(item, Entry) else Entry(message=item)
            if entry.timestamp is None:
                entry = Entry(
                    message=entry.message,
                    timestamp=datetime.now(UTC).isoformat(timespec="milliseconds"),
                    metadata=entry.metadata,
                )
            return self.format.encode_entry(entry)

        message = item.message if isinstance(item, Entry) else item
        return self.format.encode_message(message)

    # =========================================================================
    # Reads
    # =========================================================================

    def read(self, session_id: str) -> list[Message]:
        """Return every message of a session in file order.

        A missing log yields an empty list.

        Raises:
            LogSizeLimitError: If the log is larger than max_file_size
            StorageIOError: If the log cannot be read
        """
        return self.read_with_stats(session_id).messages

    def read_entries(self, session_id: str) -> list[Entry]:
        """Like read(), but keeps the timestamp and metadata of wrapped records."""
        return self.read_with_stats(session_id).entries

    def read_with_stats(self, session_id: str) -> ReadResult:
        """Read a session and report how many records were skipped."""
        path = self.path_for(session_id)
        log = self._log.for_session(session_id)

        with self._locks.reading(session_id):
            match self.format:
                case LogFormat.STRUCTURED:
                    lines = file_ops.read_lines(path, session_id, self.max_file_size)
                    result = _decode_lines(lines or [])
                case LogFormat.TRANSCRIPT:
                    content = file_ops.read_text(path, session_id, self.max_file_size)
                    result = _parse_transcript(content or "")

        if result.skipped:
            log.warning(
                "Skipped %d undecodable record(s) in %s", result.skipped, path.name
            )
        log.debug("Read %d message(s)", len(result.entries))
        return result

    def iter_messages(self, session_id: str) -> Iterator[Message]:
        """Yield the messages of a session one at a time.

        The log is opened under the session lock and its current size is
        captured; lines up to that size are then streamed without holding
        the lock. Records appended meanwhile are not included.

        Raises:
            LogSizeLimitError: If the log is larger than max_file_size
            StorageIOError: If the log cannot be read
        """
        if self.format is LogFormat.TRANSCRIPT:
            # Transcript blocks span lines and must be parsed whole
            yield from self.read(session_id)
            return

        path = self.path_for(session_id)
        with self._locks.reading(session_id):
            snapshot = file_ops.open_snapshot(path, session_id, self.max_file_size)
        if snapshot is None:
            return

        f, size = snapshot
        skipped = 0
        for line in file_ops.iter_snapshot_lines(f, size, path):
            if not line.strip():
                continue
            try:
                yield structured.decode_message(line)
            except RecordDecodeError:
                skipped += 1

        if skipped:
            self._log.for_session(session_id).warning(
                "Skipped %d undecodable record(s) in %s", skipped, path.name
            )

    def get_last_n(self, session_id: str, n: int) -> list[Message]:
        """Return the last n messages, or all of them if there are fewer.

        Raises:
            ValueError: If n is negative
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        messages = self.read(session_id)
        if n == 0:
            return []
        return messages[-n:]

    def message_count(self, session_id: str) -> int:
        """Number of decodable messages in a session (0 if missing)."""
        return len(self.read_with_stats(session_id).entries)

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def exists(self, session_id: str) -> bool:
        """True if the session's log file is present (even when empty)."""
        with self._locks.reading(session_id):
            return file_ops.file_exists(self.path_for(session_id))

    def clear(self, session_id: str) -> None:
        """Truncate a session log to empty. The file itself stays.

        A missing log is not an error.
        """
        with self._locks.writing(session_id):
            truncated = file_ops.truncate(self.path_for(session_id))

        if truncated:
            self._log.for_session(session_id).info("Cleared session log")

    def delete(self, session_id: str) -> bool:
        """Remove a session log.

        Returns:
            True if the log was removed, False if it didn't exist
        """
        with self._locks.writing(session_id):
            removed = file_ops.remove_file(self.path_for(session_id))

        if removed:
            self._log.for_session(session_id).info("Deleted session log")
        return removed

    def get_or_create(self, session_id: str) -> tuple[SessionHandle, bool]:
        """Return a handle for a session, creating an empty log if needed.

        Returns:
            (handle, created) where created is True if the log was new

        Raises:
            StorageIOError: If the log cannot be created
        """
        with self._locks.writing(session_id):
            created = file_ops.create_empty(self.path_for(session_id))

        if created:
            self._log.for_session(session_id).info("Created session log")
        return SessionHandle(self, session_id, created=created), created

    # =========================================================================
    # Whole-store operations
    # =========================================================================

    def get_sessions(self) -> list[str]:
        """Session ids of every log in base_dir with the active format's extension."""
        with self._locks.directory.read_locked():
            files = file_ops.list_files(self.base_dir, self._paths.extension)

        sessions = []
        for path in files:
            session_id = self._paths.session_id_for(path)
            if session_id is not None:
                sessions.append(session_id)
        return sessions

    def session_info(self, session_id: str) -> SessionInfo | None:
        """File size, modification time and line count of a session log."""
        path = self.path_for(session_id)
        with self._locks.reading(session_id):
            return _info_for(session_id, path)

    def list_session_info(self) -> list[SessionInfo]:
        """SessionInfo for every session in the store."""
        infos = []
        for session_id in self.get_sessions():
            info = self.session_info(session_id)
            if info is not None:
                infos.append(info)
        return infos

    def session_status(self, session_id: str) -> dict[str, Any]:
        """Summary of a session for status displays."""
        info = self.session_info(session_id)
        size = info.size if info else 0
        return {
            "session_id": session_id,
            "exists": info is not None,
            "message_count": self.message_count(session_id) if info else 0,
            "file_size": size,
            "file_size_human": format_bytes(size),
        }

    def cleanup(
        self,
        *,
        ttl_days: int | None = None,
        max_size_bytes: int | None = None,
        keep_active_days: int | None = None,
        active_sessions: Iterable[str] = (),
    ) -> list[str]:
        """Remove stale or oversized session logs.

        A session is removed when it was last modified more than ttl_days
        ago, or when it is larger than max_size_bytes. With keep_active_days
        the size rule only applies to sessions idle for longer than that.
        Sessions in active_sessions are never removed.

        Returns:
            Ids of the removed sessions
        """
        for name, value in (
            ("ttl_days", ttl_days),
            ("max_size_bytes", max_size_bytes),
            ("keep_active_days", keep_active_days),
        ):
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative")

        active = set(active_sessions)
        now = datetime.now()
        removed: list[str] = []

        with self._locks.directory.write_locked():
            for path in file_ops.list_files(self.base_dir, self._paths.extension):
                session_id = self._paths.session_id_for(path)
                if session_id is None or session_id in active:
                    continue

                stat = file_ops.stat_file(path)
                if stat is None:
                    continue
                age = now - file_ops.modified_at(stat)

                if not _should_remove(age, stat.st_size, ttl_days, max_size_bytes, keep_active_days):
                    continue

                try:
                    if file_ops.remove_file(path):
                        removed.append(session_id)
                except StorageIOError as e:
                    self._log.for_session(session_id).error("Failed to remove session log: %s", e)

        if removed:
            self._log.info("Cleaned up %d session log(s)", len(removed))
        return removed


def _decode_lines(lines: Iterable[str]) -> ReadResult:
    result = ReadResult()
    for line in lines:
        if not line.strip():
            continue
        try:
            result.entries.append(structured.decode_entry(line))
        except RecordDecodeError as e:
            result.skipped += 1
            logger.debug("Skipping record: %s", e.reason)
    return result


def _parse_transcript(content: str) -> ReadResult:
    parser = TranscriptParser()
    messages = parser.parse(content)
    return ReadResult(
        entries=[Entry(message=message) for message in messages],
        skipped=parser.skipped,
    )


def _info_for(session_id: str, path: Path) -> SessionInfo | None:
    stat = file_ops.stat_file(path)
    if stat is None:
        return None
    return SessionInfo(
        session_id=session_id,
        path=path,
        size=stat.st_size,
        modified=file_ops.modified_at(stat),
        line_count=file_ops.count_lines(path),
    )


def _should_remove(
    age: timedelta,
    size: int,
    ttl_days: int | None,
    max_size_bytes: int | None,
    keep_active_days: int | None,
) -> bool:
    if ttl_days and age > timedelta(days=ttl_days):
        return True

    if max_size_bytes and size > max_size_bytes:
        if keep_active_days:
            return age > timedelta(days=keep_active_days)
        return True

    return False
