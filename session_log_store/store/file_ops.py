"""
File operations for session logs.

Every helper opens the file, does one thing and closes it again; the
store keeps no handles between calls. Missing files are reported as
`None` / `False` / empty results so callers can apply one not-found
policy, while every other OS failure is raised as `StorageIOError`.
"""

import os
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from ..exceptions import LogSizeLimitError, StorageIOError

FILE_MODE = 0o644


def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create_directory", str(path), e) from e


def append_records(path: Path, records: list[str]) -> None:
    """Append already-encoded records to a file, creating it if needed.

    Every record is converted to UTF-8 before the file is opened, so a
    record that cannot be encoded fails the batch with nothing written.
    The file is opened in append mode so each record goes out at the
    current end of file.

    Args:
        path: Log file path
        records: Encoded records, each carrying its own line terminator
    """
    try:
        payloads = [record.encode("utf-8") for record in records]
    except UnicodeEncodeError as e:
        raise StorageIOError("encode", str(path), e) from e

    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, FILE_MODE)
    except OSError as e:
        raise StorageIOError("open_for_append", str(path), e) from e

    try:
        for data in payloads:
            while data:
                written = os.write(fd, data)
                data = data[written:]
    except OSError as e:
        raise StorageIOError("append", str(path), e) from e
    finally:
        os.close(fd)


def create_empty(path: Path) -> bool:
    """Create an empty file if it does not exist.

    Returns:
        True if the file was created, False if it already existed
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
    except FileExistsError:
        return False
    except OSError as e:
        raise StorageIOError("create", str(path), e) from e
    os.close(fd)
    return True


def truncate(path: Path) -> bool:
    """Truncate a file to zero length.

    Returns:
        True if the file was truncated, False if it didn't exist
    """
    try:
        with open(path, "r+b") as f:
            f.truncate(0)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageIOError("truncate", str(path), e) from e


def remove_file(path: Path) -> bool:
    """Remove a file if it exists.

    Returns:
        True if file was removed, False if it didn't exist
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageIOError("remove", str(path), e) from e


def file_exists(path: Path) -> bool:
    """Check whether a regular file exists at `path`."""
    try:
        return path.is_file()
    except OSError:
        return False


def stat_file(path: Path) -> os.stat_result | None:
    """Stat a file, returning None when it does not exist."""
    try:
        return path.stat()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageIOError("stat", str(path), e) from e


def open_snapshot(
    path: Path, session_id: str, max_size: int | None = None
) -> tuple[BinaryIO, int] | None:
    """Open a file for reading and capture its current size.

    Logs are append-only, so the first `size` bytes stay a consistent
    prefix even if more records are appended after the caller lets go
    of the session lock.

    Args:
        path: File to open
        session_id: Session the file belongs to (for error reporting)
        max_size: Refuse files larger than this many bytes

    Returns:
        (open binary file, size in bytes), or None if the file does not exist

    Raises:
        LogSizeLimitError: If the file is larger than max_size
        StorageIOError: If the file cannot be opened or stat'ed
    """
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageIOError("open_for_read", str(path), e) from e

    try:
        size = os.fstat(f.fileno()).st_size
    except OSError as e:
        f.close()
        raise StorageIOError("stat", str(path), e) from e

    if max_size is not None and size > max_size:
        f.close()
        raise LogSizeLimitError(session_id, size, max_size)

    return f, size


def read_text(path: Path, session_id: str, max_size: int | None = None) -> str | None:
    """Read a whole file as text.

    Returns:
        File content, or None if the file does not exist

    Raises:
        LogSizeLimitError: If the file is larger than max_size
        StorageIOError: If the file cannot be read
    """
    snapshot = open_snapshot(path, session_id, max_size)
    if snapshot is None:
        return None
    f, size = snapshot
    try:
        with f:
            return f.read(size).decode("utf-8", errors="replace")
    except OSError as e:
        raise StorageIOError("read", str(path), e) from e


def read_lines(path: Path, session_id: str, max_size: int | None = None) -> list[str] | None:
    """Read a whole file as a list of lines (see `iter_snapshot_lines`).

    Returns:
        Lines without terminators, or None if the file does not exist
    """
    snapshot = open_snapshot(path, session_id, max_size)
    if snapshot is None:
        return None
    f, size = snapshot
    return list(iter_snapshot_lines(f, size, path))


def iter_snapshot_lines(f: BinaryIO, size: int, path: Path | None = None) -> Iterator[str]:
    """Yield lines from the first `size` bytes of an open file, then close it.

    Lines end at `\\n` or `\\r\\n`; a final line without a terminator is
    still yielded.
    """
    remaining = size
    try:
        with f:
            while remaining > 0:
                raw = f.readline(remaining)
                if not raw:
                    break
                remaining -= len(raw)
                if raw.endswith(b"\n"):
                    raw = raw[:-1]
                    if raw.endswith(b"\r"):
                        raw = raw[:-1]
                yield raw.decode("utf-8", errors="replace")
    except OSError as e:
        raise StorageIOError("read", str(path) if path else None, e) from e


def count_lines(path: Path) -> int:
    """Count lines, including a final line without a terminator."""
    count = 0
    last = b""
    try:
        with open(path, "rb") as f:
            while chunk := f.read(64 * 1024):
                count += chunk.count(b"\n")
                last = chunk[-1:]
    except FileNotFoundError:
        return 0
    except OSError as e:
        raise StorageIOError("count_lines", str(path), e) from e

    if last and last != b"\n":
        count += 1
    return count


def list_files(directory: Path, suffix: str) -> list[Path]:
    """List regular files in `directory` whose names end with `suffix`."""
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise StorageIOError("list_directory", str(directory), e) from e

    files = []
    for entry in entries:
        if entry.name.endswith(suffix) and entry.is_file():
            files.append(entry)
    return sorted(files)


def modified_at(stat: os.stat_result) -> datetime:
    """Local modification time of a stat result."""
    return datetime.fromtimestamp(stat.st_mtime)
