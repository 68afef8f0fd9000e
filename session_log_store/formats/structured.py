"""
Structured (JSONL) codec.

One self-contained JSON object per line. Records are either bare
messages:

    {"role": "user", "content": "Hello"}

or, for entry-wrapping stores, entries:

    {"message": {"role": "tool", "content": "42", "tool_call_id": "call_1"},
     "timestamp": "2025-01-01T10:00:00.000+00:00"}

The decoder accepts both shapes so a store can switch wrapping on
without rewriting existing logs. Non-ASCII text is written as JSON
escapes, so any Python str (lone surrogates included) can be stored.
"""

import json
from typing import Any

from ..exceptions import RecordDecodeError
from ..types import Entry, Message

FILE_EXTENSION = ".jsonl"


def encode_message(message: Message) -> str:
    """Encode a bare message as one line, including the trailing newline."""
    return json.dumps(message.to_dict()) + "\n"


def encode_entry(entry: Entry) -> str:
    """Encode a wrapped entry as one line, including the trailing newline."""
    return json.dumps(entry.to_dict()) + "\n"


def decode_entry(line: str) -> Entry:
    """Decode one record into an Entry.

    Args:
        line: A single record, with or without its line terminator

    Returns:
        The decoded entry. Bare messages come back with no timestamp
        or metadata.

    Raises:
        RecordDecodeError: If the line is not a valid record
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise RecordDecodeError(f"invalid JSON: {e.msg}", line) from e

    if not isinstance(data, dict):
        raise RecordDecodeError("record is not a JSON object", line)

    if "message" in data:
        _check_message(data["message"], line)
        _check_optional_str(data, "timestamp", line)
        metadata = data.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise RecordDecodeError("metadata must be an object", line)
        return Entry.from_dict(data)

    _check_message(data, line)
    return Entry(message=Message.from_dict(data))


def decode_message(line: str) -> Message:
    """Decode one record and return only its message."""
    return decode_entry(line).message


def _check_message(data: Any, line: str) -> None:
    if not isinstance(data, dict):
        raise RecordDecodeError("message is not a JSON object", line)
    if not isinstance(data.get("role"), str):
        raise RecordDecodeError("missing or non-string role", line)
    if not isinstance(data.get("content", ""), str):
        raise RecordDecodeError("content must be a string", line)
    _check_optional_str(data, "tool_call_id", line)


def _check_optional_str(data: dict[str, Any], key: str, line: str) -> None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise RecordDecodeError(f"{key} must be a string", line)
