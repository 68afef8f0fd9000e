"""
Serialization formats for session logs.

The set of formats is closed: `LogFormat.STRUCTURED` (JSONL, one record
per line, for replaying history into a model) and `LogFormat.TRANSCRIPT`
(markdown blocks for people). Dispatch is an exhaustive `match` on the
enum rather than a plug-in interface.
"""

from __future__ import annotations

from enum import Enum

from ..exceptions import StoreConfigurationError
from ..types import Entry, Message
from . import structured, transcript
from .transcript_parser import ParserState, TranscriptParser


class LogFormat(str, Enum):
    """Supported on-disk formats."""

    STRUCTURED = "jsonl"
    TRANSCRIPT = "markdown"

    @classmethod
    def parse(cls, value: LogFormat | str | None) -> LogFormat:
        """Resolve a format from its name or value; None means STRUCTURED."""
        if value is None or value == "":
            return cls.STRUCTURED
        if isinstance(value, LogFormat):
            return value
        if not isinstance(value, str):
            raise StoreConfigurationError(
                "format", "expected a format name", value=repr(value)
            )

        normalized = value.strip().lower()
        aliases = {
            "jsonl": cls.STRUCTURED,
            "structured": cls.STRUCTURED,
            "markdown": cls.TRANSCRIPT,
            "md": cls.TRANSCRIPT,
            "transcript": cls.TRANSCRIPT,
        }
        if normalized not in aliases:
            raise StoreConfigurationError(
                "format", "expected one of: jsonl, markdown", value=value
            )
        return aliases[normalized]

    @property
    def file_extension(self) -> str:
        """File extension including the leading dot."""
        match self:
            case LogFormat.STRUCTURED:
                return structured.FILE_EXTENSION
            case LogFormat.TRANSCRIPT:
                return transcript.FILE_EXTENSION

    def encode_message(self, message: Message) -> str:
        """Serialize one message as a record (line or block)."""
        match self:
            case LogFormat.STRUCTURED:
                return structured.encode_message(message)
            case LogFormat.TRANSCRIPT:
                return transcript.encode_message(message)

    def encode_entry(self, entry: Entry) -> str:
        """Serialize a wrapped entry.

        Transcript headers already carry a timestamp, so only the
        message is rendered there.
        """
        match self:
            case LogFormat.STRUCTURED:
                return structured.encode_entry(entry)
            case LogFormat.TRANSCRIPT:
                return transcript.encode_message(entry.message)

    def decode_record(self, line: str) -> Message:
        """Decode one record; raises RecordDecodeError on failure."""
        match self:
            case LogFormat.STRUCTURED:
                return structured.decode_message(line)
            case LogFormat.TRANSCRIPT:
                return transcript.decode_message(line)


__all__ = [
    "LogFormat",
    "ParserState",
    "TranscriptParser",
    "structured",
    "transcript",
]
