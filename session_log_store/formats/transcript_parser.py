"""
Transcript parser.

Rebuilds the ordered message list from a whole transcript file by
scanning it line by line with a small two-state machine (idle or
accumulating a message).

Tool headers are special: they emit a tool message with empty content
straight away and leave the parser idle, so any prose written under a
tool header is dropped. Tool results therefore do not survive a
transcript round trip; use the structured format when they must.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from ..types import Message, Role
from .transcript import (
    ASSISTANT_HEADER,
    HEADER_MARKER,
    SYSTEM_HEADER,
    TOOL_HEADER,
    USER_HEADER,
)

logger = logging.getLogger(__name__)

_ROLE_HEADERS: tuple[tuple[str, Role], ...] = (
    (USER_HEADER, Role.USER),
    (ASSISTANT_HEADER, Role.ASSISTANT),
    (SYSTEM_HEADER, Role.SYSTEM),
)


class ParserState(Enum):
    """Scanner states."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"


class TranscriptParser:
    """
    Stateful scanner turning transcript text into messages.

    A parser can be fed incrementally with `feed()` and finished with
    `close()`, or used in one go through `parse()`.

    Example:
        parser = TranscriptParser()
        messages = parser.parse(path.read_text(encoding="utf-8"))
        parser.skipped  # header-like lines that were ignored
    """

    def __init__(self) -> None:
        self.state = ParserState.IDLE
        self.skipped = 0
        self._role: Role | None = None
        self._lines: list[str] = []
        self._messages: list[Message] = []

    def parse(self, content: str) -> list[Message]:
        """Parse a complete transcript and return its messages in order."""
        self.reset()
        self.feed(content.split("\n"))
        return self.close()

    def reset(self) -> None:
        """Return to the initial state, dropping any partial output."""
        self.state = ParserState.IDLE
        self.skipped = 0
        self._role = None
        self._lines = []
        self._messages = []

    def feed(self, lines: Iterable[str]) -> None:
        """Scan more lines (without their line terminators)."""
        for line in lines:
            self._scan(line)

    def close(self) -> list[Message]:
        """Finish scanning and return every message seen since the last reset."""
        self._flush()
        messages = self._messages
        self._messages = []
        return messages

    def _scan(self, line: str) -> None:
        trimmed = line.strip()

        for prefix, role in _ROLE_HEADERS:
            if trimmed.startswith(prefix):
                self._flush()
                self._role = role
                self.state = ParserState.ACCUMULATING
                return

        if trimmed.startswith(TOOL_HEADER):
            self._flush()
            self._emit_tool(trimmed)
            return

        if trimmed.startswith(HEADER_MARKER):
            self.skipped += 1
            return

        if self.state is ParserState.ACCUMULATING:
            self._lines.append(line)

    def _emit_tool(self, header: str) -> None:
        # "#### Tool: <id> [<date> <time>]" -> third token is the id
        parts = header.split()
        if len(parts) >= 3:
            self._messages.append(
                Message(role=Role.TOOL, content="", tool_call_id=parts[2].removesuffix("]"))
            )
        else:
            self.skipped += 1
            logger.debug("Tool header without call id skipped: %r", header)

        self._role = None
        self._lines = []
        self.state = ParserState.IDLE

    def _flush(self) -> None:
        if self.state is ParserState.ACCUMULATING and self._role is not None and self._lines:
            content = "\n".join(self._lines).strip()
            self._messages.append(Message(role=self._role, content=content))

        self._role = None
        self._lines = []
        self.state = ParserState.IDLE
