"""
Core data types for the session log store.

Message is the unit of history, Entry wraps it with the optional
timestamp and metadata recorded by entry-wrapping stores, and the
remaining types describe read results and session files.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class Role(str, Enum):
    """Message sender roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


def parse_role(value: str) -> "Role | str":
    """Map a role string to `Role`, keeping unknown roles as plain strings."""
    try:
        return Role(value)
    except ValueError:
        return value


def role_value(role: "Role | str") -> str:
    """Return the wire value of a role."""
    return role.value if isinstance(role, Role) else role


@dataclass
class Message:
    """A single conversation message.

    `tool_call_id` only carries meaning for tool messages; the store
    neither enforces that nor strips it from other roles.
    """

    role: Role | str
    content: str
    tool_call_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (empty tool_call_id omitted)."""
        data: dict[str, Any] = {
            "role": role_value(self.role),
            "content": self.content,
        }
        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Create from dictionary."""
        return cls(
            role=parse_role(data["role"]),
            content=data.get("content", ""),
            tool_call_id=data.get("tool_call_id") or None,
        )


@dataclass
class Entry:
    """A message plus the optional timestamp and metadata stored with it."""

    message: Message
    timestamp: str | None = None
    metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (empty fields omitted)."""
        data: dict[str, Any] = {"message": self.message.to_dict()}
        if self.timestamp:
            data["timestamp"] = self.timestamp
        if self.metadata:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Create from dictionary."""
        return cls(
            message=Message.from_dict(data["message"]),
            timestamp=data.get("timestamp") or None,
            metadata=data.get("metadata") or None,
        )


@dataclass
class ReadResult:
    """Messages decoded from a log plus the number of records skipped."""

    entries: list[Entry] = field(default_factory=list)
    skipped: int = 0

    @property
    def messages(self) -> list[Message]:
        return [entry.message for entry in self.entries]


@dataclass
class SessionInfo:
    """File-level information about one session log."""

    session_id: str
    path: Path
    size: int
    modified: datetime
    line_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "path": str(self.path),
            "size": self.size,
            "modified": self.modified.isoformat(),
            "line_count": self.line_count,
        }
