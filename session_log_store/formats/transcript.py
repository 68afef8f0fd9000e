"""
Transcript (markdown) codec.

Each message is rendered as a headed block meant for people reading
the log:

    ### User [2025-01-01 10:00:00]

    Hello there

System messages get a heavier `##` header, tool results a lighter
`####` header that carries the tool call id. Any other role falls
back to `### <role>`. The timestamp is local time and is never read
back.

Transcripts cannot be decoded one line at a time; use
`TranscriptParser` on the whole file instead.
"""

from datetime import datetime

from ..exceptions import RecordDecodeError
from ..types import Message, Role, role_value

FILE_EXTENSION = ".markdown"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Header prefixes recognised by the parser (matched on stripped lines)
SYSTEM_HEADER = "## System ["
USER_HEADER = "### User ["
ASSISTANT_HEADER = "### Assistant ["
TOOL_HEADER = "#### Tool:"
HEADER_MARKER = "#"


def render_header(message: Message, timestamp: str) -> str:
    """Return the header line for a message, without line breaks."""
    match message.role:
        case Role.SYSTEM:
            return f"## System [{timestamp}]"
        case Role.USER:
            return f"### User [{timestamp}]"
        case Role.ASSISTANT:
            return f"### Assistant [{timestamp}]"
        case Role.TOOL:
            return f"#### Tool: {message.tool_call_id or ''} [{timestamp}]"
        case _:
            return f"### {role_value(message.role)} [{timestamp}]"


def encode_message(message: Message, now: datetime | None = None) -> str:
    """Render one message as a transcript block.

    Args:
        message: Message to render
        now: Time to stamp the header with (defaults to local now)

    Returns:
        `\\n<header>\\n\\n<content>\\n`
    """
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"\n{render_header(message, timestamp)}\n\n{message.content}\n"


def decode_message(line: str) -> Message:
    """Transcripts are parsed whole-file; single lines are not records."""
    raise RecordDecodeError("transcript records must be parsed from the whole file", line)
