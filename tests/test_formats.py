"""Tests for the structured and transcript codecs."""

import json
from datetime import datetime

import pytest

from session_log_store import Entry, LogFormat, Message, RecordDecodeError, Role
from session_log_store.exceptions import StoreConfigurationError
from session_log_store.formats import structured, transcript

FIXED_TIME = datetime(2025, 3, 14, 9, 26, 53)


class TestLogFormat:
    """Tests for the LogFormat enum."""

    def test_default_is_structured(self):
        """None and empty string resolve to the structured format."""
        assert LogFormat.parse(None) is LogFormat.STRUCTURED
        assert LogFormat.parse("") is LogFormat.STRUCTURED

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("jsonl", LogFormat.STRUCTURED),
            ("structured", LogFormat.STRUCTURED),
            ("markdown", LogFormat.TRANSCRIPT),
            ("MD", LogFormat.TRANSCRIPT),
            (" transcript ", LogFormat.TRANSCRIPT),
            (LogFormat.TRANSCRIPT, LogFormat.TRANSCRIPT),
        ],
    )
    def test_parse_names(self, value, expected):
        """Format names and aliases are accepted case-insensitively."""
        assert LogFormat.parse(value) is expected

    def test_parse_unknown(self):
        """Unknown formats are configuration errors."""
        with pytest.raises(StoreConfigurationError) as exc_info:
            LogFormat.parse("yaml")
        assert exc_info.value.field == "format"

    @pytest.mark.parametrize("value", [True, 1, ["jsonl"]])
    def test_parse_non_string(self, value):
        """Non-string format values are configuration errors."""
        with pytest.raises(StoreConfigurationError) as exc_info:
            LogFormat.parse(value)
        assert exc_info.value.field == "format"

    def test_behaves_as_string(self):
        """Formats keep the full str interface."""
        assert LogFormat.STRUCTURED.encode("utf-8") == b"jsonl"
        assert LogFormat.TRANSCRIPT.upper() == "MARKDOWN"
        assert LogFormat.TRANSCRIPT == "markdown"

    def test_file_extensions(self):
        """Each format has its own file extension."""
        assert LogFormat.STRUCTURED.file_extension == ".jsonl"
        assert LogFormat.TRANSCRIPT.file_extension == ".markdown"

    def test_transcript_line_decode_unsupported(self):
        """Transcript records cannot be decoded one line at a time."""
        with pytest.raises(RecordDecodeError):
            LogFormat.TRANSCRIPT.decode_record("### User [2025-01-01 10:00:00]")


class TestStructuredCodec:
    """Tests for the JSONL codec."""

    def test_encode_single_line(self):
        """A record is one JSON object terminated by a newline."""
        line = structured.encode_message(Message(Role.USER, "multi\nline"))

        assert line.endswith("\n")
        assert line.count("\n") == 1
        assert json.loads(line) == {"role": "user", "content": "multi\nline"}

    def test_empty_tool_call_id_omitted(self):
        """Empty optional fields are left out of the record."""
        line = structured.encode_message(Message(Role.ASSISTANT, "hi", tool_call_id=""))
        assert "tool_call_id" not in json.loads(line)

    def test_tool_call_id_kept(self):
        """tool_call_id is written when set."""
        line = structured.encode_message(Message(Role.TOOL, "42", tool_call_id="call_1"))
        assert json.loads(line)["tool_call_id"] == "call_1"

    def test_tool_call_id_not_stripped_for_other_roles(self):
        """tool_call_id is neither enforced nor stripped for non-tool roles."""
        line = structured.encode_message(Message(Role.USER, "x", tool_call_id="call_9"))
        assert structured.decode_message(line).tool_call_id == "call_9"

    def test_non_ascii_escaped(self):
        """Non-ASCII text is escaped on write and restored on read."""
        line = structured.encode_message(Message(Role.USER, "Привет, 世界"))

        assert line.isascii()
        assert structured.decode_message(line).content == "Привет, 世界"

    def test_lone_surrogate_round_trip(self):
        """Strings that are not valid UTF-8 still encode to a decodable record."""
        message = Message(Role.USER, "bad\udcff")
        line = structured.encode_message(message)

        assert line.isascii()
        assert structured.decode_message(line) == message

    def test_decode_bare_message(self):
        """Bare message records decode to entries without timestamps."""
        entry = structured.decode_entry('{"role":"assistant","content":"ok"}')

        assert entry.message == Message(Role.ASSISTANT, "ok")
        assert entry.timestamp is None
        assert entry.metadata is None

    def test_decode_wrapped_entry(self):
        """Wrapped records keep their timestamp and metadata."""
        entry = Entry(
            message=Message(Role.TOOL, "result", tool_call_id="call_2"),
            timestamp="2025-01-01T10:00:00.000+00:00",
            metadata={"duration_ms": 12},
        )
        decoded = structured.decode_entry(structured.encode_entry(entry))

        assert decoded == entry

    def test_decode_unknown_role_kept(self):
        """Unknown roles survive as plain strings."""
        message = structured.decode_message('{"role":"developer","content":"note"}')
        assert message.role == "developer"
        assert not isinstance(message.role, Role)

    def test_decode_missing_content_defaults_empty(self):
        """A record without content decodes with empty content."""
        assert structured.decode_message('{"role":"user"}').content == ""

    @pytest.mark.parametrize(
        "line",
        [
            "invalid json line",
            "[1, 2, 3]",
            '"just a string"',
            '{"content": "no role"}',
            '{"role": 5, "content": "x"}',
            '{"role": "user", "content": ["a"]}',
            '{"role": "tool", "content": "x", "tool_call_id": 7}',
            '{"message": "not an object"}',
            '{"message": {"role": "user", "content": "x"}, "metadata": [1]}',
        ],
    )
    def test_decode_failures(self, line):
        """Malformed records raise RecordDecodeError."""
        with pytest.raises(RecordDecodeError):
            structured.decode_entry(line)

    def test_decode_error_truncates_line_details(self):
        """Error details keep only the start of huge records."""
        with pytest.raises(RecordDecodeError) as exc_info:
            structured.decode_entry("x" * 10_000)
        assert len(exc_info.value.details["line"]) == 200


class TestTranscriptCodec:
    """Tests for markdown rendering."""

    @pytest.mark.parametrize(
        "message,header",
        [
            (Message(Role.SYSTEM, "c"), "## System [2025-03-14 09:26:53]"),
            (Message(Role.USER, "c"), "### User [2025-03-14 09:26:53]"),
            (Message(Role.ASSISTANT, "c"), "### Assistant [2025-03-14 09:26:53]"),
            (
                Message(Role.TOOL, "c", tool_call_id="call_7"),
                "#### Tool: call_7 [2025-03-14 09:26:53]",
            ),
            (Message("critic", "c"), "### critic [2025-03-14 09:26:53]"),
        ],
    )
    def test_headers(self, message, header):
        """Each role gets its own header form."""
        block = transcript.encode_message(message, now=FIXED_TIME)
        assert block == f"\n{header}\n\nc\n"

    def test_block_layout(self):
        """Blocks are newline, header, blank line, content, newline."""
        block = transcript.encode_message(Message(Role.USER, "line one\nline two"), now=FIXED_TIME)

        assert block.split("\n") == [
            "",
            "### User [2025-03-14 09:26:53]",
            "",
            "line one",
            "line two",
            "",
        ]

    def test_entry_renders_message_only(self):
        """Entry metadata is not rendered into transcripts."""
        entry = Entry(message=Message(Role.USER, "hello"), metadata={"k": "v"})
        block = LogFormat.TRANSCRIPT.encode_entry(entry)

        assert block.endswith("\n\nhello\n")
        assert "metadata" not in block
        assert "'k'" not in block
