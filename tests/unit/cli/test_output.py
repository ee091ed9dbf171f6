"""Tests for CLI output rendering."""

from __future__ import annotations

import json

import pytest

from cost_katana.chat.client import ChatReply
from cost_katana.chat.session import SessionState
from cost_katana.cli.output import (
    OutputFormat,
    format_cost,
    print_configuration_missing,
    print_history,
    print_records,
    print_reply,
    print_stats,
    records_to_csv,
    records_to_json,
)

RECORDS = [
    {"key": "apiKey", "value": "ck-1...cdef", "source": "file"},
    {"key": "debugMode", "value": None, "source": "default"},
]


class TestFormatCost:
    """Tests for format_cost()."""

    @pytest.mark.parametrize(
        ("cost", "expected"),
        [(0, "$0.0000"), (0.002, "$0.0020"), (1.23456, "$1.2346"), (12.5, "$12.5000")],
    )
    def test_four_decimals(self, cost: float, expected: str) -> None:
        """Test costs always show four decimal places."""
        assert format_cost(cost) == expected


class TestRecordFormats:
    """Tests for table/json/csv record output."""

    def test_json(self) -> None:
        """Test JSON output is a list of objects."""
        assert json.loads(records_to_json(RECORDS)) == RECORDS

    def test_csv(self) -> None:
        """Test CSV has a header row and blanks for None."""
        assert records_to_csv(RECORDS).splitlines() == [
            "key,value,source",
            "apiKey,ck-1...cdef,file",
            "debugMode,,default",
        ]

    def test_csv_empty(self) -> None:
        """Test no records means no output."""
        assert records_to_csv([]) == ""

    def test_print_json_has_no_markup(self, console_buffer) -> None:
        """Test printed JSON is parseable."""
        console, buffer = console_buffer
        print_records([{"key": "[bold]x[/]"}], fmt="json", console=console)
        assert json.loads(buffer.getvalue()) == [{"key": "[bold]x[/]"}]

    def test_print_table(self, console_buffer) -> None:
        """Test table output includes headers, values and title."""
        console, buffer = console_buffer
        print_records(RECORDS, fmt=OutputFormat.TABLE, title="Configuration", console=console)
        out = buffer.getvalue()
        assert "Configuration" in out
        assert "source" in out
        assert "ck-1...cdef" in out

    def test_unknown_format(self, console_buffer) -> None:
        """Test an unsupported format is rejected."""
        console, _ = console_buffer
        with pytest.raises(ValueError):
            print_records(RECORDS, fmt="yaml", console=console)


class TestSessionViews:
    """Tests for chat session output."""

    def test_stats_fresh_session(self, console_buffer) -> None:
        """Test stats before any messages."""
        console, buffer = console_buffer
        print_stats(SessionState(model="gpt-4"), console=console)
        out = buffer.getvalue()
        assert "Messages: 0 user, 0 AI" in out
        assert "Total Cost: $0.0000" in out
        assert "Total Tokens: 0" in out
        assert "History: on" in out

    def test_stats_totals(self, console_buffer) -> None:
        """Test stats sum cost and tokens with thousands separators."""
        console, buffer = console_buffer
        state = SessionState(model="gpt-4", history_enabled=False)
        state.add_user_message("a")
        state.add_assistant_message("b", cost=0.0125, tokens=1200)
        state.add_user_message("c")
        state.add_assistant_message("d", cost=0.0075, tokens=300)

        print_stats(state, console=console)
        out = buffer.getvalue()
        assert "Messages: 2 user, 2 AI" in out
        assert "Total Cost: $0.0200" in out
        assert "Total Tokens: 1,500" in out
        assert "History: off" in out

    def test_history_shows_cost_only_when_known(self, console_buffer) -> None:
        """Test history entries show speaker, time and cost."""
        console, buffer = console_buffer
        state = SessionState(model="gpt-4")
        user = state.add_user_message("What is [bold]?")
        state.add_assistant_message("An answer", cost=0.002, tokens=15)

        print_history(state, console=console)
        out = buffer.getvalue()
        assert f"You [{user.timestamp.strftime('%H:%M:%S')}]:" in out
        assert "What is [bold]?" in out
        assert "($0.0020):" in out
        assert out.count("($") == 1

    def test_history_empty(self, console_buffer) -> None:
        console, buffer = console_buffer
        print_history(SessionState(model="gpt-4"), console=console)
        assert "No conversation history yet." in buffer.getvalue()

    def test_reply_footer(self, console_buffer) -> None:
        """Test the reply footer shows model, cost and tokens."""
        console, buffer = console_buffer
        print_reply(ChatReply(content="**Hi**", cost=0.002, tokens=1500), "gpt-4", console=console)
        out = buffer.getvalue()
        assert "Hi" in out
        assert "gpt-4 · $0.0020 · 1,500 tokens" in out

    def test_configuration_missing(self, console_buffer) -> None:
        """Test the missing-configuration panel lists keys and the fix."""
        console, buffer = console_buffer
        print_configuration_missing(["apiKey"], console=console)
        out = buffer.getvalue()
        assert "Configuration Missing" in out
        assert "apiKey is not set" in out
        assert "cost-katana init" in out
