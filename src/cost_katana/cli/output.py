"""Rich-powered CLI output utilities.

Renders chat session views (reply, history, stats, summary, help) and
generic record lists as a table, JSON, or CSV.

Example:
    ```python
    from cost_katana.cli.output import print_stats, print_records

    print_stats(state)
    print_records([{"key": "baseUrl", "value": "https://..."}], fmt="json")
    ```
"""

from __future__ import annotations

import csv
import io
import json
from enum import Enum
from typing import TYPE_CHECKING, Any

from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cost_katana.chat.commands import COMMAND_REFERENCE
from cost_katana.chat.session import Role
from cost_katana.cli.console import (
    BOX_STYLES,
    BRAND_ACCENT,
    get_console,
    print_divider,
    print_section,
    print_warning,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from rich.console import Console

    from cost_katana.chat.client import ChatReply
    from cost_katana.chat.session import SessionState


class OutputFormat(str, Enum):
    """Formats for record output."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def format_cost(cost: float) -> str:
    """Format a monetary amount the way the backend reports it ($0.0000)."""
    return f"${cost:.4f}"


# =============================================================================
# Chat Session Output
# =============================================================================


def print_welcome(state: SessionState, console: Console | None = None) -> None:
    """Print the session banner with model and temperature."""
    console = console or get_console()
    console.print()
    console.print(Text("Cost Katana Chat Session", style=f"bold {BRAND_ACCENT}"))
    print_divider(console=console)
    console.print(f"[metric.label]Model:[/] {escape(state.model)}")
    console.print(f"[metric.label]Temperature:[/] {state.temperature}")
    console.print('[muted]Type "quit", "exit", or "bye" to end the session[/]')
    console.print('[muted]Type "help" for available commands[/]')
    print_divider(console=console)
    console.print()


def print_help(console: Console | None = None) -> None:
    """Print the in-session command reference."""
    console = console or get_console()
    print_section("Available Commands", console=console)
    for command, description in COMMAND_REFERENCE:
        console.print(f"  [metric.label]{command:<10}[/] {description}")
    print_divider(console=console)
    console.print()


def print_cleared(console: Console | None = None) -> None:
    console = console or get_console()
    console.print("[success]✓ Conversation history cleared[/]")
    console.print()


def print_history(state: SessionState, console: Console | None = None) -> None:
    """Print every message after the system prompt, oldest first."""
    console = console or get_console()
    conversation = state.conversation

    if not conversation:
        print_warning("No conversation history yet.", console=console)
        console.print()
        return

    print_section("Conversation History", console=console)
    for message in conversation:
        header = Text()
        if message.role is Role.USER:
            header.append("You", style="chat.user")
        else:
            header.append("AI", style="chat.ai")
        header.append(f" [{message.timestamp.strftime('%H:%M:%S')}]", style="chat.time")
        if message.cost is not None:
            header.append(f" ({format_cost(message.cost)})", style="cost")
        header.append(":")
        console.print(header)
        console.print(Text(message.content))
        console.print()
    print_divider(console=console)
    console.print()


def print_stats(state: SessionState, console: Console | None = None) -> None:
    """Print message counts, totals and session parameters."""
    console = console or get_console()
    print_section("Session Statistics", console=console)
    console.print(
        f"[metric.label]Messages:[/] {state.user_message_count} user, "
        f"{state.assistant_message_count} AI"
    )
    console.print(f"[metric.label]Total Cost:[/] {format_cost(state.total_cost)}")
    console.print(f"[metric.label]Total Tokens:[/] {state.total_tokens:,}")
    console.print(f"[metric.label]Model:[/] {escape(state.model)}")
    console.print(f"[metric.label]Temperature:[/] {state.temperature}")
    console.print(f"[metric.label]History:[/] {'on' if state.history_enabled else 'off'}")
    print_divider(console=console)
    console.print()


def print_reply(reply: ChatReply, model: str | None = None, console: Console | None = None) -> None:
    """Render an AI reply as markdown with a cost/token footer."""
    console = console or get_console()
    console.print("[chat.ai]AI:[/]")
    console.print(Markdown(reply.content, justify="left"))

    footer = f"{format_cost(reply.cost)} · {reply.tokens:,} tokens"
    if model:
        footer = f"{escape(model)} · {footer}"
    console.print(f"  [dim]↳ {footer}[/dim]")
    console.print()


def print_turn_failed(reason: str, console: Console | None = None) -> None:
    """One-line notice for a chat turn that did not get a response."""
    console = console or get_console()
    text = Text()
    text.append("✗ Failed to get AI response: ", style="error")
    text.append(reason)
    text.append(" Please try again.", style="dim")
    console.print(text)
    console.print()


def print_summary(state: SessionState, console: Console | None = None) -> None:
    """Print the end-of-session summary."""
    console = console or get_console()
    print_section("Chat session ended", console=console)
    console.print(f"[metric.label]Total messages:[/] {len(state.conversation)}")
    console.print(f"[metric.label]Total cost:[/] {format_cost(state.total_cost)}")
    print_divider(console=console)


def print_configuration_missing(missing: Sequence[str], console: Console | None = None) -> None:
    """Explain which settings are missing and how to fix it."""
    console = console or get_console()
    body = Text()
    for key in missing:
        body.append("• ", style="warning")
        body.append(f"{key} is not set\n")
    body.append("\nTo set up your configuration, run:\n", style="info")
    body.append("  cost-katana init", style="bold white")

    console.print()
    console.print(
        Panel(
            body,
            title="[error]Configuration Missing[/]",
            title_align="left",
            border_style="red",
            box=BOX_STYLES["error"],
            padding=(1, 2),
        )
    )


# =============================================================================
# Record Output (table / json / csv)
# =============================================================================


def records_to_json(records: Sequence[Mapping[str, Any]]) -> str:
    return json.dumps([dict(r) for r in records], indent=2, default=str)


def records_to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Render records as CSV with a header row taken from the first record."""
    if not records:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(records[0].keys()), lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow({k: "" if v is None else v for k, v in record.items()})
    return buffer.getvalue()


def print_records(
    records: Sequence[Mapping[str, Any]],
    *,
    fmt: OutputFormat | str = OutputFormat.TABLE,
    title: str | None = None,
    console: Console | None = None,
) -> None:
    """Print a list of flat records in the requested format.

    JSON and CSV are written without markup so they can be piped.
    """
    console = console or get_console()
    fmt = OutputFormat(fmt)

    if fmt is OutputFormat.JSON:
        console.print(records_to_json(records), markup=False, highlight=False, soft_wrap=True)
        return
    if fmt is OutputFormat.CSV:
        console.print(records_to_csv(records), markup=False, highlight=False, end="", soft_wrap=True)
        return

    table = Table(
        show_header=True,
        header_style="bold",
        box=BOX_STYLES["default"],
        title=f"[bold]{title}[/]" if title else None,
        title_justify="left",
        padding=(0, 1),
    )
    columns = list(records[0].keys()) if records else []
    for i, column in enumerate(columns):
        table.add_column(column, style=f"bold {BRAND_ACCENT}" if i == 0 else None)
    for record in records:
        table.add_row(*("" if record.get(c) is None else str(record.get(c)) for c in columns))

    console.print()
    console.print(table)
    console.print()


__all__ = [
    "OutputFormat",
    "format_cost",
    # Chat session
    "print_welcome",
    "print_help",
    "print_cleared",
    "print_history",
    "print_stats",
    "print_reply",
    "print_turn_failed",
    "print_summary",
    "print_configuration_missing",
    # Records
    "records_to_json",
    "records_to_csv",
    "print_records",
]
