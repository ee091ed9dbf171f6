"""
CLI command for interactive chat with the Cost Katana backend.

Usage:
    cost-katana chat                       # Interactive REPL with configured defaults
    cost-katana chat --model gpt-4o        # Use a specific model
    cost-katana chat -t 0.2 -s "Be terse"  # Temperature and system prompt
    cost-katana chat -o chat.json          # Save the transcript when the session ends

    Within the chat REPL:
    help                                   # Show available commands
    clear                                  # Clear conversation history
    history                                # Show conversation history
    stats                                  # Show message counts, cost and tokens
    quit / exit / bye / q                  # End the session
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from cost_katana.chat.controller import ChatController
from cost_katana.chat.session import MAX_TEMPERATURE, MIN_TEMPERATURE
from cost_katana.cli.config import ConfigStore
from cost_katana.cli.console import print_error
from cost_katana.cli.output import print_configuration_missing
from cost_katana.errors import ConfigurationError, InvalidConfigValue

log = logging.getLogger(__name__)

app = typer.Typer(
    help="Interactive chat with AI models through the Cost Katana backend",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def chat_cmd(
    ctx: typer.Context,
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model to use (default: defaultModel from config)",
    ),
    temperature: float | None = typer.Option(
        None,
        "--temperature",
        "-t",
        min=MIN_TEMPERATURE,
        max=MAX_TEMPERATURE,
        help="Temperature (0.0-2.0, default: defaultTemperature from config)",
    ),
    system: str | None = typer.Option(
        None,
        "--system",
        "-s",
        help='System prompt (default: "You are a helpful AI assistant.")',
    ),
    history: bool = typer.Option(
        True,
        "--history/--no-history",
        help="Keep conversation history for this session",
    ),
    max_tokens: int | None = typer.Option(
        None,
        "--max-tokens",
        min=1,
        help="maxTokens sent with each message (default: defaultMaxTokens from config)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Save the conversation to this JSON file when the session ends",
    ),
):
    """
    Start an interactive chat session.

    Every message is sent to the backend's chat endpoint; the reply, its cost
    and token count are shown and added to the session totals.

    Examples:

        cost-katana chat

        cost-katana chat --model claude-3-5-sonnet-20241022 --temperature 0.3

        cost-katana chat -o ~/chats/today.json
    """
    if ctx.invoked_subcommand is not None:
        return

    store = ConfigStore()
    try:
        if temperature is None:
            temperature = store.get("defaultTemperature")
        controller = ChatController.from_config(
            store,
            model=model,
            temperature=temperature,
            system_prompt=system,
            history_enabled=history,
            max_tokens=max_tokens,
            output_path=output.expanduser() if output else None,
        )
    except ConfigurationError as e:
        print_configuration_missing(e.missing)
        log.error(f"Failed to start chat session: {e}")
        raise typer.Exit(1)
    except InvalidConfigValue as e:
        print_error(f"Invalid configuration: {e}", hint="Check it with: cost-katana config show")
        log.error(f"Failed to start chat session: {e}")
        raise typer.Exit(1)

    controller.run()


def register(main_app: typer.Typer):
    """Register chat command to main app."""
    main_app.add_typer(app, name="chat", rich_help_panel="Chat")
