"""Root Typer application for the cost-katana command."""

from __future__ import annotations

import sys
import time

import typer
from rich.console import Console
from rich.live import Live
from rich.text import Text

from cost_katana import __version__
from cost_katana.cli.cmds import register_chat, register_config
from cost_katana.cli.config import ConfigStore, mask_secret
from cost_katana.cli.console import BRAND_ACCENT, setup_logging

console = Console()

_LOGO_LINES = [
    "   ┏━╸┏━┓┏━┓╺┳╸   ╻┏ ┏━┓╺┳╸┏━┓┏┓╻┏━┓",
    "   ┃  ┃ ┃┗━┓ ┃    ┣┻┓┣━┫ ┃ ┣━┫┃┗┫┣━┫",
    "   ┗━╸┗━┛┗━┛ ╹    ╹ ╹╹ ╹ ╹ ╹ ╹╹ ╹╹ ╹",
]

# Gradient colors for the logo
_LOGO_GRADIENT = ["#67e8f9", "#22d3ee", "#06b6d4"]

_TAGLINE = "   Track, analyze and optimize your AI spend"


def _show_banner():
    """Display the banner, revealing it line by line on a TTY."""
    console.print()
    animate = sys.stdout.isatty()
    for idx, line in enumerate(_LOGO_LINES):
        color = _LOGO_GRADIENT[idx % len(_LOGO_GRADIENT)]
        if animate:
            with Live(console=console, refresh_per_second=60, transient=True) as live:
                for i in range(0, len(line) + 1, 3):
                    live.update(Text(line[:i], style=f"bold {color}"))
                    time.sleep(0.008)
        console.print(Text(line, style=f"bold {color}"))
    console.print(Text(f"{' ' * 30}v{__version__}", style="dim"))
    console.print()
    console.print(Text(_TAGLINE, style="dim italic"))
    console.print()


def _show_config_status() -> bool:
    """Display whether the CLI is connected. Returns True if an API key is set."""
    store = ConfigStore()
    api_key = store.get("apiKey")

    if not api_key:
        console.print("  [yellow]⚠[/yellow] [dim]No API key configured[/dim]")
        console.print()
        console.print("    [dim]Run the setup to connect to your backend:[/dim]")
        console.print("    [white]cost-katana init[/white]")
        console.print()
        console.print("    [dim]Or set environment variables directly:[/dim]")
        console.print("    [dim]export COST_KATANA_API_KEY=...[/dim]")
        console.print()
        return False

    console.print(
        f"  [green]✓[/green] [bold]{store.get('baseUrl')}[/bold] "
        f"[dim](key {mask_secret(str(api_key))}, model {store.get('defaultModel')})[/dim]"
    )
    console.print()
    return True


def _show_help():
    """Display the landing screen shown when no command is given."""
    _show_banner()
    configured = _show_config_status()

    console.print(Text("  Quick Start", style=f"bold {BRAND_ACCENT}"))
    console.print()
    if configured:
        console.print(
            "    [dim]$[/dim] [white]cost-katana chat[/white]            [dim]Interactive chat[/dim]"
        )
    else:
        console.print(
            "    [dim]$[/dim] [white]cost-katana init[/white]            [dim]Configure API key[/dim]"
        )
    console.print()

    console.print(Text("  Commands", style=f"bold {BRAND_ACCENT}"))
    console.print()
    commands = [
        ("init", "Configure API key and backend URL"),
        ("chat", "Interactive chat session with cost tracking"),
        ("config", "Show or change configuration (show, get, set, delete, reset)"),
    ]
    for cmd, desc in commands:
        console.print(f"    [bold {BRAND_ACCENT}]{cmd:16}[/bold {BRAND_ACCENT}] [dim]{desc}[/dim]")
    console.print()
    console.print("    [dim]Run[/dim] [white]cost-katana --help[/white] [dim]for all options[/dim]")
    console.print()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        typer.echo(f"cost-katana {__version__}")
        raise typer.Exit()


_TYPER_HELP = """Command-line client for the Cost Katana backend.

**Quick start:**

* `cost-katana init` — Configure your API key
* `cost-katana chat` — Start an interactive chat session
* `cost-katana config show` — Show current configuration
"""

app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=False,
    add_completion=False,
    help=_TYPER_HELP,
    rich_markup_mode="markdown",
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging (also: config set debugMode true).",
    ),
):
    """cost-katana — command-line client for the Cost Katana backend."""
    setup_logging(debug=debug or bool(ConfigStore().get("debugMode")))

    if ctx.invoked_subcommand is None:
        _show_help()
        raise typer.Exit()


register_chat(app)
register_config(app)


def main():
    app()


if __name__ == "__main__":
    main()
