"""Configuration commands for cost-katana.

Commands:
    cost-katana init                  Interactive setup of API key and base URL
    cost-katana config show           Show all settings (table, json or csv)
    cost-katana config get <key>      Print one setting
    cost-katana config set <key> <v>  Change one setting
    cost-katana config delete <key>   Remove a stored setting
    cost-katana config reset          Remove all stored settings
    cost-katana config path           Print the configuration file path
"""

from __future__ import annotations

import sys

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from cost_katana.cli.config import CONFIG_SCHEMA, ConfigStore, mask_secret
from cost_katana.cli.console import BRAND_ACCENT, KATANA_THEME
from cost_katana.cli.output import OutputFormat, print_records
from cost_katana.errors import InvalidConfigValue

console = Console(theme=KATANA_THEME, highlight=False)


def _fail(message: str, hint: str | None = None) -> typer.Exit:
    console.print(f"[error]✗ {message}[/error]")
    if hint:
        console.print(f"  [hint]{hint}[/hint]")
    return typer.Exit(1)


def _show_welcome() -> None:
    """Show welcome message for the setup wizard."""
    console.print()
    console.print(
        Panel(
            f"[bold {BRAND_ACCENT}]Cost Katana Setup[/bold {BRAND_ACCENT}]\n\n"
            "[dim]Connect the CLI to your Cost Katana backend.\n"
            "Settings are stored in ~/.config/cost-katana/config[/dim]",
            border_style=BRAND_ACCENT,
            padding=(1, 2),
        )
    )
    console.print()


def _ask_api_key() -> str | None:
    """Read an API key without echoing it when attached to a terminal."""
    console.print("[dim]Enter your Cost Katana API key (from the dashboard):[/dim]")
    if sys.stdin.isatty():
        import getpass

        try:
            return getpass.getpass(prompt="API Key: ").strip() or None
        except (EOFError, KeyboardInterrupt):
            return None
    return Prompt.ask("API Key", password=True, console=console).strip() or None


# =============================================================================
# init
# =============================================================================


def init_cmd(
    api_key: str | None = typer.Option(None, "--api-key", "-k", help="Set API key directly"),
    base_url: str | None = typer.Option(None, "--base-url", "-u", help="Set base URL directly"),
    model: str | None = typer.Option(None, "--model", "-m", help="Set default model directly"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing API key without asking",
    ),
) -> None:
    """Initialize the CLI configuration.

    Prompts for anything not given as an option.

    Examples:
        cost-katana init
        cost-katana init --api-key ck-... --base-url https://my-backend.example
    """
    store = ConfigStore()
    interactive = api_key is None

    if interactive:
        _show_welcome()

    if store.has("apiKey") and not force:
        if not interactive:
            raise _fail("Configuration already exists", hint="Use --force to overwrite it")
        existing = mask_secret(str(store.get("apiKey")))
        console.print(f"[dim]Current API key:[/dim] [green]{existing}[/green]")
        if not Confirm.ask("Replace existing configuration?", default=False, console=console):
            console.print("[dim]Cancelled[/dim]")
            return

    if api_key is None:
        api_key = _ask_api_key()
        if not api_key:
            raise _fail("API key is required")

    if base_url is None and interactive:
        base_url = Prompt.ask("Base URL", default=str(store.get("baseUrl")), console=console)
    if model is None and interactive:
        model = Prompt.ask("Default model", default=str(store.get("defaultModel")), console=console)

    try:
        store.set("apiKey", api_key)
        if base_url:
            store.set("baseUrl", base_url)
        if model:
            store.set("defaultModel", model)
    except InvalidConfigValue as e:
        raise _fail(str(e))

    store.save()
    console.print(f"[success]✓ Configuration saved to {store.path}[/success]")
    console.print("[dim]Run [white]cost-katana chat[/white] to start chatting![/dim]")


# =============================================================================
# config
# =============================================================================

config_app = typer.Typer(
    name="config",
    help="Manage CLI configuration",
    no_args_is_help=True,
)


@config_app.command("show")
def config_show(
    fmt: OutputFormat | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (default: outputFormat from config)",
        case_sensitive=False,
    ),
) -> None:
    """Show all configuration values. The API key is masked."""
    store = ConfigStore()
    fmt = fmt or OutputFormat(store.get("outputFormat"))
    print_records(store.records(), fmt=fmt, title="Configuration", console=console)
    if fmt is OutputFormat.TABLE:
        console.print(f"  [dim]Configuration file: {store.path}[/dim]")
        console.print()


@config_app.command("get")
def config_get(key: str = typer.Argument(..., help="Configuration key")) -> None:
    """Print the effective value of one key."""
    store = ConfigStore()
    try:
        value = store.display_value(key)
    except InvalidConfigValue as e:
        raise _fail(str(e))
    if not value:
        raise _fail(f"{key} is not set", hint='Use "cost-katana init" to set up your configuration')
    typer.echo(value)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one configuration key.

    Examples:
        cost-katana config set defaultModel gpt-4o
        cost-katana config set defaultTemperature 0.3
    """
    store = ConfigStore()
    try:
        stored = store.set(key, value)
    except InvalidConfigValue as e:
        raise _fail(str(e), hint=f"Valid keys: {', '.join(CONFIG_SCHEMA)}")
    store.save()
    shown = mask_secret(str(stored)) if CONFIG_SCHEMA[key].secret else stored
    console.print(f"[success]✓ Configuration updated: {key} = {shown}[/success]")


@config_app.command("delete")
def config_delete(key: str = typer.Argument(..., help="Configuration key")) -> None:
    """Remove a stored key so its default applies again."""
    store = ConfigStore()
    try:
        deleted = store.delete(key)
    except InvalidConfigValue as e:
        raise _fail(str(e))
    if not deleted:
        raise _fail(f"Configuration key not set: {key}")
    console.print(f"[success]✓ Configuration deleted: {key}[/success]")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Remove all stored configuration."""
    store = ConfigStore()
    if not force and not Confirm.ask("Remove all saved configuration?", console=console):
        console.print("[dim]Cancelled[/dim]")
        return
    store.reset()
    console.print("[success]✓ Configuration reset to defaults[/success]")


@config_app.command("path")
def config_path() -> None:
    """Print the configuration file path."""
    typer.echo(str(ConfigStore().path))


def register_config(app: typer.Typer) -> None:
    """Register init and config commands with the main app."""
    app.command("init", rich_help_panel="Setup")(init_cmd)
    app.add_typer(config_app, name="config", rich_help_panel="Setup")
