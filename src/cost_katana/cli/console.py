"""Centralized console management for the cost-katana CLI.

This module provides:
- KATANA_THEME: Consistent color theming across all CLI output
- get_console(): Factory for the themed console singleton
- setup_logging(): RichHandler logging on stderr
- Semantic output helpers: print_success, print_error, print_warning
- status_spinner(): Busy indicator for blocking network calls

Example:
    ```python
    from cost_katana.cli.console import get_console, print_error

    console = get_console()
    console.print("[cost]$0.0020[/cost]")

    print_error("Connection failed", hint="Check your base URL")
    ```
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from rich.box import HEAVY, ROUNDED, Box
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:
    from collections.abc import Iterator


# =============================================================================
# Brand Colors
# =============================================================================

BRAND_ACCENT = "#06b6d4"  # Cyan


# =============================================================================
# Theme Definition
# =============================================================================

KATANA_THEME = Theme(
    {
        # Semantic colors
        "info": BRAND_ACCENT,
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        # Chat roles
        "chat.user": "bold green",
        "chat.ai": f"bold {BRAND_ACCENT}",
        "chat.time": "dim",
        # Metrics
        "metric.label": "yellow",
        "cost": "dim green",
        # Secondary text
        "hint": "dim italic",
        "muted": "dim",
    }
)


# =============================================================================
# Color Support Detection
# =============================================================================


class ColorSupport(str, Enum):
    """Terminal color support levels."""

    NONE = "none"
    BASIC = "basic"  # 16 colors
    EXTENDED = "256"  # 256 colors
    TRUECOLOR = "truecolor"  # 24-bit color


@dataclass(frozen=True)
class TerminalCapabilities:
    """Detected terminal capabilities."""

    color_support: ColorSupport
    interactive: bool
    width: int


def _detect_color_support() -> ColorSupport:
    """Detect terminal color support level."""
    if os.environ.get("NO_COLOR"):
        return ColorSupport.NONE

    if os.environ.get("FORCE_COLOR"):
        return ColorSupport.TRUECOLOR

    colorterm = os.environ.get("COLORTERM", "").lower()
    if colorterm in ("truecolor", "24bit"):
        return ColorSupport.TRUECOLOR

    term = os.environ.get("TERM", "").lower()
    if not term or term == "dumb":
        return ColorSupport.NONE

    if "256color" in term or "256-color" in term:
        return ColorSupport.EXTENDED

    if sys.stdout.isatty():
        return ColorSupport.BASIC

    return ColorSupport.NONE


@lru_cache(maxsize=1)
def detect_terminal_capabilities() -> TerminalCapabilities:
    """Detect terminal capabilities (cached)."""
    interactive = sys.stdout.isatty()
    return TerminalCapabilities(
        color_support=_detect_color_support(),
        interactive=interactive,
        width=os.get_terminal_size().columns if interactive else 80,
    )


# =============================================================================
# Console Factory
# =============================================================================

_console: Console | None = None


def get_console() -> Console:
    """Get the themed console instance.

    Creates a singleton Console with the cost-katana theme, configured from
    the detected terminal capabilities.
    """
    global _console

    if _console is None:
        caps = detect_terminal_capabilities()

        color_system: Literal["auto", "standard", "256", "truecolor"] | None
        if caps.color_support == ColorSupport.NONE:
            color_system = None
        elif caps.color_support == ColorSupport.TRUECOLOR:
            color_system = "truecolor"
        elif caps.color_support == ColorSupport.EXTENDED:
            color_system = "256"
        else:
            color_system = "standard"

        _console = Console(
            theme=KATANA_THEME,
            color_system=color_system,
            width=caps.width if caps.interactive else 80,
            highlight=False,
        )

    return _console


def reset_console() -> None:
    """Reset the console singleton.

    Useful for testing or when terminal capabilities change.
    """
    global _console
    _console = None
    detect_terminal_capabilities.cache_clear()


# =============================================================================
# Logging
# =============================================================================


def setup_logging(debug: bool = False) -> None:
    """Route log records through Rich on stderr.

    WARNING and above by default, everything with ``debug``.
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True, theme=KATANA_THEME),
                show_path=False,
                markup=False,
            )
        ],
        force=True,
    )
    logging.getLogger("cost_katana").setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


# =============================================================================
# Box Styles
# =============================================================================

BOX_STYLES: dict[str, Box] = {
    "default": ROUNDED,
    "error": HEAVY,
}


# =============================================================================
# Semantic Output Helpers
# =============================================================================


def print_success(message: str, details: str | None = None, console: Console | None = None) -> None:
    """Print a success message.

    Args:
        message: Success message.
        details: Optional additional details.
        console: Console to print to. Defaults to the themed singleton.
    """
    console = console or get_console()
    text = Text()
    text.append("[OK] ", style="bold green")
    text.append(message, style="success")

    if details:
        text.append("\n     ", style="")
        text.append(details, style="dim")

    console.print(text)


def print_error(message: str, hint: str | None = None, console: Console | None = None) -> None:
    """Print an error message.

    Args:
        message: Error message.
        hint: Optional hint for resolution.
        console: Console to print to. Defaults to the themed singleton.
    """
    console = console or get_console()
    text = Text()
    text.append("[X] ", style="bold red")
    text.append(message, style="error")

    if hint:
        text.append("\n    ", style="")
        text.append("Hint: ", style="dim")
        text.append(hint, style="hint")

    console.print(text)


def print_warning(message: str, console: Console | None = None) -> None:
    """Print a warning message."""
    console = console or get_console()
    text = Text()
    text.append("[!] ", style="bold yellow")
    text.append(message, style="warning")
    console.print(text)


def print_divider(style: str = "dim", console: Console | None = None) -> None:
    """Print a horizontal divider line."""
    console = console or get_console()
    console.print(Text("─" * min(console.width, 52), style=style))


def print_section(title: str, console: Console | None = None) -> None:
    """Print a section header followed by a divider.

    Example:
        ```python
        print_section("Session Statistics")
        ```
    """
    console = console or get_console()
    console.print()
    console.print(Text(title, style=f"bold {BRAND_ACCENT}"))
    print_divider(console=console)


@contextmanager
def status_spinner(message: str, console: Console | None = None) -> Iterator[None]:
    """Context manager for showing a spinner during a blocking operation.

    Example:
        ```python
        with status_spinner("AI is thinking..."):
            reply = client.send_message(...)
        ```
    """
    console = console or get_console()
    with console.status(message, spinner="dots", spinner_style=BRAND_ACCENT):
        yield


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Theme
    "KATANA_THEME",
    "BRAND_ACCENT",
    # Console
    "get_console",
    "reset_console",
    "setup_logging",
    # Capabilities
    "ColorSupport",
    "TerminalCapabilities",
    "detect_terminal_capabilities",
    # Box styles
    "BOX_STYLES",
    # Output helpers
    "print_success",
    "print_error",
    "print_warning",
    "print_divider",
    "print_section",
    "status_spinner",
]
