"""Rich console output for the jira-test CLI.

Colors are disabled by ``--no-color`` or the NO_COLOR environment
variable. Reporters receive the console from ``get_console()`` so that
the flag applies to every line of a run.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console
from rich.markup import escape


def _no_color_env() -> bool:
    return os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console honoring ``no_color`` and NO_COLOR.

    Args:
        no_color: If True, disable colored output.

    Returns:
        Configured Console instance.
    """
    disabled = no_color or _no_color_env()
    return Console(force_terminal=False if disabled else None, no_color=disabled, highlight=False)


console = create_console()


def get_console() -> Console:
    """Return the current CLI console."""
    return console


def set_no_color(no_color: bool) -> None:
    """Replace the CLI console, enabling or disabling colors."""
    global console
    console = create_console(no_color=no_color)


def success(message: str, **kwargs: Any) -> None:
    """Print a message with a green checkmark.

    Example:
        >>> success("Report saved to .jira-test-report.json")
        ✓ Report saved to .jira-test-report.json
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print a message with a red cross."""
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    console.print(escape(message), **kwargs)


__all__ = [
    "console",
    "create_console",
    "error",
    "get_console",
    "info",
    "set_no_color",
    "success",
    "warning",
]
