"""Output utilities for CLI commands with clear intent.

- user_output: messages for the person at the terminal (stderr)
- machine_output: data other tools may consume (stdout)
"""

from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

TOOL_NAME = "lg"


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write data to stdout."""
    click.echo(message, nl=nl)


def error_line(message: str) -> str:
    """Format a single-line error prefixed with the tool name."""
    first_line = message.strip().splitlines()[0] if message.strip() else "unknown error"
    return click.style(f"{TOOL_NAME}: ", fg="red") + first_line


def format_export_summary(total: int, failed: list[tuple[str, str]]) -> Panel:
    """Format the end-of-export summary box.

    Args:
        total: Number of commands attempted
        failed: (command line, p4 output) for every rejected command

    Returns:
        Rich Panel listing each failed command
    """
    lines: list[Text] = [
        Text(f"{len(failed)} of {total} p4 command(s) failed", style="red bold"),
    ]
    for command, output in failed:
        lines.append(Text(""))
        lines.append(Text(f"p4 {command}", style="red"))
        if output:
            lines.append(Text(output, style="dim"))

    return Panel(Text("\n").join(lines), title="Export incomplete", border_style="red", padding=(1, 2))


def print_export_summary(total: int, failed: list[tuple[str, str]]) -> None:
    """Print the export summary to stderr."""
    Console(stderr=True).print(format_export_summary(total, failed))
