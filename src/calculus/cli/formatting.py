"""Rich output helpers for the Calculus CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from calculus.agent.events import LoopEvent
from calculus.formatting import TurnRenderer

PANEL_WIDTH = 62

HELP_ROWS = [
    ("help, ?", "Show this command list"),
    ("clear", "Start a new conversation"),
    ("exit, quit", "Leave Calculus"),
]


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def configure_logging(level: str = "WARNING") -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def show_welcome(console: Console, cwd: str | None = None) -> None:
    """Display the welcome panel."""
    body = (
        "[color(183)]*[/] [bold]Welcome to Calculus![/bold]\n"
        "\n"
        "[italic]Commands: help, clear, quit[/italic]\n"
        "\n"
        f"cwd: [color(244)]{escape(cwd or os.getcwd())}[/]"
    )
    console.print(Panel(body, border_style="color(244)", width=PANEL_WIDTH, padding=(0, 1)))
    console.print()


def show_help(console: Console) -> None:
    """Display the command list."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Command", style="bold cyan")
    table.add_column("Description")
    for command, description in HELP_ROWS:
        table.add_row(command, description)
    console.print(table)
    console.print()


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


def make_event_printer(console: Console, renderer: TurnRenderer | None = None):
    """Build an ``on_event`` callback that prints rendered loop events."""
    renderer = renderer or TurnRenderer()

    def print_event(event: LoopEvent) -> None:
        for line in renderer.render(event):
            console.print(line, highlight=False)

    return print_event
