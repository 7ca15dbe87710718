"""Calculus CLI -- interactive terminal chat with tool calling.

Only loaded via the ``calculus`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging

import click
from dotenv import load_dotenv

from calculus.cli.formatting import (
    configure_logging,
    format_error,
    get_console,
    make_event_printer,
    show_help,
    show_welcome,
)
from calculus.config import Settings
from calculus.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@click.command()
def cli() -> None:
    """Calculus: a terminal assistant that can plan, search, and fetch."""
    from calculus.agent.loop import AgentLoop
    from calculus.llm.client import OpenAIClient
    from calculus.todos.store import TodoStore
    from calculus.toolkit.definitions import get_builtin_tools
    from calculus.toolkit.registry import ToolRegistry
    from calculus.toolkit.web import BrightDataClient

    console = get_console()
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    configure_logging(settings.log_level)

    store = TodoStore()
    with OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        default_model=settings.model,
        temperature=settings.temperature,
        top_p=settings.top_p,
        reasoning_effort=settings.reasoning_effort,
        referer=settings.referer,
        title=settings.title,
    ) as model, BrightDataClient(
        api_key=settings.brightdata_api_key,
        zone=settings.brightdata_zone,
        timeout=settings.tool_timeout,
    ) as web:
        registry = ToolRegistry(get_builtin_tools(store, web))
        loop = AgentLoop(
            model,
            registry,
            settings.agent_config(),
            on_event=make_event_printer(console),
        )

        def on_clear() -> None:
            store.clear()
            console.clear()
            show_welcome(console)

        def on_error(exc: Exception) -> None:
            format_error(str(exc), console)
            console.print()

        console.clear()
        show_welcome(console)
        loop.run(
            lambda: console.input("[bold]User:[/bold] "),
            on_clear=on_clear,
            on_help=lambda: show_help(console),
            on_error=on_error,
        )
    logger.debug("Session ended")
