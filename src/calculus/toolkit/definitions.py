"""Built-in tool definitions: clock, todos, search, fetch.

Each call to ``get_builtin_tools`` returns fresh handlers bound to the
passed store and web client. No module-level state is kept.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import httpx

from calculus.exceptions import ToolTimeoutError
from calculus.toolkit.models import ToolDefinition
from calculus.toolkit.schemas import (
    ClockParams,
    ClockResult,
    FetchParams,
    FetchResult,
    SearchParams,
    SearchResult,
    TodosParams,
    TodosResult,
)
from calculus.toolkit.web import search_url

if TYPE_CHECKING:
    from collections.abc import Callable

    from calculus.todos.store import TodoStore
    from calculus.toolkit.web import BrightDataClient

logger = logging.getLogger(__name__)

CLOCK_DESCRIPTION = """\
Get the current date and time in user's local timezone with customizable formatting.
Use when you need current timestamp, scheduling, or time-based operations.
REQUIRED: Must specify format parameter ('short', 'long', or 'iso').
Format options:
- 'short': Localized format like "8/16/2025, 3:57:12 PM"
- 'long': Full format like "Friday, August 16, 2025 at 03:57:12 PM"
- 'iso': ISO 8601 format like "2025-08-16T20:57:12.345Z\""""

TODOS_DESCRIPTION = """\
Manage task planning and progress tracking.
Use for breaking down complex work, project planning, and tracking implementation progress.
Input: array of todos with {content: string, status: 'pending'|'in_progress'|'completed', id?: string}
Create new: omit 'id' (auto-generated). Update existing: include 'id' from previous response.
Status flow: pending -> in_progress -> completed. List auto-clears when all completed.
UI displays todos automatically - don't format in response."""

SEARCH_DESCRIPTION = (
    "Search the web using Google, Bing, or Yandex. "
    "Returns search result links and snippets."
)

FETCH_DESCRIPTION = (
    "Extract webpage content as clean markdown. "
    "Input: valid URL. Output: markdown content."
)


def format_clock(moment: datetime, fmt: str) -> str:
    """Render ``moment`` in one of the clock tool's formats.

    ``short`` and ``long`` use the moment's own (local) timezone; ``iso``
    is always UTC with millisecond precision and a ``Z`` suffix.
    """
    if fmt == "iso":
        utc = moment.astimezone(timezone.utc)
        return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    hour12 = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    if fmt == "long":
        return (
            f"{moment:%A}, {moment:%B} {moment.day}, {moment.year} at "
            f"{hour12:02d}:{moment:%M}:{moment:%S} {meridiem}"
        )
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour12}:{moment:%M}:{moment:%S} {meridiem}"
    )


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _retrieve(web: BrightDataClient, tool_name: str, url: str) -> str:
    try:
        return web.retrieve(url)
    except httpx.TimeoutException as exc:
        raise ToolTimeoutError(tool_name, web.timeout) from exc


def get_builtin_tools(
    store: TodoStore,
    web: BrightDataClient,
    *,
    now: Callable[[], datetime] | None = None,
) -> list[ToolDefinition]:
    """Build the four built-in tools.

    Args:
        store: Todo store the ``todos`` tool writes to.
        web: Retrieval client shared by ``search`` and ``fetch``.
        now: Clock source for the ``clock`` tool (local, tz-aware).

    Returns:
        Tool definitions in the order clock, todos, search, fetch.
    """
    clock_source = now or _local_now

    def handle_clock(params: ClockParams) -> ClockResult:
        return ClockResult(datetime=format_clock(clock_source(), params.format))

    def handle_todos(params: TodosParams) -> TodosResult:
        written = store.write_todos(params.todos)
        return TodosResult(todos=written.todos)

    def handle_search(params: SearchParams) -> SearchResult:
        target = search_url(params.engine, params.query, params.cursor)
        return SearchResult(results=_retrieve(web, "search", target))

    def handle_fetch(params: FetchParams) -> FetchResult:
        return FetchResult(content=_retrieve(web, "fetch", params.url))

    return [
        ToolDefinition(
            name="clock",
            description=CLOCK_DESCRIPTION,
            parameters=ClockParams,
            result=ClockResult,
            handler=handle_clock,
        ),
        ToolDefinition(
            name="todos",
            description=TODOS_DESCRIPTION,
            parameters=TodosParams,
            result=TodosResult,
            handler=handle_todos,
        ),
        ToolDefinition(
            name="search",
            description=SEARCH_DESCRIPTION,
            parameters=SearchParams,
            result=SearchResult,
            handler=handle_search,
        ),
        ToolDefinition(
            name="fetch",
            description=FETCH_DESCRIPTION,
            parameters=FetchParams,
            result=FetchResult,
            handler=handle_fetch,
        ),
    ]
