"""Parameter and result schemas for the built-in tools.

The parameter models are what the model sees (as JSON Schema) and what
dispatch validates call arguments against.
"""

from __future__ import annotations

from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calculus.todos.models import Todo, TodoInput


class ClockParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: Literal["short", "long", "iso"] = Field(
        description="Time format: 'short', 'long', or 'iso'",
    )


class ClockResult(BaseModel):
    datetime: str = Field(
        description=(
            "The current date and time formatted as a localized string "
            "(e.g., '12/25/2024, 3:30:45 PM')"
        ),
    )


class TodosParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    todos: list[TodoInput] = Field(
        description=(
            "Array of todo items. This replaces the entire current batch - "
            "include all todos you want to keep"
        ),
    )

    @field_validator("todos")
    @classmethod
    def _unique_ids(cls, todos: list[TodoInput]) -> list[TodoInput]:
        seen: set[str] = set()
        for todo in todos:
            if not todo.id:
                continue
            if todo.id in seen:
                raise ValueError(f"duplicate id {todo.id!r}")
            seen.add(todo.id)
        return todos


class TodosResult(BaseModel):
    todos: list[Todo] = Field(
        description="The complete updated todo batch with all generated IDs",
    )


class SearchParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(min_length=1, description="The search query to execute")
    engine: Literal["google", "bing", "yandex"] = Field(
        default="google",
        description="Search engine to use (recommended: google)",
    )
    cursor: Optional[str] = Field(
        default=None,
        description="Pagination cursor for next page",
    )


class SearchResult(BaseModel):
    results: str = Field(description="Search results formatted as markdown")


class FetchParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = Field(description="The URL to scrape (must be a valid URL)")

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, url: str) -> str:
        parsed = urlparse(url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be an absolute http(s) URL")
        return url.strip()


class FetchResult(BaseModel):
    content: str = Field(description="Scraped webpage content formatted as markdown")
