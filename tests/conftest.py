"""Shared fixtures and helpers for Calculus tests.

Provides a todo store, a fake retrieval client, a registry with the
built-in tools, a fixed clock, and a scripted model backend plus
builders for OpenAI-style replies. No test touches the network.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from calculus.llm.client import OpenAIClient
from calculus.llm.protocols import ModelResponse
from calculus.todos.store import TodoStore
from calculus.toolkit.definitions import get_builtin_tools
from calculus.toolkit.registry import ToolRegistry

# 2025-08-16 15:57:12.345 at UTC-5 == 20:57:12.345Z
FIXED_NOW = datetime(2025, 8, 16, 15, 57, 12, 345000, tzinfo=timezone(timedelta(hours=-5)))


# ---------------------------------------------------------------------------
# Reply builders
# ---------------------------------------------------------------------------


def chat_completion(message: dict) -> dict:
    """Wrap an assistant message in a chat completion response dict."""
    return {
        "id": "chatcmpl-test123",
        "object": "chat.completion",
        "model": "test-model",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def tool_call_message(calls: list[tuple[str, dict | str, str]], text: str = "") -> dict:
    """Assistant message requesting tools.

    Args:
        calls: (tool_name, arguments, call_id) tuples. A str argument is
            sent verbatim (for malformed-JSON cases).
    """
    return {
        "role": "assistant",
        "content": text or None,
        "tool_calls": [
            {
                "id": call_id,
                "type": "function",
                "function": {
                    "name": name,
                    "arguments": args if isinstance(args, str) else json.dumps(args),
                },
            }
            for name, args, call_id in calls
        ],
    }


def text_reply(text: str) -> ModelResponse:
    """Model reply with final text and no tool calls."""
    return OpenAIClient.parse_response(
        chat_completion({"role": "assistant", "content": text})
    )


def tool_reply(*calls: tuple[str, dict | str, str], text: str = "") -> ModelResponse:
    """Model reply requesting the given tool calls, in order."""
    return OpenAIClient.parse_response(chat_completion(tool_call_message(list(calls), text)))


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class ScriptedModel:
    """ModelBackend that replays scripted replies and records each request.

    An exception in the script is raised instead of returned.
    """

    def __init__(self, replies: list):
        self._replies = list(replies)
        self.calls: list[dict] = []

    def generate(self, messages: list[dict], tools: list[dict]) -> ModelResponse:
        self.calls.append({"messages": messages, "tools": tools})
        if not self._replies:
            raise AssertionError("ScriptedModel ran out of replies")
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeWeb:
    """Stand-in for BrightDataClient that records requested URLs."""

    def __init__(self, pages: dict[str, str] | None = None, default: str = "# page\n\nbody"):
        self.pages = pages or {}
        self.default = default
        self.timeout = 30.0
        self.requested: list[str] = []
        self.error: BaseException | None = None

    def retrieve(self, url: str) -> str:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.pages.get(url, self.default)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> TodoStore:
    return TodoStore()


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def registry(store: TodoStore, web: FakeWeb) -> ToolRegistry:
    """Registry holding the four built-in tools with a fixed clock."""
    return ToolRegistry(get_builtin_tools(store, web, now=lambda: FIXED_NOW))
