"""Tests for the toolkit: tool definitions, registry, and built-in tools.

Tests cover:
- ToolDefinition OpenAI format and schemas
- ToolRegistry registration and dispatch error taxonomy
- Built-in tools: clock formats, todos, search URL building, fetch
"""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import BaseModel

from calculus.exceptions import (
    DuplicateToolError,
    InvalidArgumentsError,
    ToolExecutionError,
    ToolTimeoutError,
    UnknownToolError,
)
from calculus.toolkit import (
    ToolCall,
    ToolDefinition,
    ToolRegistry,
    ToolResult,
    format_clock,
    get_builtin_tools,
    search_url,
)
from tests.conftest import FIXED_NOW


class EchoParams(BaseModel):
    text: str


class EchoResult(BaseModel):
    echoed: str


def _echo_tool(name: str = "echo", handler=None) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description="Echo text back.",
        parameters=EchoParams,
        result=EchoResult,
        handler=handler or (lambda params: EchoResult(echoed=params.text)),
    )


def _call(name: str, arguments, call_id: str = "call_1") -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments)


# ===========================================================================
# ToolDefinition
# ===========================================================================


class TestToolDefinition:
    def test_to_openai(self):
        tool = _echo_tool()
        oai = tool.to_openai()
        assert oai["type"] == "function"
        assert oai["function"]["name"] == "echo"
        assert oai["function"]["description"] == "Echo text back."
        params = oai["function"]["parameters"]
        assert params["type"] == "object"
        assert "text" in params["properties"]
        assert params["required"] == ["text"]

    def test_result_schema(self):
        assert "echoed" in _echo_tool().result_schema()["properties"]

    def test_builtin_declarations(self, registry):
        declared = {d["function"]["name"]: d["function"] for d in registry.declarations()}
        assert list(declared) == ["clock", "todos", "search", "fetch"]
        assert declared["clock"]["parameters"]["properties"]["format"]["enum"] == [
            "short", "long", "iso",
        ]
        assert "auto-clears" in declared["todos"]["description"]


# ===========================================================================
# ToolRegistry
# ===========================================================================


class TestRegistry:
    def test_register_declares_tool(self):
        registry = ToolRegistry()
        registry.register(_echo_tool())
        assert registry.names() == ["echo"]
        assert [d["function"]["name"] for d in registry.declarations()] == ["echo"]

    def test_duplicate_name_rejected(self):
        registry = ToolRegistry([_echo_tool()])
        with pytest.raises(DuplicateToolError) as exc_info:
            registry.register(_echo_tool())
        assert exc_info.value.tool_name == "echo"

    def test_dispatch_success(self):
        registry = ToolRegistry([_echo_tool()])
        result = registry.dispatch(_call("echo", {"text": "hi"}))
        assert result == ToolResult(
            call_id="call_1", tool_name="echo", success=True, value={"echoed": "hi"}
        )

    def test_handler_may_return_dict(self):
        registry = ToolRegistry([_echo_tool(handler=lambda p: {"echoed": p.text.upper()})])
        assert registry.dispatch(_call("echo", {"text": "hi"})).value == {"echoed": "HI"}

    def test_unknown_tool(self):
        registry = ToolRegistry([_echo_tool()])
        with pytest.raises(UnknownToolError):
            registry.invoke(_call("nope", {}))

        result = registry.dispatch(_call("nope", {}))
        assert not result.success
        assert result.error.kind == "UnknownTool"
        assert "nope" in result.error.message
        assert result.error.details == {"available": ["echo"]}

    def test_invalid_arguments_include_structural_diff(self):
        registry = ToolRegistry([_echo_tool()])
        with pytest.raises(InvalidArgumentsError) as exc_info:
            registry.invoke(_call("echo", {"text": 5}))
        assert exc_info.value.errors[0]["loc"] == ["text"]

        result = registry.dispatch(_call("echo", {}))
        assert result.error.kind == "InvalidArguments"
        assert result.error.details[0]["loc"] == ["text"]
        assert result.error.details[0]["type"] == "missing"

    def test_non_object_arguments(self):
        registry = ToolRegistry([_echo_tool()])
        result = registry.dispatch(_call("echo", '{"text": "unterminated'))
        assert result.error.kind == "InvalidArguments"

    def test_handler_exception_wrapped(self):
        def boom(params):
            raise RuntimeError("disk on fire")

        registry = ToolRegistry([_echo_tool(handler=boom)])
        with pytest.raises(ToolExecutionError) as exc_info:
            registry.invoke(_call("echo", {"text": "x"}))
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.tool_name == "echo"

        result = registry.dispatch(_call("echo", {"text": "x"}))
        assert result.error.kind == "ToolExecutionError"
        assert "RuntimeError: disk on fire" in result.error.message

    def test_bad_result_shape_is_execution_error(self):
        registry = ToolRegistry([_echo_tool(handler=lambda p: {"wrong": 1})])
        result = registry.dispatch(_call("echo", {"text": "x"}))
        assert result.error.kind == "ToolExecutionError"

    def test_error_content_is_json_for_model(self):
        registry = ToolRegistry([_echo_tool()])
        message = registry.dispatch(_call("echo", {}, call_id="c9")).to_message()
        assert message["role"] == "tool"
        assert message["tool_call_id"] == "c9"
        payload = json.loads(message["content"])
        assert payload["error"]["type"] == "InvalidArguments"


# ===========================================================================
# clock
# ===========================================================================


class TestClock:
    def test_format_short(self):
        assert format_clock(FIXED_NOW, "short") == "8/16/2025, 3:57:12 PM"

    def test_format_long(self):
        assert format_clock(FIXED_NOW, "long") == "Saturday, August 16, 2025 at 03:57:12 PM"

    def test_format_iso_is_utc(self):
        assert format_clock(FIXED_NOW, "iso") == "2025-08-16T20:57:12.345Z"

    def test_midnight_is_twelve_am(self):
        midnight = FIXED_NOW.replace(hour=0, minute=5)
        assert format_clock(midnight, "short") == "8/16/2025, 12:05:12 AM"

    def test_tool(self, registry):
        result = registry.dispatch(_call("clock", {"format": "iso"}))
        assert result.value == {"datetime": "2025-08-16T20:57:12.345Z"}

    def test_format_is_required(self, registry):
        result = registry.dispatch(_call("clock", {}))
        assert result.error.kind == "InvalidArguments"

    def test_unknown_format_rejected(self, registry):
        result = registry.dispatch(_call("clock", {"format": "unix"}))
        assert result.error.kind == "InvalidArguments"


# ===========================================================================
# todos
# ===========================================================================


class TestTodosTool:
    def test_creates_todos(self, registry, store):
        result = registry.dispatch(_call("todos", {"todos": [
            {"content": "Book flights", "status": "pending"},
            {"content": "Book hotel", "status": "pending", "id": None},
        ]}))
        assert result.success
        todos = result.value["todos"]
        assert [t["content"] for t in todos] == ["Book flights", "Book hotel"]
        assert all(t["id"] for t in todos)
        assert [t.id for t in store.todos] == [t["id"] for t in todos]

    def test_invalid_status_never_reaches_store(self, registry, store):
        store.write_todos([{"id": "keep", "content": "Existing", "status": "pending"}])

        result = registry.dispatch(_call("todos", {"todos": [
            {"content": "Bad", "status": "done"},
        ]}))

        assert result.error.kind == "InvalidArguments"
        assert result.error.details[0]["loc"][:3] == ["todos", 0, "status"]
        assert [t.id for t in store.todos] == ["keep"]

    def test_duplicate_ids_rejected(self, registry):
        result = registry.dispatch(_call("todos", {"todos": [
            {"id": "a", "content": "One", "status": "pending"},
            {"id": "a", "content": "Two", "status": "pending"},
        ]}))
        assert result.error.kind == "InvalidArguments"

    def test_all_completed_result_then_empty_store(self, registry, store):
        result = registry.dispatch(_call("todos", {"todos": [
            {"content": "Done", "status": "completed"},
        ]}))
        assert result.value["todos"][0]["status"] == "completed"
        assert store.todos == []


# ===========================================================================
# search / fetch
# ===========================================================================


class TestSearchUrl:
    def test_google(self):
        assert search_url("google", "ramen tokyo") == (
            "https://www.google.com/search?q=ramen%20tokyo"
        )

    def test_bing_with_cursor(self):
        assert search_url("bing", "a&b", "page 2") == (
            "https://www.bing.com/search?q=a%26b&cursor=page%202"
        )

    def test_yandex(self):
        assert search_url("yandex", "погода").startswith("https://yandex.com/search/?text=%D0%BF")

    def test_unknown_engine_falls_back_to_google(self):
        assert search_url("altavista", "x").startswith("https://www.google.com/")


class TestWebTools:
    def test_search_defaults_to_google(self, registry, web):
        web.default = "1. [Result](https://example.com)"
        result = registry.dispatch(_call("search", {"query": "best ramen"}))
        assert result.value == {"results": "1. [Result](https://example.com)"}
        assert web.requested == ["https://www.google.com/search?q=best%20ramen"]

    def test_search_null_cursor(self, registry, web):
        registry.dispatch(_call("search", {"query": "x", "engine": "bing", "cursor": None}))
        assert web.requested == ["https://www.bing.com/search?q=x"]

    def test_fetch(self, registry, web):
        web.pages["https://example.com/a"] = "# Title"
        result = registry.dispatch(_call("fetch", {"url": "https://example.com/a"}))
        assert result.value == {"content": "# Title"}

    def test_fetch_rejects_relative_url(self, registry, web):
        result = registry.dispatch(_call("fetch", {"url": "/etc/passwd"}))
        assert result.error.kind == "InvalidArguments"
        assert web.requested == []

    def test_timeout_reported_as_tool_timeout(self, registry, web):
        web.error = httpx.ReadTimeout("too slow")
        with pytest.raises(ToolTimeoutError):
            registry.invoke(_call("fetch", {"url": "https://example.com"}))
        result = registry.dispatch(_call("fetch", {"url": "https://example.com"}))
        assert result.error.kind == "ToolTimeout"
        assert "30s" in result.error.message

    def test_http_error_reported_as_execution_error(self, registry, web):
        request = httpx.Request("POST", "https://api.brightdata.com/request")
        web.error = httpx.HTTPStatusError(
            "bad", request=request, response=httpx.Response(502, request=request)
        )
        result = registry.dispatch(_call("search", {"query": "x"}))
        assert result.error.kind == "ToolExecutionError"


class TestGetBuiltinTools:
    def test_fresh_handlers_per_call(self, store, web):
        a = get_builtin_tools(store, web)
        b = get_builtin_tools(store, web)
        assert a[0].handler is not b[0].handler
        assert [t.name for t in a] == ["clock", "todos", "search", "fetch"]
