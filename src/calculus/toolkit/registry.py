"""ToolRegistry: name-keyed catalog of tools and their dispatch.

Registration rejects duplicate names up front, so dispatch only has to
look a name up, validate the arguments, and run the handler. Every
per-call failure is turned into a structured ``ToolResult``; dispatch
never raises for a bad tool call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from calculus.exceptions import (
    DuplicateToolError,
    InvalidArgumentsError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from calculus.toolkit.models import ToolResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from calculus.toolkit.models import ToolCall, ToolDefinition

logger = logging.getLogger(__name__)


def _structural_diff(exc: ValidationError) -> list[dict]:
    """Reduce a pydantic ValidationError to JSON-safe ``{loc, msg, type}`` entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


class ToolRegistry:
    """Catalog of callable tools.

    Usage::

        registry = ToolRegistry(get_builtin_tools(store, web))
        result = registry.dispatch(ToolCall(id="call_1", name="clock", arguments={"format": "iso"}))
        if result.success:
            print(result.value)
        else:
            print(result.error.kind, result.error.message)
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """Add a tool.

        Raises:
            DuplicateToolError: If a tool with the same name exists.
        """
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool

    def names(self) -> list[str]:
        """Registered tool names, in registration order."""
        return list(self._tools)

    def declarations(self) -> list[dict]:
        """All tools in OpenAI function-calling format."""
        return [tool.to_openai() for tool in self._tools.values()]

    def invoke(self, call: ToolCall) -> dict:
        """Run one tool call and return its validated result payload.

        Raises:
            UnknownToolError: If no tool is registered under ``call.name``.
            InvalidArgumentsError: If the arguments fail schema validation.
            ToolTimeoutError: If a network-bound handler timed out.
            ToolExecutionError: If the handler raised anything else, or
                returned a value that does not fit its result schema.
        """
        tool = self._tools.get(call.name)
        if tool is None:
            raise UnknownToolError(call.name, self.names())

        if not isinstance(call.arguments, dict):
            raise InvalidArgumentsError(
                call.name,
                [{"loc": [], "msg": "Arguments must be a JSON object", "type": "object_type"}],
            )
        try:
            params = tool.parameters.model_validate(call.arguments)
        except ValidationError as exc:
            raise InvalidArgumentsError(call.name, _structural_diff(exc)) from exc

        logger.debug("Dispatching %s (call %s)", call.name, call.id)
        try:
            raw = tool.handler(params)
        except ToolError:
            raise
        except Exception as exc:
            raise ToolExecutionError(call.name, exc) from exc

        try:
            if not isinstance(raw, tool.result):
                raw = tool.result.model_validate(
                    raw.model_dump() if isinstance(raw, BaseModel) else raw
                )
        except ValidationError as exc:
            raise ToolExecutionError(call.name, exc) from exc
        return raw.model_dump(mode="json")

    def dispatch(self, call: ToolCall) -> ToolResult:
        """Run one tool call, converting any tool failure into a result."""
        try:
            return ToolResult.ok(call, self.invoke(call))
        except ToolError as exc:
            logger.debug("Tool %s failed: %s", call.name, exc, exc_info=True)
            return ToolResult.failed(call, exc)
