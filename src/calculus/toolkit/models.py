"""Toolkit data models for Calculus tool calling.

Frozen dataclasses for tool definitions, model-issued tool calls, and
structured tool results.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

    from calculus.exceptions import ToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A tool the model may call, bound to its handler.

    Attributes:
        name: Tool name (e.g. "clock", "todos").
        description: Natural-language guidance consumed by the model.
        parameters: Pydantic model the call arguments must validate against.
        result: Pydantic model the handler's return value must conform to.
        handler: Callable taking a validated ``parameters`` instance and
            returning a ``result`` instance (or a dict of its fields).
    """

    name: str
    description: str
    parameters: type[BaseModel]
    result: type[BaseModel]
    handler: Callable[[Any], object]

    def parameter_schema(self) -> dict:
        """JSON Schema of the parameters, as sent to the model."""
        return self.parameters.model_json_schema()

    def result_schema(self) -> dict:
        """JSON Schema of the result payload."""
        return self.result.model_json_schema()

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameter_schema(),
            },
        }


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    ``arguments`` is the decoded JSON object, or the raw string when the
    model sent something that is not valid JSON (dispatch reports that
    as invalid arguments).
    """

    id: str
    name: str
    arguments: Any = field(default_factory=dict)


@dataclass(frozen=True)
class ToolFailure:
    """Structured error payload of a failed tool call."""

    kind: str
    message: str
    details: Any = None

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"type": self.kind, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


@dataclass(frozen=True)
class ToolResult:
    """Structured result of dispatching one tool call.

    Attributes:
        call_id: Id of the tool call this answers.
        tool_name: Name of the tool that was requested.
        success: Whether the handler produced a value.
        value: Result payload (dict conforming to the result schema) on success.
        error: Error payload on failure.
    """

    call_id: str
    tool_name: str
    success: bool
    value: dict | None = None
    error: ToolFailure | None = None

    @classmethod
    def ok(cls, call: ToolCall, value: dict) -> ToolResult:
        return cls(call_id=call.id, tool_name=call.name, success=True, value=value)

    @classmethod
    def failed(cls, call: ToolCall, exc: ToolError) -> ToolResult:
        return cls(
            call_id=call.id,
            tool_name=call.name,
            success=False,
            error=ToolFailure(kind=exc.kind, message=str(exc), details=exc.details()),
        )

    def content(self) -> str:
        """Serialize for the tool-result message sent back to the model."""
        if self.success:
            return json.dumps(self.value, ensure_ascii=False)
        assert self.error is not None
        return json.dumps({"error": self.error.to_dict()}, ensure_ascii=False, default=str)

    def to_message(self) -> dict:
        """OpenAI tool-result message for this result."""
        return {
            "role": "tool",
            "tool_call_id": self.call_id,
            "content": self.content(),
        }
