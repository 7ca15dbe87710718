"""Turn rendering: loop events to display lines.

Pure mapping from agent loop events to Rich markup strings; printing is
left to the caller. Rendering never raises: a failure while formatting
an event is logged and replaced by a degraded line.
"""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from rich.markup import escape

from calculus.agent.events import AssistantTextEvent, ToolCallEvent, ToolResultEvent

if TYPE_CHECKING:
    from calculus.agent.events import LoopEvent
    from calculus.toolkit.models import ToolCall, ToolResult

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80

CHECKED_BOX = "■"
EMPTY_BOX = "□"

_CALL_MARK = "[cyan]⏺[/cyan]"
_RESULT_MARK = "  [dim]⎿[/dim] "
_RESULT_INDENT = "    "


def truncate_for_display(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    """Keep the first line of ``text``, cut to ``max_length`` with an ellipsis."""
    first_line = text.strip().split("\n", 1)[0]
    if len(first_line) > max_length:
        return first_line[:max_length] + "..."
    return first_line


def format_assistant_response(text: str) -> str:
    return f"\n[green]✔[/green] Assistant: {escape(text.strip())}\n"


class TurnRenderer:
    """Formats tool calls, tool results, and final answers for the terminal.

    Usage::

        renderer = TurnRenderer()
        loop = AgentLoop(model, registry, on_event=lambda e: [console.print(l) for l in renderer.render(e)])
    """

    def __init__(self, preview_length: int = PREVIEW_LENGTH) -> None:
        self._preview_length = preview_length

    def render(self, event: LoopEvent) -> list[str]:
        """Return the display lines for ``event``."""
        try:
            if isinstance(event, ToolCallEvent):
                return self.tool_call_lines(event.call)
            if isinstance(event, ToolResultEvent):
                return self.tool_result_lines(event.call, event.result)
            if isinstance(event, AssistantTextEvent):
                return [format_assistant_response(event.text)]
            raise TypeError(f"Unknown event type: {type(event).__name__}")
        except Exception:
            logger.warning("Could not render %s", type(event).__name__, exc_info=True)
            return [f"[dim]<unrenderable {escape(type(event).__name__)}>[/dim]"]

    def tool_call_lines(self, call: ToolCall) -> list[str]:
        preview = self._truncate(self._salient_arguments(call))
        return [f"{_CALL_MARK} [bold]{escape(call.name)}[/bold]({escape(preview)})"]

    def tool_result_lines(self, call: ToolCall, result: ToolResult) -> list[str]:
        if not result.success:
            error = result.error
            kind = error.kind if error is not None else "Error"
            message = self._truncate(error.message) if error is not None else ""
            return [f"{_RESULT_MARK}[red]✗ {escape(kind)}[/red]: {escape(message)}"]

        value = result.value or {}
        if call.name == "todos":
            return self._todo_lines(value.get("todos", []))

        lines = [f"{_RESULT_MARK}{escape(self._truncate(self._value_preview(value)))}"]
        line_count = self._line_count(value)
        if line_count > 1:
            lines.append(f"{_RESULT_INDENT}[dim]({line_count} lines)[/dim]")
        return lines

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _truncate(self, text: str) -> str:
        return truncate_for_display(text, self._preview_length)

    @staticmethod
    def _salient_arguments(call: ToolCall) -> str:
        args = call.arguments
        if not isinstance(args, dict):
            return str(args)
        if call.name == "todos":
            todos = args.get("todos")
            count = len(todos) if isinstance(todos, list) else 0
            return f"{count} item{'s' if count != 1 else ''}"
        if call.name == "clock":
            return str(args.get("format", ""))
        if call.name == "search":
            query = json.dumps(args.get("query", ""), ensure_ascii=False)
            engine = args.get("engine")
            return f"{query}, {engine}" if engine and engine != "google" else query
        if call.name == "fetch":
            return str(args.get("url", ""))
        return ", ".join(
            f"{key}={json.dumps(value, ensure_ascii=False)}" for key, value in args.items()
        )

    @staticmethod
    def _todo_lines(todos: list[dict[str, Any]]) -> list[str]:
        if not todos:
            return [f"{_RESULT_MARK}[dim]No todos[/dim]"]
        lines = []
        for index, todo in enumerate(todos):
            prefix = _RESULT_MARK if index == 0 else _RESULT_INDENT
            content = escape(str(todo["content"]))
            if todo["status"] == "completed":
                lines.append(f"{prefix}[green]{CHECKED_BOX}[/green] [dim]{content}[/dim]")
            elif todo["status"] == "in_progress":
                lines.append(f"{prefix}{EMPTY_BOX} [bold]{content}[/bold]")
            else:
                lines.append(f"{prefix}{EMPTY_BOX} {content}")
        return lines

    @staticmethod
    def _value_preview(value: dict[str, Any]) -> str:
        for item in value.values():
            if isinstance(item, str) and item.strip():
                return item
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _line_count(value: dict[str, Any]) -> int:
        return max(
            (item.strip().count("\n") + 1 for item in value.values() if isinstance(item, str)),
            default=0,
        )
