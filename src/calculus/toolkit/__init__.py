"""Agent toolkit: tool definitions, the tool registry, and built-in tools.

Exposes the clock, todos, search, and fetch tools as function-calling
schemas for the model, plus the registry that dispatches calls to them.
"""

from calculus.toolkit.definitions import format_clock, get_builtin_tools
from calculus.toolkit.models import ToolCall, ToolDefinition, ToolFailure, ToolResult
from calculus.toolkit.registry import ToolRegistry
from calculus.toolkit.web import BrightDataClient, search_url

__all__ = [
    "ToolCall",
    "ToolDefinition",
    "ToolFailure",
    "ToolResult",
    "ToolRegistry",
    "BrightDataClient",
    "format_clock",
    "get_builtin_tools",
    "search_url",
]
