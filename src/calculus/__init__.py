"""Calculus: a terminal chat agent with tool calling.

The model can call four built-in tools (clock, todos, search, fetch);
the agent loop dispatches its requests and feeds the results back until
the model answers in plain text.
"""

from calculus._version import __version__

# Agent loop
from calculus.agent import (
    AgentLoop,
    AssistantTextEvent,
    Command,
    Conversation,
    LoopState,
    ToolCallEvent,
    ToolResultEvent,
    TurnResult,
    parse_command,
)

# Configuration
from calculus.config import AgentConfig, Settings

# Exceptions
from calculus.exceptions import (
    CalculusError,
    ConfigurationError,
    DuplicateToolError,
    InvalidArgumentsError,
    ModelBackendError,
    ToolError,
    ToolExecutionError,
    ToolLoopExceededError,
    ToolTimeoutError,
    TurnInterrupted,
    UnknownToolError,
)

# Rendering
from calculus.formatting import TurnRenderer, truncate_for_display

# Model backend
from calculus.llm import ModelBackend, ModelResponse, OpenAIClient

# Todos
from calculus.todos import Todo, TodoInput, TodoStore, TodoWriteResult

# Toolkit
from calculus.toolkit import (
    BrightDataClient,
    ToolCall,
    ToolDefinition,
    ToolFailure,
    ToolRegistry,
    ToolResult,
    get_builtin_tools,
)

__all__ = [
    "__version__",
    "AgentLoop",
    "TurnResult",
    "Command",
    "Conversation",
    "LoopState",
    "parse_command",
    "ToolCallEvent",
    "ToolResultEvent",
    "AssistantTextEvent",
    "AgentConfig",
    "Settings",
    "CalculusError",
    "ConfigurationError",
    "DuplicateToolError",
    "ToolError",
    "UnknownToolError",
    "InvalidArgumentsError",
    "ToolExecutionError",
    "ToolTimeoutError",
    "ToolLoopExceededError",
    "ModelBackendError",
    "TurnInterrupted",
    "TurnRenderer",
    "truncate_for_display",
    "ModelBackend",
    "ModelResponse",
    "OpenAIClient",
    "Todo",
    "TodoInput",
    "TodoStore",
    "TodoWriteResult",
    "BrightDataClient",
    "ToolCall",
    "ToolDefinition",
    "ToolFailure",
    "ToolRegistry",
    "ToolResult",
    "get_builtin_tools",
]
