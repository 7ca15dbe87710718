"""Agent loop package: conversation state, loop events, and the AgentLoop."""

from calculus.agent.events import (
    AssistantTextEvent,
    LoopEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from calculus.agent.loop import AgentLoop, TurnResult
from calculus.agent.state import (
    Command,
    Conversation,
    LoopState,
    default_system_prompt,
    parse_command,
)

__all__ = [
    "AgentLoop",
    "TurnResult",
    "Command",
    "Conversation",
    "LoopState",
    "default_system_prompt",
    "parse_command",
    "LoopEvent",
    "ToolCallEvent",
    "ToolResultEvent",
    "AssistantTextEvent",
]
