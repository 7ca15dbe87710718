"""Events the agent loop emits while processing a turn.

Delivered to the loop's ``on_event`` callback. Within a round, calls and
results each follow the model's call order and every ToolCallEvent comes
before its ToolResultEvent. A completed turn ends with one
AssistantTextEvent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from calculus.toolkit.models import ToolCall, ToolResult


@dataclass(frozen=True)
class ToolCallEvent:
    round: int
    call: ToolCall


@dataclass(frozen=True)
class ToolResultEvent:
    round: int
    call: ToolCall
    result: ToolResult


@dataclass(frozen=True)
class AssistantTextEvent:
    text: str


LoopEvent = Union[ToolCallEvent, ToolResultEvent, AssistantTextEvent]
