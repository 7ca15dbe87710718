"""Model backend protocol and its response type.

The agent loop only needs one operation from a model: given the
conversation so far and the available tool declarations, produce some
text and zero or more tool calls. Anything implementing ``generate``
can stand in for the built-in OpenAI-compatible client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from calculus.toolkit.models import ToolCall


@dataclass(frozen=True)
class ModelResponse:
    """One model reply.

    Attributes:
        text: Assistant text (may be empty when only tools are requested).
        tool_calls: Tool calls in the order the model listed them.
        message: The assistant message to record in the conversation,
            in OpenAI chat format (keeps ``tool_calls`` intact).
    """

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    message: dict = field(default_factory=dict)


@runtime_checkable
class ModelBackend(Protocol):
    """Protocol for a pluggable model backend."""

    def generate(self, messages: list[dict], tools: list[dict]) -> ModelResponse:
        """Produce the next assistant reply.

        Raises:
            ModelBackendError: On transport, auth, or protocol failure.
        """
        ...
