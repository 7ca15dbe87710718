"""Agent loop states, control commands, and conversation state."""

from __future__ import annotations

import copy
import enum
import logging
import os

logger = logging.getLogger(__name__)


class LoopState(str, enum.Enum):
    """States the agent loop can be in."""

    AWAITING_INPUT = "awaiting_input"
    THINKING = "thinking"
    DISPATCHING = "dispatching"
    EXITING = "exiting"


class Command(str, enum.Enum):
    """What a line of user input asks the loop to do."""

    EXIT = "exit"
    CLEAR = "clear"
    HELP = "help"
    MESSAGE = "message"


_COMMANDS: dict[str, Command] = {
    "exit": Command.EXIT,
    "quit": Command.EXIT,
    "clear": Command.CLEAR,
    "help": Command.HELP,
    "?": Command.HELP,
}


def parse_command(line: str) -> Command:
    """Classify a line of input. Matching is trimmed and case-insensitive."""
    return _COMMANDS.get(line.strip().lower(), Command.MESSAGE)


def default_system_prompt(cwd: str | None = None) -> str:
    return "\n".join([
        "You are a helpful AI assistant",
        f'You live in my terminal at the cwd "{cwd or os.getcwd()}"',
    ])


class Conversation:
    """Ordered OpenAI-format message history for one session.

    Starts primed with a single system message; ``reset`` returns it to
    that form.
    """

    def __init__(self, system_prompt: str | None = None) -> None:
        self._system_prompt = system_prompt or default_system_prompt()
        self._messages: list[dict] = []
        self.reset()

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def messages(self) -> list[dict]:
        """A deep copy of the history, safe to hand to a model backend."""
        return copy.deepcopy(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def reset(self) -> None:
        self._messages = [{"role": "system", "content": self._system_prompt}]

    def add_user(self, text: str) -> None:
        self._messages.append({"role": "user", "content": text})

    def add_assistant(self, message: dict) -> None:
        self._messages.append(copy.deepcopy(message))

    def add_tool_result(self, message: dict) -> None:
        self._messages.append(dict(message))

    def drop_unanswered_calls(self) -> int:
        """Strip tool calls without a recorded result from the last assistant turn.

        Used after an interrupted round so the history never holds a
        tool call the provider would expect an answer for. An assistant
        message left with neither calls nor text is removed.

        Returns:
            Number of tool calls dropped.
        """
        for index in range(len(self._messages) - 1, -1, -1):
            message = self._messages[index]
            if message.get("role") != "assistant":
                continue
            calls = message.get("tool_calls") or []
            if not calls:
                return 0
            answered = {
                m.get("tool_call_id")
                for m in self._messages[index + 1:]
                if m.get("role") == "tool"
            }
            kept = [call for call in calls if call.get("id") in answered]
            dropped = len(calls) - len(kept)
            if dropped == 0:
                return 0
            if kept:
                message["tool_calls"] = kept
            elif message.get("content"):
                del message["tool_calls"]
            else:
                del self._messages[index]
            logger.debug("Dropped %d unanswered tool call(s)", dropped)
            return dropped
        return 0
