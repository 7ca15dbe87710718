"""Agent loop: the conversation and tool-calling state machine.

One user turn runs as: append the user message, call the model with the
whole history and the tool declarations, dispatch any tool calls it
requests (in the order it listed them), append their results, and call
the model again with no new input. The turn ends when a reply carries
no tool calls. A per-turn round limit stops runaway tool cycles.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from calculus.agent.events import AssistantTextEvent, ToolCallEvent, ToolResultEvent
from calculus.agent.state import Command, Conversation, LoopState, parse_command
from calculus.config import AgentConfig
from calculus.exceptions import (
    ModelBackendError,
    ToolLoopExceededError,
    TurnInterrupted,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from calculus.agent.events import LoopEvent
    from calculus.llm.protocols import ModelBackend
    from calculus.toolkit.models import ToolCall, ToolResult
    from calculus.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one completed user turn.

    Attributes:
        text: The model's final answer.
        rounds: Number of tool-dispatch rounds the turn took.
        results: Every tool result of the turn, in dispatch order.
    """

    text: str
    rounds: int = 0
    results: list[ToolResult] = field(default_factory=list)


class AgentLoop:
    """Drives a single conversation between the user, the model, and the tools.

    Usage::

        loop = AgentLoop(model, registry, on_event=print)
        result = loop.run_turn("plan a 3-day trip")
        print(result.text)

    or, as a REPL::

        loop.run(read_line=input, on_error=lambda exc: print(exc))
    """

    def __init__(
        self,
        model: ModelBackend,
        registry: ToolRegistry,
        config: AgentConfig | None = None,
        *,
        on_event: Callable[[LoopEvent], None] | None = None,
    ) -> None:
        self._model = model
        self._registry = registry
        self._config = config or AgentConfig()
        self._on_event = on_event
        self._conversation = Conversation(self._config.system_prompt)
        self._state = LoopState.AWAITING_INPUT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoopState:
        """Return the current loop state."""
        return self._state

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    def reset(self) -> None:
        """Return the conversation to its system-primed form."""
        self._conversation.reset()

    def run(
        self,
        read_line: Callable[[], str],
        *,
        on_clear: Callable[[], None] | None = None,
        on_help: Callable[[], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Run the read-eval loop until the user exits.

        ``read_line`` blocks for one line of input; EOF or an interrupt
        at the prompt ends the loop. A failed turn (model backend error,
        round limit, user interrupt) is passed to ``on_error`` and the
        loop goes back to waiting for input.
        """
        self._state = LoopState.AWAITING_INPUT
        while self._state != LoopState.EXITING:
            try:
                line = read_line()
            except (EOFError, KeyboardInterrupt):
                self._state = LoopState.EXITING
                break

            command = parse_command(line)
            if command == Command.EXIT:
                self._state = LoopState.EXITING
            elif command == Command.CLEAR:
                self.reset()
                self._notify(on_clear)
            elif command == Command.HELP:
                self._notify(on_help)
            elif line.strip():
                try:
                    self.run_turn(line.strip())
                except (ModelBackendError, ToolLoopExceededError, TurnInterrupted) as exc:
                    logger.debug("Turn failed: %s", exc, exc_info=True)
                    if on_error is not None:
                        on_error(exc)

    def run_turn(self, text: str) -> TurnResult:
        """Process one user message through to the model's final answer.

        Raises:
            ModelBackendError: If the model cannot be reached.
            ToolLoopExceededError: If the model is still requesting tools
                after ``max_rounds`` rounds.
            TurnInterrupted: If the user interrupted the turn. Results
                already recorded stay; unanswered calls are dropped.
        """
        self._conversation.add_user(text)
        rounds = 0
        results: list[ToolResult] = []
        try:
            while True:
                self._state = LoopState.THINKING
                response = self._model.generate(
                    self._conversation.messages,
                    self._registry.declarations(),
                )

                if not response.tool_calls:
                    self._conversation.add_assistant(
                        {"role": "assistant", "content": response.text}
                    )
                    self._emit(AssistantTextEvent(text=response.text))
                    return TurnResult(text=response.text, rounds=rounds, results=results)

                if rounds >= self._config.max_rounds:
                    logger.warning(
                        "Round limit (%d) reached; aborting turn",
                        self._config.max_rounds,
                    )
                    raise ToolLoopExceededError(self._config.max_rounds)

                rounds += 1
                self._state = LoopState.DISPATCHING
                self._conversation.add_assistant(response.message)
                results.extend(self._dispatch_round(rounds, response.tool_calls))
        except KeyboardInterrupt:
            self._conversation.drop_unanswered_calls()
            raise TurnInterrupted() from None
        finally:
            self._state = LoopState.AWAITING_INPUT

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _dispatch_round(self, round_num: int, calls: list[ToolCall]) -> list[ToolResult]:
        """Dispatch one round of tool calls, recording results in call order."""
        if self._config.parallel_tools and len(calls) > 1:
            return self._dispatch_parallel(round_num, calls)

        results: list[ToolResult] = []
        for call in calls:
            self._emit(ToolCallEvent(round=round_num, call=call))
            result = self._registry.dispatch(call)
            self._record(round_num, call, result)
            results.append(result)
        return results

    def _dispatch_parallel(self, round_num: int, calls: list[ToolCall]) -> list[ToolResult]:
        for call in calls:
            self._emit(ToolCallEvent(round=round_num, call=call))

        results: list[ToolResult] = []
        pool = ThreadPoolExecutor(max_workers=len(calls), thread_name_prefix="calculus-tool")
        try:
            futures = [pool.submit(self._registry.dispatch, call) for call in calls]
            for call, future in zip(calls, futures):
                result = future.result()
                self._record(round_num, call, result)
                results.append(result)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
        return results

    def _record(self, round_num: int, call: ToolCall, result: ToolResult) -> None:
        self._conversation.add_tool_result(result.to_message())
        self._emit(ToolResultEvent(round=round_num, call=call, result=result))

    def _emit(self, event: LoopEvent) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            logger.debug("on_event callback error", exc_info=True)

    @staticmethod
    def _notify(callback: Callable[[], None] | None) -> None:
        if callback is not None:
            callback()
