"""Calculus exception hierarchy.

All Calculus-specific exceptions inherit from CalculusError.

Per-tool failures (ToolError subclasses) are never fatal to the agent
loop: the tool registry converts them into structured tool results the
model can reason about. Only configuration, model transport, and loop
guard failures reach the user.
"""

from __future__ import annotations


class CalculusError(Exception):
    """Base exception for all Calculus errors."""


class ConfigurationError(CalculusError):
    """Raised at start-up when required settings are missing or invalid."""

    def __init__(self, message: str, variables: list[str] | None = None) -> None:
        self.variables = list(variables or [])
        super().__init__(message)


class DuplicateToolError(CalculusError):
    """Raised when registering a tool whose name is already taken."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool already registered: {tool_name}")


class ToolError(CalculusError):
    """Base for failures of a single tool call.

    Attributes:
        tool_name: Name of the tool the model asked for.
        kind: Stable error label reported to the model.
    """

    kind = "ToolError"

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)

    def details(self) -> object | None:
        """Extra structured data attached to the error result."""
        return None


class UnknownToolError(ToolError):
    """Raised when the model requests a tool that is not registered.

    Attributes:
        available: Names the model may call instead.
    """

    kind = "UnknownTool"

    def __init__(self, tool_name: str, available: list[str] | None = None) -> None:
        self.available = list(available or [])
        super().__init__(tool_name, f"Unknown tool: {tool_name}")

    def details(self) -> object | None:
        return {"available": self.available} if self.available else None


class InvalidArgumentsError(ToolError):
    """Raised when tool-call arguments do not match the parameter schema.

    Attributes:
        errors: Structural diff, one ``{"loc", "msg", "type"}`` dict per
            offending field.
    """

    kind = "InvalidArguments"

    def __init__(self, tool_name: str, errors: list[dict]) -> None:
        self.errors = errors
        summary = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ())) or '<root>'}: {e.get('msg', '')}"
            for e in errors
        )
        super().__init__(tool_name, f"Invalid arguments for {tool_name}: {summary}")

    def details(self) -> list[dict]:
        return self.errors


class ToolExecutionError(ToolError):
    """Raised when a tool handler fails.

    Attributes:
        cause: The underlying exception.
    """

    kind = "ToolExecutionError"

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(tool_name, f"{type(cause).__name__}: {cause}")


class ToolTimeoutError(ToolError):
    """Raised when a network-bound tool does not answer in time."""

    kind = "ToolTimeout"

    def __init__(self, tool_name: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(tool_name, f"{tool_name} timed out after {timeout:g}s")


class ToolLoopExceededError(CalculusError):
    """Raised when a single turn requests tools for too many rounds."""

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(
            f"Model kept requesting tools after {max_rounds} rounds; "
            f"turn aborted."
        )


class ModelBackendError(CalculusError):
    """Transport, auth, or protocol failure talking to the model."""


class TurnInterrupted(CalculusError):
    """Raised when the user interrupts a turn in progress."""

    def __init__(self) -> None:
        super().__init__("Interrupted")
