"""Todo data model.

A Todo is identified by its ``id``; two todos are the same entity iff
their ids match. Instances are frozen so the store can hand out copies
of its batch without exposing mutable state.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TodoStatus = Literal["pending", "in_progress", "completed"]


class Todo(BaseModel):
    """A single tracked task."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier within the store")
    content: str = Field(min_length=1, description="The task description")
    status: TodoStatus = Field(description="Task status")

    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_pending(self) -> bool:
        return self.status == "pending"

    def is_in_progress(self) -> bool:
        return self.status == "in_progress"


class TodoInput(BaseModel):
    """One item of a write request. A missing or empty ``id`` means "create"."""

    content: str = Field(
        min_length=1,
        description=(
            "The task description - be specific and actionable (e.g., "
            "'Create user authentication middleware' not 'Fix auth')"
        ),
    )
    status: TodoStatus = Field(
        description=(
            "Task status: 'pending' (not started), 'in_progress' (currently "
            "working), 'completed' (finished)"
        ),
    )
    id: Optional[str] = Field(
        default=None,
        description=(
            "Unique identifier for existing todos. Omit for new todos - "
            "system will generate UUID automatically"
        ),
    )


class TodoWriteResult(BaseModel):
    """Result of a batch write: the full batch as written."""

    todos: list[Todo] = Field(
        description="The complete updated todo batch with all generated IDs",
    )
