"""TodoStore: lock-serialized owner of the current todo batch.

The batch is always handled as a whole. ``write_todos`` replaces it
(never merges), and clears it again when every item in a non-empty
batch is completed. Callers never see the lock, only atomic operations.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable, Mapping
from typing import Union

from calculus.todos.models import Todo, TodoInput, TodoStatus, TodoWriteResult

logger = logging.getLogger(__name__)

TodoLike = Union[TodoInput, Mapping[str, object]]


class TodoStore:
    """Owns one todo batch for the lifetime of a session.

    Usage::

        store = TodoStore()
        result = store.write_todos([{"content": "Book hotel", "status": "pending"}])
        todo_id = result.todos[0].id
        store.write_todos([{"id": todo_id, "content": "Book hotel", "status": "completed"}])
        assert store.todos == []   # auto-cleared
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batch: list[Todo] = []
        self._issued_ids: set[str] = set()

    @property
    def todos(self) -> list[Todo]:
        """Return a copy of the current batch."""
        with self._lock:
            return list(self._batch)

    def write_todos(self, items: Iterable[TodoLike]) -> TodoWriteResult:
        """Replace the entire batch with ``items``.

        Items with a non-empty ``id`` keep it; the rest get a fresh id
        never issued by this store before. If the resulting batch is
        non-empty and fully completed, the store clears itself, but the
        returned result still carries the completed batch.

        Raises:
            ValueError: If two items share the same explicit id. The
                ``todos`` tool schema rejects this before reaching here.
        """
        inputs = [
            item if isinstance(item, TodoInput) else TodoInput.model_validate(item)
            for item in items
        ]
        with self._lock:
            processed: list[Todo] = []
            seen: set[str] = set()
            for entry in inputs:
                if entry.id:
                    if entry.id in seen:
                        raise ValueError(f"Duplicate todo id in batch: {entry.id}")
                    todo_id = entry.id
                    self._issued_ids.add(todo_id)
                else:
                    todo_id = self._new_id()
                seen.add(todo_id)
                processed.append(
                    Todo(id=todo_id, content=entry.content, status=entry.status)
                )

            self._batch = processed
            written = list(processed)
            if processed and all(todo.is_completed() for todo in processed):
                logger.debug("All %d todos completed; clearing batch", len(processed))
                self._batch = []

        return TodoWriteResult(todos=written)

    def clear(self) -> None:
        """Empty the batch."""
        with self._lock:
            self._batch = []

    def add_todo(self, content: str, status: TodoStatus = "pending") -> Todo:
        """Append a single todo with a fresh id."""
        with self._lock:
            todo = Todo(id=self._new_id(), content=content, status=status)
            self._batch = [*self._batch, todo]
            return todo

    def update_todo(
        self,
        todo_id: str,
        *,
        content: str | None = None,
        status: TodoStatus | None = None,
    ) -> bool:
        """Update fields of the todo with ``todo_id``.

        Returns:
            True if the todo existed and was updated, False otherwise.
        """
        with self._lock:
            for index, existing in enumerate(self._batch):
                if existing.id == todo_id:
                    updated = Todo(
                        id=existing.id,
                        content=content if content is not None else existing.content,
                        status=status if status is not None else existing.status,
                    )
                    batch = list(self._batch)
                    batch[index] = updated
                    self._batch = batch
                    return True
            return False

    def remove_todo(self, todo_id: str) -> bool:
        """Remove the todo with ``todo_id``.

        Returns:
            True if a todo was removed, False if none matched.
        """
        with self._lock:
            remaining = [todo for todo in self._batch if todo.id != todo_id]
            if len(remaining) == len(self._batch):
                return False
            self._batch = remaining
            return True

    def _new_id(self) -> str:
        # Caller holds the lock.
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
