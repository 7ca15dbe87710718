"""Todo tracking: the Todo model and the batch-replacing TodoStore."""

from calculus.todos.models import Todo, TodoInput, TodoStatus, TodoWriteResult
from calculus.todos.store import TodoStore

__all__ = [
    "Todo",
    "TodoInput",
    "TodoStatus",
    "TodoWriteResult",
    "TodoStore",
]
