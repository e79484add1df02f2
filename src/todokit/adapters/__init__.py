"""Adapters - I/O implementations of ports."""

from .todo_file import TodoFileStore

__all__ = [
    "TodoFileStore",
]
