"""Task storage interface."""

from typing import Protocol

from todokit.core.task import Task


class TaskStore(Protocol):
    """Interface for loading and persisting a task list."""

    def load(self) -> list[Task]:
        """Load all tasks. A missing list loads as empty."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored list with `tasks`."""
        ...

    def archive(self, tasks: list[Task]) -> None:
        """Append `tasks` to the archive of completed tasks."""
        ...
