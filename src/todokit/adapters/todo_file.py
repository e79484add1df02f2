"""todo.txt file storage adapter."""

import logging
import os
from datetime import date
from pathlib import Path

from todokit.core.task import Task
from todokit.core.todotxt import format_task, parse_task

logger = logging.getLogger(__name__)


class TodoFileStore:
    """
    Plain-text task list, one task per line.

    Implements TaskStore protocol. Saving writes a sibling temp file and
    renames it over the original, so a crash never leaves a half-written list.
    """

    def __init__(self, path: Path | str, done_path: Path | str | None = None, today: date | None = None):
        self.path = Path(path).expanduser()
        self.done_path = Path(done_path).expanduser() if done_path else self.path.with_name("done.txt")
        self.today = today or date.today()

    def load(self) -> list[Task]:
        """Read all tasks. A missing file is an empty list."""
        if not self.path.exists():
            logger.debug(f"{self.path} does not exist, starting with an empty list")
            return []
        tasks = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            tasks.append(parse_task(line, self.today))
        return tasks

    def save(self, tasks: list[Task]) -> None:
        """Atomically replace the file contents with `tasks`."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text("".join(f"{format_task(t)}\n" for t in tasks), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")

    def archive(self, tasks: list[Task]) -> None:
        """Append tasks to the done file."""
        if not tasks:
            return
        self.done_path.parent.mkdir(parents=True, exist_ok=True)
        with self.done_path.open("a", encoding="utf-8") as f:
            for task in tasks:
                f.write(f"{format_task(task)}\n")
        logger.debug(f"Archived {len(tasks)} tasks to {self.done_path}")
