"""Multi-key task ordering - pure functions, no I/O."""

import re
from collections.abc import Callable
from datetime import date

from .filtering import priority_rank
from .task import Task

FIELD_ALIASES = {
    "pri": "priority",
    "priority": "priority",
    "due": "due",
    "thr": "threshold",
    "threshold": "threshold",
    "completed": "completed",
    "finished": "completed",
    "created": "created",
    "create": "created",
    "subject": "subject",
    "subj": "subject",
    "text": "subject",
    "done": "done",
    "proj": "project",
    "project": "project",
    "ctx": "context",
    "context": "context",
}


def parse_fields(text: str) -> list[str]:
    """Split `pri,due:proj` into field names."""
    return [f.strip().lower() for f in re.split(r"[,:]", text) if f.strip()]


def _date_key(value: date | None) -> tuple:
    # missing dates go last
    return (0, value) if value is not None else (1, date.min)


def _names_key(names: list[str]) -> tuple:
    # shorter list first when one is a prefix of the other; empty lists last
    return (0, [n.lower() for n in names]) if names else (1, [])


def _done_key(task: Task) -> int:
    # open, then completed recurring, then completed
    if not task.finished:
        return 0
    if task.recurrence is not None:
        return 1
    return 2


_KEYS: dict[str, Callable[[Task], object]] = {
    "priority": lambda t: priority_rank(t.priority),
    "due": lambda t: _date_key(t.due_date),
    "threshold": lambda t: _date_key(t.threshold_date),
    "completed": lambda t: _date_key(t.finish_date if t.finished else None),
    "created": lambda t: _date_key(t.create_date),
    "subject": lambda t: t.subject,
    "done": _done_key,
    "project": lambda t: _names_key(t.projects),
    "context": lambda t: _names_key(t.contexts),
}


def sort_tasks(
    ids: list[int],
    tasks: list[Task],
    fields: list[str] | str,
    reverse: bool = False,
) -> None:
    """
    Sort `ids` in place by `fields`, each one breaking ties of the previous.

    The sort is stable. Unknown field names compare equal and ids outside the
    task list go to the end. With `reverse` the final order is flipped as a
    whole. An empty field list leaves `ids` untouched.
    """
    if isinstance(fields, str):
        fields = parse_fields(fields)
    else:
        fields = [f.strip().lower() for f in fields]
    if not fields:
        return

    key_funcs = [_KEYS[FIELD_ALIASES[f]] for f in fields if f in FIELD_ALIASES]

    def key(idx: int) -> tuple:
        if not 0 <= idx < len(tasks):
            return (1,)
        task = tasks[idx]
        return (0, *(fn(task) for fn in key_funcs))

    ids.sort(key=key)
    if reverse:
        ids.reverse()
