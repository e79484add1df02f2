"""Bulk edits of dates, recurrence and priority.

Like the completion operations these take optional positions and return a
changed flag per position. Input is validated before any task is touched.
"""

import logging
from collections.abc import Iterable
from datetime import date
from enum import Enum

from .dates import apply_offsets, evaluate_optional, parse_offsets
from .errors import InvalidExpression
from .filtering import NO_PRIORITY_RANK, priority_rank
from .task import Recurrence, Task

logger = logging.getLogger(__name__)

DATE_FIELDS = ("due", "threshold")


class PriorityAction(Enum):
    SET = "set"
    DELETE = "delete"
    INCREASE = "increase"
    DECREASE = "decrease"


def _positions(tasks: list[Task], ids: Iterable[int] | None) -> list[int]:
    return list(range(len(tasks))) if ids is None else list(ids)


def _check_field(field: str) -> None:
    if field not in DATE_FIELDS:
        raise ValueError(f"unknown date field '{field}', expected one of {DATE_FIELDS}")


def _get_date(task: Task, field: str) -> date | None:
    return task.due_date if field == "due" else task.threshold_date


def _set_date(task: Task, field: str, value: date | None) -> bool:
    if field == "due":
        return task.set_due(value)
    return task.set_threshold(value)


def set_date(
    tasks: list[Task],
    ids: Iterable[int] | None,
    field: str,
    expr: str,
    today: date,
) -> list[bool]:
    """Set `due` or `threshold` from a date expression; `none` removes the date."""
    _check_field(field)
    value = evaluate_optional(expr, today)
    return [
        0 <= idx < len(tasks) and _set_date(tasks[idx], field, value)
        for idx in _positions(tasks, ids)
    ]


def shift_date(
    tasks: list[Task],
    ids: Iterable[int] | None,
    field: str,
    offset: str,
) -> list[bool]:
    """Move existing dates by an offset such as `+1w` or `-2b`. Tasks without the date are skipped."""
    _check_field(field)
    offsets = parse_offsets(offset.strip().lower())
    if not offsets:
        raise InvalidExpression(offset, "no offset given")

    changed = []
    for idx in _positions(tasks, ids):
        current = _get_date(tasks[idx], field) if 0 <= idx < len(tasks) else None
        if current is None:
            changed.append(False)
            continue
        try:
            new = apply_offsets(current, offsets)
        except (OverflowError, ValueError) as e:
            raise InvalidExpression(offset, str(e)) from e
        changed.append(_set_date(tasks[idx], field, new))
    return changed


def set_recurrence(tasks: list[Task], ids: Iterable[int] | None, spec: str) -> list[bool]:
    """Set or (with `none`) remove recurrence. A finished task that gets a recurrence is re-opened."""
    rec = None if spec.strip().lower() == "none" else Recurrence.parse(spec)
    changed = []
    for idx in _positions(tasks, ids):
        if not 0 <= idx < len(tasks):
            changed.append(False)
            continue
        task = tasks[idx]
        updated = task.set_recurrence(rec)
        if updated and rec is not None and task.finished:
            logger.debug(f"Re-opening task {idx} after setting recurrence {rec}")
            task.uncomplete()
        changed.append(updated)
    return changed


def _new_priority(current: str | None, action: PriorityAction, value: str | None) -> str | None:
    rank = priority_rank(current)
    match action:
        case PriorityAction.SET:
            return value
        case PriorityAction.DELETE:
            return None
        case PriorityAction.INCREASE:
            if rank == NO_PRIORITY_RANK:
                return "Z"
            return chr(ord("A") + max(rank - 1, 0))
        case PriorityAction.DECREASE:
            if rank >= NO_PRIORITY_RANK - 1:
                return None
            return chr(ord("A") + rank + 1)
    return current


def set_priority(
    tasks: list[Task],
    ids: Iterable[int] | None,
    action: PriorityAction,
    value: str | None = None,
) -> list[bool]:
    """
    Change priorities.

    INCREASE moves one level toward A (no priority becomes Z); DECREASE
    moves toward Z and past Z removes the priority.
    """
    if action == PriorityAction.SET:
        if not value or len(value) != 1 or not "A" <= value.upper() <= "Z":
            raise InvalidExpression(str(value), "priority must be a letter A-Z")
        value = value.upper()

    changed = []
    for idx in _positions(tasks, ids):
        if not 0 <= idx < len(tasks):
            changed.append(False)
            continue
        task = tasks[idx]
        new = _new_priority(task.priority, action, value)
        changed.append(new != task.priority)
        task.priority = new
    return changed
