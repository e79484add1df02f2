"""Completion state transitions and other position-based task mutations.

Every operation takes an optional list of positions (None means the whole
list) and returns one boolean per requested position telling whether that
task actually changed. Positions past the end of the list are reported as
unchanged.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .errors import InvalidExpression
from .recurrence import next_occurrence
from .task import Task
from .timer import start_timer, stop_timer
from .todotxt import parse_task

logger = logging.getLogger(__name__)


class CompletionDateMode(Enum):
    """When `done` records a finish date."""

    CREATION_DATE_PRESENT = "creation_date_present"  # todo.txt rule: only with a creation date
    ALWAYS = "always"


@dataclass
class CompletionConfig:
    """Completion behaviour."""

    date_mode: CompletionDateMode = CompletionDateMode.CREATION_DATE_PRESENT


def _positions(tasks: list[Task], ids: Iterable[int] | None) -> list[int]:
    if ids is None:
        return list(range(len(tasks)))
    return list(ids)


def _valid(tasks: list[Task], idx: int) -> bool:
    return 0 <= idx < len(tasks)


def _now(now: datetime | None) -> datetime:
    return now or datetime.now().astimezone()


def done(
    tasks: list[Task],
    ids: Iterable[int] | None = None,
    config: CompletionConfig | None = None,
    now: datetime | None = None,
) -> list[bool]:
    """
    Mark tasks completed.

    A running timer is stopped first. For a recurring task a follow-up copy
    with advanced dates is appended to `tasks`, unless the recurrence has no
    anchor date or has run past its `until` date.
    """
    config = config or CompletionConfig()
    now = _now(now)
    today = now.date()

    positions = _positions(tasks, ids)
    changed = [False] * len(positions)
    for i, idx in enumerate(positions):
        if not _valid(tasks, idx) or tasks[idx].finished:
            continue

        task = tasks[idx]
        stop_timer(task, now)
        stamp = config.date_mode == CompletionDateMode.ALWAYS or task.create_date is not None
        task.complete(today, stamp)
        changed[i] = True

        if task.recurrence is None:
            continue
        occurrence = next_occurrence(
            task.recurrence, task.due_date, task.threshold_date, today, task.until_date
        )
        if not occurrence.spawn:
            continue

        follow_up = task.clone_for_recurrence()
        follow_up.set_due(occurrence.due)
        follow_up.set_threshold(occurrence.threshold)
        if follow_up.create_date is not None:
            follow_up.create_date = today
        tasks.append(follow_up)
        logger.debug(f"Task {idx} recurs as task {len(tasks) - 1} (due {occurrence.due})")

    return changed


def undone(tasks: list[Task], ids: Iterable[int] | None = None) -> list[bool]:
    """
    Remove the completion mark.

    Recurring tasks are never re-opened: their successor already exists.
    """
    positions = _positions(tasks, ids)
    changed = [False] * len(positions)
    for i, idx in enumerate(positions):
        if not _valid(tasks, idx):
            continue
        task = tasks[idx]
        if task.recurrence is not None:
            logger.debug(f"Task {idx} is recurring, leaving it completed")
            continue
        changed[i] = task.uncomplete()
    return changed


def start(
    tasks: list[Task], ids: Iterable[int] | None = None, now: datetime | None = None
) -> list[bool]:
    """Start timers."""
    now = _now(now)
    positions = _positions(tasks, ids)
    return [_valid(tasks, idx) and start_timer(tasks[idx], now) for idx in positions]


def stop(
    tasks: list[Task], ids: Iterable[int] | None = None, now: datetime | None = None
) -> list[bool]:
    """Stop timers, adding the elapsed time to `spent`."""
    now = _now(now)
    positions = _positions(tasks, ids)
    return [_valid(tasks, idx) and stop_timer(tasks[idx], now) for idx in positions]


def add(tasks: list[Task], line: str, today: date, auto_create_date: bool = False) -> int:
    """Parse `line`, append it and return the new task's position."""
    task = parse_task(line, today)
    if task.is_empty:
        raise InvalidExpression(line, "task text is empty")
    if auto_create_date and task.create_date is None:
        task.create_date = today
    tasks.append(task)
    return len(tasks) - 1
