"""Time tracking through the `tmr` and `spent` tags."""

from datetime import datetime, timedelta, timezone

from .task import SPENT_TAG, TIMER_TAG, Task

TIMER_OFF = "off"


def is_timer_on(task: Task) -> bool:
    """True while the task's timer is running (a `tmr` start stamp is present)."""
    state = task.tags.get(TIMER_TAG)
    return bool(state) and state != TIMER_OFF


def _timestamp(now: datetime) -> int:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return int(now.timestamp())


def _stored_seconds(task: Task) -> int:
    try:
        return max(int(task.tags.get(SPENT_TAG, "0")), 0)
    except ValueError:
        return 0


def _running_seconds(task: Task, now: datetime) -> int:
    try:
        started = int(task.tags[TIMER_TAG])
    except (KeyError, ValueError):
        return 0
    return max(_timestamp(now) - started, 0)


def spent_time(task: Task, now: datetime) -> timedelta:
    """Accumulated time, including the current run when the timer is on."""
    seconds = _stored_seconds(task)
    if is_timer_on(task):
        seconds += _running_seconds(task, now)
    return timedelta(seconds=seconds)


def start_timer(task: Task, now: datetime) -> bool:
    """Start the timer. Finished tasks and running timers are left alone."""
    if task.finished or is_timer_on(task):
        return False
    return task.set_tag(TIMER_TAG, str(_timestamp(now)))


def stop_timer(task: Task, now: datetime) -> bool:
    """Stop a running timer and fold the elapsed time into `spent`."""
    if not is_timer_on(task):
        return False
    total = int(spent_time(task, now).total_seconds())
    task.remove_tag(TIMER_TAG)
    if total > 0:
        task.set_tag(SPENT_TAG, str(total))
    return True
