"""Functional core - pure task logic with no I/O."""

from .completion import CompletionConfig, CompletionDateMode, add, done, start, stop, undone
from .dates import evaluate, evaluate_optional
from .errors import InvalidExpression, InvalidRange, TodoError
from .filtering import (
    DateRule,
    ItemRange,
    ListRule,
    PriorityRule,
    RuleSet,
    TextRule,
    TodoStatus,
    filter_tasks,
)
from .recurrence import NextOccurrence, next_occurrence
from .sorting import sort_tasks
from .task import Period, Recurrence, Task
from .timer import is_timer_on, spent_time
from .todotxt import format_task, parse_task

__all__ = [
    # Task record
    "Task",
    "Recurrence",
    "Period",
    "parse_task",
    "format_task",
    # Errors
    "TodoError",
    "InvalidExpression",
    "InvalidRange",
    # Dates and recurrence
    "evaluate",
    "evaluate_optional",
    "next_occurrence",
    "NextOccurrence",
    # Filtering and sorting
    "RuleSet",
    "ItemRange",
    "TodoStatus",
    "PriorityRule",
    "TextRule",
    "ListRule",
    "DateRule",
    "filter_tasks",
    "sort_tasks",
    # Completion and timers
    "CompletionConfig",
    "CompletionDateMode",
    "add",
    "done",
    "undone",
    "start",
    "stop",
    "is_timer_on",
    "spent_time",
]
