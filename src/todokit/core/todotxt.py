"""todo.txt line codec - pure text processing, no I/O.

Line layout: optional `x ` completion mark, optional `(A) ` priority, then
finish and creation dates for completed tasks (creation date only for open
ones), then the subject with inline `+project`, `@context`, `#hashtag`
and `name:value` words.
"""

import logging
import re
from datetime import date

from .dates import evaluate_optional, parse_calendar_date
from .errors import InvalidExpression
from .task import DUE_TAG, REC_TAG, THRESHOLD_TAG, Recurrence, Task, split_tag

logger = logging.getLogger(__name__)

_PRIORITY_RE = re.compile(r"^\(([A-Z])\)(?:\s+|$)")
_DATE_WORD_RE = re.compile(r"^\d{1,4}-\d{1,2}-\d{1,2}$")


def _take_date(text: str) -> tuple[date | None, str]:
    """Read a leading date word. Returns (date, remaining text)."""
    word, _, rest = text.partition(" ")
    if not _DATE_WORD_RE.match(word):
        return None, text
    try:
        return parse_calendar_date(word), rest.strip()
    except InvalidExpression:
        return None, text


def _extract_prefixed(words: list[str], prefix: str) -> list[str]:
    items: list[str] = []
    for word in words:
        if len(word) > len(prefix) and word.startswith(prefix):
            item = word[len(prefix) :]
            if item not in items:
                items.append(item)
    return items


def parse_task(line: str, today: date) -> Task:
    """
    Parse one todo.txt line.

    Relative `due:` and `t:` values (`due:tomorrow`, `t:+1w`) are evaluated
    against `today` and rewritten as plain dates in the subject.
    """
    text = line.strip()
    task = Task()

    if text == "x" or text.startswith("x "):
        task.finished = True
        text = text[1:].strip()

    if m := _PRIORITY_RE.match(text):
        task.priority = m.group(1)
        text = text[m.end() :]

    first, text = _take_date(text)
    if first is not None:
        if task.finished:
            task.finish_date = first
            task.create_date, text = _take_date(text)
        else:
            task.create_date = first

    task.subject = text
    words = text.split()
    task.projects = _extract_prefixed(words, "+")
    task.contexts = _extract_prefixed(words, "@")
    task.hashtags = _extract_prefixed(words, "#")
    for word in words:
        tag = split_tag(word)
        if tag:
            task.tags[tag[0]] = tag[1]

    _resolve_special_tags(task, today)
    return task


def _resolve_special_tags(task: Task, today: date) -> None:
    for name in (DUE_TAG, THRESHOLD_TAG):
        value = task.tags.get(name)
        if not value:
            continue
        try:
            resolved = evaluate_optional(value, today)
        except InvalidExpression:
            logger.debug(f"Unreadable {name}:{value} in '{task.subject}'")
            continue
        if resolved is None:
            continue
        task.set_tag(name, resolved.isoformat())
        if name == DUE_TAG:
            task.due_date = resolved
        else:
            task.threshold_date = resolved

    rec = task.tags.get(REC_TAG)
    if rec:
        try:
            task.recurrence = Recurrence.parse(rec)
        except InvalidExpression:
            logger.debug(f"Unreadable recurrence rec:{rec} in '{task.subject}'")


def format_task(task: Task) -> str:
    """Render a task back to its todo.txt line."""
    parts = []
    if task.finished:
        parts.append("x")
    if task.priority:
        parts.append(f"({task.priority})")
    if task.finished and task.finish_date:
        parts.append(task.finish_date.isoformat())
    if task.create_date:
        parts.append(task.create_date.isoformat())
    if task.subject:
        parts.append(task.subject)
    return " ".join(parts)
