"""Task selection by independent rules - pure functions, no I/O.

A `RuleSet` holds one optional rule per task property. A task is selected
when every rule that is set accepts it; an unset rule accepts everything.
All text comparisons are case-insensitive.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .dates import evaluate_optional
from .errors import InvalidExpression, InvalidRange
from .task import Task
from .timer import is_timer_on

logger = logging.getLogger(__name__)

ANY_VALUE = "any"
NONE_VALUE = "none"


class TodoStatus(Enum):
    """Which completion states to keep."""

    ACTIVE = "active"
    DONE = "done"
    ALL = "all"


# ---------------------------------------------------------------------------
# Id ranges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ItemRange:
    """
    Positions to consider: one id, an inclusive span or an explicit list.

    Ids beyond the end of the task list are skipped.
    """

    low: int = 0
    high: int = 0
    ids: frozenset[int] | None = None

    @classmethod
    def one(cls, idx: int) -> "ItemRange":
        return cls(low=idx, high=idx)

    @classmethod
    def span(cls, low: int, high: int) -> "ItemRange":
        return cls(low=low, high=high)

    @classmethod
    def of(cls, ids: Iterable[int]) -> "ItemRange":
        return cls(ids=frozenset(ids))

    @classmethod
    def parse(cls, text: str) -> "ItemRange":
        """Parse `3`, `2-5` (inclusive) or `1,4,7`."""
        value = text.strip()
        try:
            if "," in value:
                return cls.of(int(part) for part in value.split(",") if part.strip())
            if "-" in value:
                low, _, high = value.partition("-")
                return cls.span(int(low), int(high))
            return cls.one(int(value))
        except ValueError as e:
            raise InvalidRange(text, "ids must be whole numbers") from e

    def validate(self) -> None:
        if self.ids is not None:
            if any(i < 0 for i in self.ids):
                raise InvalidRange(str(sorted(self.ids)), "ids cannot be negative")
            return
        if self.low < 0 or self.high < 0:
            raise InvalidRange(f"{self.low}-{self.high}", "ids cannot be negative")
        if self.low > self.high:
            raise InvalidRange(f"{self.low}-{self.high}", "range start is after its end")

    def __contains__(self, idx: int) -> bool:
        if self.ids is not None:
            return idx in self.ids
        return self.low <= idx <= self.high


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


class PrioritySpan(Enum):
    ANY = "any"
    NONE = "none"
    EQUAL = "equal"
    HIGHER = "higher"  # the given priority or more important
    LOWER = "lower"  # the given priority or less important, including none


NO_PRIORITY_RANK = 26


def priority_rank(priority: str | None) -> int:
    """A=0 ... Z=25, no priority sorts after all of them."""
    if not priority:
        return NO_PRIORITY_RANK
    return ord(priority.upper()) - ord("A")


@dataclass(frozen=True)
class PriorityRule:
    span: PrioritySpan
    value: str | None = None

    @classmethod
    def parse(cls, text: str) -> "PriorityRule":
        """`any`, `none`, `b` (equal), `b+` (B or higher), `b-` (B or lower)."""
        value = text.strip().lower()
        if value == ANY_VALUE:
            return cls(PrioritySpan.ANY)
        if value == NONE_VALUE:
            return cls(PrioritySpan.NONE)
        span = PrioritySpan.EQUAL
        if value.endswith("+"):
            span, value = PrioritySpan.HIGHER, value[:-1]
        elif value.endswith("-"):
            span, value = PrioritySpan.LOWER, value[:-1]
        rule = cls(span, value.upper())
        rule.validate()
        return rule

    def validate(self) -> None:
        if self.span in (PrioritySpan.ANY, PrioritySpan.NONE):
            return
        if not self.value or len(self.value) != 1 or not "A" <= self.value.upper() <= "Z":
            raise InvalidExpression(str(self.value), "priority must be a letter A-Z")

    def accepts(self, task: Task) -> bool:
        rank = priority_rank(task.priority)
        match self.span:
            case PrioritySpan.ANY:
                return task.priority is not None
            case PrioritySpan.NONE:
                return task.priority is None
            case PrioritySpan.EQUAL:
                return rank == priority_rank(self.value)
            case PrioritySpan.HIGHER:
                return rank <= priority_rank(self.value)
            case PrioritySpan.LOWER:
                return rank >= priority_rank(self.value)
        return False


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextRule:
    """Substring (or regular expression) searched in subject, projects and contexts."""

    pattern: str
    regex: bool = False

    def compile(self) -> Callable[[Task], bool]:
        if self.regex:
            try:
                rx = re.compile(self.pattern, re.IGNORECASE)
            except re.error as e:
                raise InvalidExpression(self.pattern, f"bad regular expression: {e}") from e
            found = lambda text: rx.search(text) is not None  # noqa: E731
        else:
            needle = self.pattern.lower()
            found = lambda text: needle in text.lower()  # noqa: E731

        def accepts(task: Task) -> bool:
            return any(found(text) for text in [task.subject, *task.projects, *task.contexts])

        return accepts


# ---------------------------------------------------------------------------
# Projects, contexts, tags, hashtags
# ---------------------------------------------------------------------------


class MatchMode(Enum):
    EXACT = "exact"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS = "contains"


def split_pattern(pattern: str) -> tuple[MatchMode, str]:
    """`*foo` ends with, `foo*` starts with, `*foo*` contains, `foo` exact."""
    leading = pattern.startswith("*")
    trailing = len(pattern) > 1 and pattern.endswith("*")
    needle = pattern.strip("*")
    if leading and trailing:
        return MatchMode.CONTAINS, needle
    if leading:
        return MatchMode.ENDS_WITH, needle
    if trailing:
        return MatchMode.STARTS_WITH, needle
    return MatchMode.EXACT, pattern


def str_matches(value: str, pattern: str) -> bool:
    """Case-insensitive wildcard match of one value."""
    mode, needle = split_pattern(pattern.lower())
    value = value.lower()
    match mode:
        case MatchMode.CONTAINS:
            return needle in value
        case MatchMode.ENDS_WITH:
            return value.endswith(needle)
        case MatchMode.STARTS_WITH:
            return value.startswith(needle)
    return value == needle


def _tag_matches(item: tuple[str, str], pattern: str) -> bool:
    name, value = item
    if ":" in pattern:
        want_name, _, want_value = pattern.partition(":")
        return name.lower() == want_name.lower() and str_matches(value, want_value)
    return str_matches(name, pattern)


@dataclass(frozen=True)
class ListRule:
    """
    Accept tasks holding any of `include` and none of `exclude`.

    `none` stands for "no entries at all" and `any` for "at least one entry".
    An empty `include` accepts every task.
    """

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def _holds(self, items: list, pattern: str, matcher: Callable) -> bool:
        low = pattern.lower()
        if low == NONE_VALUE:
            return not items
        if low == ANY_VALUE:
            return bool(items)
        return any(matcher(item, pattern) for item in items)

    def accepts(self, items: list, matcher: Callable = str_matches, prefix: str = "") -> bool:
        include = [p.removeprefix(prefix) for p in self.include]
        exclude = [p.removeprefix(prefix) for p in self.exclude]
        if include and not any(self._holds(items, p, matcher) for p in include):
            return False
        return not any(self._holds(items, p, matcher) for p in exclude)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class DateSpan(Enum):
    ANY = "any"
    NONE = "none"
    RANGE = "range"


@dataclass(frozen=True)
class DateRule:
    """
    Date presence or an inclusive range.

    Bounds are dates, date expressions evaluated against the reference date,
    or None for an open end. A bound equal to the `none` keyword turns the
    range into "no date at all OR within the other bound".
    """

    span: DateSpan
    low: date | str | None = None
    high: date | str | None = None

    @classmethod
    def any(cls) -> "DateRule":
        return cls(DateSpan.ANY)

    @classmethod
    def none(cls) -> "DateRule":
        return cls(DateSpan.NONE)

    @classmethod
    def between(cls, low: date | str | None, high: date | str | None) -> "DateRule":
        return cls(DateSpan.RANGE, low, high)

    @classmethod
    def soon(cls, days: int) -> "DateRule":
        """Dates fewer than `days` days ahead, overdue ones included."""
        return cls.between(None, f"today{days - 1:+d}d")

    @classmethod
    def overdue(cls) -> "DateRule":
        return cls.between(None, "yesterday")

    @classmethod
    def parse(cls, text: str) -> "DateRule":
        """`any`, `none`, `low..high` (either side may be empty or `none`) or one expression."""
        value = text.strip().lower()
        if value == ANY_VALUE:
            return cls.any()
        if value == NONE_VALUE:
            return cls.none()
        if ".." in value:
            low, _, high = value.partition("..")
            return cls.between(low.strip() or None, high.strip() or None)
        return cls.between(value, value)

    def compile(self, today: date) -> Callable[[date | None], bool]:
        """Resolve the bounds once and return the predicate for a task date."""
        match self.span:
            case DateSpan.ANY:
                return lambda d: d is not None
            case DateSpan.NONE:
                return lambda d: d is None

        low_none, low = _resolve_bound(self.low, today)
        high_none, high = _resolve_bound(self.high, today)

        def within(d: date) -> bool:
            return (low is None or d >= low) and (high is None or d <= high)

        if low_none or high_none:
            if low_none and high_none:
                return lambda d: d is None
            return lambda d: d is None or within(d)
        return lambda d: d is not None and within(d)


def _resolve_bound(bound: date | str | None, today: date) -> tuple[bool, date | None]:
    """Returns (is the `none` keyword, resolved date or None for an open end)."""
    if bound is None or isinstance(bound, date):
        return False, bound
    resolved = evaluate_optional(bound, today)
    return resolved is None, resolved


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


@dataclass
class RuleSet:
    """Filtering rules. A field left as None is not checked."""

    id_range: ItemRange | None = None
    status: TodoStatus | None = None
    priority: PriorityRule | None = None
    text: TextRule | None = None
    projects: ListRule | None = None
    contexts: ListRule | None = None
    tags: ListRule | None = None
    hashtags: ListRule | None = None
    due: DateRule | None = None
    threshold: DateRule | None = None
    created: DateRule | None = None
    finished: DateRule | None = None
    recurring: bool | None = None
    timer_active: bool | None = None
    include_empty: bool = False


def _status_ok(task: Task, status: TodoStatus) -> bool:
    match status:
        case TodoStatus.ACTIVE:
            return not task.finished
        case TodoStatus.DONE:
            return task.finished
    return True


def _build_checks(rules: RuleSet, today: date) -> list[Callable[[Task], bool]]:
    """Validate every rule up front so a bad rule fails the whole call."""
    checks: list[Callable[[Task], bool]] = []

    if not rules.include_empty:
        checks.append(lambda t: not t.is_empty)
    if rules.status not in (None, TodoStatus.ALL):
        checks.append(lambda t: _status_ok(t, rules.status))
    if rules.priority is not None:
        rules.priority.validate()
        checks.append(rules.priority.accepts)
    if rules.text is not None:
        checks.append(rules.text.compile())
    if rules.projects is not None:
        checks.append(lambda t: rules.projects.accepts(t.projects, prefix="+"))
    if rules.contexts is not None:
        checks.append(lambda t: rules.contexts.accepts(t.contexts, prefix="@"))
    if rules.hashtags is not None:
        checks.append(lambda t: rules.hashtags.accepts(t.hashtags, prefix="#"))
    if rules.tags is not None:
        checks.append(lambda t: rules.tags.accepts(list(t.tags.items()), _tag_matches))

    for rule, attr in (
        (rules.due, "due_date"),
        (rules.threshold, "threshold_date"),
        (rules.created, "create_date"),
        (rules.finished, "finish_date"),
    ):
        if rule is not None:
            accepts_date = rule.compile(today)
            checks.append(lambda t, a=attr, p=accepts_date: p(getattr(t, a)))

    if rules.recurring is not None:
        checks.append(lambda t: (t.recurrence is not None) == rules.recurring)
    if rules.timer_active is not None:
        checks.append(lambda t: is_timer_on(t) == rules.timer_active)
    return checks


def filter_tasks(tasks: list[Task], rules: RuleSet, today: date | None = None) -> list[int]:
    """
    Positions of the tasks accepted by every rule, in list order.

    Pure function - no I/O. Raises InvalidRange or InvalidExpression when a
    rule is malformed; no partial result is returned.
    """
    today = today or date.today()
    if rules.id_range is not None:
        rules.id_range.validate()
    checks = _build_checks(rules, today)

    selected = []
    for idx, task in enumerate(tasks):
        if rules.id_range is not None and idx not in rules.id_range:
            continue
        if all(check(task) for check in checks):
            selected.append(idx)

    logger.debug(f"Filter selected {len(selected)} of {len(tasks)} tasks")
    return selected
