"""Task record - the structured form of one todo.txt line."""

import copy
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .dates import parse_calendar_date
from .errors import InvalidExpression

logger = logging.getLogger(__name__)

DUE_TAG = "due"
THRESHOLD_TAG = "t"
REC_TAG = "rec"
SPENT_TAG = "spent"
TIMER_TAG = "tmr"
UNTIL_TAG = "until"

_TAG_RE = re.compile(r"^(\w[\w-]*):(\S+)$")
_REC_RE = re.compile(r"^(\+)?(\d+)([dwmyb])$")


def split_tag(word: str) -> tuple[str, str] | None:
    """Split a `name:value` word. Returns None if the word is not a tag."""
    m = _TAG_RE.match(word)
    if not m:
        return None
    # scheme://host is a link, not a tag
    if m.group(2).startswith("//"):
        return None
    return m.group(1), m.group(2)


class Period(Enum):
    """Recurrence unit. Values are the letters used in `rec:` tags."""

    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"
    BUSINESS_DAY = "b"


@dataclass(frozen=True)
class Recurrence:
    """How a completed task's dates advance to produce its successor."""

    count: int
    period: Period
    strict: bool = False

    @classmethod
    def parse(cls, text: str) -> "Recurrence":
        """Parse `1w`, `+3b` or `rec:2m`. A leading `+` marks strict recurrence."""
        value = text.strip().lower()
        if value.startswith(f"{REC_TAG}:"):
            value = value[len(REC_TAG) + 1 :]
        m = _REC_RE.match(value)
        if not m:
            raise InvalidExpression(text, "recurrence must look like '1w' or '+3b'")
        count = int(m.group(2))
        if count == 0:
            raise InvalidExpression(text, "recurrence period must be positive")
        return cls(count=count, period=Period(m.group(3)), strict=bool(m.group(1)))

    def __str__(self) -> str:
        prefix = "+" if self.strict else ""
        return f"{prefix}{self.count}{self.period.value}"


@dataclass
class Task:
    """One todo entry with its metadata already extracted from the subject.

    The subject keeps the inline `name:value` tag words, so any tag change
    must go through `set_tag` to keep the text, `tags` and the derived date
    fields in sync.
    """

    subject: str = ""
    priority: str | None = None
    finished: bool = False
    create_date: date | None = None
    finish_date: date | None = None
    due_date: date | None = None
    threshold_date: date | None = None
    recurrence: Recurrence | None = None
    projects: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)
    hashtags: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.subject.strip()

    @property
    def until_date(self) -> date | None:
        """The `until` tag as a date, or None when absent or unreadable."""
        value = self.tags.get(UNTIL_TAG)
        if not value:
            return None
        try:
            return parse_calendar_date(value)
        except InvalidExpression:
            logger.debug(f"Ignoring unreadable until tag '{value}' in '{self.subject}'")
            return None

    def set_tag(self, name: str, value: str) -> bool:
        """
        Add, replace or remove a tag.

        An empty value removes the tag. The subject text is rewritten and the
        derived fields (due, threshold, recurrence) are refreshed.
        Returns True if the task changed.
        """
        value = value.strip()
        if self.tags.get(name, "") == value:
            return False

        words = self.subject.split(" ")
        new_words = []
        replaced = False
        for word in words:
            tag = split_tag(word)
            if tag and tag[0] == name:
                if value and not replaced:
                    new_words.append(f"{name}:{value}")
                replaced = True
                continue
            new_words.append(word)
        if value and not replaced:
            new_words.append(f"{name}:{value}")
        self.subject = " ".join(w for w in new_words if w)

        if value:
            self.tags[name] = value
        else:
            self.tags.pop(name, None)
        self._refresh_field(name, value)
        return True

    def remove_tag(self, name: str) -> bool:
        return self.set_tag(name, "")

    def _refresh_field(self, name: str, value: str) -> None:
        match name:
            case "due":
                self.due_date = _optional_date(value)
            case "t":
                self.threshold_date = _optional_date(value)
            case "rec":
                try:
                    self.recurrence = Recurrence.parse(value) if value else None
                except InvalidExpression:
                    self.recurrence = None

    def set_due(self, value: date | None) -> bool:
        return self.set_tag(DUE_TAG, value.isoformat() if value else "")

    def set_threshold(self, value: date | None) -> bool:
        return self.set_tag(THRESHOLD_TAG, value.isoformat() if value else "")

    def set_recurrence(self, value: Recurrence | None) -> bool:
        return self.set_tag(REC_TAG, str(value) if value else "")

    def complete(self, on: date, stamp: bool) -> bool:
        """Mark finished. `stamp` decides whether `finish_date` is recorded."""
        if self.finished:
            return False
        self.finished = True
        if stamp:
            self.finish_date = on
        return True

    def uncomplete(self) -> bool:
        if not self.finished:
            return False
        self.finished = False
        self.finish_date = None
        return True

    def clone_for_recurrence(self) -> "Task":
        """Independent copy for the next occurrence, without timer bookkeeping."""
        clone = copy.deepcopy(self)
        clone.remove_tag(TIMER_TAG)
        clone.remove_tag(SPENT_TAG)
        clone.finished = False
        clone.finish_date = None
        return clone


def _optional_date(value: str) -> date | None:
    if not value:
        return None
    try:
        return parse_calendar_date(value)
    except InvalidExpression:
        return None
