"""Date expression evaluation - no I/O dependencies.

An expression is an explicit date (`2024-03-01`), a keyword (`today`,
`tomorrow`, `yesterday`, `none`, a weekday or a month name), or either of
those followed by signed offsets such as `+1w-2d`. A bare offset (`3d`,
`-1m`) is relative to the reference date. Units: d(ay), w(eek), m(onth),
y(ear), b(usiness day).
"""

import calendar
import re
from datetime import date, timedelta

from .errors import InvalidExpression

NONE_KEYWORD = "none"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
MONTHS = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]

_DATE_RE = re.compile(r"^(\d{1,4})-(\d{1,2})-(\d{1,2})")
_WORD_RE = re.compile(r"^[a-z]+")
_OFFSET_RE = re.compile(r"([+-]?)(\d+)([dwmyb])")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_calendar_date(text: str) -> date:
    """
    Parse `YYYY-MM-DD`.

    A day between 1 and 31 that is past the end of the month is clamped to
    the last day of that month: `2019-02-30` becomes `2019-02-28`.
    """
    m = _DATE_RE.match(text.strip())
    if not m or m.end() != len(text.strip()):
        raise InvalidExpression(text, "expected YYYY-MM-DD")
    year, month, day = (int(g) for g in m.groups())
    if year == 0:
        raise InvalidExpression(text, "invalid year")
    if not 1 <= month <= 12:
        raise InvalidExpression(text, "invalid month")
    if not 1 <= day <= 31:
        raise InvalidExpression(text, "invalid day")
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(base: date, months: int) -> date:
    """
    Shift by whole months.

    The day is clamped to the target month's length, and the last day of a
    month always maps to the last day of the target month.
    """
    is_last = base.day == days_in_month(base.year, base.month)
    total = base.year * 12 + (base.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    if not 1 <= year <= 9999:
        raise OverflowError(f"year {year} is out of range")
    limit = days_in_month(year, month)
    day = limit if is_last else min(base.day, limit)
    return date(year, month, day)


def add_business_days(base: date, count: int) -> date:
    """Move `count` weekdays forward (or backward when negative), skipping Sat/Sun."""
    if count == 0:
        return base
    step = 1 if count > 0 else -1
    current = base
    # a weekend start behaves like the weekday we are moving away from
    while current.weekday() >= 5:
        current -= timedelta(days=step)
    weeks, remaining = divmod(abs(count), 5)
    current += timedelta(weeks=weeks * step)
    while remaining:
        current += timedelta(days=step)
        if current.weekday() < 5:
            remaining -= 1
    return current


def business_days_between(start: date, end: date) -> int:
    """Signed number of weekdays after `start` up to and including `end`."""
    if end < start:
        return -business_days_between(end, start)
    weeks, extra = divmod((end - start).days, 7)
    count = weeks * 5
    current = start + timedelta(weeks=weeks)
    for _ in range(extra):
        current += timedelta(days=1)
        if current.weekday() < 5:
            count += 1
    return count


def shift(base: date, count: int, unit: str) -> date:
    """Apply a signed offset of `count` units to `base`."""
    match unit:
        case "d":
            return base + timedelta(days=count)
        case "w":
            return base + timedelta(weeks=count)
        case "m":
            return add_months(base, count)
        case "y":
            return add_months(base, count * 12)
        case "b":
            return add_business_days(base, count)
    raise InvalidExpression(unit, "unknown unit")


def _resolve_keyword(word: str, today: date) -> date:
    if word == "today":
        return today
    if word == "tomorrow":
        return today + timedelta(days=1)
    if word == "yesterday":
        return today - timedelta(days=1)

    for idx, name in enumerate(WEEKDAYS):
        if word in (name, name[:3]):
            # next occurrence, never today
            days = (idx - today.weekday()) % 7 or 7
            return today + timedelta(days=days)

    for idx, name in enumerate(MONTHS):
        if word in (name, name[:3]):
            first = date(today.year, idx + 1, 1)
            if first <= today:
                first = date(today.year + 1, idx + 1, 1)
            return first

    raise InvalidExpression(word, "unknown keyword")


def evaluate_optional(expr: str, today: date) -> date | None:
    """Evaluate an expression that may be the `none` sentinel (returns None)."""
    text = expr.strip().lower()
    if not text:
        raise InvalidExpression(expr, "empty expression")

    rest = text
    if m := _DATE_RE.match(text):
        base = parse_calendar_date(m.group(0))
        rest = text[m.end() :]
        has_base = True
    elif m := _WORD_RE.match(text):
        word = m.group(0)
        rest = text[m.end() :]
        if word == NONE_KEYWORD:
            if rest:
                raise InvalidExpression(expr, "'none' cannot be shifted")
            return None
        base = _resolve_keyword(word, today)
        has_base = True
    else:
        base = today
        has_base = False

    offsets = parse_offsets(rest, signed=has_base)
    try:
        return apply_offsets(base, offsets)
    except (OverflowError, ValueError) as e:
        raise InvalidExpression(expr, str(e)) from e


def parse_offsets(text: str, signed: bool = True) -> list[tuple[int, str]]:
    """
    Read a chain of offsets such as `+1w-2d` into (count, unit) pairs.

    With `signed=False` the first offset may omit its sign (`3d+1w`).
    """
    offsets = []
    pos = 0
    while pos < len(text):
        m = _OFFSET_RE.match(text, pos)
        if not m:
            raise InvalidExpression(text, f"cannot read offset at '{text[pos:]}'")
        sign, number, unit = m.groups()
        if not sign and (signed or pos > 0):
            raise InvalidExpression(text, "offset must start with '+' or '-'")
        offsets.append((int(number) * (-1 if sign == "-" else 1), unit))
        pos = m.end()
    return offsets


def apply_offsets(base: date, offsets: list[tuple[int, str]]) -> date:
    """Apply parsed offsets left to right."""
    result = base
    for count, unit in offsets:
        result = shift(result, count, unit)
    return result


def evaluate(expr: str, today: date) -> date:
    """Evaluate a date expression against the reference date `today`."""
    result = evaluate_optional(expr, today)
    if result is None:
        raise InvalidExpression(expr, "'none' is not allowed here")
    return result
