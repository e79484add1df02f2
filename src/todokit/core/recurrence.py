"""Recurrence roll-over - pure date logic, no I/O."""

import logging
from datetime import date
from typing import NamedTuple

from .dates import add_business_days, business_days_between, shift
from .errors import InvalidExpression
from .task import Period, Recurrence

logger = logging.getLogger(__name__)


class NextOccurrence(NamedTuple):
    """Dates for the follow-up task and whether it should be created at all."""

    due: date | None
    threshold: date | None
    spawn: bool


def next_date(rec: Recurrence, base: date) -> date:
    """`base` advanced by one recurrence period."""
    return shift(base, rec.count, rec.period.value)


def _keep_gap(rec: Recurrence, new_due: date, due: date, threshold: date) -> date:
    # gap in weekdays for business-day series
    if rec.period == Period.BUSINESS_DAY:
        return add_business_days(new_due, -business_days_between(threshold, due))
    return new_due - (due - threshold)


def next_occurrence(
    rec: Recurrence,
    due: date | None,
    threshold: date | None,
    today: date,
    until: date | None = None,
) -> NextOccurrence:
    """
    Compute the due/threshold dates of the next occurrence.

    Strict recurrence advances from the previous due date (or threshold when
    there is no due date); regular recurrence advances from `today`. The
    period is re-applied until the date is not in the past. When both dates
    exist the threshold keeps its distance to the due date, counted in
    weekdays for business-day recurrence.

    Nothing is spawned when the task has neither date, or when the new date
    falls after `until`.
    """
    if rec.count <= 0:
        raise InvalidExpression(str(rec), "recurrence period must be positive")
    if due is None and threshold is None:
        return NextOccurrence(None, None, False)

    anchor = (due if due is not None else threshold) if rec.strict else today
    new_anchor = next_date(rec, anchor)
    while new_anchor < today:
        new_anchor = next_date(rec, new_anchor)

    new_due: date | None = None
    new_threshold: date | None = None
    if due is not None:
        new_due = new_anchor
        if threshold is not None:
            new_threshold = _keep_gap(rec, new_anchor, due, threshold)
    else:
        new_threshold = new_anchor

    limit = new_due if new_due is not None else new_threshold
    if until is not None and limit > until:
        logger.debug(f"Recurrence expired: next date {limit} is after until {until}")
        return NextOccurrence(new_due, new_threshold, False)

    return NextOccurrence(new_due, new_threshold, True)
