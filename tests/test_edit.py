"""Tests for bulk date, recurrence and priority edits."""

from datetime import date

import pytest

from todokit.core.edit import PriorityAction, set_date, set_priority, set_recurrence, shift_date
from todokit.core.errors import InvalidExpression
from todokit.core.task import Period, Recurrence
from todokit.core.todotxt import parse_task


@pytest.fixture
def today():
    return date(2024, 1, 1)


def parsed(today, *lines):
    return [parse_task(line, today) for line in lines]


class TestSetDate:
    def test_expression(self, today):
        tasks = parsed(today, "a", "b due:2024-01-08")
        assert set_date(tasks, [0, 1], "due", "+1w", today) == [True, False]
        assert tasks[0].due_date == date(2024, 1, 8)
        assert tasks[0].subject == "a due:2024-01-08"

    def test_none_removes(self, today):
        tasks = parsed(today, "a t:2024-01-08")
        assert set_date(tasks, None, "threshold", "none", today) == [True]
        assert tasks[0].threshold_date is None
        assert tasks[0].subject == "a"

    def test_bad_expression_changes_nothing(self, today):
        tasks = parsed(today, "a due:2024-01-08")
        with pytest.raises(InvalidExpression):
            set_date(tasks, [0], "due", "someday", today)
        assert tasks[0].due_date == date(2024, 1, 8)

    def test_unknown_field(self, today):
        with pytest.raises(ValueError):
            set_date(parsed(today, "a"), [0], "created", "today", today)


class TestShiftDate:
    def test_only_dated_tasks_move(self, today):
        tasks = parsed(today, "a due:2024-01-05", "b")
        assert shift_date(tasks, None, "due", "+1b") == [True, False]
        assert tasks[0].due_date == date(2024, 1, 8)

    def test_backwards(self, today):
        tasks = parsed(today, "a t:2024-03-31")
        shift_date(tasks, [0], "threshold", "-1m")
        assert tasks[0].threshold_date == date(2024, 2, 29)

    @pytest.mark.parametrize("offset", ["", "1w", "+1x"])
    def test_invalid_offset(self, today, offset):
        with pytest.raises(InvalidExpression):
            shift_date(parsed(today, "a due:2024-01-05"), [0], "due", offset)


class TestSetRecurrence:
    def test_set(self, today):
        tasks = parsed(today, "a due:2024-01-05")
        assert set_recurrence(tasks, [0], "+2w") == [True]
        assert tasks[0].recurrence == Recurrence(2, Period.WEEK, strict=True)
        assert tasks[0].subject == "a due:2024-01-05 rec:+2w"

    def test_finished_task_reopens(self, today):
        tasks = parsed(today, "x 2024-01-01 2023-12-01 a due:2024-01-05")
        set_recurrence(tasks, [0], "1m")
        assert not tasks[0].finished
        assert tasks[0].finish_date is None

    def test_remove(self, today):
        tasks = parsed(today, "a rec:1w", "b")
        assert set_recurrence(tasks, None, "none") == [True, False]
        assert tasks[0].recurrence is None

    def test_invalid(self, today):
        with pytest.raises(InvalidExpression):
            set_recurrence(parsed(today, "a"), [0], "0d")


class TestSetPriority:
    def test_set(self, today):
        tasks = parsed(today, "a", "(C) b")
        assert set_priority(tasks, None, PriorityAction.SET, "c") == [True, False]
        assert tasks[0].priority == "C"

    def test_delete(self, today):
        tasks = parsed(today, "(A) a", "b")
        assert set_priority(tasks, None, PriorityAction.DELETE) == [True, False]
        assert tasks[0].priority is None

    def test_increase(self, today):
        tasks = parsed(today, "a", "(B) b", "(A) c")
        assert set_priority(tasks, None, PriorityAction.INCREASE) == [True, True, False]
        assert [t.priority for t in tasks] == ["Z", "A", "A"]

    def test_decrease(self, today):
        tasks = parsed(today, "(Z) a", "(B) b", "c")
        assert set_priority(tasks, None, PriorityAction.DECREASE) == [True, True, False]
        assert [t.priority for t in tasks] == [None, "C", None]

    @pytest.mark.parametrize("value", [None, "", "AB", "1"])
    def test_invalid_letter(self, today, value):
        with pytest.raises(InvalidExpression):
            set_priority(parsed(today, "a"), [0], PriorityAction.SET, value)
