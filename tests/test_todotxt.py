"""Tests for the todo.txt line codec."""

from datetime import date

import pytest

from todokit.core.task import Period, Recurrence
from todokit.core.todotxt import format_task, parse_task


@pytest.fixture
def today():
    return date(2024, 1, 1)


class TestParse:
    def test_completed_line(self, today):
        task = parse_task(
            "x (C) 2018-10-05 2018-10-01 call to car service and schedule repair +car @repair",
            today,
        )
        assert task.finished
        assert task.priority == "C"
        assert task.finish_date == date(2018, 10, 5)
        assert task.create_date == date(2018, 10, 1)
        assert task.subject == "call to car service and schedule repair +car @repair"
        assert task.projects == ["car"]
        assert task.contexts == ["repair"]

    def test_open_line_with_due(self, today):
        task = parse_task("(B) 2018-10-15 repair family car +Car @repair due:2018-12-01", today)
        assert not task.finished
        assert task.priority == "B"
        assert task.create_date == date(2018, 10, 15)
        assert task.finish_date is None
        assert task.due_date == date(2018, 12, 1)
        assert task.tags == {"due": "2018-12-01"}

    def test_plain_line(self, today):
        task = parse_task("xmas vacations", today)
        assert not task.finished
        assert task.priority is None
        assert task.subject == "xmas vacations"

    def test_lowercase_priority_is_text(self, today):
        task = parse_task("(a) not a priority", today)
        assert task.priority is None
        assert task.subject == "(a) not a priority"

    def test_relative_dates_are_rewritten(self, today):
        task = parse_task("call bank due:tomorrow t:jun", today)
        assert task.due_date == date(2024, 1, 2)
        assert task.threshold_date == date(2024, 6, 1)
        assert task.subject == "call bank due:2024-01-02 t:2024-06-01"

    def test_unreadable_due_is_kept_as_text(self, today):
        task = parse_task("call bank due:someday", today)
        assert task.due_date is None
        assert task.tags["due"] == "someday"
        assert task.subject == "call bank due:someday"

    def test_recurrence(self, today):
        task = parse_task("water plants due:2024-01-03 rec:+2w", today)
        assert task.recurrence == Recurrence(2, Period.WEEK, strict=True)

    def test_links_are_not_tags(self, today):
        task = parse_task("read https://example.com/a", today)
        assert task.tags == {}

    def test_duplicates_listed_once(self, today):
        task = parse_task("a +p @c #h +p @c #h +q", today)
        assert task.projects == ["p", "q"]
        assert task.contexts == ["c"]
        assert task.hashtags == ["h"]

    def test_empty_line(self, today):
        assert parse_task("", today).is_empty


class TestFormat:
    @pytest.mark.parametrize(
        "line",
        [
            "x (C) 2018-10-05 2018-10-01 call to car service and schedule repair +car @repair",
            "(B) 2018-10-15 repair family car +Car @repair due:2018-12-01",
            "(A) Kid's art school lesson +Family @Kids due:2018-11-10 rec:1w",
        ],
    )
    def test_line_survives_parse(self, today, line):
        assert format_task(parse_task(line, today)) == line

    def test_finish_date_only_on_completed(self, today):
        task = parse_task("2024-01-01 write report", today)
        task.finish_date = date(2024, 1, 2)
        assert format_task(task) == "2024-01-01 write report"
