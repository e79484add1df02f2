"""Tests for task ordering."""

from datetime import date, datetime, timezone

import pytest

from todokit.core.completion import done
from todokit.core.sorting import parse_fields, sort_tasks
from todokit.core.todotxt import parse_task


@pytest.fixture
def today():
    return date(2024, 1, 1)


@pytest.fixture
def family_tasks(today):
    lines = [
        "call mother +family @parents",
        "x (C) 2018-10-05 2018-10-01 call to car service and schedule repair +car @repair",
        "(B) 2018-10-15 repair family car +Car @repair due:2018-12-01",
        "(A) Kid's art school lesson +Family @Kids due:2018-11-10 rec:1w",
        "take kid to hockey game +Family @kids due:2018-11-18",
        "xmas vacations +FamilyHoliday due:2018-12-24",
    ]
    return [parse_task(line, today) for line in lines]


def sorted_ids(tasks, fields, reverse=False, ids=None):
    ids = list(range(len(tasks))) if ids is None else list(ids)
    sort_tasks(ids, tasks, fields, reverse)
    return ids


class TestSingleField:
    def test_priority(self, family_tasks):
        assert sorted_ids(family_tasks, ["pri"]) == [3, 2, 1, 0, 4, 5]

    def test_priority_reversed(self, family_tasks):
        assert sorted_ids(family_tasks, ["pri"], reverse=True) == [5, 4, 0, 1, 2, 3]

    def test_due_missing_last(self, family_tasks):
        assert sorted_ids(family_tasks, ["due"]) == [3, 4, 2, 5, 0, 1]
        assert sorted_ids(family_tasks, ["due"], reverse=True) == [1, 0, 5, 2, 4, 3]

    def test_project(self, family_tasks):
        assert sorted_ids(family_tasks, ["proj"]) == [1, 2, 0, 3, 4, 5]

    def test_context_empty_last(self, family_tasks):
        assert sorted_ids(family_tasks, ["ctx"]) == [3, 4, 0, 1, 2, 5]

    def test_done(self, family_tasks):
        # every open task, recurring or not, comes before completed ones
        assert sorted_ids(family_tasks, ["done"]) == [0, 2, 3, 4, 5, 1]

    def test_done_open_recurring_keeps_its_place(self, today):
        tasks = [parse_task(s, today) for s in ("water plants due:2024-01-02 rec:1w", "plain open task")]
        assert sorted_ids(tasks, ["done"]) == [0, 1]

    def test_done_completed_recurring_after_its_follow_up(self, today):
        tasks = [parse_task(s, today) for s in ("water plants due:2024-01-02 rec:1w", "plain open task")]
        done(tasks, [0], now=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
        assert sorted_ids(tasks, ["done"]) == [1, 2, 0]

    def test_done_tiers(self, today):
        tasks = [
            parse_task(s, today)
            for s in ("x plain done", "x recurring done due:2024-01-01 rec:1w", "open")
        ]
        assert sorted_ids(tasks, ["done"]) == [2, 1, 0]

    def test_created(self, family_tasks):
        assert sorted_ids(family_tasks, ["created"]) == [1, 2, 0, 3, 4, 5]

    def test_completed_ignores_open_tasks(self, today):
        tasks = [
            parse_task("x 2024-01-05 2024-01-01 b", today),
            parse_task("x 2024-01-02 2024-01-01 a", today),
            parse_task("2024-01-01 open", today),
        ]
        tasks[2].finish_date = date(2023, 1, 1)
        assert sorted_ids(tasks, ["completed"]) == [1, 0, 2]

    def test_subject_is_case_sensitive(self, today):
        tasks = [parse_task(s, today) for s in ("b", "B", "a")]
        assert sorted_ids(tasks, ["subject"]) == [1, 2, 0]

    def test_shorter_name_list_first(self, today):
        tasks = [parse_task(s, today) for s in ("x +a +b", "y +a")]
        assert sorted_ids(tasks, ["project"]) == [1, 0]


class TestMultipleFields:
    def test_ties_broken_by_next_field(self, family_tasks):
        assert sorted_ids(family_tasks, "proj,pri") == [2, 1, 3, 0, 4, 5]

    def test_stable_for_equal_keys(self, family_tasks):
        # 0, 4 and 5 have no priority and keep their relative order
        assert sorted_ids(family_tasks, "pri", ids=[5, 0, 4]) == [5, 0, 4]

    def test_field_names_ignore_case(self, family_tasks):
        assert sorted_ids(family_tasks, ["Pri"]) == [3, 2, 1, 0, 4, 5]
        assert sorted_ids(family_tasks, [" PROJ ", "PRI"]) == [2, 1, 3, 0, 4, 5]

    def test_unknown_field_compares_equal(self, family_tasks):
        assert sorted_ids(family_tasks, ["colour"], ids=[4, 1, 3]) == [4, 1, 3]


class TestEdgeCases:
    def test_empty_fields_leave_ids_untouched(self, family_tasks):
        assert sorted_ids(family_tasks, "", reverse=True, ids=[2, 0, 1]) == [2, 0, 1]
        assert sorted_ids(family_tasks, [], ids=[2, 0, 1]) == [2, 0, 1]

    def test_out_of_range_ids_last(self, family_tasks):
        assert sorted_ids(family_tasks, ["pri"], ids=[10, 0, 3]) == [3, 0, 10]

    def test_subset(self, family_tasks):
        assert sorted_ids(family_tasks, ["pri"], ids=[4, 2]) == [2, 4]


def test_parse_fields():
    assert parse_fields("Pri,due:proj") == ["pri", "due", "proj"]
    assert parse_fields(" , ") == []
