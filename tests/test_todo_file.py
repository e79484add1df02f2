"""Tests for the todo.txt file store."""

from datetime import date

import pytest

from todokit.adapters.todo_file import TodoFileStore
from todokit.core.todotxt import parse_task


@pytest.fixture
def today():
    return date(2024, 1, 1)


@pytest.fixture
def store(tmp_path, today):
    return TodoFileStore(tmp_path / "todo.txt", today=today)


class TestLoad:
    def test_missing_file_is_empty(self, store):
        assert store.load() == []

    def test_blank_lines_skipped(self, store):
        store.path.write_text("first\n\n   \n(A) second due:tomorrow\n")
        tasks = store.load()
        assert [t.subject for t in tasks] == ["first", "second due:2024-01-02"]
        assert tasks[1].priority == "A"


class TestSave:
    def test_round_trip(self, store, today):
        tasks = [parse_task("x 2024-01-01 2023-12-01 done thing", today), parse_task("open +p", today)]
        store.save(tasks)
        assert store.path.read_text() == "x 2024-01-01 2023-12-01 done thing\nopen +p\n"
        assert store.load() == tasks

    def test_no_temp_file_left(self, store, today):
        store.save([parse_task("a", today)])
        assert [p.name for p in store.path.parent.iterdir()] == ["todo.txt"]

    def test_creates_parent_directory(self, tmp_path, today):
        store = TodoFileStore(tmp_path / "nested" / "todo.txt", today=today)
        store.save([parse_task("a", today)])
        assert store.path.read_text() == "a\n"


class TestArchive:
    def test_done_file_next_to_todo_file(self, store):
        assert store.done_path == store.path.with_name("done.txt")

    def test_appends(self, store, today):
        store.archive([parse_task("x one", today)])
        store.archive([parse_task("x two", today)])
        assert store.done_path.read_text() == "x one\nx two\n"

    def test_custom_done_path(self, tmp_path, today):
        store = TodoFileStore(tmp_path / "todo.txt", tmp_path / "archive" / "old.txt", today)
        store.archive([parse_task("x one", today)])
        assert (tmp_path / "archive" / "old.txt").read_text() == "x one\n"

    def test_nothing_to_archive(self, store):
        store.archive([])
        assert not store.done_path.exists()
