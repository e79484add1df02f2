"""todokit CLI - filter, sort and complete todo.txt tasks."""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime

import click

from .adapters.todo_file import TodoFileStore
from .config import Config, load_config
from .core import completion, edit
from .core.errors import TodoError
from .core.filtering import (
    DateRule,
    ItemRange,
    ListRule,
    PriorityRule,
    RuleSet,
    TextRule,
    TodoStatus,
    filter_tasks,
)
from .core.sorting import sort_tasks
from .core.task import Task
from .core.timer import is_timer_on, spent_time
from .core.todotxt import format_task


@dataclass
class AppContext:
    config: Config
    store: TodoFileStore


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _select(tasks: list[Task], ids: str, today: date) -> list[int]:
    """Positions named by an id expression (`3`, `2-5`, `1,4`), in list order."""
    rules = RuleSet(id_range=ItemRange.parse(ids), status=TodoStatus.ALL, include_empty=True)
    return filter_tasks(tasks, rules, today)


def _report(action: str, changed: list[bool]) -> None:
    count = sum(changed)
    click.echo(f"{action} {count} task{'s' if count != 1 else ''}.")


@click.group()
@click.version_option()
@click.option("--file", "todo_file", type=click.Path(dir_okay=False), help="todo.txt file to use")
@click.option("--verbose", is_flag=True, help="Log debug output")
@click.pass_context
def main(ctx, todo_file: str | None, verbose: bool):
    """todokit - todo.txt task lists."""
    if verbose:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config()
    path = todo_file or config.todo_file
    store = TodoFileStore(path, config.done_file or None)
    ctx.obj = AppContext(config=config, store=store)


@main.command("list")
@click.option("--all", "status", flag_value="all", help="Include completed tasks")
@click.option("--done", "status", flag_value="done", help="Only completed tasks")
@click.option("--range", "id_range", help="Ids: 3, 2-5 or 1,4,7")
@click.option("--project", "projects", multiple=True, help="Project pattern (*work, home*, none, any)")
@click.option("--no-project", "no_projects", multiple=True, help="Exclude a project pattern")
@click.option("--context", "contexts", multiple=True, help="Context pattern")
@click.option("--no-context", "no_contexts", multiple=True, help="Exclude a context pattern")
@click.option("--tag", "tags", multiple=True, help="Tag name or name:value pattern")
@click.option("--hashtag", "hashtags", multiple=True, help="Hashtag pattern")
@click.option("--search", help="Text to look for in subject, projects and contexts")
@click.option("--regex", is_flag=True, help="Treat --search as a regular expression")
@click.option("--pri", help="Priority: any, none, b, b+ or b-")
@click.option("--due", help="Due range: any, none, low..high")
@click.option("--threshold", help="Threshold range: any, none, low..high")
@click.option("--created", help="Creation date range")
@click.option("--finished", help="Completion date range")
@click.option("--soon", is_flag=True, help="Due within the configured number of days")
@click.option("--overdue", is_flag=True, help="Due before today")
@click.option("--recurring/--no-recurring", default=None, help="Only recurring or only regular tasks")
@click.option("--active", is_flag=True, help="Only tasks with a running timer")
@click.option("--sort", "sort_fields", help="Sort fields, e.g. pri,due")
@click.option("--reverse", is_flag=True, help="Reverse the sorted list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_tasks(app: AppContext, **opts):
    """List tasks matching the given rules."""
    today = date.today()
    try:
        rules = _build_rules(app.config, opts)
        tasks = app.store.load()
        ids = filter_tasks(tasks, rules, today)
        sort_tasks(ids, tasks, opts["sort_fields"] or app.config.default_sort, opts["reverse"])
    except TodoError as e:
        _fail(e)

    if opts["as_json"]:
        now = datetime.now().astimezone()
        click.echo(
            json.dumps(
                [
                    {
                        "id": idx,
                        "subject": tasks[idx].subject,
                        "priority": tasks[idx].priority,
                        "finished": tasks[idx].finished,
                        "due_date": tasks[idx].due_date.isoformat() if tasks[idx].due_date else None,
                        "threshold_date": (
                            tasks[idx].threshold_date.isoformat() if tasks[idx].threshold_date else None
                        ),
                        "projects": tasks[idx].projects,
                        "contexts": tasks[idx].contexts,
                        "recurrence": str(tasks[idx].recurrence) if tasks[idx].recurrence else None,
                        "timer_on": is_timer_on(tasks[idx]),
                        "spent_seconds": int(spent_time(tasks[idx], now).total_seconds()),
                    }
                    for idx in ids
                ],
                indent=2,
            )
        )
        return

    if not ids:
        click.echo("No matching tasks.")
        return
    for idx in ids:
        click.echo(f"{idx:4} {format_task(tasks[idx])}")


def _build_rules(config: Config, opts: dict) -> RuleSet:
    rules = RuleSet(status=TodoStatus(opts["status"] or "active"))
    if opts["id_range"]:
        rules.id_range = ItemRange.parse(opts["id_range"])
    if opts["projects"] or opts["no_projects"]:
        rules.projects = ListRule(list(opts["projects"]), list(opts["no_projects"]))
    if opts["contexts"] or opts["no_contexts"]:
        rules.contexts = ListRule(list(opts["contexts"]), list(opts["no_contexts"]))
    if opts["tags"]:
        rules.tags = ListRule(list(opts["tags"]))
    if opts["hashtags"]:
        rules.hashtags = ListRule(list(opts["hashtags"]))
    if opts["search"]:
        rules.text = TextRule(opts["search"], regex=opts["regex"])
    if opts["pri"]:
        rules.priority = PriorityRule.parse(opts["pri"])
    if opts["soon"]:
        rules.due = DateRule.soon(config.soon_days)
    elif opts["overdue"]:
        rules.due = DateRule.overdue()
    elif opts["due"]:
        rules.due = DateRule.parse(opts["due"])
    if opts["threshold"]:
        rules.threshold = DateRule.parse(opts["threshold"])
    if opts["created"]:
        rules.created = DateRule.parse(opts["created"])
    if opts["finished"]:
        rules.finished = DateRule.parse(opts["finished"])
    rules.recurring = opts["recurring"]
    if opts["active"]:
        rules.timer_active = True
    return rules


@main.command()
@click.argument("text")
@click.pass_obj
def add(app: AppContext, text: str):
    """Add a task written in todo.txt format."""
    try:
        tasks = app.store.load()
        idx = completion.add(tasks, text, date.today(), app.config.auto_create_date)
    except TodoError as e:
        _fail(e)
    app.store.save(tasks)
    click.echo(f"Added task {idx}: {format_task(tasks[idx])}")


@main.command()
@click.argument("ids")
@click.pass_obj
def done(app: AppContext, ids: str):
    """Mark tasks completed; recurring tasks get a follow-up copy."""
    now = datetime.now().astimezone()
    try:
        tasks = app.store.load()
        positions = _select(tasks, ids, now.date())
    except TodoError as e:
        _fail(e)
    before = len(tasks)
    changed = completion.done(tasks, positions, app.config.completion, now)
    app.store.save(tasks)
    _report("Completed", changed)
    for idx in range(before, len(tasks)):
        click.echo(f"Next occurrence {idx}: {format_task(tasks[idx])}")


@main.command()
@click.argument("ids")
@click.pass_obj
def undone(app: AppContext, ids: str):
    """Remove the completion mark (recurring tasks stay completed)."""
    try:
        tasks = app.store.load()
        positions = _select(tasks, ids, date.today())
    except TodoError as e:
        _fail(e)
    changed = completion.undone(tasks, positions)
    app.store.save(tasks)
    _report("Reopened", changed)


@main.command()
@click.argument("ids")
@click.pass_obj
def start(app: AppContext, ids: str):
    """Start timers."""
    now = datetime.now().astimezone()
    try:
        tasks = app.store.load()
        positions = _select(tasks, ids, now.date())
    except TodoError as e:
        _fail(e)
    changed = completion.start(tasks, positions, now)
    app.store.save(tasks)
    _report("Started", changed)


@main.command()
@click.argument("ids")
@click.pass_obj
def stop(app: AppContext, ids: str):
    """Stop timers."""
    now = datetime.now().astimezone()
    try:
        tasks = app.store.load()
        positions = _select(tasks, ids, now.date())
    except TodoError as e:
        _fail(e)
    changed = completion.stop(tasks, positions, now)
    app.store.save(tasks)
    _report("Stopped", changed)


@main.command()
@click.argument("ids")
@click.argument("expr")
@click.option("--threshold", is_flag=True, help="Change the threshold date instead")
@click.option("--shift", is_flag=True, help="Move the current date by EXPR (e.g. +1w)")
@click.pass_obj
def due(app: AppContext, ids: str, expr: str, threshold: bool, shift: bool):
    """Set (or shift) due dates from a date expression; `none` removes them."""
    today = date.today()
    field = "threshold" if threshold else "due"
    try:
        tasks = app.store.load()
        positions = _select(tasks, ids, today)
        if shift:
            changed = edit.shift_date(tasks, positions, field, expr)
        else:
            changed = edit.set_date(tasks, positions, field, expr, today)
    except TodoError as e:
        _fail(e)
    app.store.save(tasks)
    _report("Updated", changed)


@main.command()
@click.pass_obj
def archive(app: AppContext):
    """Move completed tasks to the done file."""
    tasks = app.store.load()
    finished = [t for t in tasks if t.finished]
    if not finished:
        click.echo("Nothing to archive.")
        return
    app.store.archive(finished)
    app.store.save([t for t in tasks if not t.finished])
    count = len(finished)
    click.echo(f"Archived {count} task{'s' if count != 1 else ''} to {app.store.done_path}.")


if __name__ == "__main__":
    main()
