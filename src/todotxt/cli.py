"""Command-line interface for todotxt.

Every command reads a todo.txt document (a path, or ``-`` for stdin) and
prints to stdout. Nothing is ever written back to the file.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import ConfigModel, get_config, load_config
from .errors import TodoTxtError
from .task import Task
from .todo_list import FilterCriteria, SortKey, TodoList
from .utils.datetime import Clock, fixed_clock, system_clock

logger = logging.getLogger(__name__)

SORT_CHOICES = [key.value for key in SortKey]


def get_console(config: ConfigModel) -> Console:
    """Get a console that reflects current configuration."""
    return Console(no_color=config.no_color, highlight=False)


def load_todo_list(ctx: click.Context, source) -> TodoList:
    """Parse the document behind ``source`` or exit with status 1."""
    config: ConfigModel = ctx.obj["config"]
    text = source.read()
    try:
        todo_list = TodoList(text, config.parser_options())
    except TodoTxtError as e:
        get_console(config).print(Text(f"Error: {e}", style="red"))
        sys.exit(1)
    logger.info("Loaded %d tasks from %s", len(todo_list), getattr(source, "name", "input"))
    return todo_list


def format_task_row(index: int, task: Task, clock: Clock) -> List[Text]:
    """Format a task as a table row."""
    due = task.get_due_date()
    if task.is_overdue(clock):
        due_style = "red"
    elif task.is_due_today(clock):
        due_style = "yellow"
    else:
        due_style = "blue"

    return [
        Text(str(index), style="dim"),
        Text("x" if task.completed else ""),
        Text(task.priority or "", style="bold"),
        Text(task.description, style="dim" if task.completed else ""),
        Text(str(due) if due is not None else "", style=due_style),
        Text(" ".join(task.projects), style="green"),
        Text(" ".join(task.contexts), style="cyan"),
    ]


def render_table(tasks: List[Task], clock: Clock, title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Done")
    table.add_column("Pri")
    table.add_column("Description")
    table.add_column("Due")
    table.add_column("Projects")
    table.add_column("Contexts")
    for index, task in enumerate(tasks, start=1):
        table.add_row(*format_task_row(index, task, clock))
    return table


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--today", help="Treat this date (YYYY-MM-DD) as today")
@click.pass_context
def main(ctx, config, verbose, today):
    """todotxt - inspect todo.txt files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)

    try:
        ctx.obj["config"] = load_config(Path(config)) if config else get_config()
    except TodoTxtError as e:
        raise click.ClickException(str(e))

    if today:
        try:
            ctx.obj["clock"] = fixed_clock(datetime.strptime(today, "%Y-%m-%d").date())
        except ValueError:
            raise click.BadParameter("Use YYYY-MM-DD", param_hint="--today")
    else:
        ctx.obj["clock"] = system_clock


@main.command("list")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--project", "-p", "projects", multiple=True, help="Project tag (can be used multiple times)")
@click.option("--context", "-c", "contexts", multiple=True, help="Context tag (can be used multiple times)")
@click.option("--priority", help="Priority letter")
@click.option("--status", type=click.Choice(["all", "pending", "done"]), help="Completion state to show")
@click.option("--due-after", help="Due on or after YYYY-MM-DD")
@click.option("--due-before", help="Due on or before YYYY-MM-DD")
@click.option("--sort", "sort_key", type=click.Choice(SORT_CHOICES), help="Sort field")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def list_tasks(ctx, source, projects, contexts, priority, status,
               due_after, due_before, sort_key, as_json):
    """List tasks, optionally filtered and sorted."""
    config: ConfigModel = ctx.obj["config"]
    todo_list = load_todo_list(ctx, source)

    sort_key = sort_key or config.default_sort
    if sort_key:
        todo_list.sort_by(sort_key)

    if status is None:
        status = "all" if config.show_completed else "pending"
    completed = {"all": None, "pending": False, "done": True}[status]

    tasks = todo_list.filter(FilterCriteria(
        completed=completed,
        priority=priority,
        projects=list(projects),
        contexts=list(contexts),
        due_after=due_after,
        due_before=due_before,
    ))

    if as_json:
        click.echo(json.dumps([task.to_dict() for task in tasks], indent=2))
        return

    console = get_console(config)
    if not tasks:
        console.print("No tasks found.", style="yellow")
        return
    console.print(render_table(tasks, ctx.obj["clock"], f"{len(tasks)} of {len(todo_list)} tasks"))


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def projects(ctx, source):
    """Show all project tags."""
    for project in load_todo_list(ctx, source).get_projects():
        click.echo(project)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def contexts(ctx, source):
    """Show all context tags."""
    for context in load_todo_list(ctx, source).get_contexts():
        click.echo(context)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def keys(ctx, source):
    """Show all metadata key names."""
    for key in load_todo_list(ctx, source).get_key_names():
        click.echo(key)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--mode", type=click.Choice(["overdue", "today", "soon"]), default="soon",
              help="overdue, due today, or due within --within days")
@click.option("--within", type=int, help="Days ahead for --mode soon")
@click.pass_context
def due(ctx, source, mode, within):
    """Show tasks by due date."""
    config: ConfigModel = ctx.obj["config"]
    clock: Clock = ctx.obj["clock"]
    todo_list = load_todo_list(ctx, source)

    if mode == "overdue":
        tasks = todo_list.get_overdue_tasks(clock)
    elif mode == "today":
        tasks = todo_list.get_due_today_tasks(clock)
    else:
        days = config.due_soon_days if within is None else within
        tasks = todo_list.get_due_in_next_n_days_tasks(days, clock)

    for task in tasks:
        click.echo(task.to_string())


@main.command("format")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--sort", "sort_key", type=click.Choice(SORT_CHOICES), help="Sort field")
@click.pass_context
def format_tasks(ctx, source, sort_key: Optional[str]):
    """Print the normalized todo.txt rendering of a file."""
    todo_list = load_todo_list(ctx, source)
    if sort_key:
        todo_list.sort_by(sort_key)
    text = todo_list.to_string()
    if text:
        click.echo(text)


@main.command("next")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def next_occurrences(ctx, source):
    """Print the next occurrence of every recurring task."""
    for task in load_todo_list(ctx, source):
        next_task = task.generate_recurring_task()
        if next_task is not None:
            click.echo(next_task.to_string())


if __name__ == "__main__":
    main()
