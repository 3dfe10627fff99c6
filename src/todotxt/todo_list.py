"""Collection of todo.txt tasks with querying, filtering and sorting."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Union

from .errors import NotFoundError, TaskParsingError
from .parser import Parser, ParserOptions
from .scanner import Scanner
from .task import Task, format_tag, normalize_priority
from .utils.datetime import Clock, add_days, date_to_string, system_clock

logger = logging.getLogger(__name__)

# Only CR, LF and CRLF end a line; other Unicode breaks stay in the text
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class SortKey(Enum):
    """Fields a TodoList can be sorted by"""
    PRIORITY = "priority"
    DUE = "due"
    CREATION = "creation"
    COMPLETION = "completion"


@dataclass
class FilterCriteria:
    """Filter criteria for TodoList.filter.

    Criteria are combined with AND; a task matches ``projects`` or
    ``contexts`` when it has any one of the listed tags. Due bounds are
    inclusive and exclude tasks without a due date.
    """
    completed: Optional[bool] = None
    priority: Optional[str] = None
    projects: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    due_after: Optional[str] = None
    due_before: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.projects, str):
            self.projects = [self.projects]
        self.projects = [format_tag(p, "+") for p in self.projects]
        if isinstance(self.contexts, str):
            self.contexts = [self.contexts]
        self.contexts = [format_tag(c, "@") for c in self.contexts]
        if self.priority is not None:
            # Letterless input is kept as-is and so matches no task
            self.priority = normalize_priority(self.priority) or self.priority

    def matches(self, task: Task) -> bool:
        if self.completed is not None and task.completed != self.completed:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.projects and not any(p in task.projects for p in self.projects):
            return False
        if self.contexts and not any(c in task.contexts for c in self.contexts):
            return False

        if self.due_after or self.due_before:
            due = _due_text(task)
            if not due:
                return False
            if self.due_after and due < self.due_after:
                return False
            if self.due_before and due > self.due_before:
                return False

        return True


class TodoList:
    """An ordered collection of tasks parsed from a todo.txt document.

    Line order is insertion order. Tasks handed out by lookups belong to the
    list; mutate them through ``edit_task`` or by holding on to them only
    until the next change to the list.
    """

    def __init__(self, text: Optional[str] = None, options: Optional[ParserOptions] = None):
        self.tasks: List[Task] = []
        self._scanner = Scanner()
        if text:
            self.parse(text, options)

    # Loading

    def parse(self, text: str, options: Optional[ParserOptions] = None) -> None:
        """Replace the list with the tasks of a multi-line document.

        Blank lines are skipped. If any line fails to parse the error is
        re-raised with its ``line_number`` set and the list keeps its
        previous contents.
        """
        tasks = []
        for line_number, line in enumerate(LINE_BREAK.split(text), start=1):
            if not line.strip():
                continue
            try:
                tasks.append(self._parse_line(line, options))
            except TaskParsingError as e:
                e.line_number = line_number
                raise
        self.tasks = tasks
        logger.debug("Parsed %d tasks", len(tasks))

    def load_tasks(self, tasks: Iterable[Task]) -> None:
        """Replace the list with pre-built tasks."""
        self.tasks = list(tasks)

    def _parse_line(self, line: str, options: Optional[ParserOptions]) -> Task:
        return Parser(self._scanner.scan(line), options).parse_task()

    # Mutation

    def add_line(self, line: str, options: Optional[ParserOptions] = None) -> Task:
        """Parse one line and append the resulting task."""
        task = self._parse_line(line, options)
        self.tasks.append(task)
        return task

    def add_task(self, task: Task) -> Task:
        """Append a pre-built task."""
        self.tasks.append(task)
        return task

    def edit_task(self, task_id: str, updater: Callable[[Task], Any]) -> Task:
        """Apply ``updater`` to the task with ``task_id`` in place.

        Raises:
            NotFoundError: If no task has that id
        """
        task = self.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        updater(task)
        return task

    def replace_task(self, task: Task) -> None:
        """Swap in ``task`` for the stored task with the same id.

        Raises:
            NotFoundError: If no task has that id
        """
        for index, existing in enumerate(self.tasks):
            if existing.id == task.id:
                self.tasks[index] = task
                return
        raise NotFoundError(task.id)

    def delete_task(self, task_id: str) -> bool:
        """Remove the first task with ``task_id``; returns whether one was found."""
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                del self.tasks[index]
                return True
        return False

    def remove_task(self, task: Task) -> bool:
        return self.delete_task(task.id)

    # Lookup

    def get_tasks(self) -> List[Task]:
        return list(self.tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((task for task in self.tasks if task.id == task_id), None)

    def get_task_by_line_number(self, line_number: int) -> Optional[Task]:
        """Return the task at a zero-based position, or None if out of range."""
        if 0 <= line_number < len(self.tasks):
            return self.tasks[line_number]
        return None

    def get_tasks_by_property(self, name: str, value: Any) -> List[Task]:
        return [task for task in self.tasks if getattr(task, name, None) == value]

    def get_tasks_by_key_value(self, key: str, value: Any) -> List[Task]:
        """Tasks whose metadata ``key`` equals ``value`` or, for lists, contains it."""
        result = []
        for task in self.tasks:
            stored = task.metadata.get(key)
            if isinstance(stored, list):
                if value in stored:
                    result.append(task)
            elif key in task.metadata and stored == value:
                result.append(task)
        return result

    def get_tasks_by_project(self, project: str) -> List[Task]:
        project = format_tag(project, "+")
        return [task for task in self.tasks if project in task.projects]

    def get_tasks_by_context(self, context: str) -> List[Task]:
        context = format_tag(context, "@")
        return [task for task in self.tasks if context in task.contexts]

    def get_completed_tasks(self) -> List[Task]:
        return [task for task in self.tasks if task.completed]

    def get_incomplete_tasks(self) -> List[Task]:
        return [task for task in self.tasks if not task.completed]

    # Derived queries

    def get_projects(self) -> List[str]:
        return sorted({project for task in self.tasks for project in task.projects})

    def get_contexts(self) -> List[str]:
        return sorted({context for task in self.tasks for context in task.contexts})

    def get_key_names(self) -> List[str]:
        return sorted({key for task in self.tasks for key in task.metadata})

    def get_overdue_tasks(self, clock: Clock = system_clock) -> List[Task]:
        return [task for task in self.tasks if task.is_overdue(clock)]

    def get_due_today_tasks(self, clock: Clock = system_clock) -> List[Task]:
        return [task for task in self.tasks if task.is_due_today(clock)]

    def get_due_in_next_n_days_tasks(self, n: int, clock: Clock = system_clock) -> List[Task]:
        """Incomplete tasks due on or before today plus ``n`` days."""
        horizon = add_days(clock(), n).isoformat()
        result = []
        for task in self.tasks:
            due = _due_text(task)
            if not task.completed and due and due <= horizon:
                result.append(task)
        return result

    def filter(self, criteria: Optional[FilterCriteria] = None, **kwargs: Any) -> List[Task]:
        """Return tasks matching ``criteria`` or the equivalent keyword arguments.

        Example:
            todo_list.filter(completed=False, projects=["+Family"], contexts="@phone")
        """
        if criteria is None:
            criteria = FilterCriteria(**kwargs)
        return [task for task in self.tasks if criteria.matches(task)]

    def sort_by(self, criterion: Union[SortKey, str]) -> None:
        """Stable sort by a field; tasks missing the field come first."""
        criterion = SortKey(criterion)
        key_funcs = {
            SortKey.PRIORITY: lambda t: t.priority or "",
            SortKey.DUE: lambda t: _sortable(t.get_due_date()),
            SortKey.CREATION: lambda t: t.creation_date or "",
            SortKey.COMPLETION: lambda t: t.completion_date or "",
        }
        self.tasks.sort(key=key_funcs[criterion])

    # Rendering

    def to_string(self) -> str:
        """Render the list as a todo.txt document, one task per line."""
        return "\n".join(task.to_string() for task in self.tasks)

    def __str__(self) -> str:
        return self.to_string()

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __contains__(self, task: object) -> bool:
        return isinstance(task, Task) and self.get_task(task.id) is not None


def _due_text(task: Task) -> Optional[str]:
    due = task.get_due_date()
    if isinstance(due, list):
        return None
    return date_to_string(due)


def _sortable(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(_sortable(item) for item in value)
    return str(value)
