"""Task record model for todo.txt lines."""

import copy
import logging
import re
import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from .recurring import (
    RecurrencePattern,
    advance_date,
    decode_recurrence,
    encode_recurrence,
    to_pattern,
)
from .utils.datetime import (
    Clock,
    date_to_string,
    parse_iso_date,
    system_clock,
    today_string,
)

logger = logging.getLogger(__name__)

PRIORITY_PATTERN = re.compile(r"\([A-Z]\)")
DUE_KEY = "due"
RECURRENCE_KEY = "rec"


def new_task_id() -> str:
    """Generate a process-unique task id."""
    return uuid.uuid4().hex


def normalize_priority(text: str) -> Optional[str]:
    """Normalize priority input to the ``(X)`` form.

    ``(B)`` is returned as-is; otherwise the first ASCII letter of the input is
    upper-cased and wrapped, so ``"b"`` and ``"[b]"`` both give ``(B)``.

    Returns:
        The normalized priority, or None when the input contains no letter
    """
    if len(text) == 3 and PRIORITY_PATTERN.fullmatch(text):
        return text
    letters = re.sub(r"[^A-Za-z]", "", text).upper()
    if not letters:
        return None
    return f"({letters[0]})"


def format_tag(tag: str, prefix: str) -> str:
    """Prefix a tag with ``+`` or ``@`` unless it already has it."""
    return tag if tag.startswith(prefix) else f"{prefix}{tag}"


def _format_value(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(_format_value(item) for item in value)
    return date_to_string(value) or str(value)


@dataclass
class Task:
    """A single todo.txt task.

    ``projects`` and ``contexts`` hold prefixed tags (``+name``/``@name``) and
    never contain duplicates. ``metadata`` maps key names to values; a key
    merged from duplicates holds a list. ``completion_date`` is only kept while
    the task is completed.
    """

    completed: bool = False
    priority: Optional[str] = None
    completion_date: Optional[str] = None
    creation_date: Optional[str] = None
    description: str = ""
    projects: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_task_id, init=False, compare=False)

    def __post_init__(self):
        raw_priority, self.priority = self.priority, None
        if raw_priority is not None:
            self.set_priority(raw_priority)

        projects, self.projects = self.projects, []
        for project in projects:
            self.add_project(project)

        contexts, self.contexts = self.contexts, []
        for context in contexts:
            self.add_context(context)

        if not self.completed:
            self.completion_date = None

    @classmethod
    def create(
        cls,
        description: str = "",
        *,
        project: Optional[str] = None,
        context: Optional[str] = None,
        due: Optional[str] = None,
        **kwargs: Any,
    ) -> "Task":
        """Build a task from keyword arguments.

        Keywords naming a Task field are passed through; any other keyword is
        stored as metadata, so ``Task.create("Pay rent", t="2024-01-01")``
        sets ``metadata["t"]``.
        """
        field_names = {f.name for f in fields(cls) if f.init}
        task_fields = {k: v for k, v in kwargs.items() if k in field_names}
        extra = {k: v for k, v in kwargs.items() if k not in field_names}

        task = cls(description=description, **task_fields)
        if project:
            task.add_project(project)
        if context:
            task.add_context(context)
        if due:
            task.set_due_date(due)
        for key, value in extra.items():
            task.set_key_value(key, value)
        return task

    # Description and tags

    def set_description(self, description: str) -> None:
        self.description = description

    def add_project(self, project: str) -> None:
        """Add a project tag (with or without the leading +)."""
        project = format_tag(project, "+")
        if project not in self.projects:
            self.projects.append(project)

    def remove_project(self, project: str) -> None:
        project = format_tag(project, "+")
        self.projects = [p for p in self.projects if p != project]

    def add_context(self, context: str) -> None:
        """Add a context tag (with or without the leading @)."""
        context = format_tag(context, "@")
        if context not in self.contexts:
            self.contexts.append(context)

    def remove_context(self, context: str) -> None:
        context = format_tag(context, "@")
        self.contexts = [c for c in self.contexts if c != context]

    # Priority

    def set_priority(self, priority: Optional[str]) -> None:
        """Set or clear the priority.

        Input without any letter leaves the current priority untouched.
        """
        if priority is None:
            self.priority = None
            return
        normalized = normalize_priority(priority)
        if normalized:
            self.priority = normalized

    def increase_priority(self) -> None:
        """Raise priority one letter toward A; no priority becomes (Z)."""
        if not self.priority:
            self.set_priority("Z")
            return
        letter = self.priority[1]
        if letter == "A":
            return
        self.set_priority(chr(ord(letter) - 1))

    def decrease_priority(self) -> None:
        """Lower priority one letter toward Z; (Z) clears it."""
        if not self.priority:
            return
        letter = self.priority[1]
        if letter == "Z":
            self.set_priority(None)
            return
        self.set_priority(chr(ord(letter) + 1))

    # Completion

    def mark_completed(self, completion_date: Optional[str] = None,
                       clock: Clock = system_clock) -> None:
        """Mark the task as completed, dated today unless a date is given."""
        self.completed = True
        self.completion_date = completion_date or today_string(clock)

    def mark_incomplete(self) -> None:
        """Reopen the task and drop its completion date."""
        self.completed = False
        self.completion_date = None

    def toggle_completion(self, clock: Clock = system_clock) -> bool:
        """Flip completion state and return the new state."""
        if self.completed:
            self.mark_incomplete()
        else:
            self.mark_completed(clock=clock)
        return self.completed

    # Metadata

    def set_key_value(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_key_value(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def remove_key_value(self, key: str) -> None:
        self.metadata.pop(key, None)

    def set_due_date(self, due_date: str) -> None:
        self.metadata[DUE_KEY] = due_date

    def get_due_date(self) -> Any:
        return self.metadata.get(DUE_KEY)

    def _due_string(self) -> Optional[str]:
        due = self.get_due_date()
        if isinstance(due, list):
            return None
        return date_to_string(due)

    def days_until_due(self, clock: Clock = system_clock) -> Optional[int]:
        """Whole days from today until the due date.

        Positive values are in the future. Returns None without a due date or
        when the due value is not a calendar date.
        """
        due = parse_iso_date(self.get_due_date())
        if due is None:
            return None
        return (due - clock()).days

    def is_overdue(self, clock: Clock = system_clock) -> bool:
        """Check if the task is incomplete and past its due date."""
        due = self._due_string()
        return not self.completed and bool(due) and due < today_string(clock)

    def is_due_today(self, clock: Clock = system_clock) -> bool:
        return self._due_string() == today_string(clock)

    # Recurrence

    def set_recurrence(self, pattern: Union[RecurrencePattern, str]) -> None:
        """Store a recurrence as a compact ``rec`` code (``2w``, ``1m``)."""
        self.set_key_value(RECURRENCE_KEY, encode_recurrence(to_pattern(pattern)))

    def get_recurrence(self) -> Optional[RecurrencePattern]:
        return decode_recurrence(self.metadata.get(RECURRENCE_KEY))

    def generate_recurring_task(self) -> Optional["Task"]:
        """Create the next occurrence of a recurring task.

        The copy is incomplete and its due date is moved forward by the
        recurrence. Returns None unless the task has both a valid due date
        and a valid recurrence.
        """
        due = parse_iso_date(self.get_due_date())
        recurrence = self.get_recurrence()
        if due is None or recurrence is None:
            return None

        next_task = self.clone()
        next_task.mark_incomplete()
        next_task.set_due_date(advance_date(due, recurrence).isoformat())
        logger.debug("Generated recurrence of %s due %s", self.id, next_task.get_due_date())
        return next_task

    # Conversion

    def to_string(self) -> str:
        """Render the task as a todo.txt line.

        Order: ``x`` and completion date, creation date, priority (incomplete
        tasks only), description, tags, metadata. Tags already present
        anywhere in the description text are not repeated. Metadata follows in
        insertion order.

        A task with both a creation date and a priority renders as
        ``2024-01-01 (A) ...``; scanning that line again reads ``(A)`` as a
        description word, so such lines do not round-trip their priority.
        """
        parts: List[str] = []

        if self.completed:
            parts.append("x")
            if self.completion_date:
                parts.append(self.completion_date)

        if self.creation_date:
            parts.append(self.creation_date)

        # Completed tasks drop their priority
        if self.priority and not self.completed:
            parts.append(self.priority)

        if self.description:
            parts.append(self.description)

        parts.extend(p for p in self.projects if p not in self.description)
        parts.extend(c for c in self.contexts if c not in self.description)

        for key, value in self.metadata.items():
            parts.append(f"{key}:{_format_value(value)}")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def clone(self) -> "Task":
        """Deep copy of the task with a new id."""
        return Task(
            completed=self.completed,
            priority=self.priority,
            completion_date=self.completion_date,
            creation_date=self.creation_date,
            description=self.description,
            projects=list(self.projects),
            contexts=list(self.contexts),
            metadata=copy.deepcopy(self.metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the task to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "completed": self.completed,
            "priority": self.priority,
            "completion_date": self.completion_date,
            "creation_date": self.creation_date,
            "description": self.description,
            "projects": list(self.projects),
            "contexts": list(self.contexts),
            "metadata": {key: _plain_value(value) for key, value in self.metadata.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create a task from a dictionary; a fresh id is always assigned."""
        return cls(
            completed=data.get("completed", False),
            priority=data.get("priority"),
            completion_date=data.get("completion_date"),
            creation_date=data.get("creation_date"),
            description=data.get("description", ""),
            projects=list(data.get("projects", [])),
            contexts=list(data.get("contexts", [])),
            metadata=dict(data.get("metadata", {})),
        )


def _plain_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_plain_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return _format_value(value)
