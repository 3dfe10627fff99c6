"""todotxt - parse, query and render todo.txt task lists."""

__version__ = "0.1.0"

from .errors import (
    TodoTxtError,
    TaskParsingError,
    DuplicateKeyError,
    ValidationError,
    NotFoundError,
    ConfigError,
)
from .token import Token, TokenType
from .scanner import Scanner, scan
from .task import Task, normalize_priority
from .parser import (
    Parser,
    ParserOptions,
    KeyHandler,
    DuplicateKeyBehavior,
    parse_line,
)
from .recurring import RecurrencePattern, RecurrenceType, RecurrenceParser
from .todo_list import TodoList, FilterCriteria, SortKey

__all__ = [
    "TodoTxtError",
    "TaskParsingError",
    "DuplicateKeyError",
    "ValidationError",
    "NotFoundError",
    "ConfigError",
    "Token",
    "TokenType",
    "Scanner",
    "scan",
    "Task",
    "normalize_priority",
    "Parser",
    "ParserOptions",
    "KeyHandler",
    "DuplicateKeyBehavior",
    "parse_line",
    "RecurrencePattern",
    "RecurrenceType",
    "RecurrenceParser",
    "TodoList",
    "FilterCriteria",
    "SortKey",
    "__version__",
]
