"""Exceptions raised by the todotxt package."""

from typing import Any, Optional


class TodoTxtError(Exception):
    """Base class for all todotxt errors."""


class TaskParsingError(TodoTxtError):
    """Raised when a token sequence cannot be turned into a task.

    Attributes:
        message: Human readable description of the failure
        token_index: Index of the offending token, when known
        line_number: 1-based line of the document, set by TodoList.parse
    """

    def __init__(self, message: str, token_index: Optional[int] = None):
        self.message = message
        self.token_index = token_index
        self.line_number: Optional[int] = None
        super().__init__(message)

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        return self.message


class DuplicateKeyError(TaskParsingError):
    """A metadata key appeared twice under the "error" policy."""

    def __init__(self, key: str, token_index: Optional[int] = None):
        self.key = key
        super().__init__(f"Duplicate key '{key}' encountered", token_index)


class ValidationError(TaskParsingError):
    """A custom key handler rejected a value."""

    def __init__(self, key: str, value: Any, token_index: Optional[int] = None):
        self.key = key
        self.value = value
        super().__init__(
            f"Validation failed for key '{key}' with value '{value}'", token_index
        )


class NotFoundError(TodoTxtError, LookupError):
    """No task with the requested id exists in the list."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task with id {task_id} not found")


class ConfigError(TodoTxtError):
    """Configuration file could not be understood."""
