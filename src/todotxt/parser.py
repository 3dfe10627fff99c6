"""Grammar-driven parser turning a token sequence into a Task.

Grammar of one line (every element optional, order fixed)::

    [x] [(P)] [date] [date if completed] description-tokens...

Inside the description region a KEY token followed by any token becomes a
metadata entry instead of description text.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from .errors import DuplicateKeyError, ValidationError
from .scanner import scan
from .task import Task
from .token import Token, TokenType

logger = logging.getLogger(__name__)


class DuplicateKeyBehavior(Enum):
    """What to do when a metadata key occurs twice on one line"""
    ERROR = "error"          # raise DuplicateKeyError
    OVERWRITE = "overwrite"  # later value wins
    MERGE = "merge"          # collect values in a list


@dataclass
class KeyHandler:
    """Validation and transformation hooks for one metadata key"""
    key: str
    validate: Optional[Callable[[str], bool]] = None
    transform: Optional[Callable[[str], Any]] = None


@dataclass
class ParserOptions:
    """Configuration options for the parser"""
    duplicate_key_behavior: Union[DuplicateKeyBehavior, str] = DuplicateKeyBehavior.OVERWRITE
    custom_key_handlers: List[KeyHandler] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.duplicate_key_behavior, DuplicateKeyBehavior):
            self.duplicate_key_behavior = DuplicateKeyBehavior(self.duplicate_key_behavior)

    def handler_for(self, key: str) -> Optional[KeyHandler]:
        """Return the first handler registered for ``key``."""
        for handler in self.custom_key_handlers:
            if handler.key == key:
                return handler
        return None


class Parser:
    """Builds a Task from the tokens of a single line"""

    def __init__(self, tokens: List[Token], options: Optional[ParserOptions] = None):
        self.tokens = tokens
        self.options = options or ParserOptions()
        self.position = 0

    def parse_task(self) -> Task:
        """Parse the tokens into a Task.

        Raises:
            DuplicateKeyError: A key repeats under the "error" policy
            ValidationError: A custom key handler rejected a value, or its
                transform raised ValueError
        """
        self.position = 0
        task = Task()

        if self._match(TokenType.COMPLETION):
            task.completed = True
            self._advance()

        if self._match(TokenType.PRIORITY):
            task.set_priority(self._advance().value)

        if self._match(TokenType.DATE):
            if task.completed:
                task.completion_date = self._advance().value
            else:
                task.creation_date = self._advance().value

        # Completed tasks carry the creation date after the completion date
        if task.completed and self._match(TokenType.DATE):
            task.creation_date = self._advance().value

        description: List[str] = []
        while not self._at_end():
            if self._match(TokenType.KEY) and not self._at_end(1):
                self._parse_key_value(task)
                continue

            token = self._advance()
            description.append(token.value)
            if token.type == TokenType.PROJECT:
                task.add_project(token.value)
            elif token.type == TokenType.CONTEXT:
                task.add_context(token.value)

        task.set_description(" ".join(description).strip())
        return task

    def _parse_key_value(self, task: Task) -> None:
        key_index = self.position
        key = self._advance().value[:-1]
        value_index = self.position
        value: Any = self._advance().value

        handler = self.options.handler_for(key)
        if handler:
            if handler.validate and not handler.validate(value):
                raise ValidationError(key, value, value_index)
            if handler.transform:
                try:
                    value = handler.transform(value)
                except ValueError as e:
                    raise ValidationError(key, value, value_index) from e

        if key not in task.metadata:
            task.set_key_value(key, value)
            return

        behavior = self.options.duplicate_key_behavior
        if behavior == DuplicateKeyBehavior.ERROR:
            raise DuplicateKeyError(key, key_index)
        elif behavior == DuplicateKeyBehavior.MERGE:
            existing = task.metadata[key]
            if isinstance(existing, list):
                task.set_key_value(key, existing + [value])
            else:
                task.set_key_value(key, [existing, value])
        else:
            task.set_key_value(key, value)
        logger.debug("Resolved duplicate key %r with %s policy", key, behavior.value)

    def _match(self, token_type: TokenType) -> bool:
        return not self._at_end() and self.tokens[self.position].type == token_type

    def _at_end(self, offset: int = 0) -> bool:
        return self.position + offset >= len(self.tokens)

    def _advance(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token


def parse_line(line: str, options: Optional[ParserOptions] = None) -> Task:
    """Scan and parse a single todo.txt line."""
    return Parser(scan(line), options).parse_task()
