"""Token types produced by the todo.txt scanner."""

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Lexical classes of a todo.txt line"""
    COMPLETION = "COMPLETION"  # x
    PRIORITY = "PRIORITY"      # (A) .. (Z)
    DATE = "DATE"              # YYYY-MM-DD
    PROJECT = "PROJECT"        # +project
    CONTEXT = "CONTEXT"        # @context
    KEY = "KEY"                # due:
    WORD = "WORD"              # anything else


@dataclass(frozen=True)
class Token:
    """A token in a scanned line"""
    type: TokenType
    value: str

    def __str__(self) -> str:
        return self.value
