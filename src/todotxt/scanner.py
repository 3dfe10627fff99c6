"""Scanner that splits a single todo.txt line into tokens.

Each line is scanned independently. Classification is positional for the
completion marker and the priority, and lexical for everything else. The
scanner is total: every non-empty part yields at least one token.
"""

import re
from typing import List, Optional

from .token import Token, TokenType
from .utils.datetime import ISO_DATE_PATTERN

PART_SEPARATOR = re.compile(r"[ \t]+")
PRIORITY_PATTERN = re.compile(r"\([A-Z]\)")
KEY_PATTERN = re.compile(r"[A-Za-z]+:")
KEY_VALUE_PATTERN = re.compile(r"([A-Za-z]+:)(.+)", re.DOTALL)


class Scanner:
    """Tokenizes todo.txt lines"""

    def scan(self, line: str) -> List[Token]:
        """Convert one line into an ordered token list."""
        parts = [part for part in PART_SEPARATOR.split(line) if part]
        tokens: List[Token] = []

        for index, part in enumerate(parts):
            # key:value pairs take precedence over whole-part classification
            key_value = KEY_VALUE_PATTERN.fullmatch(part)
            if key_value:
                key, value = key_value.groups()
                tokens.append(Token(TokenType.KEY, key))
                tokens.append(Token(self._classify(value, index, parts), value))
                continue

            tokens.append(Token(self._classify(part, index, parts), part))

        return tokens

    def _classify(self, text: str, index: int, parts: List[str]) -> TokenType:
        """Classify a chunk of text found at part ``index``."""
        if text == "x" and index == 0:
            return TokenType.COMPLETION

        if PRIORITY_PATTERN.fullmatch(text):
            if self._priority_allowed(index, parts):
                return TokenType.PRIORITY
            return TokenType.WORD

        token_type = self._lexical_type(text)
        return token_type or TokenType.WORD

    @staticmethod
    def _priority_allowed(index: int, parts: List[str]) -> bool:
        """Priority is only valid first, or second after a completion marker."""
        return index == 0 or (index == 1 and parts[0] == "x")

    @staticmethod
    def _lexical_type(text: str) -> Optional[TokenType]:
        if ISO_DATE_PATTERN.fullmatch(text):
            return TokenType.DATE
        if text.startswith("+") and len(text) > 1:
            return TokenType.PROJECT
        if text.startswith("@") and len(text) > 1:
            return TokenType.CONTEXT
        if KEY_PATTERN.fullmatch(text):
            return TokenType.KEY
        return None


_default_scanner = Scanner()


def scan(line: str) -> List[Token]:
    """Scan a line with a shared Scanner instance."""
    return _default_scanner.scan(line)
