"""
Recurrence support for todo.txt tasks.

A task's repeat interval is stored in its metadata under ``rec`` as a compact
code such as ``1d`` or ``2w``. This module converts between codes, patterns
and phrases, and moves dates forward by a pattern.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

from .utils.datetime import add_days, add_months, add_years


class RecurrenceType(Enum):
    """Types of recurrence patterns"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass
class RecurrencePattern:
    """Defines how often a task repeats"""
    type: RecurrenceType
    interval: int = 1  # Every N days/weeks/months/years

    def __post_init__(self):
        """Validate pattern after creation"""
        if not isinstance(self.type, RecurrenceType):
            self.type = RecurrenceType(self.type)
        if self.interval < 1:
            raise ValueError(f"Recurrence interval must be at least 1, got {self.interval}")


RECURRENCE_CODE = re.compile(r"^(\d+)([dwmy])$", re.IGNORECASE)

_CODE_LETTERS = {
    "d": RecurrenceType.DAILY,
    "w": RecurrenceType.WEEKLY,
    "m": RecurrenceType.MONTHLY,
    "y": RecurrenceType.YEARLY,
}


def encode_recurrence(pattern: RecurrencePattern) -> str:
    """Encode a pattern as ``<interval><first letter of type>``."""
    return f"{pattern.interval}{pattern.type.value[0]}"


def decode_recurrence(value: Any) -> Optional[RecurrencePattern]:
    """Decode a stored ``rec`` value; anything unrecognised yields None."""
    if not isinstance(value, str):
        return None
    match = RECURRENCE_CODE.fullmatch(value)
    if not match:
        return None
    interval = int(match.group(1))
    if interval < 1:
        return None
    return RecurrencePattern(type=_CODE_LETTERS[match.group(2).lower()], interval=interval)


def advance_date(day: date, pattern: RecurrencePattern) -> date:
    """Move ``day`` forward by one step of ``pattern``."""
    if pattern.type == RecurrenceType.DAILY:
        return add_days(day, pattern.interval)
    elif pattern.type == RecurrenceType.WEEKLY:
        return add_days(day, pattern.interval * 7)
    elif pattern.type == RecurrenceType.MONTHLY:
        return add_months(day, pattern.interval)
    return add_years(day, pattern.interval)


class RecurrenceParser:
    """Parses recurrence codes and simple English phrases"""

    PATTERNS = {
        r'^daily$': (RecurrenceType.DAILY, {'interval': 1}),
        r'^every day$': (RecurrenceType.DAILY, {'interval': 1}),
        r'^every (\d+) days?$': (RecurrenceType.DAILY, lambda m: {'interval': int(m.group(1))}),

        r'^weekly$': (RecurrenceType.WEEKLY, {'interval': 1}),
        r'^every week$': (RecurrenceType.WEEKLY, {'interval': 1}),
        r'^every (\d+) weeks?$': (RecurrenceType.WEEKLY, lambda m: {'interval': int(m.group(1))}),

        r'^monthly$': (RecurrenceType.MONTHLY, {'interval': 1}),
        r'^every month$': (RecurrenceType.MONTHLY, {'interval': 1}),
        r'^every (\d+) months?$': (RecurrenceType.MONTHLY, lambda m: {'interval': int(m.group(1))}),

        r'^yearly$': (RecurrenceType.YEARLY, {'interval': 1}),
        r'^annually$': (RecurrenceType.YEARLY, {'interval': 1}),
        r'^every year$': (RecurrenceType.YEARLY, {'interval': 1}),
        r'^every (\d+) years?$': (RecurrenceType.YEARLY, lambda m: {'interval': int(m.group(1))}),
    }

    @classmethod
    def parse(cls, pattern_str: str) -> Optional[RecurrencePattern]:
        """Parse a compact code or a phrase such as "every 2 weeks"."""
        pattern_str = " ".join(pattern_str.lower().split())

        decoded = decode_recurrence(pattern_str)
        if decoded:
            return decoded

        for regex, (rec_type, params) in cls.PATTERNS.items():
            match = re.match(regex, pattern_str)
            if match:
                if callable(params):
                    params = params(match)
                if params['interval'] < 1:
                    return None
                return RecurrencePattern(type=rec_type, **params)

        return None


def to_pattern(value: Union[RecurrencePattern, str]) -> RecurrencePattern:
    """Coerce a pattern or phrase into a RecurrencePattern.

    Raises:
        ValueError: If ``value`` is a string that cannot be parsed
    """
    if isinstance(value, RecurrencePattern):
        return value
    pattern = RecurrenceParser.parse(value)
    if pattern is None:
        raise ValueError(f"Unrecognised recurrence: {value!r}")
    return pattern
