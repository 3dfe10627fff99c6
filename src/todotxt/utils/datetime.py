"""Date utilities for todo.txt records.

todo.txt stores every date as a zero-padded ISO 8601 string (YYYY-MM-DD), so
string comparison and chronological comparison agree. Everything that needs
"today" takes a clock callable instead of reading the system time directly.
"""

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional

Clock = Callable[[], date]

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def system_clock() -> date:
    """Return today's local date."""
    return date.today()


def fixed_clock(day: date) -> Clock:
    """Return a clock that always reports ``day``.

    Args:
        day: The date the clock should report

    Returns:
        A zero-argument callable returning ``day``
    """
    def clock() -> date:
        return day
    return clock


def today_string(clock: Clock = system_clock) -> str:
    """Return the clock's current date as YYYY-MM-DD."""
    return clock().isoformat()


def is_iso_date_text(text: Any) -> bool:
    """Check whether ``text`` has the lexical shape of an ISO date.

    No calendar check is made: ``2023-13-99`` passes.
    """
    return isinstance(text, str) and ISO_DATE_PATTERN.fullmatch(text) is not None


def parse_iso_date(value: Any) -> Optional[date]:
    """Convert a stored date value to a calendar date.

    Args:
        value: A YYYY-MM-DD string, a date or a datetime

    Returns:
        The calendar date, or None if the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_iso_date_text(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def date_to_string(value: Any) -> Optional[str]:
    """Return the YYYY-MM-DD form of a stored date value, if it has one."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value
    return None


def add_days(day: date, days: int) -> date:
    """Add a number of days to a date."""
    return day + timedelta(days=days)


def add_months(day: date, months: int) -> date:
    """Add months to a date, clamping to the end of shorter months."""
    month = day.month - 1 + months
    year = day.year + month // 12
    month = month % 12 + 1
    max_day = monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, max_day))


def add_years(day: date, years: int) -> date:
    """Add years to a date; Feb 29 becomes Feb 28 in non-leap years."""
    return add_months(day, years * 12)
