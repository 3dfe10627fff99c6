"""Tests for date utilities."""

from datetime import date, datetime

from todotxt.utils.datetime import (
    add_months,
    add_years,
    date_to_string,
    fixed_clock,
    is_iso_date_text,
    parse_iso_date,
    system_clock,
    today_string,
)


class TestClock:
    """Test clock helpers."""

    def test_fixed_clock(self):
        """Test a fixed clock always returns its date."""
        clock = fixed_clock(date(2020, 1, 2))
        assert clock() == date(2020, 1, 2)
        assert today_string(clock) == "2020-01-02"

    def test_system_clock(self):
        """Test the system clock returns today."""
        assert system_clock() == date.today()


class TestDateParsing:
    """Test lexical and calendar date handling."""

    def test_is_iso_date_text(self):
        """Test ISO date shape detection."""
        assert is_iso_date_text("2023-04-01")
        assert is_iso_date_text("2023-13-99")
        assert not is_iso_date_text("2023-4-01")
        assert not is_iso_date_text("2023-04-01\n")
        assert not is_iso_date_text(None)

    def test_parse_iso_date(self):
        """Test parsing dates from strings and date objects."""
        assert parse_iso_date("2023-04-01") == date(2023, 4, 1)
        assert parse_iso_date(date(2023, 4, 1)) == date(2023, 4, 1)
        assert parse_iso_date(datetime(2023, 4, 1, 12, 30)) == date(2023, 4, 1)

    def test_parse_iso_date_never_raises(self):
        """Test invalid input gives None instead of raising."""
        assert parse_iso_date("2023-02-30") is None
        assert parse_iso_date("tomorrow") is None
        assert parse_iso_date(42) is None

    def test_date_to_string(self):
        """Test formatting dates as ISO strings."""
        assert date_to_string(date(2023, 4, 1)) == "2023-04-01"
        assert date_to_string(datetime(2023, 4, 1, 8)) == "2023-04-01"
        assert date_to_string("anything") == "anything"
        assert date_to_string(3) is None


class TestDateArithmetic:
    """Test month and year arithmetic."""

    def test_add_months_across_year(self):
        """Test month arithmetic crossing a year boundary."""
        assert add_months(date(2023, 12, 15), 1) == date(2024, 1, 15)
        assert add_months(date(2023, 10, 31), 4) == date(2024, 2, 29)

    def test_add_years(self):
        """Test year arithmetic including leap days."""
        assert add_years(date(2023, 3, 1), 2) == date(2025, 3, 1)
