"""
Calendar helpers for month-keyed queries.

Month keys are plain "YYYY-MM" strings. They are derived from entry
timestamps and accepted from callers as query arguments; the latter must
be validated before they reach the ledger's cache, so a typo can never
create a phantom cache slot.
"""

import re
from datetime import date, datetime
from typing import Union

YEAR_MONTH_PATTERN = re.compile(r"([0-9]{4})-(0[1-9]|1[0-2])")

DEFAULT_MIN_YEAR = 1900
DEFAULT_MAX_YEAR = 2100


class InvalidYearMonthError(ValueError):
    """A month key argument is malformed or outside the accepted year range."""

    def __init__(self, value: object, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid year-month {value!r}: {reason}")


def validate_year_month(
    value: str,
    min_year: int = DEFAULT_MIN_YEAR,
    max_year: int = DEFAULT_MAX_YEAR,
) -> str:
    """
    Check that value is a "YYYY-MM" key with month 01-12 and a year in range.

    Returns the value unchanged so it can be used inline.

    Raises:
        InvalidYearMonthError: If the shape, month or year is wrong
    """
    if not isinstance(value, str):
        raise InvalidYearMonthError(value, "expected a string in YYYY-MM format")

    # fullmatch: "$" alone would accept a trailing newline.
    match = YEAR_MONTH_PATTERN.fullmatch(value)
    if match is None:
        raise InvalidYearMonthError(value, "expected YYYY-MM with month 01-12")

    year = int(match.group(1))
    if year < min_year or year > max_year:
        raise InvalidYearMonthError(
            value, f"year must be between {min_year} and {max_year}"
        )

    return value


def is_valid_year_month(
    value: str,
    min_year: int = DEFAULT_MIN_YEAR,
    max_year: int = DEFAULT_MAX_YEAR,
) -> bool:
    try:
        validate_year_month(value, min_year, max_year)
    except InvalidYearMonthError:
        return False
    return True


def month_key_for(timestamp: Union[date, datetime]) -> str:
    """Month key ("YYYY-MM") of a date or datetime."""
    return f"{timestamp.year:04d}-{timestamp.month:02d}"


def normalize_to_day(value: Union[date, datetime]) -> date:
    """Drop the time of day so comparisons happen at calendar-day granularity."""
    if isinstance(value, datetime):
        return value.date()
    return value
