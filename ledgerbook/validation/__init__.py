"""Validation helpers for query arguments."""

from ledgerbook.validation.year_month import (
    InvalidYearMonthError,
    is_valid_year_month,
    month_key_for,
    normalize_to_day,
    validate_year_month,
)

__all__ = [
    "InvalidYearMonthError",
    "is_valid_year_month",
    "month_key_for",
    "normalize_to_day",
    "validate_year_month",
]
