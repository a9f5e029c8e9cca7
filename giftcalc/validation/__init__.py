"""Validation package."""

from giftcalc.validation.validator import (
    BudgetPeriodValidator,
    DateValidationError,
    parse_calendar_date,
    validate_date,
)

__all__ = [
    "BudgetPeriodValidator",
    "DateValidationError",
    "parse_calendar_date",
    "validate_date",
]
