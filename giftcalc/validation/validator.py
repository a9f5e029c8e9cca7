"""
Budget Period Validation

IMPORTANT: Validation NEVER silently fixes input.
`2024-02-30` is rejected, not rolled over into March, and `2024-1-5` is
rejected rather than guessed at.

Checks, in order:
1. Both dates are YYYY-MM-DD and exist in the calendar
2. The period does not end before it starts (same-day periods are fine)
3. The period does not overlap any other stored budget
"""

import re
from datetime import date
from typing import Iterable, Optional

from giftcalc.models.budget import Budget, ValidationIssue, ValidationResult

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class DateValidationError(ValueError):
    """A date string is malformed or not a real calendar day."""
    pass


def parse_calendar_date(text: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.
    
    Raises:
        DateValidationError: With a user-facing message
    """
    if not isinstance(text, str) or not DATE_PATTERN.match(text.strip()):
        raise DateValidationError("Date must be in YYYY-MM-DD format")
    year, month, day = (int(part) for part in text.strip().split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        raise DateValidationError("Invalid date") from None


def validate_date(text: str) -> ValidationResult:
    """Validate a single date string."""
    try:
        parse_calendar_date(text)
    except DateValidationError as e:
        return ValidationResult(issues=[ValidationIssue(
            field="date",
            issue_type="invalid_date",
            message=str(e),
        )])
    return ValidationResult()


class BudgetPeriodValidator:
    """
    Validates a candidate budget period against the stored budgets.
    
    `exclude_id` skips the budget being edited so it does not collide
    with its own old period.
    """
    
    def validate(
        self,
        from_text: str,
        to_text: str,
        existing: Iterable[Budget],
        exclude_id: Optional[int] = None,
    ) -> tuple[ValidationResult, Optional[date], Optional[date]]:
        """
        Returns: (result, from_date, to_date)
        
        The dates are None unless the result is valid.
        """
        issues = []
        
        try:
            from_date = parse_calendar_date(from_text)
        except DateValidationError as e:
            issues.append(ValidationIssue(
                field="from_date",
                issue_type="invalid_date",
                message=f"From date error: {e}",
            ))
            return ValidationResult(issues=issues), None, None
        
        try:
            to_date = parse_calendar_date(to_text)
        except DateValidationError as e:
            issues.append(ValidationIssue(
                field="to_date",
                issue_type="invalid_date",
                message=f"To date error: {e}",
            ))
            return ValidationResult(issues=issues), None, None
        
        if from_date > to_date:
            issues.append(ValidationIssue(
                field="period",
                issue_type="inverted_range",
                message="From date must be before or equal to to date",
            ))
            return ValidationResult(issues=issues), None, None
        
        for budget in existing:
            if exclude_id is not None and budget.id == exclude_id:
                continue
            if budget.overlaps(from_date, to_date):
                issues.append(ValidationIssue(
                    field="period",
                    issue_type="overlap",
                    message=(
                        "Budget period overlaps with existing budget: "
                        f'"{budget.description or "Unnamed"}" '
                        f"({budget.from_date.isoformat()} to {budget.to_date.isoformat()})"
                    ),
                ))
                return ValidationResult(issues=issues), None, None
        
        return ValidationResult(issues=issues), from_date, to_date
