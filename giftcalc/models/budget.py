"""
Budget Models

Budgets are persisted as camelCase JSON to stay readable next to the
other files in the config directory:

    {"budgets": [{"id": 1, "totalAmount": "5000", "fromDate": "2024-12-01",
                  "toDate": "2024-12-31", "description": "Christmas",
                  "createdAt": "..."}],
     "nextId": 2}
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


class BudgetStatus(str, Enum):
    """Where a budget sits relative to today."""
    ACTIVE = "ACTIVE"
    FUTURE = "FUTURE"
    EXPIRED = "EXPIRED"


class Budget(BaseModel):
    """
    A spending allowance bound to a closed date interval.
    
    CRITICAL: Intervals of two stored budgets never overlap.
    The model only checks its own dates; overlap is enforced by the store.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
    
    id: int = Field(
        ...,
        ge=1,
        description="Monotonically assigned identifier"
    )
    total_amount: Decimal = Field(
        ...,
        gt=0,
        description="Allowance for the whole period"
    )
    from_date: date = Field(
        ...,
        description="First day of the period (inclusive)"
    )
    to_date: date = Field(
        ...,
        description="Last day of the period (inclusive)"
    )
    description: str = Field(
        default="",
        max_length=200,
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the budget was added"
    )
    
    @model_validator(mode='after')
    def validate_period(self) -> 'Budget':
        """A period cannot end before it starts."""
        if self.from_date > self.to_date:
            raise ValueError("From date must be before or equal to to date")
        if not self.description:
            self.description = f"Budget {self.id}"
        return self
    
    def overlaps(self, from_date: date, to_date: date) -> bool:
        """Closed-interval overlap; touching boundaries count."""
        return from_date <= self.to_date and to_date >= self.from_date
    
    def status_on(self, today: date) -> BudgetStatus:
        if today > self.to_date:
            return BudgetStatus.EXPIRED
        if today < self.from_date:
            return BudgetStatus.FUTURE
        return BudgetStatus.ACTIVE
    
    @property
    def total_days(self) -> int:
        """Inclusive number of days in the period."""
        return (self.to_date - self.from_date).days + 1


class BudgetBook(BaseModel):
    """Snapshot of the whole budget store."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    budgets: list[Budget] = Field(default_factory=list)
    next_id: int = Field(default=1, ge=1)
    
    def find(self, budget_id: int) -> Optional[Budget]:
        for budget in self.budgets:
            if budget.id == budget_id:
                return budget
        return None


class BudgetUpdate(BaseModel):
    """Fields an edit may change; None means "leave as is"."""
    model_config = ConfigDict(str_strip_whitespace=True)
    
    amount: Optional[Decimal] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=200)
    
    @property
    def changes_dates(self) -> bool:
        return self.from_date is not None or self.to_date is not None
    
    @property
    def is_empty(self) -> bool:
        return (
            self.amount is None
            and not self.changes_dates
            and self.description is None
        )


class BudgetListing(BaseModel):
    """A budget together with its status for a given day."""
    
    budget: Budget
    status: BudgetStatus


class ActiveBudgetStatus(BaseModel):
    """Result of looking up the budget that covers today."""
    
    has_active_budget: bool
    budget: Optional[Budget] = None
    remaining_days: Optional[int] = None
    total_days: Optional[int] = None
    message: Optional[str] = None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_format', 'overlap')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )


class ValidationResult(BaseModel):
    """Outcome of validating a budget period."""
    
    issues: list[ValidationIssue] = Field(default_factory=list)
    
    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)
    
    @property
    def is_valid(self) -> bool:
        return not self.has_errors
    
    @property
    def error_message(self) -> Optional[str]:
        """Message of the first error, if any."""
        for issue in self.issues:
            if issue.severity == "error":
                return issue.message
        return None


class BudgetResult(BaseModel):
    """
    Result of a mutating budget operation.
    
    Failures are returned, never raised, so any front end can render them.
    """
    
    success: bool
    message: str
    budget: Optional[Budget] = None
    issues: list[ValidationIssue] = Field(default_factory=list)
