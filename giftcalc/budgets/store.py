"""
Budget Store

Business rules over a BudgetStorageInterface:
- ids are assigned from a persisted, monotonically increasing counter
- no two budgets ever have overlapping periods
- a failed add or edit leaves the stored snapshot untouched

Every operation does one full load -> mutate in memory -> save cycle.
Failures are returned as BudgetResult values, never raised.
"""

import math
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from giftcalc.audit import AuditLogger
from giftcalc.models.budget import (
    ActiveBudgetStatus,
    Budget,
    BudgetBook,
    BudgetListing,
    BudgetResult,
    BudgetStatus,
    BudgetUpdate,
    ValidationIssue,
)
from giftcalc.services.currency import format_amount
from giftcalc.services.storage import BudgetStorageInterface, WriteError
from giftcalc.validation import BudgetPeriodValidator

logger = structlog.get_logger(__name__)

NO_BUDGETS_MESSAGE = 'No budgets configured. Use "budget add" to create one.'
NO_ACTIVE_BUDGET_MESSAGE = 'No active budget for today. Use "budget add" to create one.'


def _to_amount(value: Union[Decimal, int, float, str]) -> Optional[Decimal]:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def days_between(start: date, end: date) -> int:
    """Whole days from start to end, rounded up."""
    return math.ceil((end - start).total_seconds() / 86400)


class BudgetStore:
    """
    CRUD and status classification for budgets.
    
    Deletion is intentionally not offered.
    """
    
    def __init__(
        self,
        storage: BudgetStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[BudgetPeriodValidator] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._validator = validator or BudgetPeriodValidator()
    
    def add(
        self,
        amount: Union[Decimal, int, float, str],
        from_date: str,
        to_date: str,
        description: Optional[str] = None,
    ) -> BudgetResult:
        """
        Add a budget after validating its dates and checking for overlap.
        
        The new budget gets id = nextId and nextId is incremented.
        """
        total = _to_amount(amount)
        if total is None:
            return self._reject(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a positive number",
            ))
        
        book = self._storage.load()
        result, start, end = self._validator.validate(from_date, to_date, book.budgets)
        if not result.is_valid:
            return self._reject(*result.issues)
        
        # Never hand out an id that an existing budget already uses
        new_id = max([book.next_id] + [b.id + 1 for b in book.budgets])
        try:
            budget = Budget(
                id=new_id,
                total_amount=total,
                from_date=start,
                to_date=end,
                description=(description or "").strip(),
                created_at=datetime.now(timezone.utc),
            )
        except ValidationError as e:
            return self._reject(ValidationIssue(
                field="budget",
                issue_type="invalid_value",
                message=e.errors()[0]["msg"],
            ))
        
        updated = BudgetBook(budgets=[*book.budgets, budget], next_id=new_id + 1)
        failure = self._save(updated, "Failed to save budget")
        if failure:
            return failure
        
        logger.info("budget_added", budget_id=budget.id)
        if self._audit_logger:
            self._audit_logger.log_budget_added(
                budget_id=budget.id,
                description=budget.description,
                amount=str(budget.total_amount),
                from_date=budget.from_date.isoformat(),
                to_date=budget.to_date.isoformat(),
            )
        return BudgetResult(
            success=True,
            message=f'Budget "{budget.description}" added successfully (ID: {budget.id})',
            budget=budget,
        )
    
    def edit(self, budget_id: int, updates: BudgetUpdate) -> BudgetResult:
        """
        Apply only the provided fields.
        
        When either date changes the full period is re-validated against
        every other budget; an invalid edit changes nothing.
        """
        book = self._storage.load()
        current = book.find(budget_id)
        if current is None:
            return self._reject(
                ValidationIssue(
                    field="id",
                    issue_type="not_found",
                    message=f"Budget with ID {budget_id} not found",
                ),
                budget_id=budget_id,
            )
        
        changes: dict = {}
        changed_fields = []
        if updates.amount is not None:
            total = _to_amount(updates.amount)
            if total is None:
                return self._reject(
                    ValidationIssue(
                        field="amount",
                        issue_type="invalid_value",
                        message="Amount must be a positive number",
                    ),
                    budget_id=budget_id,
                )
            changes["total_amount"] = total
            changed_fields.append("amount")
        if updates.description is not None:
            changes["description"] = updates.description
            changed_fields.append("description")
        
        if updates.changes_dates:
            from_text = updates.from_date if updates.from_date is not None else current.from_date.isoformat()
            to_text = updates.to_date if updates.to_date is not None else current.to_date.isoformat()
            result, start, end = self._validator.validate(
                from_text, to_text, book.budgets, exclude_id=budget_id
            )
            if not result.is_valid:
                return self._reject(*result.issues, budget_id=budget_id)
            changes["from_date"] = start
            changes["to_date"] = end
            if updates.from_date is not None:
                changed_fields.append("from_date")
            if updates.to_date is not None:
                changed_fields.append("to_date")
        
        try:
            edited = Budget.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            return self._reject(
                ValidationIssue(
                    field="budget",
                    issue_type="invalid_value",
                    message=e.errors()[0]["msg"],
                ),
                budget_id=budget_id,
            )
        
        updated = BudgetBook(
            budgets=[edited if b.id == budget_id else b for b in book.budgets],
            next_id=book.next_id,
        )
        failure = self._save(updated, "Failed to save budget updates")
        if failure:
            return failure
        
        logger.info("budget_updated", budget_id=budget_id, fields=changed_fields)
        if self._audit_logger:
            self._audit_logger.log_budget_updated(budget_id, changed_fields)
        return BudgetResult(
            success=True,
            message=f'Budget "{edited.description}" updated successfully',
            budget=edited,
        )
    
    def list(self, today: Optional[date] = None) -> list[BudgetListing]:
        """All budgets in stored order, each with its status for `today`."""
        today = today or date.today()
        return [
            BudgetListing(budget=budget, status=budget.status_on(today))
            for budget in self._storage.load().budgets
        ]
    
    def get(self, budget_id: int) -> Optional[Budget]:
        return self._storage.load().find(budget_id)
    
    def status_for_today(self, today: Optional[date] = None) -> ActiveBudgetStatus:
        """
        The budget covering `today`, with remaining and total day counts.
        
        At most one budget can be active because periods never overlap.
        """
        today = today or date.today()
        budgets = self._storage.load().budgets
        if not budgets:
            return ActiveBudgetStatus(has_active_budget=False, message=NO_BUDGETS_MESSAGE)
        
        for budget in budgets:
            if budget.status_on(today) == BudgetStatus.ACTIVE:
                return ActiveBudgetStatus(
                    has_active_budget=True,
                    budget=budget,
                    remaining_days=days_between(today, budget.to_date),
                    total_days=days_between(budget.from_date, budget.to_date) + 1,
                )
        return ActiveBudgetStatus(has_active_budget=False, message=NO_ACTIVE_BUDGET_MESSAGE)
    
    def _save(self, book: BudgetBook, failure_message: str) -> Optional[BudgetResult]:
        try:
            self._storage.save(book)
        except WriteError as e:
            logger.error("budget_save_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_save_failed("budgets", str(getattr(self._storage, "path", "memory")), str(e))
            return BudgetResult(success=False, message=failure_message)
        return None
    
    def _reject(self, *issues: ValidationIssue, budget_id: Optional[int] = None) -> BudgetResult:
        message = issues[0].message
        logger.info("budget_rejected", budget_id=budget_id, reason=message)
        if self._audit_logger:
            self._audit_logger.log_budget_rejected(message, budget_id=budget_id)
        return BudgetResult(success=False, message=message, issues=list(issues))


def format_budget_line(listing: BudgetListing, currency: str) -> str:
    """`1. Christmas: 5000 SEK (2024-12-01 to 2024-12-31) [ACTIVE]`"""
    budget = listing.budget
    return (
        f"{budget.id}. {budget.description}: {format_amount(budget.total_amount)} {currency} "
        f"({budget.from_date.isoformat()} to {budget.to_date.isoformat()}) [{listing.status.value}]"
    )
