"""
Data Models Package

This package contains all Pydantic models used by the gift ledger engine.
All data flowing between the stores and the engines conforms to these schemas.
"""

from giftcalc.models.ledger import CurrencyTotals, LedgerEntry
from giftcalc.models.budget import (
    ActiveBudgetStatus,
    Budget,
    BudgetBook,
    BudgetListing,
    BudgetResult,
    BudgetStatus,
    BudgetUpdate,
    ValidationIssue,
    ValidationResult,
)
from giftcalc.models.person import PersonRecord, person_key
from giftcalc.models.reports import (
    BudgetSummary,
    BudgetUsage,
    MergedPerson,
    PerCurrencyRanking,
    RankedList,
    RelativeUnit,
    SingleRanking,
    SkippedEntry,
    SpendingReport,
    ToplistResult,
    ToplistSort,
)
from giftcalc.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CurrencyTotals",
    "LedgerEntry",
    # Budget models
    "ActiveBudgetStatus",
    "Budget",
    "BudgetBook",
    "BudgetListing",
    "BudgetResult",
    "BudgetStatus",
    "BudgetUpdate",
    "ValidationIssue",
    "ValidationResult",
    # Person models
    "PersonRecord",
    "person_key",
    # Read models
    "BudgetSummary",
    "BudgetUsage",
    "MergedPerson",
    "PerCurrencyRanking",
    "RankedList",
    "RelativeUnit",
    "SingleRanking",
    "SkippedEntry",
    "SpendingReport",
    "ToplistResult",
    "ToplistSort",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
