"""Budget management package."""

from giftcalc.budgets.store import (
    NO_ACTIVE_BUDGET_MESSAGE,
    NO_BUDGETS_MESSAGE,
    BudgetStore,
    days_between,
    format_budget_line,
)

__all__ = [
    "NO_ACTIVE_BUDGET_MESSAGE",
    "NO_BUDGETS_MESSAGE",
    "BudgetStore",
    "days_between",
    "format_budget_line",
]
