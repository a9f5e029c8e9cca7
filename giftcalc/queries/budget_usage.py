"""
Budget Usage Calculator

Combines the ledger window of the active budget with currency filtering.
Only entries in the budget's currency count towards spending; the rest
are handed back so the caller can warn about them.
"""

from decimal import Decimal
from typing import Iterable, Union

from giftcalc.models.budget import Budget
from giftcalc.models.ledger import LedgerEntry
from giftcalc.models.reports import BudgetSummary, BudgetUsage, SkippedEntry
from giftcalc.queries.ledger import entries_between
from giftcalc.services.currency import format_amount


def calculate_usage(
    entries: Iterable[LedgerEntry],
    budget: Budget,
    budget_currency: str,
) -> BudgetUsage:
    """Spending inside the budget period, split by currency match."""
    currency = budget_currency.upper()
    usage = BudgetUsage()
    
    for entry in entries_between(entries, budget.from_date, budget.to_date):
        if entry.currency == currency:
            usage.total_spent += entry.amount
        else:
            usage.skipped.append(SkippedEntry(
                amount=entry.amount,
                currency=entry.currency,
                date=entry.day,
                recipient=entry.recipient,
            ))
            usage.mixed_currencies = True
    
    return usage


def summarize_usage(
    usage: BudgetUsage,
    budget: Budget,
    budget_currency: str,
    remaining_days: int,
    new_amount: Union[Decimal, int, float, str] = Decimal("0"),
) -> BudgetSummary:
    """
    Classify a prospective new amount against the budget.
    
    remaining = totalAmount - (spent + new); negative means over budget.
    """
    new = new_amount if isinstance(new_amount, Decimal) else Decimal(str(new_amount))
    return BudgetSummary(
        budget_amount=budget.total_amount,
        previously_spent=usage.total_spent,
        new_amount=new,
        remaining=budget.total_amount - (usage.total_spent + new),
        remaining_days=remaining_days,
        ends_on=budget.to_date,
        currency=budget_currency.upper(),
        mixed_currencies=usage.mixed_currencies,
    )


def format_budget_summary(summary: BudgetSummary) -> str:
    """
    One-line budget summary shown after a gift is logged.
    
    Budget: 1000 SEK | Used: 650 SEK | Remaining: 350 SEK | Ends: 2025-09-30 (15 days)
    """
    ccy = summary.currency
    day_word = "day" if summary.remaining_days == 1 else "days"
    ends = f"Ends: {summary.ends_on.isoformat()} ({summary.remaining_days} {day_word})"
    budget = f"Budget: {format_amount(summary.budget_amount)} {ccy}"
    used = f"Used: {format_amount(summary.used)} {ccy}"
    
    if summary.over_budget:
        line = (
            f"⚠️  BUDGET EXCEEDED! {budget} | {used} | "
            f"Over by: {format_amount(summary.over_by)} {ccy} | {ends}"
        )
    else:
        line = f"{budget} | {used} | Remaining: {format_amount(summary.remaining)} {ccy} | {ends}"
    
    if summary.mixed_currencies:
        line += " [*mixed currencies]"
    return line


def format_skipped_warning(usage: BudgetUsage, budget_currency: str) -> list[str]:
    """Lines describing entries left out of the budget total."""
    if not usage.skipped:
        return []
    lines = [f"Note: {len(usage.skipped)} gift(s) in other currencies were not counted towards the {budget_currency.upper()} budget:"]
    for skipped in usage.skipped:
        text = f"  {skipped.date.isoformat()}  {format_amount(skipped.amount)} {skipped.currency}"
        if skipped.recipient:
            text += f" for {skipped.recipient}"
        lines.append(text)
    return lines
