"""
Derived Read Models

Everything in this module is computed from ledger entries and store
snapshots. None of it is persisted.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from giftcalc.models.ledger import LedgerEntry


# =============================================================================
# BUDGET USAGE
# =============================================================================

class SkippedEntry(BaseModel):
    """A ledger entry inside the budget window but in another currency."""
    
    amount: Decimal
    currency: str
    date: date
    recipient: Optional[str] = None


class BudgetUsage(BaseModel):
    """
    Spending recorded against a budget.
    
    Entries in other currencies are surfaced in `skipped`, never
    converted or dropped.
    """
    
    total_spent: Decimal = Decimal("0")
    skipped: list[SkippedEntry] = Field(default_factory=list)
    mixed_currencies: bool = False


class BudgetSummary(BaseModel):
    """Budget usage including a prospective new amount."""
    
    budget_amount: Decimal
    previously_spent: Decimal
    new_amount: Decimal
    remaining: Decimal = Field(
        ...,
        description="budget_amount - (previously_spent + new_amount); negative when over"
    )
    remaining_days: int
    ends_on: date
    currency: str
    mixed_currencies: bool = False
    
    @property
    def used(self) -> Decimal:
        return self.previously_spent + self.new_amount
    
    @property
    def over_budget(self) -> bool:
        return self.remaining < 0
    
    @property
    def over_by(self) -> Decimal:
        return -self.remaining if self.remaining < 0 else Decimal("0")


# =============================================================================
# SPENDING REPORT
# =============================================================================

class RelativeUnit(str, Enum):
    """Units accepted for a relative reporting window."""
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


class SpendingReport(BaseModel):
    """
    Per-currency totals plus a chronological itemization.
    
    `error` is set for invalid input; `notice` carries informational
    messages such as a missing ledger.
    """
    
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    currency_totals: dict[str, Decimal] = Field(default_factory=dict)
    itemized: list[LedgerEntry] = Field(default_factory=list)
    error: Optional[str] = None
    notice: Optional[str] = None
    
    @property
    def success(self) -> bool:
        return self.error is None
    
    @property
    def has_data(self) -> bool:
        return len(self.itemized) > 0
    
    @property
    def currencies(self) -> list[str]:
        return sorted(self.currency_totals)


# =============================================================================
# TOPLIST
# =============================================================================

class ToplistSort(str, Enum):
    """Ranking criteria."""
    TOTAL = "total"
    NICE_SCORE = "nice-score"
    FRIEND_SCORE = "friend-score"
    GIFT_COUNT = "gift-count"


class MergedPerson(BaseModel):
    """A registry profile joined with the gifts found in the ledger."""
    
    key: str
    name: str
    nice_score: Optional[float] = None
    friend_score: Optional[float] = None
    gifts: dict[str, Decimal] = Field(default_factory=dict)
    gift_count: int = 0
    
    def total_in(self, currency: str) -> Decimal:
        return self.gifts.get(currency, Decimal("0"))


class SingleRanking(BaseModel):
    """One ranked list (score sorts, filtered or single-currency totals)."""
    
    kind: Literal["single"] = "single"
    sort_by: ToplistSort
    currency: Optional[str] = None
    persons: list[MergedPerson] = Field(default_factory=list)


class PerCurrencyRanking(BaseModel):
    """
    One ranked list per currency.
    
    Produced for totals over a multi-currency dataset, where a single
    ranking would have to add up unconverted amounts.
    """
    
    kind: Literal["per_currency"] = "per_currency"
    sort_by: ToplistSort = ToplistSort.TOTAL
    rankings: dict[str, list[MergedPerson]] = Field(default_factory=dict)


RankedList = Annotated[
    Union[SingleRanking, PerCurrencyRanking],
    Field(discriminator="kind"),
]


class ToplistResult(BaseModel):
    """Toplist returned to a front end."""
    
    success: bool = True
    error: Optional[str] = None
    ranking: Optional[RankedList] = None
    currencies: list[str] = Field(default_factory=list)
    person_count: int = 0
