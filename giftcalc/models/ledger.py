"""
Ledger Models

A ledger entry is never persisted as an object. It is rebuilt from one
line of the gift log on every read, so the model is frozen: nothing
downstream may "correct" what the log says.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from giftcalc.models.person import person_key

# Currency code -> accumulated amount
CurrencyTotals = dict[str, Decimal]


class LedgerEntry(BaseModel):
    """One parsed line of the gift log."""
    
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
    
    timestamp: datetime = Field(
        ...,
        description="When the gift was calculated (UTC, millisecond precision)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Gift amount"
    )
    currency: str = Field(
        ...,
        pattern="^[A-Z]{3}$",
        description="ISO-4217 style currency code"
    )
    recipient: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Recipient as written in the log"
    )
    raw_text: str = Field(
        ...,
        description="Formatted output after the timestamp, used for redisplay"
    )
    
    @property
    def day(self):
        """UTC calendar day of the entry."""
        return self.timestamp.date()
    
    def is_for(self, name: str) -> bool:
        """Case-insensitive recipient match."""
        if self.recipient is None:
            return False
        return person_key(self.recipient) == person_key(name)
