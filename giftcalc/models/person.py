"""
Person Registry Models

The registry is owned by the person commands; this package reads it to
decorate toplists. On disk it is keyed by the case-folded name:

    {"persons": {"alice": {"name": "Alice", "niceScore": 9, "friendScore": 8,
                           "baseValue": 100, "currency": "SEK"}}}
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def person_key(name: str) -> str:
    """Registry and ledger recipients share this key."""
    return name.strip().casefold()


class PersonRecord(BaseModel):
    """Stored profile of a gift recipient."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )
    
    name: str = Field(..., min_length=1, max_length=200)
    nice_score: Optional[float] = Field(default=None, ge=0, le=10)
    friend_score: Optional[float] = Field(default=None, ge=1, le=10)
    base_value: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, pattern="^[A-Za-z]{3}$")
    
    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v
    
    @property
    def key(self) -> str:
        return person_key(self.name)
