"""
Currency Collaborators

The engine never talks to an exchange-rate service. It only needs to turn
an amount into text, and front ends that show converted values plug in a
converter implementing `CurrencyConverter`.
"""

from decimal import Decimal
from typing import Optional, Protocol, Union

from pydantic import BaseModel

Number = Union[Decimal, int, float, str]


class ConversionResult(BaseModel):
    """Outcome of a currency conversion."""
    
    success: bool
    value: Optional[Decimal] = None
    error: Optional[str] = None


class CurrencyFormatter(Protocol):
    def format(self, amount: Decimal, currency: str) -> str:
        ...


class CurrencyConverter(Protocol):
    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> ConversionResult:
        ...


def format_amount(amount: Number) -> str:
    """
    Render an amount the way the gift log writes it.
    
    Trailing zeros are dropped and no exponent is ever used:
    Decimal("85.00") -> "85", Decimal("120.750") -> "120.75".
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Cannot format non-finite amount: {value}")
    if value == 0:
        return "0"
    normalized = value.normalize()
    if normalized.as_tuple().exponent > 0:
        normalized = normalized.quantize(Decimal(1))
    return format(normalized, "f")


class PlainCurrencyFormatter:
    """`<amount> <CCY>` without grouping or symbols."""
    
    def format(self, amount: Number, currency: str) -> str:
        return f"{format_amount(amount)} {currency}"


class IdentityConverter:
    """Converter that only handles same-currency requests."""
    
    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> ConversionResult:
        if from_currency.upper() == to_currency.upper():
            return ConversionResult(success=True, value=amount)
        return ConversionResult(
            success=False,
            error=f"No exchange rate available for {from_currency} -> {to_currency}",
        )
