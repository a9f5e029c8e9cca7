"""
Ledger Query Engine

Pure functions over parsed entries held in file order. Nothing here
reads files; callers pass in what the ledger source returned.

GUARANTEES:
- Only returns entries that exist in the ledger
- Never converts between currencies
- Windows are inclusive on both ends, on the entry's UTC calendar day
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from giftcalc.models.ledger import CurrencyTotals, LedgerEntry
from giftcalc.services.currency import CurrencyFormatter, format_amount


def last_entry(entries: Sequence[LedgerEntry]) -> Optional[LedgerEntry]:
    """Most recent entry by file order."""
    return entries[-1] if entries else None


def last_entry_for_recipient(
    entries: Sequence[LedgerEntry],
    name: Optional[str],
) -> Optional[LedgerEntry]:
    """
    Most recent entry for `name`, matched case-insensitively.
    
    A blank name matches nothing.
    """
    if not name or not name.strip():
        return None
    for entry in reversed(entries):
        if entry.is_for(name):
            return entry
    return None


def entries_between(
    entries: Iterable[LedgerEntry],
    from_date: date,
    to_date: date,
) -> list[LedgerEntry]:
    """
    Entries from `from_date` 00:00:00 through `to_date` 23:59:59.
    
    The result is sorted ascending by timestamp whatever the input order
    (stable, so equal timestamps keep file order).
    """
    selected = [e for e in entries if from_date <= e.day <= to_date]
    return sorted(selected, key=lambda e: e.timestamp)


def entries_between_in_currency(
    entries: Iterable[LedgerEntry],
    from_date: date,
    to_date: date,
    currency: str,
) -> list[LedgerEntry]:
    """`entries_between` restricted to one currency."""
    wanted = currency.upper()
    return [e for e in entries_between(entries, from_date, to_date) if e.currency == wanted]


def sum_by_currency(entries: Iterable[LedgerEntry]) -> CurrencyTotals:
    """Accumulate amounts per currency code."""
    totals: CurrencyTotals = {}
    for entry in entries:
        totals[entry.currency] = totals.get(entry.currency, Decimal("0")) + entry.amount
    return totals


def list_currencies(entries: Iterable[LedgerEntry]) -> list[str]:
    """Sorted set of currencies seen in the ledger."""
    return sorted({entry.currency for entry in entries})


def format_matched_gift(entry: LedgerEntry, formatter: Optional[CurrencyFormatter] = None) -> str:
    """`150 SEK for Alice (from 2024-12-01)`"""
    if formatter is None:
        text = f"{format_amount(entry.amount)} {entry.currency}"
    else:
        text = formatter.format(entry.amount, entry.currency)
    if entry.recipient:
        text += f" for {entry.recipient}"
    return f"{text} (from {entry.day.isoformat()})"
