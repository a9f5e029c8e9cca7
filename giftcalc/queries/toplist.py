"""
Toplist Ranking Engine

Joins the person registry with per-recipient gift totals from the ledger
and ranks the result.

DESIGN DECISION: Totals over a dataset with several currencies are
never added together. Without a currency filter such a ranking comes
back as a PerCurrencyRanking with one list per currency; the caller
always gets a tagged result and has to handle both shapes.
"""

from datetime import date
from typing import Iterable, Optional, Sequence, Union

import structlog

from giftcalc.models.ledger import LedgerEntry
from giftcalc.models.person import PersonRecord, person_key
from giftcalc.models.reports import (
    MergedPerson,
    PerCurrencyRanking,
    RankedList,
    SingleRanking,
    ToplistSort,
)
from giftcalc.queries.ledger import list_currencies
from giftcalc.services.currency import format_amount

logger = structlog.get_logger(__name__)

DEFAULT_LENGTH = 10
NO_PERSONS_MESSAGE = "No persons found in configuration or gift history."

SORT_LABELS = {
    ToplistSort.TOTAL: "Total Gifts",
    ToplistSort.NICE_SCORE: "Nice Score",
    ToplistSort.FRIEND_SCORE: "Friend Score",
    ToplistSort.GIFT_COUNT: "Gift Count",
}


class ToplistError(ValueError):
    """Raised for a ranking request that cannot be answered."""
    pass


def _display_name(key: str) -> str:
    return key[:1].upper() + key[1:]


def filter_window(
    entries: Iterable[LedgerEntry],
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    today: Optional[date] = None,
) -> list[LedgerEntry]:
    """
    Entries inside an optional window.
    
    No bounds keeps everything. A start without an end runs up to today.
    """
    entries = list(entries)
    if from_date is None and to_date is None:
        return entries
    if from_date is not None and to_date is None:
        to_date = today or date.today()
    return [
        e for e in entries
        if (from_date is None or e.day >= from_date) and (to_date is None or e.day <= to_date)
    ]


def merge_persons(
    persons: Iterable[PersonRecord],
    entries: Iterable[LedgerEntry],
) -> list[MergedPerson]:
    """
    Union of registry profiles and ledger recipients, keyed by case-folded name.
    
    Registry persons come first in registry order, then recipients that
    only appear in the ledger, in order of first appearance. Entries
    without a recipient are ignored.
    """
    merged: dict[str, MergedPerson] = {}
    for record in persons:
        merged.setdefault(record.key, MergedPerson(
            key=record.key,
            name=record.name,
            nice_score=record.nice_score,
            friend_score=record.friend_score,
        ))
    
    for entry in entries:
        if not entry.recipient:
            continue
        key = person_key(entry.recipient)
        person = merged.get(key)
        if person is None:
            person = merged[key] = MergedPerson(key=key, name=_display_name(key))
        person.gifts[entry.currency] = person.total_in(entry.currency) + entry.amount
        person.gift_count += 1
    
    return list(merged.values())


def _score_key(attribute: str):
    # Missing scores sort below every valid score
    def key(person: MergedPerson) -> float:
        value = getattr(person, attribute)
        return float("-inf") if value is None else value
    return key


def _rank_by_currency(persons: Sequence[MergedPerson], currency: str, length: int) -> list[MergedPerson]:
    holders = [p for p in persons if p.total_in(currency) != 0]
    return sorted(holders, key=lambda p: p.total_in(currency), reverse=True)[:length]


def rank(
    persons: Iterable[PersonRecord],
    entries: Iterable[LedgerEntry],
    sort_by: Union[ToplistSort, str] = ToplistSort.TOTAL,
    length: int = DEFAULT_LENGTH,
    currency_filter: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    today: Optional[date] = None,
) -> RankedList:
    """
    Rank merged persons.
    
    Score and gift-count rankings ignore currency. Total rankings use
    the filter currency, the single dataset currency, or one sub-list
    per currency. Sorting is stable so ties keep merge order.
    
    Raises:
        ToplistError: On a non-positive length or a filter currency that
            does not appear in the (windowed) ledger
    """
    sort_by = ToplistSort(sort_by)
    if length < 1:
        raise ToplistError("Toplist length must be a positive number")
    
    windowed = filter_window(entries, from_date, to_date, today)
    merged = merge_persons(persons, windowed)
    currencies = list_currencies(windowed)
    
    if sort_by == ToplistSort.NICE_SCORE:
        ranked = sorted(merged, key=_score_key("nice_score"), reverse=True)
        return SingleRanking(sort_by=sort_by, persons=ranked[:length])
    if sort_by == ToplistSort.FRIEND_SCORE:
        ranked = sorted(merged, key=_score_key("friend_score"), reverse=True)
        return SingleRanking(sort_by=sort_by, persons=ranked[:length])
    if sort_by == ToplistSort.GIFT_COUNT:
        ranked = sorted(merged, key=lambda p: p.gift_count, reverse=True)
        return SingleRanking(sort_by=sort_by, persons=ranked[:length])
    
    if currency_filter:
        wanted = currency_filter.upper()
        if currencies and wanted not in currencies:
            raise ToplistError(
                f"Currency '{wanted}' not found in gift history. "
                f"Available currencies: {', '.join(currencies)}"
            )
        return SingleRanking(
            sort_by=sort_by,
            currency=wanted,
            persons=_rank_by_currency(merged, wanted, length),
        )
    
    if len(currencies) == 1:
        only = currencies[0]
        ranked = sorted(merged, key=lambda p: p.total_in(only), reverse=True)
        return SingleRanking(sort_by=sort_by, currency=only, persons=ranked[:length])
    
    if not currencies:
        return SingleRanking(sort_by=sort_by, persons=merged[:length])
    
    logger.debug("toplist_split_by_currency", currencies=currencies)
    return PerCurrencyRanking(
        sort_by=sort_by,
        rankings={ccy: _rank_by_currency(merged, ccy, length) for ccy in currencies},
    )


def _score_text(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return str(int(value)) if float(value).is_integer() else str(value)


def _person_line(position: int, person: MergedPerson, sort_by: ToplistSort, currency: Optional[str]) -> str:
    if sort_by == ToplistSort.NICE_SCORE:
        value = _score_text(person.nice_score)
    elif sort_by == ToplistSort.FRIEND_SCORE:
        value = _score_text(person.friend_score)
    elif sort_by == ToplistSort.GIFT_COUNT:
        value = f"{person.gift_count} gift" + ("" if person.gift_count == 1 else "s")
    elif currency:
        value = f"{format_amount(person.total_in(currency))} {currency}"
    else:
        value = "0"
    return f"{position}. {person.name}: {value}"


def _section(title: str, persons: Sequence[MergedPerson], sort_by: ToplistSort, currency: Optional[str]) -> list[str]:
    lines = [f"Top {len(persons)} Persons ({title})"]
    lines.extend(
        _person_line(i, person, sort_by, currency)
        for i, person in enumerate(persons, start=1)
    )
    return lines


def format_toplist(ranking: RankedList) -> str:
    """
    Render either ranking shape.
    
    `Top 2 Persons (Total Gifts, SEK)` followed by `1. Alice: 450.75 SEK`.
    """
    if isinstance(ranking, PerCurrencyRanking):
        sections = [
            "\n".join(_section(f"{SORT_LABELS[ranking.sort_by]}, {ccy}", persons, ranking.sort_by, ccy))
            for ccy, persons in ranking.rankings.items()
            if persons
        ]
        return "\n\n".join(sections) if sections else NO_PERSONS_MESSAGE
    
    if not ranking.persons:
        return NO_PERSONS_MESSAGE
    title = SORT_LABELS[ranking.sort_by]
    if ranking.sort_by == ToplistSort.TOTAL and ranking.currency:
        title = f"{title}, {ranking.currency}"
    return "\n".join(_section(title, ranking.persons, ranking.sort_by, ranking.currency))


def format_currency_list(currencies: Sequence[str]) -> str:
    if not currencies:
        return "No currencies found in gift history."
    return f"Available currencies in dataset: {', '.join(currencies)}"
