"""
Spending Report Builder

Per-currency totals and a chronological itemization for a date window.
The window is either an absolute pair of dates or a relative period
counted back from today with calendar arithmetic ("3 months" from
2024-05-31 is 2024-02-29, not 90 days).
"""

from datetime import date
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from giftcalc.models.ledger import LedgerEntry
from giftcalc.models.reports import RelativeUnit, SpendingReport
from giftcalc.queries.ledger import entries_between, sum_by_currency
from giftcalc.services.currency import format_amount
from giftcalc.validation import DateValidationError, parse_calendar_date

NO_LEDGER_MESSAGE = "No spending data found. The gift log is empty or missing."


class WindowError(ValueError):
    """The requested reporting window is not usable."""
    pass


def relative_start(
    unit: Union[RelativeUnit, str],
    value: int,
    today: Optional[date] = None,
) -> date:
    """First day of a window reaching `value` units back from today."""
    try:
        unit = RelativeUnit(unit)
    except ValueError:
        raise WindowError(f"Unknown time unit: {unit}") from None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise WindowError(f"--{unit.value} must be a positive number")
    today = today or date.today()
    return today - relativedelta(**{unit.value: value})


def resolve_window(
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    unit: Optional[Union[RelativeUnit, str]] = None,
    value: Optional[int] = None,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """
    Turn user input into an inclusive (from, to) pair.
    
    Exactly one of {absolute pair, relative period} must be given.
    
    Raises:
        WindowError: With a user-facing message
    """
    absolute = from_date is not None or to_date is not None
    relative = unit is not None or value is not None
    
    if absolute and relative:
        raise WindowError("Cannot combine absolute dates (--from/--to) with relative periods")
    if not absolute and not relative:
        raise WindowError(
            "No time period specified. Use --from/--to or one of --days, --weeks, --months, --years"
        )
    
    today = today or date.today()
    if relative:
        if unit is None or value is None:
            raise WindowError("A relative period needs both a unit and a value")
        return relative_start(unit, value, today), today
    
    if from_date is None or to_date is None:
        raise WindowError("Both --from and --to dates are required for an absolute range")
    try:
        start = parse_calendar_date(from_date)
        end = parse_calendar_date(to_date)
    except DateValidationError as e:
        raise WindowError(str(e)) from None
    if start > end:
        raise WindowError("From date must be before or equal to to date")
    return start, end


def build_spending_report(
    entries: Iterable[LedgerEntry],
    from_date: date,
    to_date: date,
) -> SpendingReport:
    """
    Totals per currency plus the itemized entries, oldest first.
    
    An empty window is a normal result; the caller decides what to say.
    """
    itemized = entries_between(entries, from_date, to_date)
    return SpendingReport(
        from_date=from_date,
        to_date=to_date,
        currency_totals=sum_by_currency(itemized),
        itemized=itemized,
    )


def _item_line(entry: LedgerEntry) -> str:
    line = f"{entry.day.isoformat()}  {format_amount(entry.amount)} {entry.currency}"
    if entry.recipient:
        line += f" for {entry.recipient}"
    return line


def format_spending_report(report: SpendingReport) -> str:
    """
    Render a report for the terminal.
    
    With more than one currency each total gets its own line and the
    items are grouped under per-currency headings, still oldest first.
    """
    if report.error:
        return report.error
    
    start, end = report.from_date.isoformat(), report.to_date.isoformat()
    period = f"{start} to {end}"
    if not report.has_data:
        return report.notice or f"No spending found between {start} and {end}."
    
    lines = []
    currencies = report.currencies
    if len(currencies) == 1:
        ccy = currencies[0]
        lines.append(f"Total Spending ({period}): {format_amount(report.currency_totals[ccy])} {ccy}")
        lines.append("")
        lines.extend(_item_line(entry) for entry in report.itemized)
        return "\n".join(lines)
    
    lines.append(f"Total Spending ({period}):")
    for ccy in currencies:
        lines.append(f"  {format_amount(report.currency_totals[ccy])} {ccy}")
    for ccy in currencies:
        lines.append("")
        lines.append(f"{ccy}:")
        lines.extend(
            f"  {_item_line(entry)}" for entry in report.itemized if entry.currency == ccy
        )
    return "\n".join(lines)
