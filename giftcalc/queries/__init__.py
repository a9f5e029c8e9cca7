"""Query engines derived from the ledger and the stores."""

from giftcalc.queries.budget_usage import (
    calculate_usage,
    format_budget_summary,
    format_skipped_warning,
    summarize_usage,
)
from giftcalc.queries.ledger import (
    entries_between,
    entries_between_in_currency,
    format_matched_gift,
    last_entry,
    last_entry_for_recipient,
    list_currencies,
    sum_by_currency,
)
from giftcalc.queries.spending import (
    NO_LEDGER_MESSAGE,
    WindowError,
    build_spending_report,
    format_spending_report,
    relative_start,
    resolve_window,
)
from giftcalc.queries.toplist import (
    NO_PERSONS_MESSAGE,
    ToplistError,
    filter_window,
    format_currency_list,
    format_toplist,
    merge_persons,
    rank,
)

__all__ = [
    # Ledger queries
    "entries_between",
    "entries_between_in_currency",
    "format_matched_gift",
    "last_entry",
    "last_entry_for_recipient",
    "list_currencies",
    "sum_by_currency",
    # Budget usage
    "calculate_usage",
    "format_budget_summary",
    "format_skipped_warning",
    "summarize_usage",
    # Spending report
    "NO_LEDGER_MESSAGE",
    "WindowError",
    "build_spending_report",
    "format_spending_report",
    "relative_start",
    "resolve_window",
    # Toplist
    "NO_PERSONS_MESSAGE",
    "ToplistError",
    "filter_window",
    "format_currency_list",
    "format_toplist",
    "merge_persons",
    "rank",
]
