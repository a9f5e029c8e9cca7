"""
Gift Ledger Service

Ties the parser, the stores and the query engines together into the
operations a front end (CLI, MCP tool, script) calls.

DESIGN DECISION: The service enforces the boundaries:
- The ledger is the only source of spending data; nothing is cached
  between calls, every operation re-reads it
- Input validation happens here, before the pure engines run
- Every mutation and every degraded path is audited

Front ends stay thin: they collect arguments, call one method and print
the formatted result.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import structlog

from giftcalc.audit import AuditLogger, configure_logging
from giftcalc.budgets import BudgetStore, format_budget_line, NO_BUDGETS_MESSAGE
from giftcalc.config import get_settings
from giftcalc.ledger import parse_entry, parse_lines, render_entry
from giftcalc.models.budget import (
    ActiveBudgetStatus,
    BudgetListing,
    BudgetResult,
    BudgetUpdate,
)
from giftcalc.models.ledger import LedgerEntry
from giftcalc.models.reports import (
    BudgetSummary,
    BudgetUsage,
    RelativeUnit,
    SpendingReport,
    ToplistResult,
    ToplistSort,
)
from giftcalc.queries import (
    NO_LEDGER_MESSAGE,
    WindowError,
    build_spending_report,
    calculate_usage,
    filter_window,
    format_matched_gift,
    last_entry,
    last_entry_for_recipient,
    list_currencies,
    rank,
    resolve_window,
    summarize_usage,
)
from giftcalc.services.currency import (
    CurrencyConverter,
    CurrencyFormatter,
    IdentityConverter,
    PlainCurrencyFormatter,
)
from giftcalc.services.storage import (
    BudgetStorageInterface,
    JsonBudgetStorage,
    JsonPersonStorage,
    LedgerFile,
    LedgerSourceInterface,
    PersonStorageInterface,
    StorageError,
)
from giftcalc.validation import DateValidationError, parse_calendar_date

logger = structlog.get_logger(__name__)


class GiftLedgerService:
    """
    Facade over the gift ledger and its derived views.
    
    All collaborators are injected; `create_service` wires the
    file-backed ones from settings.
    """
    
    def __init__(
        self,
        ledger: LedgerSourceInterface,
        budget_storage: BudgetStorageInterface,
        person_storage: PersonStorageInterface,
        default_currency: str = "SEK",
        toplist_length: int = 10,
        audit_logger: Optional[AuditLogger] = None,
        formatter: Optional[CurrencyFormatter] = None,
        converter: Optional[CurrencyConverter] = None,
    ):
        self._ledger = ledger
        self._person_storage = person_storage
        self._audit_logger = audit_logger
        self._formatter = formatter or PlainCurrencyFormatter()
        self._converter = converter or IdentityConverter()
        self.default_currency = default_currency.upper()
        self.toplist_length = toplist_length
        self.budgets = BudgetStore(budget_storage, audit_logger=audit_logger)
    
    # =========================================================================
    # LEDGER
    # =========================================================================
    
    def load_entries(self) -> list[LedgerEntry]:
        """
        Parse the whole ledger, skipping lines that do not match.
        
        A missing ledger is an empty one.
        
        Raises:
            StorageError: If the ledger exists but cannot be read
        """
        if not self._ledger.exists():
            return []
        try:
            lines = self._ledger.read_lines()
        except StorageError as e:
            logger.error("ledger_read_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_ledger_read_failed(
                    str(getattr(self._ledger, "path", "memory")), str(e)
                )
            raise
        return parse_lines(lines)
    
    def log_gift(
        self,
        amount: Union[Decimal, int, float, str],
        currency: Optional[str] = None,
        recipient: Optional[str] = None,
        annotation: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> LedgerEntry:
        """
        Append a gift to the ledger in its canonical format.
        
        Returns the entry as it will be read back.
        """
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {amount!r}") from None
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {amount!r}")
        line = render_entry(
            timestamp or datetime.now(timezone.utc),
            value,
            currency or self.default_currency,
            recipient,
            annotation,
        )
        entry = parse_entry(line)
        if entry is None:
            raise ValueError(f"Gift cannot be recorded: {line!r}")
        self._ledger.append_line(line)
        logger.info("gift_logged", currency=entry.currency, recipient=entry.recipient)
        return entry
    
    def last_gift(self, recipient: Optional[str] = None) -> Optional[LedgerEntry]:
        """Most recent gift, optionally for one recipient."""
        entries = self.load_entries()
        if recipient is None:
            return last_entry(entries)
        return last_entry_for_recipient(entries, recipient)
    
    def describe_last_gift(self, recipient: Optional[str] = None) -> str:
        entry = self.last_gift(recipient)
        if entry is None:
            if recipient:
                return f"No previous gifts found for {recipient.strip()}."
            return "No previous gifts found."
        return format_matched_gift(entry, self._formatter)
    
    def currencies(self) -> list[str]:
        return list_currencies(self.load_entries())
    
    # =========================================================================
    # BUDGETS
    # =========================================================================
    
    def add_budget(
        self,
        amount: Union[Decimal, int, float, str],
        from_date: str,
        to_date: str,
        description: Optional[str] = None,
    ) -> BudgetResult:
        return self.budgets.add(amount, from_date, to_date, description)
    
    def edit_budget(self, budget_id: int, updates: BudgetUpdate) -> BudgetResult:
        if updates.is_empty:
            return BudgetResult(success=False, message="No changes specified")
        return self.budgets.edit(budget_id, updates)
    
    def list_budgets(self, today: Optional[date] = None) -> list[BudgetListing]:
        return self.budgets.list(today)
    
    def format_budget_list(self, today: Optional[date] = None) -> str:
        listings = self.list_budgets(today)
        if not listings:
            return NO_BUDGETS_MESSAGE
        return "\n".join(format_budget_line(listing, self.default_currency) for listing in listings)
    
    def budget_status(self, today: Optional[date] = None) -> ActiveBudgetStatus:
        return self.budgets.status_for_today(today)
    
    def budget_summary_for(
        self,
        new_amount: Union[Decimal, int, float, str] = Decimal("0"),
        currency: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Optional[tuple[BudgetSummary, BudgetUsage]]:
        """
        Usage of today's budget including a prospective new amount.
        
        A new amount in another currency goes through the converter; if
        it cannot be converted it is left out and the summary is flagged
        as mixed-currency.
        
        Returns:
            (summary, usage), or None when no budget is active or the
            new amount is not a non-negative number
        """
        try:
            value = new_amount if isinstance(new_amount, Decimal) else Decimal(str(new_amount))
        except (InvalidOperation, ValueError):
            value = None
        if value is None or not value.is_finite() or value < 0:
            logger.warning("invalid_new_amount", amount=str(new_amount))
            return None
        new_amount = value
        
        status = self.budget_status(today)
        if not status.has_active_budget or status.budget is None:
            return None
        usage = calculate_usage(self.load_entries(), status.budget, self.default_currency)
        if currency and currency.upper() != self.default_currency and new_amount:
            converted = self._converter.convert(new_amount, currency.upper(), self.default_currency)
            if converted.success and converted.value is not None:
                new_amount = converted.value
            else:
                logger.warning("new_amount_not_converted", currency=currency, error=converted.error)
                new_amount = Decimal("0")
                usage.mixed_currencies = True
        summary = summarize_usage(
            usage,
            status.budget,
            self.default_currency,
            remaining_days=status.remaining_days or 0,
            new_amount=new_amount,
        )
        return summary, usage
    
    # =========================================================================
    # REPORTS
    # =========================================================================
    
    def spending_report(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        unit: Optional[Union[RelativeUnit, str]] = None,
        value: Optional[int] = None,
        today: Optional[date] = None,
    ) -> SpendingReport:
        """
        Spending for an absolute or relative window.
        
        Invalid input comes back as a report with `error` set.
        """
        try:
            start, end = resolve_window(from_date, to_date, unit, value, today)
        except WindowError as e:
            return SpendingReport(error=str(e))
        
        if not self._ledger.exists():
            return SpendingReport(from_date=start, to_date=end, notice=NO_LEDGER_MESSAGE)
        
        report = build_spending_report(self.load_entries(), start, end)
        if self._audit_logger:
            self._audit_logger.log_report_generated("spending", len(report.itemized))
        return report
    
    def toplist(
        self,
        sort_by: Union[ToplistSort, str] = ToplistSort.TOTAL,
        length: Optional[int] = None,
        currency: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ToplistResult:
        """Ranked persons; failures are returned in `error`."""
        try:
            start = parse_calendar_date(from_date) if from_date else None
            end = parse_calendar_date(to_date) if to_date else None
        except DateValidationError as e:
            return ToplistResult(success=False, error=str(e))
        if start and end and start > end:
            return ToplistResult(success=False, error="From date must be before or equal to to date")
        
        persons = list(self._person_storage.load().values())
        entries = self.load_entries()
        try:
            ranking = rank(
                persons,
                entries,
                sort_by=sort_by,
                length=self.toplist_length if length is None else length,
                currency_filter=currency,
                from_date=start,
                to_date=end,
                today=today,
            )
        except ValueError as e:
            # ToplistError or an unknown sort key
            return ToplistResult(success=False, error=str(e))
        
        if self._audit_logger:
            self._audit_logger.log_report_generated("toplist", len(entries))
        return ToplistResult(
            ranking=ranking,
            currencies=list_currencies(filter_window(entries, start, end, today)),
            person_count=len(persons),
        )


def create_service(audit_logger: Optional[AuditLogger] = None) -> GiftLedgerService:
    """
    Factory function wiring file-backed stores from settings.
    
    Returns:
        A service reading the configured ledger, budgets and persons files
    """
    settings = get_settings()
    storage = settings.storage
    app = settings.app
    configure_logging(app.log_level, app.json_logs)
    audit_logger = audit_logger or AuditLogger()
    
    return GiftLedgerService(
        ledger=LedgerFile(storage.ledger_path),
        budget_storage=JsonBudgetStorage(storage.budgets_path, audit_logger=audit_logger),
        person_storage=JsonPersonStorage(storage.persons_path, audit_logger=audit_logger),
        default_currency=app.default_currency,
        toplist_length=app.toplist_length,
        audit_logger=audit_logger,
    )
