"""
Integration tests for the gift ledger service

All collaborators are in-memory; no config directory is touched except
through tmp_path.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from giftcalc.audit import AuditLogger
from giftcalc.config import get_settings
from giftcalc.models import (
    AuditEventType,
    BudgetUpdate,
    PerCurrencyRanking,
    PersonRecord,
    ToplistSort,
)
from giftcalc.orchestrator import GiftLedgerService, create_service
from giftcalc.queries import NO_LEDGER_MESSAGE, format_budget_summary, format_spending_report
from giftcalc.services.storage import (
    InMemoryBudgetStorage,
    InMemoryLedger,
    InMemoryPersonStorage,
    StorageError,
)


class UnreadableLedger(InMemoryLedger):
    def read_lines(self):
        raise StorageError("permission denied")


LINES = [
    "2024-12-01T10:00:00.000Z 85 SEK for Alice",
    "2024-12-03T10:00:00.000Z 50 USD for Bob",
    "2024-12-05T10:00:00.000Z 188 SEK for Bob",
]


@pytest.fixture
def audit():
    return AuditLogger(keep_events=True)


def _service(lines=None, persons=None, audit=None) -> GiftLedgerService:
    return GiftLedgerService(
        ledger=InMemoryLedger(lines),
        budget_storage=InMemoryBudgetStorage(),
        person_storage=InMemoryPersonStorage(persons or []),
        default_currency="SEK",
        audit_logger=audit,
    )


class TestLedgerOperations:
    """Tests for reading and appending the gift log."""
    
    def test_log_gift_appends_canonical_line(self):
        """Test a logged gift is written in the ledger grammar and read back."""
        service = _service([])
        entry = service.log_gift(
            Decimal("85.00"),
            recipient="Alice",
            timestamp=datetime(2024, 12, 1, 10, tzinfo=timezone.utc),
        )
        assert entry.currency == "SEK"
        assert entry.raw_text == "85 SEK for Alice"
        assert service.last_gift("alice") == entry
    
    def test_log_gift_rejects_bad_input(self):
        """Test amounts and currencies the grammar cannot hold."""
        service = _service([])
        with pytest.raises(ValueError):
            service.log_gift("abc")
        with pytest.raises(ValueError):
            service.log_gift(-5)
        with pytest.raises(ValueError):
            service.log_gift(10, currency="EURO")
        with pytest.raises(ValueError):
            service.log_gift("NaN")
        with pytest.raises(ValueError):
            service.log_gift(Decimal("Infinity"))
        assert service.load_entries() == []
    
    def test_missing_ledger_is_empty(self):
        """Test a missing log reads as no entries."""
        service = _service(None)
        assert service.load_entries() == []
        assert service.last_gift() is None
    
    def test_unreadable_ledger_is_audited(self, audit):
        """Test a read failure propagates after being audited."""
        service = GiftLedgerService(
            ledger=UnreadableLedger([]),
            budget_storage=InMemoryBudgetStorage(),
            person_storage=InMemoryPersonStorage(),
            audit_logger=audit,
        )
        with pytest.raises(StorageError):
            service.load_entries()
        assert audit.recorded_events[-1].event_type == AuditEventType.LEDGER_READ_FAILED
    
    def test_describe_last_gift(self):
        """Test the matched-gift text and the no-match messages."""
        service = _service(LINES)
        assert service.describe_last_gift("bob") == "188 SEK for Bob (from 2024-12-05)"
        assert service.describe_last_gift("Carol") == "No previous gifts found for Carol."
        assert _service([]).describe_last_gift() == "No previous gifts found."
    
    def test_currencies(self):
        """Test the dataset currency list."""
        assert _service(LINES).currencies() == ["SEK", "USD"]


class TestBudgetOperations:
    """Tests for budget flows through the service."""
    
    def test_add_list_and_summary(self):
        """Test a budget summary counts only budget-currency gifts."""
        service = _service(LINES)
        assert service.add_budget(1000, "2024-12-01", "2024-12-31", "Christmas").success
        assert service.format_budget_list(date(2024, 12, 15)) == (
            "1. Christmas: 1000 SEK (2024-12-01 to 2024-12-31) [ACTIVE]"
        )
        summary, usage = service.budget_summary_for(Decimal("150"), today=date(2024, 12, 15))
        assert summary.previously_spent == Decimal("273")
        assert summary.remaining == Decimal("577")
        assert summary.remaining_days == 16
        assert usage.mixed_currencies
        assert format_budget_summary(summary) == (
            "Budget: 1000 SEK | Used: 423 SEK | Remaining: 577 SEK | "
            "Ends: 2024-12-31 (16 days) [*mixed currencies]"
        )
    
    def test_summary_without_active_budget(self):
        """Test None when no budget covers today."""
        assert _service(LINES).budget_summary_for(100, today=date(2024, 12, 15)) is None
    
    @pytest.mark.parametrize("amount", ["abc", "NaN", "-5"])
    def test_summary_invalid_new_amount(self, amount):
        """Test an unusable new amount gives no summary instead of raising."""
        service = _service(LINES)
        service.add_budget(1000, "2024-12-01", "2024-12-31")
        assert service.budget_summary_for(amount, today=date(2024, 12, 15)) is None
    
    def test_unconvertible_new_amount_is_left_out(self):
        """Test a new gift in another currency without a rate."""
        service = _service([])
        service.add_budget(1000, "2024-12-01", "2024-12-31")
        summary, usage = service.budget_summary_for(100, currency="USD", today=date(2024, 12, 15))
        assert summary.new_amount == Decimal("0")
        assert summary.mixed_currencies
    
    def test_empty_edit_rejected(self):
        """Test an edit with no fields does nothing."""
        service = _service([])
        service.add_budget(1000, "2024-12-01", "2024-12-31")
        result = service.edit_budget(1, BudgetUpdate())
        assert not result.success
        assert result.message == "No changes specified"
    
    def test_empty_budget_list(self):
        """Test the message for an empty store."""
        assert _service([]).format_budget_list() == (
            'No budgets configured. Use "budget add" to create one.'
        )


class TestReports:
    """Tests for spending reports and toplists through the service."""
    
    def test_spending_report(self, audit):
        """Test a report over an absolute window is built and audited."""
        service = _service(LINES, audit=audit)
        report = service.spending_report("2024-12-01", "2024-12-31")
        assert report.currency_totals == {"SEK": Decimal("273"), "USD": Decimal("50")}
        assert audit.recorded_events[-1].event_type == AuditEventType.REPORT_GENERATED
    
    def test_relative_spending_report(self):
        """Test a relative window ending today."""
        service = _service(LINES)
        report = service.spending_report(unit="days", value=3, today=date(2024, 12, 5))
        assert report.from_date == date(2024, 12, 2)
        assert [e.amount for e in report.itemized] == [Decimal("50"), Decimal("188")]
    
    def test_spending_report_invalid_input(self):
        """Test boundary errors come back in the report."""
        report = _service(LINES).spending_report("2024-12-01")
        assert not report.success
        assert "Both --from and --to dates are required" in report.error
    
    def test_spending_report_missing_ledger(self):
        """Test the message for a missing gift log."""
        report = _service(None).spending_report("2024-12-01", "2024-12-31")
        assert report.success
        assert format_spending_report(report) == NO_LEDGER_MESSAGE
    
    def test_toplist_per_currency(self):
        """Test the service returns the tagged multi-currency result."""
        service = _service(LINES, persons=[PersonRecord(name="Alice", nice_score=9)])
        result = service.toplist(ToplistSort.TOTAL)
        assert result.success
        assert isinstance(result.ranking, PerCurrencyRanking)
        assert result.currencies == ["SEK", "USD"]
        assert result.person_count == 1
    
    def test_toplist_unknown_currency(self):
        """Test an unknown filter currency is reported."""
        result = _service(LINES).toplist(currency="EUR")
        assert not result.success
        assert "Available currencies: SEK, USD" in result.error
    
    def test_toplist_invalid_dates(self):
        """Test toplist date validation."""
        result = _service(LINES).toplist(from_date="2024-02-30")
        assert result.error == "Invalid date"
        result = _service(LINES).toplist(from_date="2024-12-31", to_date="2024-12-01")
        assert result.error == "From date must be before or equal to to date"
    
    def test_toplist_default_length(self):
        """Test the configured length is used when none is given."""
        lines = [f"2024-12-0{i}T10:00:00.000Z {i} SEK for P{i}" for i in range(1, 6)]
        service = GiftLedgerService(
            ledger=InMemoryLedger(lines),
            budget_storage=InMemoryBudgetStorage(),
            person_storage=InMemoryPersonStorage(),
            toplist_length=3,
        )
        assert len(service.toplist().ranking.persons) == 3
    
    def test_toplist_zero_length_rejected(self):
        """Test an explicit zero length is an error, not the default."""
        result = _service(LINES).toplist(length=0)
        assert not result.success
        assert result.error
    
    def test_toplist_currencies_follow_window(self):
        """Test the reported currencies come from the same window as the ranking."""
        result = _service(LINES).toplist(from_date="2024-12-04", to_date="2024-12-31")
        assert result.success
        assert result.currencies == ["SEK"]
        assert [p.name for p in result.ranking.persons] == ["Bob"]


class TestCreateService:
    """Tests for the settings-driven factory."""
    
    def test_create_service_uses_config_dir(self, tmp_path, monkeypatch):
        """Test the factory wires file-backed stores under the config dir."""
        monkeypatch.setenv("GIFTCALC_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("GIFTCALC_DEFAULT_CURRENCY", "eur")
        get_settings.cache_clear()
        try:
            service = create_service()
            assert service.default_currency == "EUR"
            service.log_gift(20, recipient="Eva")
            assert service.add_budget(500, "2030-01-01", "2030-01-31").success
        finally:
            get_settings.cache_clear()
        assert (tmp_path / "gift-calc.log").read_text(encoding="utf-8").endswith(" 20 EUR for Eva\n")
        assert (tmp_path / "budgets.json").exists()
