"""
Tests for the Gift Calculator models

Test strategy:
1. Unit tests for the pydantic models (validation, aliases, derived values)
2. Engine tests live next to this module, one file per component
3. No real config directory is touched (tmp_path for file-backed stores)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import ValidationError

from giftcalc.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Budget,
    BudgetBook,
    BudgetStatus,
    BudgetSummary,
    BudgetUpdate,
    LedgerEntry,
    PersonRecord,
    ValidationIssue,
    ValidationResult,
    person_key,
)


def _entry(**overrides) -> LedgerEntry:
    values = dict(
        timestamp=datetime(2024, 12, 1, 10, 0, tzinfo=timezone.utc),
        amount=Decimal("100"),
        currency="SEK",
        recipient="Alice",
        raw_text="100 SEK for Alice",
    )
    values.update(overrides)
    return LedgerEntry(**values)


def _budget(**overrides) -> Budget:
    values = dict(
        id=1,
        total_amount=Decimal("5000"),
        from_date=date(2024, 12, 1),
        to_date=date(2024, 12, 31),
        description="Christmas",
    )
    values.update(overrides)
    return Budget(**values)


class TestLedgerEntry:
    """Tests for the parsed ledger line model."""
    
    def test_entry_creation(self):
        """Test LedgerEntry model creation."""
        entry = _entry()
        assert entry.amount == Decimal("100")
        assert entry.currency == "SEK"
        assert entry.day == date(2024, 12, 1)
    
    def test_entry_is_frozen(self):
        """Test that parsed entries cannot be modified."""
        entry = _entry()
        with pytest.raises(ValidationError):
            entry.amount = Decimal("1")
    
    def test_entry_rejects_lowercase_currency(self):
        """Test that currency codes must be three uppercase letters."""
        with pytest.raises(ValidationError):
            _entry(currency="sek")
    
    def test_entry_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            _entry(amount=Decimal("-1"))
    
    def test_is_for_ignores_case(self):
        """Test recipient matching is case-insensitive."""
        entry = _entry(recipient="Alice")
        assert entry.is_for("alice")
        assert entry.is_for(" ALICE ")
        assert not entry.is_for("Bob")
    
    def test_entry_without_recipient_matches_nobody(self):
        """Test that an entry with no recipient never matches."""
        entry = _entry(recipient=None, raw_text="100 SEK")
        assert not entry.is_for("Alice")
    
    def test_is_for_agrees_with_registry_key(self):
        """Test ledger matching folds names the same way as registry keys."""
        entry = _entry(recipient="Straße", raw_text="100 SEK for Straße")
        assert entry.is_for("STRASSE")
        assert person_key("STRASSE") == person_key("Straße")


class TestBudgetModels:
    """Tests for budget models."""
    
    def test_budget_creation(self):
        """Test Budget model creation."""
        budget = _budget()
        assert budget.total_days == 31
        assert budget.created_at.tzinfo is not None
    
    def test_budget_rejects_inverted_period(self):
        """Test that a period ending before it starts is rejected."""
        with pytest.raises(ValidationError) as exc:
            _budget(from_date=date(2024, 12, 31), to_date=date(2024, 12, 1))
        assert "From date must be before or equal to to date" in str(exc.value)
    
    def test_budget_allows_single_day_period(self):
        """Test that from == to is a valid one-day budget."""
        budget = _budget(from_date=date(2024, 12, 24), to_date=date(2024, 12, 24))
        assert budget.total_days == 1
    
    def test_budget_rejects_non_positive_amount(self):
        """Test that zero and negative totals are rejected."""
        with pytest.raises(ValidationError):
            _budget(total_amount=Decimal("0"))
    
    def test_budget_default_description(self):
        """Test that an empty description falls back to the id."""
        budget = _budget(id=7, description="")
        assert budget.description == "Budget 7"
    
    def test_budget_serializes_camel_case(self):
        """Test that budgets persist with camelCase keys."""
        data = _budget().model_dump(mode="json", by_alias=True)
        assert data["totalAmount"] == "5000"
        assert data["fromDate"] == "2024-12-01"
        assert data["toDate"] == "2024-12-31"
        assert "createdAt" in data
    
    def test_budget_book_loads_camel_case(self):
        """Test that a stored snapshot validates from its JSON shape."""
        book = BudgetBook.model_validate({
            "budgets": [{
                "id": 1,
                "totalAmount": 1000,
                "fromDate": "2025-09-01",
                "toDate": "2025-09-30",
                "description": "September",
            }],
            "nextId": 2,
        })
        assert book.next_id == 2
        assert book.find(1).total_amount == Decimal("1000")
        assert book.find(2) is None
    
    def test_status_boundaries(self):
        """Test ACTIVE on both boundary days, FUTURE before, EXPIRED after."""
        budget = _budget()
        assert budget.status_on(date(2024, 11, 30)) == BudgetStatus.FUTURE
        assert budget.status_on(date(2024, 12, 1)) == BudgetStatus.ACTIVE
        assert budget.status_on(date(2024, 12, 31)) == BudgetStatus.ACTIVE
        assert budget.status_on(date(2025, 1, 1)) == BudgetStatus.EXPIRED
    
    def test_overlap_includes_touching_days(self):
        """Test that sharing a single boundary day counts as overlap."""
        budget = _budget()
        assert budget.overlaps(date(2024, 12, 31), date(2025, 1, 15))
        assert budget.overlaps(date(2024, 11, 1), date(2024, 12, 1))
        assert not budget.overlaps(date(2025, 1, 1), date(2025, 1, 31))
    
    def test_budget_update_is_empty(self):
        """Test detection of an edit that changes nothing."""
        assert BudgetUpdate().is_empty
        assert not BudgetUpdate(description="New").is_empty
        assert BudgetUpdate(to_date="2025-01-31").changes_dates


class TestPersonRecord:
    """Tests for the person registry model."""
    
    def test_person_from_camel_case(self):
        """Test loading a stored person profile."""
        person = PersonRecord.model_validate({
            "name": "Alice",
            "niceScore": 9,
            "friendScore": 8,
            "baseValue": 100,
            "currency": "sek",
        })
        assert person.nice_score == 9
        assert person.friend_score == 8
        assert person.currency == "SEK"
        assert person.key == "alice"
    
    def test_person_rejects_out_of_range_scores(self):
        """Test score ranges (nice 0-10, friend 1-10)."""
        with pytest.raises(ValidationError):
            PersonRecord(name="Alice", nice_score=11)
        with pytest.raises(ValidationError):
            PersonRecord(name="Alice", friend_score=0)


class TestReportModels:
    """Tests for derived read models."""
    
    def test_budget_summary_within_budget(self):
        """Test used/over figures when there is money left."""
        summary = BudgetSummary(
            budget_amount=Decimal("1000"),
            previously_spent=Decimal("300"),
            new_amount=Decimal("150"),
            remaining=Decimal("550"),
            remaining_days=10,
            ends_on=date(2024, 12, 31),
            currency="SEK",
        )
        assert summary.used == Decimal("450")
        assert not summary.over_budget
        assert summary.over_by == Decimal("0")
    
    def test_budget_summary_over_budget(self):
        """Test over_by is the absolute value of a negative remainder."""
        summary = BudgetSummary(
            budget_amount=Decimal("500"),
            previously_spent=Decimal("450"),
            new_amount=Decimal("100"),
            remaining=Decimal("-50"),
            remaining_days=3,
            ends_on=date(2024, 12, 31),
            currency="SEK",
        )
        assert summary.over_budget
        assert summary.over_by == Decimal("50")


class TestValidationModels:
    """Tests for validation result models."""
    
    def test_validation_result_no_issues(self):
        """Test ValidationResult with no issues."""
        result = ValidationResult()
        assert result.is_valid
        assert result.error_message is None
    
    def test_validation_result_with_errors(self):
        """Test ValidationResult with errors."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="to_date",
                issue_type="invalid_date",
                message="To date error: Invalid date",
            ),
        ])
        assert result.has_errors
        assert result.error_message == "To date error: Invalid date"
    
    def test_warnings_do_not_invalidate(self):
        """Test that warning-level issues leave the result valid."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="period",
                issue_type="long_period",
                message="Very long period",
                severity="warning",
            ),
        ])
        assert result.is_valid


class TestAuditModels:
    """Tests for audit event models."""
    
    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_ADDED,
            description="Budget added: Christmas",
        )
        assert event.event_type == AuditEventType.BUDGET_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
    
    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Could not save budgets store",
            error_message="disk full",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "save_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "disk full"
    
    def test_audit_builder_budget_added(self):
        """Test AuditEventBuilder for budget additions."""
        event = AuditEventBuilder.budget_added(
            budget_id=3,
            description="Christmas",
            amount="5000",
            from_date="2024-12-01",
            to_date="2024-12-31",
        )
        assert event.event_type == AuditEventType.BUDGET_ADDED
        assert event.entity_type == "budget"
        assert event.entity_id == "3"
        assert event.details["amount"] == "5000"
    
    def test_audit_builder_store_fallback(self):
        """Test AuditEventBuilder for a discarded store file."""
        event = AuditEventBuilder.store_fallback(
            store="budgets",
            path="/tmp/budgets.json",
            reason="Expecting value",
        )
        assert event.event_type == AuditEventType.STORE_FALLBACK
        assert event.severity == AuditSeverity.WARNING
        assert event.details["path"] == "/tmp/budgets.json"
