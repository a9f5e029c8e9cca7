"""
Audit Models for the Gift Calculator

Every mutation of persisted state, and every time the system falls back
to a degraded path, is described by an AuditEvent. This provides:
1. Traceability of budget changes
2. Visible warnings when a store file was corrupt or unreadable
3. Debugging information when a save fails
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Budgets
    BUDGET_ADDED = "budget_added"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_REJECTED = "budget_rejected"
    
    # Persistence
    SAVE_FAILED = "save_failed"
    STORE_FALLBACK = "store_fallback"
    LEDGER_READ_FAILED = "ledger_read_failed"
    
    # Read models
    REPORT_GENERATED = "report_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""
    
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    
    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'store', 'report')"
    )
    entity_id: Optional[str] = None
    
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.budget_added(budget_id, description, amount)
        event = AuditEventBuilder.store_fallback("budgets", path, reason)
    """
    
    @staticmethod
    def budget_added(
        budget_id: int,
        description: str,
        amount: str,
        from_date: str,
        to_date: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_ADDED,
            entity_type="budget",
            entity_id=str(budget_id),
            description=f"Budget added: {description}",
            details={
                "amount": amount,
                "from_date": from_date,
                "to_date": to_date,
            },
        )
    
    @staticmethod
    def budget_updated(
        budget_id: int,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            entity_id=str(budget_id),
            description=f"Budget {budget_id} updated: {', '.join(changed_fields) or 'no changes'}",
            details={
                "changed_fields": changed_fields,
            },
        )
    
    @staticmethod
    def budget_rejected(
        reason: str,
        budget_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            entity_id=str(budget_id) if budget_id is not None else None,
            description="Budget change rejected",
            error_message=reason,
        )
    
    @staticmethod
    def save_failed(
        store: str,
        path: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=store,
            description=f"Could not save {store} store",
            details={"path": path},
            error_message=error_message,
        )
    
    @staticmethod
    def store_fallback(
        store: str,
        path: str,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            entity_id=store,
            description=f"Could not parse {store} file, starting with an empty {store} store",
            details={"path": path},
            error_message=reason,
        )
    
    @staticmethod
    def ledger_read_failed(
        path: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Could not read gift log",
            details={"path": path},
            error_message=error_message,
        )
    
    @staticmethod
    def report_generated(
        report: str,
        entry_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            severity=AuditSeverity.DEBUG,
            entity_type="report",
            entity_id=report,
            description=f"{report} built from {entry_count} ledger entries",
            details={"entry_count": entry_count},
        )
