"""
Audit Logger

DESIGN DECISION: Every budget mutation and every degraded path is logged.
This provides:
1. Traceability of budget changes
2. Loud warnings when persisted state had to be discarded
3. Debugging capability when a save fails

The audit logger:
- Is synchronous, like the rest of the engine
- Never raises (a logging failure must not abort a command)
- Can keep events in memory for callers that want to show them
"""

import logging
from typing import Optional

import structlog

from giftcalc.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog on top of the stdlib logging module.
    
    Front ends call this once at startup; the defaults below are applied
    at import time so library use without configuration still works.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    logging.getLogger("giftcalc").setLevel(level.upper())


configure_logging()


class AuditLogger:
    """
    Central audit logging service.
    
    Logs events to the structured local log and, when `keep_events` is
    set, remembers them in `recorded_events`.
    """
    
    def __init__(self, keep_events: bool = False):
        self._keep_events = keep_events
        self._events: list[AuditEvent] = []
        self._logger = structlog.get_logger("giftcalc.audit")
    
    @property
    def recorded_events(self) -> list[AuditEvent]:
        return list(self._events)
    
    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.
        
        Returns False if the event could not be written locally.
        """
        if self._keep_events:
            self._events.append(event)
        
        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger("giftcalc.audit").error(
                "audit logging failed: %s", e
            )
            return False
        return True
    
    def log_budget_added(
        self,
        budget_id: int,
        description: str,
        amount: str,
        from_date: str,
        to_date: str,
    ) -> None:
        """Log a new budget."""
        self.log(AuditEventBuilder.budget_added(
            budget_id=budget_id,
            description=description,
            amount=amount,
            from_date=from_date,
            to_date=to_date,
        ))
    
    def log_budget_updated(self, budget_id: int, changed_fields: list[str]) -> None:
        """Log a budget edit."""
        self.log(AuditEventBuilder.budget_updated(
            budget_id=budget_id,
            changed_fields=changed_fields,
        ))
    
    def log_budget_rejected(self, reason: str, budget_id: Optional[int] = None) -> None:
        """Log a rejected add or edit."""
        self.log(AuditEventBuilder.budget_rejected(
            reason=reason,
            budget_id=budget_id,
        ))
    
    def log_save_failed(self, store: str, path: str, error_message: str) -> None:
        """Log a failed store write."""
        self.log(AuditEventBuilder.save_failed(
            store=store,
            path=path,
            error_message=error_message,
        ))
    
    def log_store_fallback(self, store: str, path: str, reason: str) -> None:
        """Log that a corrupt store was replaced by an empty one."""
        self.log(AuditEventBuilder.store_fallback(
            store=store,
            path=path,
            reason=reason,
        ))
    
    def log_ledger_read_failed(self, path: str, error_message: str) -> None:
        self.log(AuditEventBuilder.ledger_read_failed(
            path=path,
            error_message=error_message,
        ))
    
    def log_report_generated(self, report: str, entry_count: int) -> None:
        self.log(AuditEventBuilder.report_generated(
            report=report,
            entry_count=entry_count,
        ))
