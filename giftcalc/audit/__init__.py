"""Audit logging package."""

from giftcalc.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
