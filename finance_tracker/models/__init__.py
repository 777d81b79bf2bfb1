"""
Data Models Package

This package contains all Pydantic models used in the Personal Finance Tracker.
"""

from finance_tracker.models.transaction import (
    DEFAULT_CATEGORY,
    BalanceSummary,
    Transaction,
    TransactionCategory,
    ValidationIssue,
    ValidationResult,
    now_millis,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "DEFAULT_CATEGORY",
    "BalanceSummary",
    "Transaction",
    "TransactionCategory",
    "ValidationIssue",
    "ValidationResult",
    "now_millis",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
