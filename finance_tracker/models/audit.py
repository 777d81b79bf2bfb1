"""
Audit Models for Personal Finance Tracker

Every mutation reaching the store is described by an AuditEvent so that the
log shows what the user did and what the store made of it.

DESIGN DECISION: Updates and deletes that match no record are NOT errors,
but they are audited at warning level so caller mistakes stay visible.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_tracker.models.transaction import Transaction


class AuditEventType(str, Enum):
    """Types of events we audit."""
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    STORAGE_FAULT = "storage_fault"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audited action."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    transaction_id: Optional[int] = Field(
        default=None,
        description="Affected transaction, when there is exactly one"
    )
    description: str
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten to keyword arguments for a structured log call."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "transaction_id": self.transaction_id,
            "description": self.description,
            "details": self.details,
        }


class AuditEventBuilder:
    """Factory methods for the events the state layer emits."""

    @staticmethod
    def transaction_added(transaction: Transaction) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            transaction_id=transaction.id,
            description=f"Added {'expense' if transaction.is_expense else 'income'} '{transaction.title}'",
            details={
                "amount": transaction.amount,
                "category": transaction.category,
            },
        )

    @staticmethod
    def transaction_updated(transaction: Transaction) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            transaction_id=transaction.id,
            description=f"Updated transaction '{transaction.title}'",
            details={
                "amount": transaction.amount,
                "category": transaction.category,
                "is_expense": transaction.is_expense,
            },
        )

    @staticmethod
    def transaction_deleted(transaction: Transaction) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            transaction_id=transaction.id,
            description=f"Deleted transaction '{transaction.title}'",
        )

    @staticmethod
    def transactions_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All transactions deleted",
        )

    @staticmethod
    def transaction_not_found(transaction: Transaction, action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            transaction_id=transaction.id,
            description=f"{action.capitalize()} matched no stored transaction; nothing changed",
            details={"action": action},
        )

    @staticmethod
    def storage_fault(action: str, error: Exception) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAULT,
            severity=AuditSeverity.ERROR,
            description=f"{action.capitalize()} failed: {error}",
            details={
                "action": action,
                "error_type": type(error).__name__,
            },
        )
