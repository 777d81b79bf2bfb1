"""
Audit Logger

DESIGN DECISION: Every mutation the user triggers is logged.
This provides:
1. Traceability of what was added, edited and removed
2. Visibility of edits/deletes that matched nothing
3. A record of storage faults, which are never silently dropped

Audit events go to the structured local log only; the transaction table
is the one thing this application persists.
"""

import logging
import sys

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finance_tracker.models.transaction import Transaction


def configure_logging(log_level: str = "INFO") -> None:
    """Route structlog through stdlib logging and render JSON lines."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
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
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """Writes audit events to the structured log at their own severity."""

    def __init__(self, logger=None):
        """
        Initialize audit logger.

        Args:
            logger: Bound structlog logger to write to.
                    Defaults to the "finance_tracker.audit" logger.
        """
        self._logger = logger or structlog.get_logger("finance_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_transaction_added(self, transaction: Transaction) -> None:
        self.log(AuditEventBuilder.transaction_added(transaction))

    def log_transaction_updated(self, transaction: Transaction) -> None:
        self.log(AuditEventBuilder.transaction_updated(transaction))

    def log_transaction_deleted(self, transaction: Transaction) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction))

    def log_transactions_cleared(self) -> None:
        self.log(AuditEventBuilder.transactions_cleared())

    def log_transaction_not_found(self, transaction: Transaction, action: str) -> None:
        """An update or delete matched no stored record."""
        self.log(AuditEventBuilder.transaction_not_found(transaction, action))

    def log_storage_fault(self, action: str, error: Exception) -> None:
        self.log(AuditEventBuilder.storage_fault(action, error))
