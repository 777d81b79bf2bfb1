"""
Component Wiring for Personal Finance Tracker

Builds the chain the UI talks to:

    SQLiteDatabase -> SQLiteTransactionStore -> TransactionRepository -> FinanceState

Call create_app_components() once per process, from inside the running
event loop that will also drive the UI.
"""

from typing import Optional

import structlog

from finance_tracker.audit import AuditLogger, configure_logging
from finance_tracker.config import get_settings
from finance_tracker.repository import TransactionRepository
from finance_tracker.services.storage import (
    SQLiteDatabase,
    SQLiteTransactionStore,
    get_database,
)
from finance_tracker.state import FinanceState


logger = structlog.get_logger(__name__)


def create_app_components(
    database: Optional[SQLiteDatabase] = None,
) -> FinanceState:
    """
    Factory function to create all application components.

    Args:
        database: Database to use. Defaults to the process-wide database
                  at the configured path.

    Returns:
        The FinanceState the presentation layer binds to
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    database = database or get_database()
    store = SQLiteTransactionStore(database)
    repository = TransactionRepository(store)
    state = FinanceState(
        repository,
        settings=settings.state,
        audit_logger=AuditLogger(),
    )

    logger.info(
        "app_components_created",
        environment=settings.app.app_environment,
        database_path=database.path,
    )
    return state
