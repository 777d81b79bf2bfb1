"""Services package."""

from finance_tracker.services.storage import (
    DatabaseUnavailableError,
    SQLiteDatabase,
    SQLiteTransactionStore,
    StorageError,
    StorageFault,
    TransactionStoreInterface,
    close_database,
    get_database,
)

__all__ = [
    # Storage services
    "DatabaseUnavailableError",
    "SQLiteDatabase",
    "SQLiteTransactionStore",
    "StorageError",
    "StorageFault",
    "TransactionStoreInterface",
    "close_database",
    "get_database",
]
