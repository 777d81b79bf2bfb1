"""
Storage Services Package

Provides the abstract store interface and its SQLite implementation.
"""

from finance_tracker.services.storage.interface import (
    DatabaseUnavailableError,
    StorageError,
    StorageFault,
    TransactionStoreInterface,
)
from finance_tracker.services.storage.sqlite_store import (
    SCHEMA_VERSION,
    SQLiteDatabase,
    SQLiteTransactionStore,
    close_database,
    get_database,
)

__all__ = [
    # Interfaces
    "TransactionStoreInterface",
    # Exceptions
    "DatabaseUnavailableError",
    "StorageError",
    "StorageFault",
    # SQLite implementation
    "SCHEMA_VERSION",
    "SQLiteDatabase",
    "SQLiteTransactionStore",
    "close_database",
    "get_database",
]
