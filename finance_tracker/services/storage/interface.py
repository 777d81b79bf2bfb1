"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the transaction store.
This allows us to:
1. Keep the repository and state layer independent of SQLite
2. Swap the storage technology without touching the reactive layer
3. Substitute a failing store in tests

Reads are live: every query returns a LiveQuery that re-emits after each
committed mutation. Writes are coroutines that run off the event loop.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from finance_tracker.models.transaction import Transaction

if TYPE_CHECKING:
    from finance_tracker.reactive.live import LiveQuery


class TransactionStoreInterface(ABC):
    """
    Abstract interface for transaction storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def all_transactions(self) -> "LiveQuery[list[Transaction]]":
        """
        Live list of every transaction, newest first (by date).
        """
        pass

    @abstractmethod
    def total_balance(self) -> "LiveQuery[Optional[float]]":
        """
        Live sum of income minus expenses.

        Emits None (not 0.0) while the table is empty.
        """
        pass

    @abstractmethod
    def total_income(self) -> "LiveQuery[Optional[float]]":
        """Live sum of non-expense amounts; None when there are none."""
        pass

    @abstractmethod
    def total_expenses(self) -> "LiveQuery[Optional[float]]":
        """Live sum of expense amounts; None when there are none."""
        pass

    @abstractmethod
    def transactions_by_category(
        self,
        category: str,
    ) -> "LiveQuery[list[Transaction]]":
        """
        Live list of transactions whose category equals `category`.

        Matching is exact and case-sensitive; newest first.
        """
        pass

    @abstractmethod
    async def insert(self, transaction: Transaction) -> Transaction:
        """
        Persist a new transaction.

        Any id on the input is ignored; a fresh, never reused id is assigned.

        Returns:
            The stored transaction with its id

        Raises:
            StorageFault: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, transaction: Transaction) -> bool:
        """
        Replace the stored transaction with the same id.

        Returns:
            True if a record was replaced, False if no record has that id
            (a no-op, not an error)

        Raises:
            StorageFault: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, transaction: Transaction) -> bool:
        """
        Remove the stored transaction with the same id.

        Returns:
            True if a record was removed, False if no record has that id

        Raises:
            StorageFault: If the write fails
        """
        pass

    @abstractmethod
    async def delete_all(self) -> int:
        """
        Remove every transaction.

        Returns:
            Number of records removed

        Raises:
            StorageFault: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageFault(StorageError):
    """A persistence operation failed (I/O, corruption, constraint violation)."""
    pass


class DatabaseUnavailableError(StorageFault):
    """The database could not be opened, or has been closed."""
    pass
