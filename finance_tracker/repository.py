"""
Transaction Repository

The state layer talks to the repository, the repository talks to the store.
Every call is forwarded unchanged: no caching, buffering or transformation
happens here, so swapping the storage technology only touches the store.
"""

from typing import Optional

from finance_tracker.models.transaction import Transaction
from finance_tracker.reactive.live import LiveQuery
from finance_tracker.services.storage import TransactionStoreInterface


class TransactionRepository:
    """Stable contract over a TransactionStoreInterface."""

    def __init__(self, store: TransactionStoreInterface):
        self._store = store

    def all_transactions(self) -> LiveQuery[list[Transaction]]:
        return self._store.all_transactions()

    def total_balance(self) -> LiveQuery[Optional[float]]:
        return self._store.total_balance()

    def total_income(self) -> LiveQuery[Optional[float]]:
        return self._store.total_income()

    def total_expenses(self) -> LiveQuery[Optional[float]]:
        return self._store.total_expenses()

    def transactions_by_category(self, category: str) -> LiveQuery[list[Transaction]]:
        return self._store.transactions_by_category(category)

    async def insert(self, transaction: Transaction) -> Transaction:
        return await self._store.insert(transaction)

    async def update(self, transaction: Transaction) -> bool:
        return await self._store.update(transaction)

    async def delete(self, transaction: Transaction) -> bool:
        return await self._store.delete(transaction)

    async def delete_all(self) -> int:
        return await self._store.delete_all()
