"""
Reactive State Layer

Holds what the screen shows and the actions the screen can trigger.

Flow:
1. The UI calls an action (add/update/delete/search)
2. Mutations are handed to the repository as background tasks
3. The store commits and its live queries re-emit
4. The snapshots here update, and filtered_transactions recomputes

DESIGN DECISION: This layer never validates input and never owns the
data. It caches the latest snapshots for rendering; the store is the
source of truth. Aggregates arrive as None for "no rows" and are stored
as 0.0 so the UI never sees a missing total.
"""

import asyncio
from typing import Any, Callable, Coroutine, Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.config import StateSettings, get_settings
from finance_tracker.models.transaction import BalanceSummary, Transaction, now_millis
from finance_tracker.reactive.live import (
    DerivedLiveValue,
    LiveValue,
    MutableLiveValue,
    Subscription,
)
from finance_tracker.repository import TransactionRepository
from finance_tracker.services.storage import StorageError


logger = structlog.get_logger(__name__)


def filter_transactions(
    transactions: list[Transaction],
    query: str,
) -> list[Transaction]:
    """
    Transactions whose title, category or note contains `query`.

    Matching is a case-insensitive substring test and keeps the input
    order. A blank query returns the input list itself.
    """
    if not query.strip():
        return transactions

    needle = query.lower()
    return [
        transaction
        for transaction in transactions
        if needle in transaction.title.lower()
        or needle in transaction.category.lower()
        or needle in transaction.note.lower()
    ]


def _or_zero(value: Optional[float]) -> float:
    return 0.0 if value is None else value


class FinanceState:
    """
    Snapshots and actions for the finance screen.

    Must be created on a running event loop: the four repository streams
    are subscribed in the constructor and stay subscribed until close().
    """

    def __init__(
        self,
        repository: TransactionRepository,
        settings: Optional[StateSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._settings = settings or get_settings().state
        self._audit = audit_logger or AuditLogger()

        self._transactions: MutableLiveValue[list[Transaction]] = MutableLiveValue([])
        self._total_balance = MutableLiveValue(0.0)
        self._total_income = MutableLiveValue(0.0)
        self._total_expenses = MutableLiveValue(0.0)
        self._search_query = MutableLiveValue("")
        self._last_error: MutableLiveValue[Optional[Exception]] = MutableLiveValue(None)

        self.transactions: LiveValue[list[Transaction]] = self._transactions.as_read_only()
        self.total_balance: LiveValue[float] = self._total_balance.as_read_only()
        self.total_income: LiveValue[float] = self._total_income.as_read_only()
        self.total_expenses: LiveValue[float] = self._total_expenses.as_read_only()
        self.search_query: LiveValue[str] = self._search_query.as_read_only()
        # Most recent storage failure from an action or a query refresh
        self.last_error: LiveValue[Optional[Exception]] = self._last_error.as_read_only()

        self.filtered_transactions: DerivedLiveValue[list[Transaction]] = DerivedLiveValue(
            [self._transactions, self._search_query],
            filter_transactions,
            initial=[],
            stop_timeout=self._settings.stop_timeout_seconds,
        )

        self._tasks: set[asyncio.Task] = set()
        self._closed = False
        self._subscriptions: list[Subscription[Any]] = [
            repository.all_transactions().subscribe(
                self._transactions.set, self._on_query_error
            ),
            repository.total_balance().subscribe(
                lambda value: self._total_balance.set(_or_zero(value)),
                self._on_query_error,
            ),
            repository.total_income().subscribe(
                lambda value: self._total_income.set(_or_zero(value)),
                self._on_query_error,
            ),
            repository.total_expenses().subscribe(
                lambda value: self._total_expenses.set(_or_zero(value)),
                self._on_query_error,
            ),
        ]

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def summary(self) -> BalanceSummary:
        return BalanceSummary(
            balance=self._total_balance.value,
            income=self._total_income.value,
            expenses=self._total_expenses.value,
            transaction_count=len(self._transactions.value),
        )

    # =========================================================================
    # User actions
    # =========================================================================

    def add_transaction(
        self,
        title: str,
        amount: float,
        category: str,
        is_expense: bool,
        note: str = "",
    ) -> asyncio.Task:
        """Record a new transaction dated now."""
        transaction = Transaction(
            title=title,
            amount=amount,
            category=category,
            is_expense=is_expense,
            date=now_millis(),
            note=note,
        )
        return self._launch(
            "add",
            self._repository.insert(transaction),
            self._audit.log_transaction_added,
        )

    def update_transaction(self, transaction: Transaction) -> asyncio.Task:
        def done(updated: bool) -> None:
            if updated:
                self._audit.log_transaction_updated(transaction)
            else:
                self._audit.log_transaction_not_found(transaction, "update")

        return self._launch("update", self._repository.update(transaction), done)

    def delete_transaction(self, transaction: Transaction) -> asyncio.Task:
        def done(deleted: bool) -> None:
            if deleted:
                self._audit.log_transaction_deleted(transaction)
            else:
                self._audit.log_transaction_not_found(transaction, "delete")

        return self._launch("delete", self._repository.delete(transaction), done)

    def update_search_query(self, query: str) -> None:
        self._search_query.value = query

    def clear_search(self) -> None:
        self.update_search_query("")

    def delete_all_transactions(self) -> asyncio.Task:
        return self._launch(
            "delete_all",
            self._repository.delete_all(),
            lambda _removed: self._audit.log_transactions_cleared(),
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def drain(self) -> None:
        """Wait for every action started so far to finish (successfully or not)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """
        Release the repository subscriptions and stop derived values.

        Mutations already started still run to completion, and their tasks
        still report the outcome when awaited, but they no longer touch
        last_error or the audit log.
        """
        self._closed = True
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.cancel()
        self.filtered_transactions.stop()

    # =========================================================================
    # Internals
    # =========================================================================

    def _launch(
        self,
        action: str,
        operation: Coroutine[Any, Any, Any],
        on_success: Callable[[Any], Any],
    ) -> asyncio.Task:
        """
        Run a repository mutation in the background.

        The returned task re-raises a storage failure when awaited; the
        failure is also logged and published on last_error.
        """
        task = asyncio.get_running_loop().create_task(operation)
        self._tasks.add(task)
        task.add_done_callback(
            lambda finished: self._on_action_done(action, finished, on_success)
        )
        return task

    def _on_action_done(
        self,
        action: str,
        task: asyncio.Task,
        on_success: Callable[[Any], Any],
    ) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if self._closed:
            logger.debug(
                "finance_action_finished_after_close",
                action=action,
                failed=task.exception() is not None,
            )
            return

        error = task.exception()
        if error is None:
            on_success(task.result())
        elif isinstance(error, StorageError):
            self._audit.log_storage_fault(action, error)
            self._last_error.value = error
        else:
            logger.error("finance_action_failed", action=action, error=repr(error))
            self._last_error.value = error

    def _on_query_error(self, error: Exception) -> None:
        self._last_error.value = error
