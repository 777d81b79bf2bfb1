"""
SQLite Storage Implementation

DESIGN DECISION: A single local SQLite file is the only source of truth.
1. No server or setup required on the user's machine
2. One table, no foreign keys, nothing to migrate carefully
3. Incompatible schema versions are reset destructively (data is discarded)

CONCURRENCY: The connection is owned by one dedicated worker thread.
Every read and write is queued to that thread, so writes are serialized
and each query result corresponds to some point in the commit order.
The event loop only awaits the results.
"""

import asyncio
import functools
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import DatabaseSettings, get_settings
from finance_tracker.models.transaction import Transaction
from finance_tracker.reactive.live import InvalidationTracker, LiveQuery
from finance_tracker.services.storage.interface import (
    DatabaseUnavailableError,
    StorageFault,
    TransactionStoreInterface,
)


logger = structlog.get_logger(__name__)

# Bump when the table layout changes; older files are wiped on open
SCHEMA_VERSION = 1

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        amount REAL NOT NULL,
        category TEXT NOT NULL,
        isExpense INTEGER NOT NULL,
        date INTEGER NOT NULL,
        note TEXT NOT NULL DEFAULT ''
    )
"""

TRANSACTION_COLUMNS = "id, title, amount, category, isExpense, date, note"

# Same-millisecond records fall back to insertion order, newest first
SELECT_ALL_SQL = f"SELECT {TRANSACTION_COLUMNS} FROM transactions ORDER BY date DESC, id DESC"
SELECT_BY_CATEGORY_SQL = (
    f"SELECT {TRANSACTION_COLUMNS} FROM transactions "
    "WHERE category = ? ORDER BY date DESC, id DESC"
)
TOTAL_BALANCE_SQL = """
    SELECT SUM(
        CASE
            WHEN isExpense = 1 THEN -amount
            ELSE amount
        END
    ) FROM transactions
"""
TOTAL_INCOME_SQL = "SELECT SUM(amount) FROM transactions WHERE isExpense = 0"
TOTAL_EXPENSES_SQL = "SELECT SUM(amount) FROM transactions WHERE isExpense = 1"

INSERT_SQL = (
    "INSERT INTO transactions (title, amount, category, isExpense, date, note) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)
UPDATE_SQL = (
    "UPDATE transactions SET title = ?, amount = ?, category = ?, isExpense = ?, "
    "date = ?, note = ? WHERE id = ?"
)
DELETE_SQL = "DELETE FROM transactions WHERE id = ?"
DELETE_ALL_SQL = "DELETE FROM transactions"


class SQLiteDatabase:
    """
    Owner of the SQLite connection and the thread it lives on.

    The connection is opened lazily on the worker thread by the first
    operation. Use get_database() for the process-wide instance.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        settings: Optional[DatabaseSettings] = None,
    ):
        self._settings = settings or get_settings().database
        self.path = path or self._settings.path
        self._connection: Optional[sqlite3.Connection] = None
        self._closing = False
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="finance-db",
        )

    @property
    def is_closed(self) -> bool:
        return self._closing or self._closed

    def connect(self) -> sqlite3.Connection:
        """
        Get the open connection, opening it on first use.

        Must only be called on the database worker thread.

        Raises:
            DatabaseUnavailableError: If the database is closed or cannot be opened
        """
        if self._closed:
            raise DatabaseUnavailableError(f"Database is closed: {self.path}")

        if self._connection is None:
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(self._settings.connect_attempts),
                    wait=wait_exponential(multiplier=0.1, min=0.1, max=1.0),
                    retry=retry_if_exception_type(sqlite3.OperationalError),
                    reraise=True,
                ):
                    with attempt:
                        self._connection = self._open()
            except sqlite3.Error as e:
                raise DatabaseUnavailableError(
                    f"Failed to open database at {self.path}: {e}"
                ) from e
            logger.info("database_opened", path=self.path, schema_version=SCHEMA_VERSION)

        return self._connection

    def _open(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self.path,
            timeout=self._settings.timeout_seconds,
        )
        try:
            self._ensure_schema(connection)
        except sqlite3.Error:
            connection.close()
            raise
        return connection

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create the table, wiping it first if it was written by another schema version."""
        version = connection.execute("PRAGMA user_version").fetchone()[0]
        if version not in (0, SCHEMA_VERSION):
            logger.warning(
                "database_schema_reset",
                path=self.path,
                found_version=version,
                expected_version=SCHEMA_VERSION,
            )
            with connection:
                connection.execute("DROP TABLE IF EXISTS transactions")

        with connection:
            connection.execute(CREATE_TABLE_SQL)
            connection.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run `func(*args)` on the database thread and await its result."""
        if self.is_closed:
            raise DatabaseUnavailableError(f"Database is closed: {self.path}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            functools.partial(func, *args),
        )

    def _close_connection(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self._closed = True

    def close(self) -> None:
        """
        Finish queued work, close the connection and stop the worker thread.

        Blocks until the queued operations have run.
        """
        if self.is_closed:
            return
        self._closing = True
        self._executor.submit(self._close_connection).result()
        self._executor.shutdown(wait=True)
        logger.info("database_closed", path=self.path)


_instance: Optional[SQLiteDatabase] = None
_instance_lock = threading.Lock()


def get_database() -> SQLiteDatabase:
    """
    Get the process-wide database (created on first access).

    Construction happens under a lock, so concurrent first calls still
    produce exactly one instance.
    """
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = SQLiteDatabase()
    return _instance


def close_database() -> None:
    """Close the process-wide database; the next get_database() opens a new one."""
    global _instance
    with _instance_lock:
        instance, _instance = _instance, None
    if instance is not None:
        instance.close()


class SQLiteTransactionStore(TransactionStoreInterface):
    """
    SQLite implementation of the transaction store.

    Every committed mutation invalidates the live queries that are
    currently observed; a failed mutation invalidates nothing.
    """

    def __init__(self, database: Optional[SQLiteDatabase] = None):
        self._db = database or get_database()
        self._tracker = InvalidationTracker()

    @property
    def database(self) -> SQLiteDatabase:
        return self._db

    @property
    def active_query_count(self) -> int:
        """Number of live queries that currently have observers."""
        return self._tracker.active_count

    # -------------------------------------------------------------------------
    # Worker-thread helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_transaction(row: tuple) -> Transaction:
        return Transaction(
            id=row[0],
            title=row[1],
            amount=row[2],
            category=row[3],
            is_expense=bool(row[4]),
            date=row[5],
            note=row[6] or "",
        )

    def _select(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            return self._db.connect().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageFault(f"Failed to read transactions: {e}") from e

    def _select_transactions(self, sql: str, params: tuple = ()) -> list[Transaction]:
        return [self._row_to_transaction(row) for row in self._select(sql, params)]

    def _select_sum(self, sql: str) -> Optional[float]:
        value = self._select(sql)[0][0]
        return None if value is None else float(value)

    def _write(self, sql: str, params: tuple = ()) -> tuple[int, int]:
        """Execute one statement in its own transaction; returns (lastrowid, rowcount)."""
        try:
            connection = self._db.connect()
            with connection:
                cursor = connection.execute(sql, params)
            return cursor.lastrowid, cursor.rowcount
        except sqlite3.Error as e:
            raise StorageFault(f"Failed to write transactions: {e}") from e

    @staticmethod
    def _values(transaction: Transaction) -> tuple:
        return (
            transaction.title,
            transaction.amount,
            transaction.category,
            int(transaction.is_expense),
            transaction.date,
            transaction.note,
        )

    # -------------------------------------------------------------------------
    # Live queries
    # -------------------------------------------------------------------------

    def _live(self, name: str, func: Callable[..., Any], *args: Any) -> LiveQuery:
        async def fetch():
            return await self._db.run(func, *args)

        return LiveQuery(fetch, self._tracker, name=name)

    def all_transactions(self) -> LiveQuery[list[Transaction]]:
        return self._live("all_transactions", self._select_transactions, SELECT_ALL_SQL)

    def total_balance(self) -> LiveQuery[Optional[float]]:
        return self._live("total_balance", self._select_sum, TOTAL_BALANCE_SQL)

    def total_income(self) -> LiveQuery[Optional[float]]:
        return self._live("total_income", self._select_sum, TOTAL_INCOME_SQL)

    def total_expenses(self) -> LiveQuery[Optional[float]]:
        return self._live("total_expenses", self._select_sum, TOTAL_EXPENSES_SQL)

    def transactions_by_category(self, category: str) -> LiveQuery[list[Transaction]]:
        return self._live(
            f"transactions_by_category:{category}",
            self._select_transactions,
            SELECT_BY_CATEGORY_SQL,
            (category,),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def insert(self, transaction: Transaction) -> Transaction:
        row_id, _ = await self._db.run(self._write, INSERT_SQL, self._values(transaction))
        stored = transaction.with_id(row_id)
        logger.debug("transaction_inserted", transaction_id=stored.id)
        self._tracker.notify()
        return stored

    async def update(self, transaction: Transaction) -> bool:
        if transaction.id is None:
            return False
        _, changed = await self._db.run(
            self._write,
            UPDATE_SQL,
            self._values(transaction) + (transaction.id,),
        )
        if changed:
            logger.debug("transaction_updated", transaction_id=transaction.id)
            self._tracker.notify()
        return changed > 0

    async def delete(self, transaction: Transaction) -> bool:
        if transaction.id is None:
            return False
        _, changed = await self._db.run(self._write, DELETE_SQL, (transaction.id,))
        if changed:
            logger.debug("transaction_deleted", transaction_id=transaction.id)
            self._tracker.notify()
        return changed > 0

    async def delete_all(self) -> int:
        _, removed = await self._db.run(self._write, DELETE_ALL_SQL)
        logger.debug("transactions_cleared", removed=removed)
        self._tracker.notify()
        return removed
