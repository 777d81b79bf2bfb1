"""
Pytest Configuration and Shared Fixtures

Every test gets its own SQLite file under pytest's tmp_path.
"""

import pytest

from finance_tracker.config import DatabaseSettings, get_settings
from finance_tracker.models import Transaction
from finance_tracker.services.storage import SQLiteDatabase, SQLiteTransactionStore


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached process-wide; start and end every test clean."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "finance.db")


@pytest.fixture
def database(db_path):
    db = SQLiteDatabase(db_path, settings=DatabaseSettings(path=db_path))
    yield db
    db.close()


@pytest.fixture
def store(database) -> SQLiteTransactionStore:
    return SQLiteTransactionStore(database)


@pytest.fixture
def salary() -> Transaction:
    return Transaction(
        title="Salary",
        amount=50000,
        category="Salary",
        is_expense=False,
        date=1_700_000_000_000,
    )


@pytest.fixture
def groceries() -> Transaction:
    return Transaction(
        title="Groceries",
        amount=10000,
        category="Food",
        is_expense=True,
        date=1_700_000_100_000,
        note="weekly market run",
    )
