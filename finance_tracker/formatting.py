"""Display formatting for amounts, dates and counts."""

from datetime import datetime
from typing import Optional

from finance_tracker.config import get_settings
from finance_tracker.models.transaction import Transaction


def format_amount(amount: float) -> str:
    """Format with thousands separators and two decimals, e.g. '1,234.50'."""
    return f"{amount:,.2f}"


def format_currency(amount: float, symbol: Optional[str] = None) -> str:
    """Format as a currency string, e.g. 'TSh 1,234.50'."""
    if symbol is None:
        symbol = get_settings().app.currency_symbol
    return f"{symbol} {format_amount(amount)}"


def format_signed_amount(transaction: Transaction) -> str:
    """'+' for income, '-' for expenses."""
    sign = "-" if transaction.is_expense else "+"
    return f"{sign}{format_amount(transaction.amount)}"


def format_timestamp(millis: int) -> str:
    """Local time, e.g. 'Oct 19, 2026 • 09:30 AM'."""
    return datetime.fromtimestamp(millis / 1000).strftime("%b %d, %Y • %I:%M %p")


def transaction_count_label(count: int) -> str:
    return f"{count} transaction" if count == 1 else f"{count} transactions"
