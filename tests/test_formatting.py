"""Tests for display formatting helpers."""

import re

from finance_tracker.config import get_settings
from finance_tracker.formatting import (
    format_amount,
    format_currency,
    format_signed_amount,
    format_timestamp,
    transaction_count_label,
)
from finance_tracker.models import Transaction


class TestAmounts:
    """Tests for amount and currency strings."""

    def test_format_amount_groups_thousands(self):
        """Amounts get thousands separators and two decimals."""
        assert format_amount(1234.5) == "1,234.50"
        assert format_amount(0) == "0.00"
        assert format_amount(50000) == "50,000.00"

    def test_format_currency_uses_configured_symbol(self):
        """The default symbol is TSh; an explicit one wins."""
        assert format_currency(40000) == "TSh 40,000.00"
        assert format_currency(12.3, symbol="KES") == "KES 12.30"

    def test_format_currency_reads_environment(self, monkeypatch):
        """CURRENCY_SYMBOL overrides the default symbol."""
        monkeypatch.setenv("CURRENCY_SYMBOL", "USD")
        get_settings.cache_clear()
        assert format_currency(1) == "USD 1.00"

    def test_format_signed_amount(self):
        """Expenses are shown with a minus, income with a plus."""
        expense = Transaction(title="Rent", amount=300000, category="Bills")
        income = Transaction(title="Salary", amount=50000, category="Salary", is_expense=False)
        assert format_signed_amount(expense) == "-300,000.00"
        assert format_signed_amount(income) == "+50,000.00"


class TestLabels:
    """Tests for date and count labels."""

    def test_format_timestamp_shape(self):
        """Timestamps render as 'Mon DD, YYYY • HH:MM AM'."""
        text = format_timestamp(1_700_000_000_000)
        assert re.fullmatch(r"[A-Z][a-z]{2} \d{2}, \d{4} • \d{2}:\d{2} (AM|PM)", text)
        assert "2023" in text

    def test_transaction_count_label(self):
        """Only a count of one is singular."""
        assert transaction_count_label(0) == "0 transactions"
        assert transaction_count_label(1) == "1 transaction"
        assert transaction_count_label(2) == "2 transactions"
