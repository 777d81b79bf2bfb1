"""Form validation package."""

from finance_tracker.validation.validator import (
    AMOUNT_PATTERN,
    TransactionFormValidator,
    ValidationFailure,
)

__all__ = ["AMOUNT_PATTERN", "TransactionFormValidator", "ValidationFailure"]
