"""
Core Data Models for Personal Finance Tracker

These models define the schemas for everything flowing between the store,
the repository and the reactive state layer.

DESIGN DECISION: The store does NOT validate business rules.
A Transaction accepts any title/amount/category the caller provides;
non-blank titles and positive amounts are checked at the form boundary
(see finance_tracker.validation). Records are frozen so that a snapshot
handed to an observer can never change underneath it.
"""

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


# =============================================================================
# ENUMS - Suggested values
# =============================================================================

class TransactionCategory(str, Enum):
    """
    Categories offered by the add/edit form.

    Category on a Transaction is free text; these are only suggestions.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills"
    SALARY = "Salary"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"

    @classmethod
    def labels(cls) -> list[str]:
        return [category.value for category in cls]


DEFAULT_CATEGORY = TransactionCategory.FOOD


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One income or expense entry.

    `id` is None until the store assigns one on insert and never changes
    afterwards. `date` is stamped at creation and is not edited by the
    current flows.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(
        default=None,
        description="Store-assigned identifier, None before insert"
    )
    title: str = Field(
        ...,
        description="What the money was for (e.g., 'Grocery Shopping')"
    )
    amount: float = Field(
        ...,
        description="Positive amount by convention; the sign comes from is_expense"
    )
    category: str = Field(
        ...,
        description="Free-form category label"
    )
    is_expense: bool = Field(
        default=True,
        description="True = money out, False = money in"
    )
    date: int = Field(
        default_factory=now_millis,
        description="Creation timestamp in epoch milliseconds"
    )
    note: str = Field(
        default="",
        description="Optional additional details"
    )

    @property
    def signed_amount(self) -> float:
        """Amount with its sign applied: negative for expenses."""
        return -self.amount if self.is_expense else self.amount

    def with_id(self, transaction_id: int) -> "Transaction":
        return self.model_copy(update={"id": transaction_id})


class BalanceSummary(BaseModel):
    """
    Aggregate totals shown on the balance card.

    Values are never None: "no rows" has already been mapped to 0.0.
    """
    model_config = ConfigDict(frozen=True)

    balance: float = 0.0
    income: float = 0.0
    expenses: float = 0.0
    transaction_count: int = Field(default=0, ge=0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating an add/edit form submission."""

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any blocking errors."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def issues_for(self, field: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == field]
