"""
Add/Edit Form Validation

DESIGN DECISION: Validation happens at the form boundary ONLY.
The state layer and the store accept whatever they are given, so this
is the one place where a blank title or a non-positive amount is caught.

Checks:
- Title must not be blank
- Amount must be a plain decimal with at most two fractional digits
- Amount must be greater than zero
- Category must not be blank

Unusually large amounts and categories outside the suggested list are
reported but do not block the save.

IMPORTANT: Validation NEVER silently fixes issues (beyond trimming
surrounding whitespace). It reports them for the user to correct.
"""

import re
from typing import Any, Optional

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.transaction import (
    TransactionCategory,
    ValidationIssue,
    ValidationResult,
)


AMOUNT_PATTERN = re.compile(r"^\d*\.?\d{0,2}$")


class ValidationFailure(Exception):
    """Form input was rejected; `result` holds every issue found."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid transaction: {messages}")


class TransactionFormValidator:
    """Validates raw add/edit form input before an action is invoked."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate(
        self,
        title: str,
        amount_text: str,
        category: str,
    ) -> ValidationResult:
        """Check the fields the form requires; the note and type toggle are free."""
        issues: list[ValidationIssue] = []

        if not title.strip():
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title is required",
                severity="error",
                suggested_fix="Describe what the money was for",
            ))

        issues.extend(self._validate_amount(amount_text))

        if not category.strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix=f"Pick one of: {', '.join(TransactionCategory.labels())}",
            ))
        elif category.strip() not in TransactionCategory.labels():
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_category",
                message=f"'{category.strip()}' is not one of the suggested categories",
                severity="info",
            ))

        return ValidationResult(issues=issues)

    def _validate_amount(self, amount_text: str) -> list[ValidationIssue]:
        text = amount_text.strip()

        if not text:
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            )]

        if not AMOUNT_PATTERN.match(text) or text == ".":
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"'{text}' is not a valid amount",
                severity="error",
                suggested_fix="Use digits with at most two decimal places, e.g. 1250.50",
            )]

        amount = float(text)
        if amount <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            )]

        if amount > self._settings.max_transaction_amount:
            return [ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount {amount:,.2f} is unusually large",
                severity="warning",
                suggested_fix="Please verify the amount is correct",
            )]

        return []

    def parse(
        self,
        title: str,
        amount_text: str,
        category: str,
        is_expense: bool = True,
        note: str = "",
    ) -> dict[str, Any]:
        """
        Validate and convert form input to add_transaction() arguments.

        Raises:
            ValidationFailure: If any error-level issue was found
        """
        result = self.validate(title, amount_text, category)
        if result.has_errors:
            raise ValidationFailure(result)

        return {
            "title": title.strip(),
            "amount": float(amount_text.strip()),
            "category": category.strip(),
            "is_expense": is_expense,
            "note": note.strip(),
        }
