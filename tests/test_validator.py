"""Tests for add/edit form validation."""

import pytest

from finance_tracker.config import AppSettings
from finance_tracker.validation import (
    AMOUNT_PATTERN,
    TransactionFormValidator,
    ValidationFailure,
)


@pytest.fixture
def validator():
    return TransactionFormValidator(settings=AppSettings(max_transaction_amount=1000000))


def issue_types(result, field):
    return [issue.issue_type for issue in result.issues_for(field)]


class TestAmountPattern:
    """Tests for the accepted amount shapes."""

    @pytest.mark.parametrize("text", ["0", "12", "12.5", "12.50", ".5", "5.", ""])
    def test_accepted_shapes(self, text):
        """Digits with an optional point and up to two decimals pass."""
        assert AMOUNT_PATTERN.match(text)

    @pytest.mark.parametrize("text", ["12.345", "-5", "1e5", "abc", "1,000", "1.2.3", " 5"])
    def test_rejected_shapes(self, text):
        """Signs, exponents, separators and extra decimals fail."""
        assert AMOUNT_PATTERN.match(text) is None


class TestTransactionFormValidator:
    """Tests for form validation."""

    def test_valid_input_has_no_issues(self, validator):
        """Well-formed input produces no issues."""
        result = validator.validate("Groceries", "10000", "Food")
        assert result.is_valid is True
        assert result.issues == []

    def test_blank_title_is_an_error(self, validator):
        """A blank title is rejected."""
        result = validator.validate("   ", "10", "Food")
        assert result.has_errors is True
        assert issue_types(result, "title") == ["missing"]

    def test_blank_amount_is_an_error(self, validator):
        """A blank amount is rejected."""
        result = validator.validate("Tea", "  ", "Food")
        assert issue_types(result, "amount") == ["missing"]

    @pytest.mark.parametrize("text", ["12.345", "-5", "abc", ".", "1e3"])
    def test_malformed_amount_is_an_error(self, validator, text):
        """Amounts not matching the pattern are rejected."""
        result = validator.validate("Tea", text, "Food")
        assert issue_types(result, "amount") == ["invalid_format"]
        assert result.has_errors is True

    @pytest.mark.parametrize("text", ["0", "0.00", "0."])
    def test_non_positive_amount_is_an_error(self, validator, text):
        """Zero amounts are rejected."""
        result = validator.validate("Tea", text, "Food")
        assert issue_types(result, "amount") == ["invalid_value"]

    def test_large_amount_is_only_a_warning(self, validator):
        """Amounts above the threshold only warn."""
        result = validator.validate("Car", "2000000", "Shopping")
        assert result.has_errors is False
        issue = result.issues_for("amount")[0]
        assert issue.issue_type == "suspicious_value"
        assert issue.severity == "warning"

    def test_blank_category_is_an_error(self, validator):
        """A blank category is rejected."""
        result = validator.validate("Tea", "5", " ")
        assert issue_types(result, "category") == ["missing"]

    def test_custom_category_is_informational(self, validator):
        """Unlisted categories are allowed with a note."""
        result = validator.validate("Gift", "5", "Presents")
        assert result.has_errors is False
        assert result.issues_for("category")[0].severity == "info"

    def test_every_problem_is_reported_at_once(self, validator):
        """All errors come back together."""
        result = validator.validate("", "abc", "")
        assert result.error_count == 3


class TestParse:
    """Tests for turning form input into action arguments."""

    def test_parse_trims_and_converts(self, validator):
        """Fields are trimmed and the amount becomes a float."""
        values = validator.parse("  Groceries ", " 10000.50 ", " Food ", True, " market ")
        assert values == {
            "title": "Groceries",
            "amount": 10000.5,
            "category": "Food",
            "is_expense": True,
            "note": "market",
        }

    def test_parse_raises_with_all_errors(self, validator):
        """Errors raise ValidationFailure carrying the result."""
        with pytest.raises(ValidationFailure) as excinfo:
            validator.parse("", "0", "Food")
        assert excinfo.value.result.error_count == 2
        assert "Title is required" in str(excinfo.value)

    def test_parse_allows_warnings(self, validator):
        """Warnings do not block parsing."""
        values = validator.parse("Car", "2000000", "Shopping", False)
        assert values["amount"] == 2000000.0
        assert values["is_expense"] is False

    def test_note_and_type_pass_through_unchecked(self, validator):
        """The note and the expense flag never produce issues."""
        values = validator.parse("Gift", "25", "Other", False, "x" * 500)
        assert values["note"] == "x" * 500
        assert values["is_expense"] is False
        assert validator.validate("Gift", "25", "Other").issues == []
