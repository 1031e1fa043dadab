"""Tests for entry validation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from finance_tracker.config import AppSettings
from finance_tracker.models.ledger import TransactionKind
from finance_tracker.validation import EntryValidator


@pytest.fixture
def validator(app_settings) -> EntryValidator:
    return EntryValidator(app_settings)


def issue_types(result) -> set[str]:
    return {issue.issue_type for issue in result.issues}


class TestTransactionInput:
    """Tests for validate_transaction_input."""

    def test_valid_input(self, validator):
        result = validator.validate_transaction_input("Salary", "1000.50", "income")
        assert result.is_valid is True
        assert result.issues == []
        assert result.parsed_amount == Decimal("1000.50")
        assert result.parsed_kind == TransactionKind.INCOME

    def test_blank_description(self, validator):
        """The original form ignored entries without a description."""
        result = validator.validate_transaction_input("   ", "10", "expense")
        assert result.is_valid is False
        assert "missing" in issue_types(result)

    def test_description_too_long(self, validator):
        result = validator.validate_transaction_input("x" * 201, "10", "expense")
        assert result.is_valid is False
        assert "too_long" in issue_types(result)

    def test_missing_amount(self, validator):
        result = validator.validate_transaction_input("Coffee", "", "expense")
        assert result.is_valid is False
        assert result.parsed_amount is None
        assert result.issues[0].field == "amount"

    def test_non_numeric_amount(self, validator):
        result = validator.validate_transaction_input("Coffee", "ten", "expense")
        assert result.is_valid is False
        assert "not_numeric" in issue_types(result)

    def test_negative_amount(self, validator):
        result = validator.validate_transaction_input("Coffee", "-3", "expense")
        assert result.is_valid is False
        assert "negative" in issue_types(result)

    def test_nan_amount(self, validator):
        result = validator.validate_transaction_input("Coffee", "NaN", "expense")
        assert "not_numeric" in issue_types(result)

    def test_zero_amount_is_a_warning(self, validator):
        result = validator.validate_transaction_input("Free sample", "0", "expense")
        assert result.is_valid is True
        assert result.parsed_amount == Decimal("0")
        assert result.warnings == ["Amount is zero"]

    def test_large_amount_is_a_warning(self):
        validator = EntryValidator(AppSettings(_env_file=None, max_transaction_amount=Decimal("500")))
        result = validator.validate_transaction_input("TV", "501", "expense")
        assert result.is_valid is True
        assert "suspicious_value" in issue_types(result)

    def test_unknown_kind(self, validator):
        result = validator.validate_transaction_input("Gift", "10", "donation")
        assert result.is_valid is False
        assert result.parsed_kind is None
        assert "invalid_value" in issue_types(result)

    def test_missing_kind(self, validator):
        result = validator.validate_transaction_input("Gift", "10", None)
        assert result.is_valid is False

    def test_budget_on_income_is_a_warning(self, validator):
        result = validator.validate_transaction_input("Salary", "10", "income", uuid4())
        assert result.is_valid is True
        assert "ignored" in issue_types(result)

    def test_budget_on_expense_is_fine(self, validator):
        result = validator.validate_transaction_input("Market", "10", "expense", uuid4())
        assert result.issues == []

    def test_collects_every_error(self, validator):
        result = validator.validate_transaction_input("", "abc", "nope")
        assert result.error_count == 3


class TestBudgetInput:
    """Tests for validate_budget_input."""

    def test_valid_budget(self, validator):
        result = validator.validate_budget_input("Groceries", "200")
        assert result.is_valid is True
        assert result.parsed_amount == Decimal("200")
        assert result.parsed_kind is None

    def test_blank_name(self, validator):
        result = validator.validate_budget_input("", "200")
        assert result.is_valid is False
        assert result.issues[0].field == "name"

    def test_negative_limit(self, validator):
        result = validator.validate_budget_input("Groceries", "-200")
        assert result.is_valid is False
        assert result.issues[0].field == "limit"
        assert result.issues[0].message == "Limit cannot be negative"

    def test_zero_limit_is_a_warning(self, validator):
        result = validator.validate_budget_input("Nothing", "0")
        assert result.is_valid is True
        assert result.warnings == ["Limit is zero"]


class TestUserFriendlySummary:
    """Tests for get_user_friendly_summary."""

    def test_all_passed(self, validator):
        result = validator.validate_budget_input("Groceries", "200")
        assert validator.get_user_friendly_summary(result) == "✅ All checks passed."

    def test_errors_with_fixes(self, validator):
        result = validator.validate_transaction_input("Coffee", "abc", "expense")
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following" in summary
        assert "is not a valid number" in summary
        assert "💡" in summary

    def test_warnings_only(self, validator):
        result = validator.validate_budget_input("Nothing", "0")
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("⚠️ Please verify the following:")
        assert "Limit is zero" in summary
