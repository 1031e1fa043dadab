"""
Entry Validation

DESIGN DECISION: Raw form input is validated before it reaches the store.
The store rejects bad amounts on its own, but it can only say "invalid".
The validator says what is wrong and how to fix it, and flags values that
are legal but suspicious.

Checks run in two groups:
- Errors block the entry (missing description, unparseable amount, ...)
- Warnings are shown but don't block (zero amount, very large amount, ...)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to act on.
"""

from decimal import Decimal
from typing import Optional, Union

from finance_tracker.config import AppSettings, get_settings
from finance_tracker.ledger import InvalidAmountError, InvalidKindError, to_amount, to_kind
from finance_tracker.models.ledger import (
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)


class EntryValidator:
    """
    Validates transaction and budget form input.

    Pure: needs no access to the store.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Initialize validator.

        Args:
            settings: Thresholds to validate against.
                      If None, the cached application settings are used.
        """
        self._settings = settings or get_settings().app

    def _check_amount(
        self,
        amount_text: Optional[Union[str, Decimal, int, float]],
        field: str,
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        """
        Parse an amount and report why it cannot be used.

        Returns: (parsed_amount_or_None, list_of_issues)
        """
        issues = []

        if amount_text is None or (isinstance(amount_text, str) and not amount_text.strip()):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.capitalize()} is required",
                severity="error",
                suggested_fix=f"Enter the {field} as a number, e.g. 12.50",
            ))
            return None, issues

        try:
            amount = to_amount(amount_text, field=field)
        except InvalidAmountError:
            issues.append(self._classify_bad_amount(amount_text, field))
            return None, issues

        if amount == 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="zero_value",
                message=f"{field.capitalize()} is zero",
                severity="warning",
                suggested_fix=f"Check the {field} was typed correctly",
            ))

        return amount, issues

    def _classify_bad_amount(
        self,
        amount_text: Union[str, Decimal, int, float],
        field: str,
    ) -> ValidationIssue:
        """Tell negative amounts apart from text that isn't a number at all."""
        try:
            value = Decimal(str(amount_text).strip())
        except ArithmeticError:
            value = None

        if value is not None and value.is_finite() and value < 0:
            return ValidationIssue(
                field=field,
                issue_type="negative",
                message=f"{field.capitalize()} cannot be negative",
                severity="error",
                suggested_fix="Pick the transaction kind instead of using a minus sign",
            )
        return ValidationIssue(
            field=field,
            issue_type="not_numeric",
            message=f"{field.capitalize()} '{amount_text}' is not a valid number",
            severity="error",
            suggested_fix="Use digits and a dot for decimals, e.g. 12.50",
        )

    def _check_text(
        self,
        value: Optional[str],
        field: str,
        max_length: int,
    ) -> list[ValidationIssue]:
        issues = []
        if value is None or not value.strip():
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.capitalize()} is required",
                severity="error",
            ))
        elif len(value.strip()) > max_length:
            issues.append(ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{field.capitalize()} is longer than {max_length} characters",
                severity="error",
                suggested_fix="Shorten it",
            ))
        return issues

    def validate_transaction_input(
        self,
        description: Optional[str],
        amount_text: Optional[Union[str, Decimal, int, float]],
        kind: Optional[Union[TransactionKind, str]],
        budget_id: Optional[object] = None,
    ) -> ValidationResult:
        """
        Validate the add-transaction form.

        Args:
            description: What the transaction was for
            amount_text: Amount as typed by the user
            kind: income, expense or investment
            budget_id: Budget picked in the form, if any

        Returns:
            ValidationResult with parsed_amount and parsed_kind set
            when they parsed cleanly
        """
        issues = self._check_text(
            description, "description", self._settings.max_description_length
        )

        amount, amount_issues = self._check_amount(amount_text, "amount")
        issues.extend(amount_issues)

        if amount is not None and amount > self._settings.max_transaction_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        parsed_kind = None
        try:
            parsed_kind = to_kind(kind) if kind is not None else None
        except InvalidKindError:
            pass
        if parsed_kind is None:
            issues.append(ValidationIssue(
                field="kind",
                issue_type="invalid_value",
                message=f"Transaction kind {kind!r} is not one of income, expense, investment",
                severity="error",
            ))

        if (
            budget_id is not None
            and parsed_kind is not None
            and parsed_kind != TransactionKind.EXPENSE
        ):
            issues.append(ValidationIssue(
                field="budget_id",
                issue_type="ignored",
                message=f"Budgets only apply to expenses; it will be ignored for {parsed_kind.value}",
                severity="warning",
            ))

        return self._build_result(issues, amount, parsed_kind)

    def validate_budget_input(
        self,
        name: Optional[str],
        limit_text: Optional[Union[str, Decimal, int, float]],
    ) -> ValidationResult:
        """Validate the create-budget form."""
        issues = self._check_text(name, "name", 200)

        limit, limit_issues = self._check_amount(limit_text, "limit")
        issues.extend(limit_issues)

        return self._build_result(issues, limit, None)

    def _build_result(
        self,
        issues: list[ValidationIssue],
        amount: Optional[Decimal],
        kind: Optional[TransactionKind],
    ) -> ValidationResult:
        warnings = [issue.message for issue in issues if issue.severity == "warning"]
        is_valid = not any(issue.severity == "error" for issue in issues)

        return ValidationResult(
            is_valid=is_valid,
            issues=issues,
            warnings=warnings,
            parsed_amount=amount,
            parsed_kind=kind,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
