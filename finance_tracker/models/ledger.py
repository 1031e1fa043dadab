"""
Core Data Models for the Finance Tracker

These models define the records held by the ledger store and the
read-only views built on top of it. They are designed to:
1. Enforce type safety at runtime
2. Be immutable once handed out by the store
3. Be serializable for storage and logging

DESIGN DECISION: Records are frozen Pydantic models.
The store replaces a record with an updated copy whenever a budget total
or a budget reference changes, so callers can never edit store state
through a record they were given.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Kinds of transaction a user can record.

    Expenses and investments both reduce the available balance.
    """
    INCOME = "income"
    EXPENSE = "expense"
    INVESTMENT = "investment"


# =============================================================================
# CORE LEDGER RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single recorded transaction.

    budget_id is a weak reference: it names a budget by id and is only
    meaningful for expenses. Deleting the budget clears it, never the
    transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        ...,
        description="Store-assigned unique identifier"
    )
    description: str = Field(
        ...,
        description="What the transaction was for"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative amount, stored exactly"
    )
    kind: TransactionKind
    occurred_on: date = Field(
        ...,
        description="Calendar date the transaction was recorded"
    )
    budget_id: Optional[UUID] = Field(
        default=None,
        description="Budget this expense counts against, if any"
    )

    @property
    def is_linked_expense(self) -> bool:
        """True when this transaction counts against a budget."""
        return self.kind == TransactionKind.EXPENSE and self.budget_id is not None


class Budget(BaseModel):
    """
    A spending limit that expenses can be attached to.

    CRITICAL: spent is maintained by the store. It always equals the sum of
    the expenses currently linked to this budget.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID
    name: str = Field(
        ...,
        description="Budget name shown to the user"
    )
    limit: Decimal = Field(
        ...,
        ge=0,
        description="Planned maximum spend"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of linked expense amounts"
    )

    @property
    def available(self) -> Decimal:
        """Remaining allowance. Negative means overspent."""
        return self.limit - self.spent

    @property
    def utilization(self) -> Decimal:
        """
        Raw spent/limit ratio, unclamped.

        A zero limit yields 0 when nothing was spent and Infinity otherwise,
        so any spend against it still reads as overspent.
        """
        if self.limit == 0:
            return Decimal("0") if self.spent == 0 else Decimal("Infinity")
        return self.spent / self.limit

    @property
    def display_utilization(self) -> Decimal:
        """Utilization clamped to [0, 1] for progress bars."""
        return max(Decimal("0"), min(self.utilization, Decimal("1")))

    @property
    def is_overspent(self) -> bool:
        return self.spent > self.limit


class LedgerSnapshot(BaseModel):
    """
    Serializable copy of both collections, in insertion order.

    This is what storage backends read and write. The store rebuilds
    itself from a snapshot and recomputes budget totals by default.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'LedgerSnapshot':
        """Reject snapshots that reuse an id."""
        transaction_ids = [txn.id for txn in self.transactions]
        if len(set(transaction_ids)) != len(transaction_ids):
            raise ValueError("Snapshot contains duplicate transaction ids")

        budget_ids = [budget.id for budget in self.budgets]
        if len(set(budget_ids)) != len(budget_ids):
            raise ValueError("Snapshot contains duplicate budget ids")

        return self


# =============================================================================
# REPORT MODELS
# =============================================================================

class BudgetStatus(BaseModel):
    """One row of the budgets view."""

    budget_id: UUID
    name: str
    limit: Decimal
    spent: Decimal
    available: Decimal
    utilization: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Raw spent/limit ratio; above 1 means overspent"
    )
    display_utilization: Decimal = Field(
        ...,
        ge=0,
        le=1,
        description="Ratio clamped for progress bars"
    )
    overspent: bool
    transaction_count: int = Field(ge=0)


class LedgerSummary(BaseModel):
    """Aggregate totals shown at the top of the transactions view."""

    total_income: Decimal
    total_expense: Decimal
    total_investment: Decimal
    balance: Decimal
    transaction_count: int = Field(ge=0)
    budget_count: int = Field(ge=0)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'negative')"
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
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating a transaction or budget form.

    When is_valid is True the parsed values are ready to hand to the store.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    # Parsed values (only set when the corresponding input parsed cleanly)
    parsed_amount: Optional[Decimal] = None
    parsed_kind: Optional[TransactionKind] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# SESSION MODELS
# =============================================================================

class ActionResult(BaseModel):
    """Outcome of a session action, ready to show to the user."""

    success: bool = Field(
        ...,
        description="Whether the action was applied to the ledger"
    )
    message: str = Field(
        ...,
        description="User-facing message describing the outcome"
    )
    record: Optional[Union[Transaction, Budget]] = Field(
        default=None,
        description="The record created by the action, if any"
    )
    validation: Optional[ValidationResult] = Field(
        default=None,
        description="Validation of the submitted form, if one was checked"
    )
    persisted: bool = Field(
        default=False,
        description="Whether the ledger was saved after the action"
    )
