"""
Data Models Package

This package contains all Pydantic models used by the finance tracker.
Every record the ledger store hands out conforms to these schemas.
"""

from finance_tracker.models.ledger import (
    ActionResult,
    Budget,
    BudgetStatus,
    LedgerSnapshot,
    LedgerSummary,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger records
    "Budget",
    "LedgerSnapshot",
    "Transaction",
    "TransactionKind",
    # Report models
    "BudgetStatus",
    "LedgerSummary",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Session models
    "ActionResult",
]
