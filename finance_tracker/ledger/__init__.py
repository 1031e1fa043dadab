"""Ledger/budget store package."""

from finance_tracker.ledger.errors import (
    InconsistentReferenceError,
    InvalidAmountError,
    InvalidKindError,
    LedgerError,
    NotFoundError,
)
from finance_tracker.ledger.store import LedgerStore, to_amount, to_kind

__all__ = [
    "LedgerStore",
    "to_amount",
    "to_kind",
    # Exceptions
    "InconsistentReferenceError",
    "InvalidAmountError",
    "InvalidKindError",
    "LedgerError",
    "NotFoundError",
]
