"""Ledger query package."""

from finance_tracker.queries.summary import LedgerQueries

__all__ = ["LedgerQueries"]
