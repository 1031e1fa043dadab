"""Entry validation package."""

from finance_tracker.validation.validator import EntryValidator

__all__ = ["EntryValidator"]
