"""
Storage Services Package

Provides the abstract ledger storage interface and its implementations.
Google Sheets is the persistent backend; the in-memory backend serves tests.
"""

from finance_tracker.services.storage.interface import (
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)
from finance_tracker.services.storage.memory import InMemoryLedgerStorage
from finance_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryLedgerStorage",
]
