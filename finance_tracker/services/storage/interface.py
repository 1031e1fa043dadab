"""
Abstract Storage Interface

DESIGN DECISION: Persistence is an external collaborator of the ledger.
The store never performs I/O. A storage backend saves and restores the two
collections as a LedgerSnapshot, and the store rebuilds itself from it.
This allows us to:
1. Swap Google Sheets for a database or a file later
2. Use in-memory storage for testing
3. Keep the reconciliation logic free of storage concerns

The interface is intentionally small: load everything, save everything.
"""

from abc import ABC, abstractmethod

from finance_tracker.models.ledger import LedgerSnapshot


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load_snapshot(self) -> LedgerSnapshot:
        """
        Load the stored collections.

        Returns:
            The stored snapshot, or an empty one if nothing was saved yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        """
        Replace the stored collections with this snapshot.

        Args:
            snapshot: Both collections in display order

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
