"""In-memory ledger storage, for tests and throwaway sessions."""

from typing import Optional

from finance_tracker.models.ledger import LedgerSnapshot
from finance_tracker.services.storage.interface import LedgerStorageInterface


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Keeps the last saved snapshot in memory."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._snapshot = snapshot or LedgerSnapshot()
        self.save_count = 0

    async def load_snapshot(self) -> LedgerSnapshot:
        return self._snapshot.model_copy(deep=True)

    async def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1
        return True
