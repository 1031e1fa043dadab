"""
Session Orchestrator for the Finance Tracker

This module ties together the store, entry validation and storage, and
defines the flows a presentation layer calls:
1. Start (storage → snapshot → store)
2. Add transaction / budget (form input → validate → store → save)
3. Remove transaction / budget (id → store → save)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing entry validation
- Ledger errors never escape; they become user-facing messages
- A storage failure never undoes a mutation that already applied

This is the "glue" a UI calls into. It holds no ledger logic itself.
"""

from typing import Optional, Union
from uuid import UUID

from finance_tracker.config import AppSettings, Settings, get_settings
from finance_tracker.ledger import LedgerError, LedgerStore, NotFoundError
from finance_tracker.logs import configure_logging, get_logger
from finance_tracker.models.ledger import (
    ActionResult,
    TransactionKind,
    ValidationResult,
)
from finance_tracker.queries import LedgerQueries
from finance_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from finance_tracker.validation import EntryValidator


class LedgerSession:
    """
    One user's working session over a ledger.

    Flow for every mutation:
    1. Validate → reject with a friendly message if the input is bad
    2. Apply → the store mutates atomically or raises before changing anything
    3. Save → autosave the snapshot; failures are reported, not raised

    Use LedgerSession.start() to build a session from stored data.
    """

    def __init__(
        self,
        store: LedgerStore,
        storage: Optional[LedgerStorageInterface] = None,
        validator: Optional[EntryValidator] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._settings = settings or get_settings().app
        self._store = store
        self._storage = storage
        self._validator = validator or EntryValidator(self._settings)
        self._queries = LedgerQueries(store)
        self._logger = get_logger(__name__)

    @classmethod
    async def start(
        cls,
        storage: LedgerStorageInterface,
        settings: Optional[AppSettings] = None,
    ) -> "LedgerSession":
        """
        Load the stored ledger and open a session on it.

        Raises:
            StorageError: If the stored ledger cannot be read
        """
        settings = settings or get_settings().app
        snapshot = await storage.load_snapshot()
        store = LedgerStore.from_snapshot(
            snapshot,
            trust_stored_spent=settings.trust_stored_spent,
        )
        return cls(store, storage=storage, settings=settings)

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def queries(self) -> LedgerQueries:
        return self._queries

    async def add_transaction(
        self,
        description: Optional[str],
        amount_text: Optional[str],
        kind: Optional[Union[TransactionKind, str]],
        budget_id: Optional[UUID] = None,
    ) -> ActionResult:
        """Validate the transaction form and record it."""
        validation = self._validator.validate_transaction_input(
            description, amount_text, kind, budget_id
        )
        if not validation.is_valid:
            return ActionResult(
                success=False,
                message=self._validator.get_user_friendly_summary(validation),
                validation=validation,
            )

        try:
            transaction = self._store.create_transaction(
                description=description,
                amount=validation.parsed_amount,
                kind=validation.parsed_kind,
                budget_id=budget_id,
            )
        except (LedgerError, ValueError) as e:
            return self._failed("add_transaction", e, validation)

        message = f"Added {transaction.kind.value}: {transaction.description}"
        if budget_id is not None and transaction.budget_id is None:
            message += " (not linked to a budget)"

        return ActionResult(
            success=True,
            message=message,
            record=transaction,
            validation=validation,
            persisted=await self._autosave(),
        )

    async def add_budget(
        self,
        name: Optional[str],
        limit_text: Optional[str],
    ) -> ActionResult:
        """Validate the budget form and create the budget."""
        validation = self._validator.validate_budget_input(name, limit_text)
        if not validation.is_valid:
            return ActionResult(
                success=False,
                message=self._validator.get_user_friendly_summary(validation),
                validation=validation,
            )

        try:
            budget = self._store.create_budget(name, validation.parsed_amount)
        except (LedgerError, ValueError) as e:
            return self._failed("add_budget", e, validation)

        return ActionResult(
            success=True,
            message=f"Created budget: {budget.name}",
            record=budget,
            validation=validation,
            persisted=await self._autosave(),
        )

    async def remove_transaction(self, transaction_id: UUID) -> ActionResult:
        """Delete a transaction."""
        try:
            self._store.delete_transaction(transaction_id)
        except NotFoundError as e:
            return self._failed("remove_transaction", e)

        return ActionResult(
            success=True,
            message="Transaction deleted",
            persisted=await self._autosave(),
        )

    async def remove_budget(self, budget_id: UUID) -> ActionResult:
        """Delete a budget; its expenses stay, unlinked."""
        try:
            self._store.delete_budget(budget_id)
        except NotFoundError as e:
            return self._failed("remove_budget", e)

        return ActionResult(
            success=True,
            message="Budget deleted",
            persisted=await self._autosave(),
        )

    async def save(self) -> bool:
        """Persist the current ledger. Returns False if it could not be saved."""
        if self._storage is None:
            return False
        try:
            return await self._storage.save_snapshot(self._store.snapshot())
        except StorageError as e:
            self._logger.error("session_save_failed", error=str(e))
            return False

    async def _autosave(self) -> bool:
        if not self._settings.autosave:
            return False
        return await self.save()

    def _failed(
        self,
        action: str,
        error: Exception,
        validation: Optional[ValidationResult] = None,
    ) -> ActionResult:
        self._logger.warning(
            "session_action_failed",
            action=action,
            error_type=type(error).__name__,
            error=str(error),
        )
        return ActionResult(
            success=False,
            message=f"❌ {error}",
            validation=validation,
        )


def create_session_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> tuple[LedgerStorageInterface, EntryValidator]:
    """
    Factory function to create the pieces a session runs on.

    Configures logging as a side effect.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run against in-memory storage.

    Returns:
        (storage, validator). Pass storage to LedgerSession.start().
    """
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.logging.json_output,
    )
    logger = get_logger(__name__)

    storage: LedgerStorageInterface = InMemoryLedgerStorage()
    if use_storage:
        try:
            storage = GoogleSheetsLedgerStorage(
                GoogleSheetsClient(settings.google_sheets)
            )
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))

    return storage, EntryValidator(settings.app)
