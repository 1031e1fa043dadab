"""
Ledger/Budget Store

DESIGN DECISION: One object owns both collections.
Callers never touch the transaction or budget collections directly. They go
through four mutation operations, each of which changes a transaction and
the affected budget total together, under one lock, or changes nothing.

INVARIANT: for every budget B, B.spent equals the sum of the amounts of the
expense transactions currently linked to B.

Budget references on transactions are plain ids resolved through the store.
Deleting a budget clears those ids; it never deletes transactions.
"""

import threading
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union
from uuid import UUID, uuid4

from finance_tracker.ledger.errors import (
    InconsistentReferenceError,
    InvalidAmountError,
    InvalidKindError,
    NotFoundError,
)
from finance_tracker.logs import get_logger
from finance_tracker.models.ledger import (
    Budget,
    LedgerSnapshot,
    Transaction,
    TransactionKind,
)


AmountInput = Union[Decimal, int, float, str]
IdInput = Union[UUID, str]


def to_amount(value: AmountInput, field: str = "amount") -> Decimal:
    """
    Convert user-provided numeric values into an exact, non-negative Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        InvalidAmountError: non-numeric, negative, NaN or infinite input
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value, field)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmountError(value, field)
    else:
        raise InvalidAmountError(value, field)

    if not amount.is_finite() or amount < 0:
        raise InvalidAmountError(value, field)
    return amount


def to_kind(kind: Union[TransactionKind, str]) -> TransactionKind:
    """Accept a TransactionKind or its string value."""
    if isinstance(kind, TransactionKind):
        return kind
    try:
        return TransactionKind(str(kind).strip().lower())
    except ValueError:
        raise InvalidKindError(kind)


def _to_uuid(value: IdInput) -> Optional[UUID]:
    """Parse an id, returning None when it cannot be one of ours."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class LedgerStore:
    """
    In-memory ledger of transactions and budgets.

    Collections are dicts keyed by id, which keeps lookups O(1) and
    preserves insertion order for display.

    Thread safety: every mutation runs under an RLock, so a store may be
    shared between threads even though the app itself has one writer.
    """

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        """
        Initialize an empty store.

        Args:
            clock: Returns the date to stamp on new transactions.
                   Defaults to date.today.
        """
        self._transactions: dict[UUID, Transaction] = {}
        self._budgets: dict[UUID, Budget] = {}
        self._issued_ids: set[UUID] = set()
        self._clock = clock or date.today
        self._lock = threading.RLock()
        self._logger = get_logger(__name__)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_transaction(
        self,
        description: str,
        amount: AmountInput,
        kind: Union[TransactionKind, str],
        budget_id: Optional[IdInput] = None,
    ) -> Transaction:
        """
        Record a transaction.

        A budget_id is honoured only for expenses and only when the budget
        exists; otherwise the transaction is recorded without one.

        Raises:
            InvalidAmountError: amount is negative or not a number
            InvalidKindError: kind is not income, expense or investment
        """
        amount = to_amount(amount)
        kind = to_kind(kind)

        with self._lock:
            budget = None
            if budget_id is not None:
                try:
                    budget = self._resolve_reference(budget_id, kind)
                except InconsistentReferenceError as e:
                    self._logger.warning(
                        "budget_reference_dropped",
                        budget_id=str(e.budget_id),
                        reason=e.reason,
                    )

            transaction = Transaction(
                id=self._new_id(),
                description=description,
                amount=amount,
                kind=kind,
                occurred_on=self._clock(),
                budget_id=budget.id if budget else None,
            )

            self._transactions[transaction.id] = transaction
            if budget is not None:
                self._budgets[budget.id] = budget.model_copy(
                    update={"spent": budget.spent + amount}
                )

        self._logger.info(
            "transaction_created",
            transaction_id=str(transaction.id),
            kind=kind.value,
            amount=str(amount),
            budget_id=str(transaction.budget_id) if transaction.budget_id else None,
        )
        return transaction

    def delete_transaction(self, transaction_id: IdInput) -> None:
        """
        Delete a transaction, releasing its amount from its budget.

        Raises:
            NotFoundError: no transaction has this id (nothing changes)
        """
        with self._lock:
            key = _to_uuid(transaction_id)
            transaction = self._transactions.get(key) if key else None
            if transaction is None:
                raise NotFoundError("transaction", transaction_id)

            if transaction.is_linked_expense:
                budget = self._budgets.get(transaction.budget_id)
                if budget is not None:
                    self._budgets[budget.id] = budget.model_copy(
                        update={"spent": budget.spent - transaction.amount}
                    )
            del self._transactions[key]

        self._logger.info(
            "transaction_deleted",
            transaction_id=str(key),
            kind=transaction.kind.value,
            amount=str(transaction.amount),
        )

    def create_budget(self, name: str, limit: AmountInput) -> Budget:
        """
        Create a budget with nothing spent yet.

        Raises:
            InvalidAmountError: limit is negative or not a number
        """
        limit = to_amount(limit, field="limit")

        with self._lock:
            budget = Budget(id=self._new_id(), name=name, limit=limit)
            self._budgets[budget.id] = budget

        self._logger.info(
            "budget_created",
            budget_id=str(budget.id),
            name=budget.name,
            limit=str(limit),
        )
        return budget

    def delete_budget(self, budget_id: IdInput) -> None:
        """
        Delete a budget and unlink every transaction that referenced it.

        The transactions themselves are kept unchanged apart from the
        cleared reference.

        Raises:
            NotFoundError: no budget has this id (nothing changes)
        """
        with self._lock:
            key = _to_uuid(budget_id)
            if key is None or key not in self._budgets:
                raise NotFoundError("budget", budget_id)

            unlinked = {
                txn_id: txn.model_copy(update={"budget_id": None})
                for txn_id, txn in self._transactions.items()
                if txn.budget_id == key
            }
            # update() keeps existing keys in place, so display order holds
            self._transactions.update(unlinked)
            del self._budgets[key]

        self._logger.info(
            "budget_deleted",
            budget_id=str(key),
            unlinked_transactions=len(unlinked),
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions in insertion order."""
        with self._lock:
            return tuple(self._transactions.values())

    def budgets(self) -> tuple[Budget, ...]:
        """All budgets in insertion order."""
        with self._lock:
            return tuple(self._budgets.values())

    def get_transaction(self, transaction_id: IdInput) -> Optional[Transaction]:
        key = _to_uuid(transaction_id)
        return self._transactions.get(key) if key else None

    def get_budget(self, budget_id: IdInput) -> Optional[Budget]:
        key = _to_uuid(budget_id)
        return self._budgets.get(key) if key else None

    def resolve_budget(self, transaction: Transaction) -> Optional[Budget]:
        """Budget a transaction counts against, or None if unset or dangling."""
        if transaction.budget_id is None:
            return None
        return self._budgets.get(transaction.budget_id)

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def total(self, kind: Union[TransactionKind, str]) -> Decimal:
        """Sum of amounts over all transactions of one kind."""
        kind = to_kind(kind)
        with self._lock:
            return sum(
                (txn.amount for txn in self._transactions.values() if txn.kind == kind),
                Decimal("0"),
            )

    def balance(self) -> Decimal:
        """
        Income minus expenses minus investments.

        Investments count as an outflow from the liquid balance.
        """
        with self._lock:
            return (
                self.total(TransactionKind.INCOME)
                - self.total(TransactionKind.EXPENSE)
                - self.total(TransactionKind.INVESTMENT)
            )

    def available(self, budget_id: IdInput) -> Decimal:
        """Budget limit minus spent; negative when overspent."""
        return self._require_budget(budget_id).available

    def utilization(self, budget_id: IdInput, clamp: bool = False) -> Decimal:
        """
        spent/limit for a budget.

        The raw ratio exceeds 1 when overspent. clamp=True bounds it to
        [0, 1] for progress bars.
        """
        budget = self._require_budget(budget_id)
        return budget.display_utilization if clamp else budget.utilization

    def spent_for(self, budget_id: IdInput) -> Decimal:
        """Recompute a budget's spent total from the linked expenses."""
        key = _to_uuid(budget_id)
        with self._lock:
            return sum(
                (
                    txn.amount
                    for txn in self._transactions.values()
                    if txn.is_linked_expense and txn.budget_id == key
                ),
                Decimal("0"),
            )

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Copy both collections for storage."""
        with self._lock:
            return LedgerSnapshot(
                transactions=list(self._transactions.values()),
                budgets=list(self._budgets.values()),
            )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        trust_stored_spent: bool = False,
        clock: Optional[Callable[[], date]] = None,
    ) -> "LedgerStore":
        """
        Rebuild a store from stored collections.

        Budget references that do not resolve, or that sit on a non-expense
        transaction, are cleared. Budget totals are recomputed from the
        transactions unless trust_stored_spent is set.
        """
        store = cls(clock=clock)
        stored_spent = {budget.id: budget.spent for budget in snapshot.budgets}

        for budget in snapshot.budgets:
            if not trust_stored_spent:
                budget = budget.model_copy(update={"spent": Decimal("0")})
            store._budgets[budget.id] = budget
            store._issued_ids.add(budget.id)

        cleared = 0
        for txn in snapshot.transactions:
            if txn.budget_id is not None and (
                txn.kind != TransactionKind.EXPENSE
                or txn.budget_id not in store._budgets
            ):
                txn = txn.model_copy(update={"budget_id": None})
                cleared += 1

            store._transactions[txn.id] = txn
            store._issued_ids.add(txn.id)

            if not trust_stored_spent and txn.is_linked_expense:
                budget = store._budgets[txn.budget_id]
                store._budgets[budget.id] = budget.model_copy(
                    update={"spent": budget.spent + txn.amount}
                )

        for budget in store._budgets.values():
            expected = store.spent_for(budget.id)
            if stored_spent[budget.id] != expected:
                store._logger.warning(
                    "stored_spent_mismatch",
                    budget_id=str(budget.id),
                    stored=str(stored_spent[budget.id]),
                    recomputed=str(expected),
                    kept="stored" if trust_stored_spent else "recomputed",
                )

        store._logger.info(
            "ledger_restored",
            transactions=len(store._transactions),
            budgets=len(store._budgets),
            cleared_references=cleared,
        )
        return store

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _new_id(self) -> UUID:
        """Generate an id this store has never handed out."""
        new_id = uuid4()
        while new_id in self._issued_ids:
            new_id = uuid4()
        self._issued_ids.add(new_id)
        return new_id

    def _resolve_reference(
        self,
        budget_id: IdInput,
        kind: TransactionKind,
    ) -> Budget:
        if kind != TransactionKind.EXPENSE:
            raise InconsistentReferenceError(
                budget_id, f"{kind.value} transactions cannot use a budget"
            )
        key = _to_uuid(budget_id)
        budget = self._budgets.get(key) if key else None
        if budget is None:
            raise InconsistentReferenceError(budget_id, "budget does not exist")
        return budget

    def _require_budget(self, budget_id: IdInput) -> Budget:
        budget = self.get_budget(budget_id)
        if budget is None:
            raise NotFoundError("budget", budget_id)
        return budget
