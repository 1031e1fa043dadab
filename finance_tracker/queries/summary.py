"""
Ledger Queries

DESIGN DECISION: Views read the ledger through this module.
It builds report rows from the store's records and aggregates and never
mutates anything. Every number it returns comes from the store; nothing is
cached or estimated.
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from finance_tracker.ledger import LedgerStore, to_kind
from finance_tracker.models.ledger import (
    Budget,
    BudgetStatus,
    LedgerSummary,
    Transaction,
    TransactionKind,
)


class LedgerQueries:
    """
    Read-only reporting over a LedgerStore.

    GUARANTEES:
    - Insertion order of the store is kept in every listing
    - Dangling budget references read as unset
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    def summary(self) -> LedgerSummary:
        """Totals per kind and the resulting balance."""
        return LedgerSummary(
            total_income=self._store.total(TransactionKind.INCOME),
            total_expense=self._store.total(TransactionKind.EXPENSE),
            total_investment=self._store.total(TransactionKind.INVESTMENT),
            balance=self._store.balance(),
            transaction_count=len(self._store.transactions()),
            budget_count=len(self._store.budgets()),
        )

    def budget_statuses(self) -> list[BudgetStatus]:
        """One status row per budget, in creation order."""
        counts: dict[UUID, int] = {}
        for txn in self._store.transactions():
            if txn.is_linked_expense:
                counts[txn.budget_id] = counts.get(txn.budget_id, 0) + 1

        return [self._budget_to_status(budget, counts.get(budget.id, 0))
                for budget in self._store.budgets()]

    def list_transactions(
        self,
        kind: Optional[Union[TransactionKind, str]] = None,
        budget_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """
        List transactions with optional filters.

        Args:
            kind: Only transactions of this kind
            budget_id: Only expenses linked to this budget
            limit: Maximum number of results (first ones in display order)

        Returns:
            Matching transactions in insertion order
        """
        kind = to_kind(kind) if kind is not None else None

        results = []
        for txn in self._store.transactions():
            if kind and txn.kind != kind:
                continue
            if budget_id and txn.budget_id != budget_id:
                continue
            results.append(txn)

        return results[:limit] if limit is not None else results

    def budget_label(self, transaction: Transaction) -> Optional[str]:
        """Name of the budget a transaction counts against, if any."""
        budget = self._store.resolve_budget(transaction)
        return budget.name if budget else None

    def budget_options(self) -> list[tuple[UUID, str, Decimal]]:
        """
        Budgets an expense can be attached to.

        Returns (budget_id, name, available) so the form can show how much
        is left in each.
        """
        return [(budget.id, budget.name, budget.available)
                for budget in self._store.budgets()]

    def _budget_to_status(self, budget: Budget, transaction_count: int) -> BudgetStatus:
        """Convert a budget to a status row."""
        return BudgetStatus(
            budget_id=budget.id,
            name=budget.name,
            limit=budget.limit,
            spent=budget.spent,
            available=budget.available,
            utilization=budget.utilization,
            display_utilization=budget.display_utilization,
            overspent=budget.is_overspent,
            transaction_count=transaction_count,
        )
