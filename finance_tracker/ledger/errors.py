"""
Ledger Errors

All errors are local and recoverable. A mutation that raises one of these
has not changed any state; the calling layer shows the message to the user.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidAmountError(LedgerError):
    """Amount or limit is negative, non-numeric or not finite."""

    def __init__(self, value: object, field: str = "amount"):
        self.value = value
        self.field = field
        super().__init__(f"Invalid {field}: {value!r} (must be a non-negative number)")


class InvalidKindError(LedgerError):
    """Transaction kind is not income, expense or investment."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"Unknown transaction kind: {kind!r}")


class NotFoundError(LedgerError):
    """No record with the given id exists in the store."""

    def __init__(self, entity_type: str, entity_id: object):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} not found: {entity_id}")


class InconsistentReferenceError(LedgerError):
    """
    A budget reference cannot be honoured.

    Either the budget does not exist or the transaction is not an expense.
    The store catches this and records the transaction without a budget.
    """

    def __init__(self, budget_id: object, reason: str):
        self.budget_id = budget_id
        self.reason = reason
        super().__init__(f"Budget reference {budget_id} dropped: {reason}")
