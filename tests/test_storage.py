"""
Tests for ledger storage backends.

Google Sheets is replaced by in-process fakes; no network access.
"""

import asyncio
from decimal import Decimal

import gspread
import pytest
from structlog.testing import capture_logs
from tenacity import stop_after_attempt

from finance_tracker.ledger import LedgerStore
from finance_tracker.models.ledger import LedgerSnapshot
from finance_tracker.services.storage import (
    GoogleSheetsLedgerStorage,
    InMemoryLedgerStorage,
    StorageError,
)
from finance_tracker.services.storage.google_sheets import (
    BUDGET_COLUMNS,
    TRANSACTION_COLUMNS,
)


class FakeWorksheet:
    """The slice of gspread.Worksheet the storage uses."""

    def __init__(self, rows=None, row_count=1000):
        self.rows = [list(row) for row in rows or []]
        self.row_count = row_count

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def add_rows(self, rows):
        self.row_count += rows

    def update(self, values=None, range_name=None, value_input_option=None):
        assert range_name == "A1"
        assert len(values) <= self.row_count
        for index, row in enumerate(values):
            if index < len(self.rows):
                self.rows[index] = list(row)
            else:
                self.rows.append(list(row))

    def batch_clear(self, ranges):
        for cell_range in ranges:
            first_row, _ = gspread.utils.a1_to_rowcol(cell_range.split(":")[0])
            del self.rows[first_row - 1:]


class BrokenWorksheet(FakeWorksheet):
    """Fails every write, like a sheet hitting its API quota."""

    def update(self, values=None, range_name=None, value_input_option=None):
        raise gspread.exceptions.GSpreadException("quota exceeded")


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient."""

    def __init__(self, transaction_rows=None, budget_rows=None):
        self.transactions = FakeWorksheet([TRANSACTION_COLUMNS] + (transaction_rows or []))
        self.budgets = FakeWorksheet([BUDGET_COLUMNS] + (budget_rows or []))

    def get_transactions_sheet(self):
        return self.transactions

    def get_budgets_sheet(self):
        return self.budgets


@pytest.fixture
def populated(store) -> LedgerStore:
    budget = store.create_budget("Groceries", "200.00")
    store.create_transaction("Market", "50.25", "expense", budget.id)
    store.create_transaction("Salary", "1000", "income")
    store.create_transaction("Fund", "0.10", "investment")
    return store


class TestInMemoryStorage:
    """Tests for InMemoryLedgerStorage."""

    def test_starts_empty(self):
        snapshot = asyncio.run(InMemoryLedgerStorage().load_snapshot())
        assert snapshot == LedgerSnapshot()

    def test_save_then_load(self, populated):
        storage = InMemoryLedgerStorage()
        assert asyncio.run(storage.save_snapshot(populated.snapshot())) is True
        loaded = asyncio.run(storage.load_snapshot())
        assert loaded == populated.snapshot()
        assert storage.save_count == 1


class TestGoogleSheetsStorage:
    """Tests for GoogleSheetsLedgerStorage against fake worksheets."""

    def test_save_writes_header_and_rows(self, populated):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)

        assert asyncio.run(storage.save_snapshot(populated.snapshot())) is True

        assert client.transactions.rows[0] == TRANSACTION_COLUMNS
        assert client.budgets.rows[0] == BUDGET_COLUMNS
        assert len(client.transactions.rows) == 4
        budget = populated.budgets()[0]
        assert client.budgets.rows[1] == [str(budget.id), "Groceries", "200.00", "50.25"]
        market = client.transactions.rows[1]
        assert market[1:5] == ["Market", "50.25", "expense", "2024-12-15"]
        assert market[5] == str(budget.id)
        assert client.transactions.rows[2][5] == ""

    def test_save_replaces_previous_rows(self, populated):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.save_snapshot(populated.snapshot()))
        asyncio.run(storage.save_snapshot(LedgerSnapshot()))
        assert client.transactions.rows == [TRANSACTION_COLUMNS]
        assert client.budgets.rows == [BUDGET_COLUMNS]

    def test_load_restores_saved_ledger(self, populated):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.save_snapshot(populated.snapshot()))

        loaded = asyncio.run(storage.load_snapshot())
        assert loaded == populated.snapshot()

        restored = LedgerStore.from_snapshot(loaded)
        assert restored.balance() == populated.balance()
        assert restored.budgets()[0].spent == Decimal("50.25")

    def test_load_skips_malformed_and_duplicate_rows(self, populated):
        good = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(good)
        asyncio.run(storage.save_snapshot(populated.snapshot()))

        rows = good.transactions.rows[1:]
        client = FakeSheetsClient(
            transaction_rows=[
                rows[0],
                ["not-a-uuid", "Broken", "1", "income", "2024-12-15", ""],
                [],
                rows[1],
                rows[1],  # repeated id
                [rows[2][0].replace(rows[2][0][:8], "0" * 8), "Bad", "abc", "income", "2024-12-15", ""],
            ],
            budget_rows=good.budgets.rows[1:],
        )

        with capture_logs() as logs:
            loaded = asyncio.run(GoogleSheetsLedgerStorage(client).load_snapshot())

        assert [txn.description for txn in loaded.transactions] == ["Market", "Salary"]
        events = [log["event"] for log in logs]
        assert events.count("malformed_row_skipped") == 2
        assert events.count("duplicate_row_skipped") == 1

    def test_load_empty_sheets(self):
        loaded = asyncio.run(GoogleSheetsLedgerStorage(FakeSheetsClient()).load_snapshot())
        assert loaded == LedgerSnapshot()

    def test_missing_spent_column_defaults_to_zero(self, populated):
        budget = populated.budgets()[0]
        client = FakeSheetsClient(budget_rows=[[str(budget.id), "Groceries", "200"]])
        loaded = asyncio.run(GoogleSheetsLedgerStorage(client).load_snapshot())
        assert loaded.budgets[0].spent == Decimal("0")


class TestSheetRewrite:
    """Tests for how a save overwrites existing sheet rows."""

    def test_shorter_save_trims_stale_rows(self, populated):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.save_snapshot(populated.snapshot()))

        salary = populated.transactions()[1]
        populated.delete_transaction(populated.transactions()[0].id)
        populated.delete_transaction(populated.transactions()[-1].id)
        asyncio.run(storage.save_snapshot(populated.snapshot()))

        assert len(client.transactions.rows) == 2
        assert client.transactions.rows[1][0] == str(salary.id)
        loaded = asyncio.run(storage.load_snapshot())
        assert [txn.description for txn in loaded.transactions] == ["Salary"]

    def test_grows_sheet_when_rows_run_out(self, populated):
        client = FakeSheetsClient()
        client.transactions.row_count = 2
        storage = GoogleSheetsLedgerStorage(client)

        asyncio.run(storage.save_snapshot(populated.snapshot()))

        assert client.transactions.row_count == 4
        assert len(client.transactions.rows) == 4

    def test_failed_write_keeps_previous_rows(self, populated):
        client = FakeSheetsClient()
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.save_snapshot(populated.snapshot()))
        saved_rows = client.transactions.get_all_values()

        client.transactions = BrokenWorksheet(saved_rows)
        populated.create_transaction("Bonus", "300", "income")
        save_once = GoogleSheetsLedgerStorage.save_snapshot.retry_with(
            stop=stop_after_attempt(1)
        )

        with pytest.raises(StorageError, match="quota exceeded"):
            asyncio.run(save_once(storage, populated.snapshot()))

        assert client.transactions.rows == saved_rows
