"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the storage backend because:
1. Users can look at their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Every save rewrites both sheets (fine for a personal ledger)
- No transactions across the two sheets; the store recomputes budget
  totals on load, so a half-written save cannot break the invariant

The implementation follows the abstract interface, so it can be swapped
without touching the ledger.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finance_tracker.config import GoogleSheetsSettings, get_settings
from finance_tracker.logs import get_logger
from finance_tracker.models.ledger import (
    Budget,
    LedgerSnapshot,
    Transaction,
    TransactionKind,
)
from finance_tracker.services.storage.interface import (
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "description",
    "amount",
    "kind",
    "occurred_on",
    "budget_id",
]

# Column mappings for Budgets sheet
BUDGET_COLUMNS = [
    "id",
    "name",
    "limit",
    "spent",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS
        )

    def get_budgets_sheet(self) -> gspread.Worksheet:
        """Get or create the Budgets worksheet."""
        return self._get_or_create_sheet(
            self._settings.budgets_sheet_name, BUDGET_COLUMNS
        )


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    One row per record, one sheet per collection, rows in display order.
    Amounts are written as exact decimal strings.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._logger = get_logger(__name__)

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            str(transaction.id),
            transaction.description,
            str(transaction.amount),
            transaction.kind.value,
            transaction.occurred_on.isoformat(),
            str(transaction.budget_id) if transaction.budget_id else "",
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=UUID(safe_get(0)),
            description=safe_get(1),
            amount=Decimal(safe_get(2)),
            kind=TransactionKind(safe_get(3)),
            occurred_on=date.fromisoformat(safe_get(4)),
            budget_id=UUID(safe_get(5)) if safe_get(5) else None,
        )

    def _budget_to_row(self, budget: Budget) -> list:
        """Convert a Budget to a spreadsheet row."""
        return [
            str(budget.id),
            budget.name,
            str(budget.limit),
            str(budget.spent),
        ]

    def _row_to_budget(self, row: list) -> Budget:
        """Convert a spreadsheet row to a Budget."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Budget(
            id=UUID(safe_get(0)),
            name=safe_get(1),
            limit=Decimal(safe_get(2)),
            spent=Decimal(safe_get(3, "0")),
        )

    def _parse_rows(self, rows: list[list], parse, sheet: str) -> list:
        """Parse data rows, skipping empty, malformed and repeated ones."""
        records = []
        seen = set()
        for line, row in enumerate(rows, start=2):  # Row 1 is the header
            if not row or not row[0]:  # Skip empty rows
                continue

            try:
                record = parse(row)
            except (ValueError, ArithmeticError) as e:
                self._logger.warning(
                    "malformed_row_skipped",
                    sheet=sheet,
                    row=line,
                    error=str(e),
                )
                continue

            if record.id in seen:
                self._logger.warning(
                    "duplicate_row_skipped",
                    sheet=sheet,
                    row=line,
                    record_id=str(record.id),
                )
                continue

            seen.add(record.id)
            records.append(record)
        return records

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def load_snapshot(self) -> LedgerSnapshot:
        """Read both sheets into a snapshot."""
        try:
            transaction_rows = self._client.get_transactions_sheet().get_all_values()[1:]
            budget_rows = self._client.get_budgets_sheet().get_all_values()[1:]
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load ledger: {e}") from e

        return LedgerSnapshot(
            transactions=self._parse_rows(
                transaction_rows, self._row_to_transaction, "transactions"
            ),
            budgets=self._parse_rows(budget_rows, self._row_to_budget, "budgets"),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        """Rewrite both sheets from a snapshot."""
        try:
            self._rewrite_sheet(
                self._client.get_budgets_sheet(),
                BUDGET_COLUMNS,
                [self._budget_to_row(budget) for budget in snapshot.budgets],
            )
            self._rewrite_sheet(
                self._client.get_transactions_sheet(),
                TRANSACTION_COLUMNS,
                [self._transaction_to_row(txn) for txn in snapshot.transactions],
            )
        except ConnectionError:
            raise
        except Exception as e:
            self._logger.error("ledger_save_failed", error=str(e))
            raise StorageError(f"Failed to save ledger: {e}") from e

        self._logger.info(
            "ledger_saved",
            transactions=len(snapshot.transactions),
            budgets=len(snapshot.budgets),
        )
        return True

    def _rewrite_sheet(
        self,
        sheet: gspread.Worksheet,
        columns: list[str],
        rows: list[list],
    ) -> None:
        """
        Overwrite a sheet in place, then trim rows left over from a longer save.

        The old rows stay readable until the new values land; a failed
        write never leaves the sheet empty.
        """
        values = [columns] + rows
        old_count = len(sheet.get_all_values())

        if len(values) > sheet.row_count:
            sheet.add_rows(len(values) - sheet.row_count)
        sheet.update(values=values, range_name="A1", value_input_option="RAW")

        if old_count > len(values):
            last_cell = gspread.utils.rowcol_to_a1(old_count, len(columns))
            sheet.batch_clear([f"A{len(values) + 1}:{last_cell}"])
