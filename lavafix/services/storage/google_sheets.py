"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. The business owner can look at clients and payments directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a repair shop's clients are fine)
- No transactions (a save overwrites in place, then trims leftover rows)
- A cell holds at most 50,000 characters, so large photos cannot be stored here
- Every cell is stored as RAW text; the ledger models parse it back

The implementation follows the abstract interface, so the ledger
store never knows which backend it is talking to.
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from lavafix.config import get_settings
from lavafix.services.storage.interface import (
    CollectionKey,
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)


# Google Sheets rejects any cell longer than this
MAX_CELL_CHARS = 50000

# Column mappings per collection (camelCase, same as the JSON records)
COLUMNS: dict[CollectionKey, list[str]] = {
    CollectionKey.CLIENTS: [
        "id",
        "name",
        "phone1",
        "phone2",
        "monthlyAmount",
        "status",
        "createdAt",
        "lastPaymentDate",
        "image",
    ],
    CollectionKey.PAYMENTS: [
        "id",
        "clientId",
        "clientName",
        "amount",
        "date",
        "notes",
    ],
    CollectionKey.NOTIFICATIONS: [
        "id",
        "title",
        "message",
        "type",
        "timestamp",
    ],
}


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

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

    def sheet_name_for(self, key: CollectionKey) -> str:
        return {
            CollectionKey.CLIENTS: self._settings.clients_sheet_name,
            CollectionKey.PAYMENTS: self._settings.payments_sheet_name,
            CollectionKey.NOTIFICATIONS: self._settings.notifications_sheet_name,
        }[key]

    def get_sheet(self, key: CollectionKey) -> gspread.Worksheet:
        """Get or create the worksheet for a collection."""
        spreadsheet = self.get_spreadsheet()
        title = self.sheet_name_for(key)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(COLUMNS[key]),
            )
            sheet.append_row(COLUMNS[key])
        return sheet


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Each collection is one worksheet: a header row followed by one
    record per row. Empty cells mean "field not set".
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, key: CollectionKey, record: dict) -> list[str]:
        """Convert a record dict to a spreadsheet row."""
        row = []
        for column in COLUMNS[key]:
            value = record.get(column)
            row.append("" if value is None else str(value))
        return row

    def _row_to_record(self, header: list[str], row: list[str]) -> dict:
        """Convert a spreadsheet row to a record dict."""
        return {
            column: value
            for column, value in zip(header, row)
            if column and value != ""
        }

    def load(self, key: CollectionKey) -> list[dict]:
        """Read every record of a collection."""
        try:
            sheet = self._client.get_sheet(key)
            all_rows = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load {key.value}: {e}")

        if not all_rows:
            return []

        header, rows = all_rows[0], all_rows[1:]
        return [
            self._row_to_record(header, row)
            for row in rows
            if row and row[0]  # Skip empty rows
        ]

    def _check_cell_sizes(self, key: CollectionKey, values: list[list[str]]) -> None:
        for row in values:
            for column, cell in zip(COLUMNS[key], row):
                if len(cell) > MAX_CELL_CHARS:
                    raise StorageError(
                        f"Value for {column} in {key.value} is {len(cell)} characters; "
                        f"Google Sheets allows at most {MAX_CELL_CHARS}"
                    )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write(self, key: CollectionKey, values: list[list[str]]) -> None:
        """
        Overwrite the sheet from A1, then clear rows left over from a longer save.

        The old rows are only touched after the new values are written, so a
        failed write leaves the previous contents in place.
        """
        try:
            sheet = self._client.get_sheet(key)
            if sheet.row_count < len(values):
                sheet.add_rows(len(values) - sheet.row_count)
            sheet.update(
                values=values,
                range_name="A1",
                value_input_option="RAW",
            )
            sheet.batch_clear([f"A{len(values) + 1}:Z"])
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save {key.value}: {e}")

    def save(self, key: CollectionKey, records: list[dict]) -> None:
        """Replace a collection's worksheet contents."""
        values = [COLUMNS[key]] + [
            self._record_to_row(key, record) for record in records
        ]
        # Checked before any API call
        self._check_cell_sizes(key, values)
        self._write(key, values)
