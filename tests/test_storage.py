"""Tests for the persistence gateways (no real Google API calls)."""

from unittest.mock import Mock

import gspread
import pytest
from tenacity import wait_none

from lavafix.services.storage import (
    MAX_CELL_CHARS,
    CollectionKey,
    GoogleSheetsLedgerStorage,
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
)
from lavafix.services.storage.google_sheets import COLUMNS


CLIENT_RECORD = {
    "id": "c1",
    "name": "Ana",
    "phone1": "5551234",
    "phone2": None,
    "monthlyAmount": "150",
    "status": "Pendiente",
    "createdAt": "2025-03-01T09:00:00",
    "lastPaymentDate": None,
    "image": None,
}


class TestJsonFileStorage:
    """Tests for the local JSON backend."""

    def test_missing_file_loads_empty(self, tmp_path):
        """Test a collection never saved loads as empty."""
        storage = JsonFileStorage(tmp_path)
        assert storage.load(CollectionKey.CLIENTS) == []

    def test_save_then_load(self, tmp_path):
        """Test saved records come back unchanged."""
        storage = JsonFileStorage(tmp_path)
        storage.save(CollectionKey.CLIENTS, [CLIENT_RECORD])
        assert storage.load(CollectionKey.CLIENTS) == [CLIENT_RECORD]
        assert storage.path_for(CollectionKey.CLIENTS).name == "lavafix_clients.json"

    def test_collections_are_independent(self, tmp_path):
        """Test saving one collection leaves the others alone."""
        storage = JsonFileStorage(tmp_path)
        storage.save(CollectionKey.CLIENTS, [CLIENT_RECORD])
        assert storage.load(CollectionKey.PAYMENTS) == []

    def test_creates_data_dir(self, tmp_path):
        """Test the data directory is created on first save."""
        storage = JsonFileStorage(tmp_path / "nested" / "data")
        storage.save(CollectionKey.PAYMENTS, [])
        assert storage.path_for(CollectionKey.PAYMENTS).exists()

    def test_corrupt_file_raises(self, tmp_path):
        """Test unparseable JSON is a storage error."""
        storage = JsonFileStorage(tmp_path)
        storage.path_for(CollectionKey.CLIENTS).write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            storage.load(CollectionKey.CLIENTS)

    def test_non_array_raises(self, tmp_path):
        """Test a JSON object instead of an array is a storage error."""
        storage = JsonFileStorage(tmp_path)
        storage.path_for(CollectionKey.CLIENTS).write_text('{"a": 1}', encoding="utf-8")
        with pytest.raises(StorageError):
            storage.load(CollectionKey.CLIENTS)


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_load_returns_copies(self):
        """Test callers cannot mutate what was stored."""
        storage = InMemoryStorage()
        storage.save(CollectionKey.CLIENTS, [dict(CLIENT_RECORD)])
        loaded = storage.load(CollectionKey.CLIENTS)
        loaded[0]["name"] = "Changed"
        assert storage.load(CollectionKey.CLIENTS)[0]["name"] == "Ana"
        assert storage.save_count == 1


class TestGoogleSheetsStorage:
    """Tests for the Sheets backend against a mocked worksheet."""

    @pytest.fixture
    def sheet(self):
        sheet = Mock(spec=gspread.Worksheet)
        sheet.row_count = 1000
        return sheet

    @pytest.fixture
    def sheets_storage(self, sheet):
        client = Mock()
        client.get_sheet.return_value = sheet
        return GoogleSheetsLedgerStorage(client)

    def test_save_writes_raw_values_then_trims(self, sheets_storage, sheet):
        """Test save overwrites from A1 and clears only rows past the new data."""
        sheets_storage.save(CollectionKey.CLIENTS, [CLIENT_RECORD])

        sheet.clear.assert_not_called()
        sheet.batch_clear.assert_called_once_with(["A3:Z"])
        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "A1"
        assert kwargs["value_input_option"] == "RAW"
        header, row = kwargs["values"]
        assert header == COLUMNS[CollectionKey.CLIENTS]
        assert row[:3] == ["c1", "Ana", "5551234"]
        assert row[3] == ""

    def test_load_maps_header_to_record(self, sheets_storage, sheet):
        """Test rows are read back by header, dropping empty cells."""
        sheet.get_all_values.return_value = [
            COLUMNS[CollectionKey.PAYMENTS],
            ["p1", "c1", "Ana", "150", "2025-03-01T09:00:00", ""],
            ["", "", "", "", "", ""],
        ]

        records = sheets_storage.load(CollectionKey.PAYMENTS)

        assert records == [{
            "id": "p1",
            "clientId": "c1",
            "clientName": "Ana",
            "amount": "150",
            "date": "2025-03-01T09:00:00",
        }]

    def test_load_empty_sheet(self, sheets_storage, sheet):
        """Test a sheet with no values loads as empty."""
        sheet.get_all_values.return_value = []
        assert sheets_storage.load(CollectionKey.NOTIFICATIONS) == []

    def test_load_api_failure_raises_storage_error(self, sheets_storage, sheet):
        """Test API errors surface as StorageError."""
        sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageError):
            sheets_storage.load(CollectionKey.CLIENTS)


class FakeWorksheet:
    """Just enough of a gspread worksheet to keep rows between calls."""

    def __init__(self, rows):
        self.rows = [list(row) for row in rows]
        self.row_count = 1000
        self.fail_updates = False

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def update(self, values, range_name, value_input_option):
        if self.fail_updates:
            raise RuntimeError(
                "Your input contains more than the maximum of 50000 characters in a single cell."
            )
        self.rows[:len(values)] = [list(row) for row in values]

    def batch_clear(self, ranges):
        first_row = int(ranges[0].split(":")[0][1:])
        self.rows = self.rows[:first_row - 1]

    def clear(self):
        self.rows = []

    def add_rows(self, count):
        self.row_count += count


class TestGoogleSheetsSaveSafety:
    """A failed save must leave the previous sheet contents readable."""

    @pytest.fixture(autouse=True)
    def no_retry_wait(self, monkeypatch):
        monkeypatch.setattr(GoogleSheetsLedgerStorage._write.retry, "wait", wait_none())

    @pytest.fixture
    def worksheet(self):
        header = COLUMNS[CollectionKey.CLIENTS]
        return FakeWorksheet([
            header,
            ["c1", "Ana", "5551234", "", "150", "Pendiente", "2025-03-01T09:00:00", "", ""],
            ["c2", "Beto", "5559876", "", "200", "Pagado", "2025-03-01T09:01:00", "", ""],
        ])

    @pytest.fixture
    def sheets_storage(self, worksheet):
        client = Mock()
        client.get_sheet.return_value = worksheet
        return GoogleSheetsLedgerStorage(client)

    def test_failed_update_keeps_existing_rows(self, sheets_storage, worksheet):
        """Test an API failure during save does not erase stored clients."""
        worksheet.fail_updates = True

        with pytest.raises(StorageError):
            sheets_storage.save(CollectionKey.CLIENTS, [CLIENT_RECORD])

        assert [r["name"] for r in sheets_storage.load(CollectionKey.CLIENTS)] == ["Ana", "Beto"]

    def test_oversized_cell_rejected_before_writing(self, sheets_storage, worksheet):
        """Test a value over the cell limit fails without touching the sheet."""
        record = dict(CLIENT_RECORD, image="x" * (MAX_CELL_CHARS + 1))

        with pytest.raises(StorageError):
            sheets_storage.save(CollectionKey.CLIENTS, [record])

        assert len(sheets_storage.load(CollectionKey.CLIENTS)) == 2

    def test_shorter_save_trims_stale_rows(self, sheets_storage, worksheet):
        """Test rows from a previous longer save do not come back on load."""
        sheets_storage.save(CollectionKey.CLIENTS, [CLIENT_RECORD])

        records = sheets_storage.load(CollectionKey.CLIENTS)
        assert [r["id"] for r in records] == ["c1"]
        assert records[0]["name"] == "Ana"
