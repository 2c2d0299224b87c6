"""
Payment History Backup

Serializes the full payment history to CSV so the owner can keep a
copy outside the app (a spreadsheet, an email to themselves, ...).

FORMAT:
    ID,Cliente,Fecha,Monto,Notas
    9f1c...,"Ana López",05/03/2025,150,"Pagó en efectivo"

- Cliente and Notas are always quoted; embedded quotes are doubled
- Any other field is quoted only if it contains a comma, quote or newline
- Fecha is a calendar date without time
- Filename: <AppName>_Respaldo_<YYYY-MM-DD>.csv (the export date)

Building the text is pure. Delivering it (disk, browser download) is
delegated to a BackupSink.
"""

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from lavafix.config import AppSettings, get_settings
from lavafix.models import PaymentRecord


HEADERS = ["ID", "Cliente", "Fecha", "Monto", "Notas"]
DELIMITER = ","


class BackupExportError(Exception):
    """Backup could not be delivered."""
    pass


class BackupFile(BaseModel):
    """A rendered backup, ready to hand off."""

    filename: str
    content: str

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _field(value: str, always_quote: bool = False) -> str:
    if always_quote or any(ch in value for ch in (DELIMITER, '"', "\n", "\r")):
        return _quote(value)
    return value


class BackupSink(ABC):
    """Where a finished backup goes."""

    @abstractmethod
    def deliver(self, backup: BackupFile) -> str:
        """
        Hand off a backup.

        Returns:
            Where the backup ended up (path, URL, ...)

        Raises:
            BackupExportError: If delivery fails
        """
        pass


class FileBackupSink(BackupSink):
    """Writes backups into a local directory."""

    def __init__(self, directory: Optional[Path] = None):
        self._directory = Path(directory or get_settings().app.backup_dir)

    def deliver(self, backup: BackupFile) -> str:
        path = self._directory / backup.filename
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(backup.data)
        except OSError as e:
            raise BackupExportError(f"Failed to write backup {path}: {e}")
        return str(path)


class BackupExporter:
    """Renders the payment history as CSV."""

    def __init__(self, settings: Optional[AppSettings] = None):
        settings = settings or get_settings().app
        self._app_name = settings.app_name
        self._date_format = settings.backup_date_format

    def filename(self, export_date: date) -> str:
        return f"{self._app_name}_Respaldo_{export_date.isoformat()}.csv"

    def _row(self, payment: PaymentRecord) -> str:
        return DELIMITER.join([
            _field(payment.id),
            _field(payment.client_name, always_quote=True),
            _field(payment.date.strftime(self._date_format)),
            _field(format(payment.amount, "f")),
            _field(payment.notes or "", always_quote=True),
        ])

    def to_csv(self, payments: list[PaymentRecord]) -> str:
        """Render every payment, in the order given, under the header row."""
        lines = [DELIMITER.join(HEADERS)]
        lines.extend(self._row(payment) for payment in payments)
        return "\n".join(lines)

    def build(
        self,
        payments: list[PaymentRecord],
        export_date: Optional[date] = None,
    ) -> BackupFile:
        export_date = export_date or date.today()
        return BackupFile(
            filename=self.filename(export_date),
            content=self.to_csv(payments),
        )

    def export(
        self,
        payments: list[PaymentRecord],
        sink: BackupSink,
        export_date: Optional[date] = None,
    ) -> str:
        """Render and deliver a backup. Returns the sink's location."""
        return sink.deliver(self.build(payments, export_date))
