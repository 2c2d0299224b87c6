"""Backup export package."""

from lavafix.export.backup import (
    HEADERS,
    BackupExporter,
    BackupExportError,
    BackupFile,
    BackupSink,
    FileBackupSink,
)

__all__ = [
    "HEADERS",
    "BackupExporter",
    "BackupExportError",
    "BackupFile",
    "BackupSink",
    "FileBackupSink",
]
