"""
Storage Services Package

Provides the abstract persistence gateway and its implementations.
Local JSON files are the default backend; Google Sheets and an
in-memory store are drop-in replacements.
"""

from lavafix.services.storage.interface import (
    CollectionKey,
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)
from lavafix.services.storage.google_sheets import (
    MAX_CELL_CHARS,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)
from lavafix.services.storage.json_file import JsonFileStorage
from lavafix.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "CollectionKey",
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "MAX_CELL_CHARS",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
