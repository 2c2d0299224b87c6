"""Services package."""

from lavafix.services.storage import (
    CollectionKey,
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    "CollectionKey",
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "LedgerStorageInterface",
    "StorageError",
]
