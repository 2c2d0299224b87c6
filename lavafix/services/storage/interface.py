"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap local JSON files for Google Sheets (or a real database later)
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from storage implementation

The interface is intentionally tiny - whole collections in, whole
collections out. The ledger store owns every invariant; a gateway only
has to remember what it was last given.
"""

from abc import ABC, abstractmethod
from enum import Enum


class CollectionKey(str, Enum):
    """The three persisted ledger collections."""
    CLIENTS = "clients"
    PAYMENTS = "payments"
    NOTIFICATIONS = "notifications"


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (JSON files, Google Sheets, etc.)
    must implement these methods. Records are plain dicts as produced
    by LedgerModel.to_record(); no schema version is stored.
    """

    @abstractmethod
    def load(self, key: CollectionKey) -> list[dict]:
        """
        Load a whole collection.

        Args:
            key: Which collection to load

        Returns:
            The stored records, or an empty list if nothing was saved yet

        Raises:
            StorageError: If the collection cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: CollectionKey, records: list[dict]) -> None:
        """
        Replace a whole collection.

        Args:
            key: Which collection to replace
            records: Every record of the collection, in order

        Raises:
            StorageError: If save fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
