"""In-memory storage, used by tests and when no backend is configured."""

import copy
from typing import Optional

from lavafix.services.storage.interface import CollectionKey, LedgerStorageInterface


class InMemoryStorage(LedgerStorageInterface):
    """Keeps deep copies of whatever was last saved."""

    def __init__(self, initial: Optional[dict[CollectionKey, list[dict]]] = None):
        self._collections: dict[CollectionKey, list[dict]] = {}
        for key, records in (initial or {}).items():
            self._collections[CollectionKey(key)] = copy.deepcopy(records)
        self.save_count = 0

    def load(self, key: CollectionKey) -> list[dict]:
        return copy.deepcopy(self._collections.get(key, []))

    def save(self, key: CollectionKey, records: list[dict]) -> None:
        self._collections[key] = copy.deepcopy(records)
        self.save_count += 1
