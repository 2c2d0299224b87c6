"""
Local JSON File Storage

Each collection lives in its own file (lavafix_clients.json, ...),
mirroring the browser localStorage keys of the earlier browser app so an
exported localStorage dump can be dropped straight into the data dir.
"""

import json
from pathlib import Path
from typing import Optional

from lavafix.config import get_settings
from lavafix.services.storage.interface import (
    CollectionKey,
    LedgerStorageInterface,
    StorageError,
)


class JsonFileStorage(LedgerStorageInterface):
    """Stores every collection as a JSON array on disk."""

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = Path(data_dir or get_settings().app.data_dir)

    def path_for(self, key: CollectionKey) -> Path:
        return self._data_dir / f"lavafix_{key.value}.json"

    def load(self, key: CollectionKey) -> list[dict]:
        path = self.path_for(key)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path}: {e}")

        if not isinstance(data, list):
            raise StorageError(f"Expected a JSON array in {path}")
        return data

    def save(self, key: CollectionKey, records: list[dict]) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path}: {e}")
