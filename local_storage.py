import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from errors import StorageError

logger = logging.getLogger(__name__)


class LocalKeyValueStore:
    """Simple local key-value storage backed by one JSON file.

    Every mutation is written through to disk before returning, so a value
    set is visible to the next read. Pass ``storage_file=None`` to keep the
    data in memory only.
    """

    def __init__(self, storage_file: Optional[str] = 'habit_tracker.json'):
        self.storage_file = storage_file
        self.data = self._load_data()

    def _load_data(self) -> Dict[str, Any]:
        """Load key-value pairs from the local JSON file"""
        if self.storage_file and os.path.exists(self.storage_file):
            try:
                with open(self.storage_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.error(f"Error loading {self.storage_file}: {e}")
                return {}
            if not isinstance(loaded, dict):
                logger.error(f"Ignoring {self.storage_file}: top level is not an object")
                return {}
            return loaded
        return {}

    def _save_data(self, data: Dict[str, Any]):
        """Save key-value pairs to the local JSON file"""
        if self.storage_file:
            try:
                with open(self.storage_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
            except IOError as e:
                logger.error(f"Error saving {self.storage_file}: {e}")
                raise StorageError(f"Failed to save {self.storage_file}: {e}")
        self.data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def contains(self, key: str) -> bool:
        return key in self.data

    def keys(self) -> List[str]:
        return list(self.data.keys())

    def put(self, key: str, value: Any):
        """Insert or overwrite a single value"""
        updated = dict(self.data)
        updated[key] = value
        self._save_data(updated)

    def remove(self, key: str):
        """Delete a key; missing keys are ignored"""
        self.remove_many([key])

    def remove_many(self, keys: Iterable[str]):
        """Delete several keys in a single write"""
        doomed = set(keys)
        if not self.data.keys() & doomed:
            return
        self._save_data({k: v for k, v in self.data.items() if k not in doomed})

    def clear(self):
        self._save_data({})
