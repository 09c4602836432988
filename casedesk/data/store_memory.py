"""
In-memory key-value store. Not durable; used for tests and ephemeral runs.
"""
from typing import Any, Dict, Optional

from .store_interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store with simple access counters."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    def get(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        if value is None:
            self._misses += 1
        else:
            self._hits += 1
        return value

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._sets += 1

    def delete(self, key: str) -> bool:
        existed = key in self._data
        if existed:
            self._data.pop(key)
            self._deletes += 1
        return existed

    def get_stats(self) -> Dict[str, Any]:
        return {
            "type": "in_memory",
            "entries": len(self._data),
            "hits": self._hits,
            "misses": self._misses,
            "sets": self._sets,
            "deletes": self._deletes,
        }
