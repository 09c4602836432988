"""
JSON file key-value store: one document on disk holding every key.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .store_interface import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Durable store backed by a single JSON file.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a crash never leaves a half-written document.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ Failed to read settings file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"❌ Settings file {self.path} does not hold a JSON object")
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".settings-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        data.pop(key)
        self._write_all(data)
        return True

    def get_stats(self) -> Dict[str, Any]:
        return {
            "type": "json_file",
            "path": str(self.path),
            "exists": self.path.exists(),
        }
