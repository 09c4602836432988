"""
Key-value store interface for client-scoped persisted settings.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class KeyValueStore(ABC):
    """
    Abstract base class for durable key-value backends.

    Operations are synchronous so that a read-modify-write on top of them
    never yields to the event loop halfway through.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the raw stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns True if key existed."""
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Backend statistics for diagnostics."""
        return {"type": type(self).__name__}
