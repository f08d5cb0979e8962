"""
Abstract Storage Interface

DESIGN DECISION: Persistence is an opaque key-value store of text values.
This allows us to:
1. Keep JSON files on disk for the desktop app
2. Use in-memory storage for testing
3. Swap in any other backend without touching business logic

The interface is intentionally tiny - each collection is one value
under one key, rewritten in full after every change.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for key-value storage.

    Any storage implementation (JSON files, browser storage bridge, etc.)
    must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Collection key

        Returns:
            The stored text, or None if nothing was ever stored
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Collection key
            value: Full serialized collection

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None
