"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
Collections are stored as JSON text, one key per collection.
"""

from expense_tracker.services.storage.interface import (
    InMemoryKeyValueStore,
    KeyValueStore,
)
from expense_tracker.services.storage.json_file import JsonFileKeyValueStore
from expense_tracker.services.storage.repository import CollectionRepository

__all__ = [
    # Interface
    "KeyValueStore",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Collections
    "CollectionRepository",
]
