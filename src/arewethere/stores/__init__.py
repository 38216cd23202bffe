"""Key-value store implementations for persisting progress history."""

from arewethere.stores.in_memory import InMemoryKeyValueStore
from arewethere.stores.interface import KeyValueStore
from arewethere.stores.sqlite import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
