"""
Key-value store protocol.

The progress history is persisted as a single serialized value under one
key. Any backend that can get, set and delete string values by key can
hold it.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Protocol for durable string key-value stores.

    Implementations:
    - InMemoryKeyValueStore: process-local, for tests and ephemeral runs
    - SQLiteKeyValueStore: file-backed via aiosqlite

    Implementations raise StoreError for backend failures.
    """

    async def get(self, key: str) -> str | None:
        """
        Get the value stored under a key.

        Args:
            key: Key to look up

        Returns:
            The stored value, or None if the key does not exist
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any existing value for the key.

        Args:
            key: Key to write
            value: Serialized value
        """
        ...

    async def delete(self, key: str) -> None:
        """
        Remove a key. Deleting a missing key is not an error.

        Args:
            key: Key to remove
        """
        ...
