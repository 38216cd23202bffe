"""In-memory key-value store."""

import asyncio

from arewethere.observability import ATTR_STORE_KEY, Tracer, create_tracer


class InMemoryKeyValueStore:
    """
    In-memory implementation of the key-value store for testing.

    All data is lost when the process terminates.

    Example:
        >>> store = InMemoryKeyValueStore()
        >>> await store.set("progress-history", "[]")
        >>> await store.get("progress-history")
        '[]'
    """

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the store.

        Args:
            initial: Optional values to pre-populate the store with
            tracer: Optional tracer for tracing (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._values: dict[str, str] = dict(initial or {})
        self._lock: asyncio.Lock = asyncio.Lock()
        self.write_count = 0

    async def get(self, key: str) -> str | None:
        with self._tracer.span("arewethere.store.get", {ATTR_STORE_KEY: key}):
            async with self._lock:
                return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        with self._tracer.span("arewethere.store.set", {ATTR_STORE_KEY: key}):
            async with self._lock:
                self._values[key] = value
                self.write_count += 1

    async def delete(self, key: str) -> None:
        with self._tracer.span("arewethere.store.delete", {ATTR_STORE_KEY: key}):
            async with self._lock:
                self._values.pop(key, None)
                self.write_count += 1

    async def clear(self) -> None:
        """Clear all values. Useful for test setup/teardown."""
        async with self._lock:
            self._values.clear()
