"""
Unit tests for SQLiteKeyValueStore.

Tests cover:
- Basic get/set/delete against an in-memory database
- Durability across connections to a file database
- Lifecycle (initialize, close, use before connect)
- Tracing attributes
"""

from pathlib import Path

import pytest

from arewethere.observability import MockTracer
from arewethere.stores import KeyValueStore, SQLiteKeyValueStore


class TestSQLiteKeyValueStore:
    """Tests for the aiosqlite-backed store."""

    def test_implements_protocol(self) -> None:
        assert isinstance(SQLiteKeyValueStore(":memory:", enable_tracing=False), KeyValueStore)

    @pytest.mark.asyncio
    async def test_missing_key(self, sqlite_store: SQLiteKeyValueStore) -> None:
        assert await sqlite_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_get_overwrite(self, sqlite_store: SQLiteKeyValueStore) -> None:
        await sqlite_store.set("key", "first")
        await sqlite_store.set("key", "second")

        assert await sqlite_store.get("key") == "second"

    @pytest.mark.asyncio
    async def test_delete(self, sqlite_store: SQLiteKeyValueStore) -> None:
        await sqlite_store.set("key", "value")

        await sqlite_store.delete("key")
        await sqlite_store.delete("key")

        assert await sqlite_store.get("key") is None

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, sqlite_store: SQLiteKeyValueStore) -> None:
        await sqlite_store.set("a", "1")
        await sqlite_store.set("b", "2")
        await sqlite_store.delete("a")

        assert await sqlite_store.get("b") == "2"

    @pytest.mark.asyncio
    async def test_values_survive_reconnect(self, tmp_path: Path) -> None:
        database = tmp_path / "nested" / "history.db"

        async with SQLiteKeyValueStore(database, enable_tracing=False) as store:
            await store.set("progress-history", "[]")

        async with SQLiteKeyValueStore(database, enable_tracing=False) as store:
            assert await store.get("progress-history") == "[]"

        assert database.exists()

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self) -> None:
        store = SQLiteKeyValueStore(":memory:", enable_tracing=False)
        try:
            await store.initialize()
            await store.initialize()
            assert store.is_connected
        finally:
            await store.close()

        assert not store.is_connected
        await store.close()

    @pytest.mark.asyncio
    async def test_use_before_initialize_raises(self) -> None:
        store = SQLiteKeyValueStore(":memory:", enable_tracing=False)

        with pytest.raises(RuntimeError, match="Not connected"):
            await store.get("key")

    def test_expands_user_path(self) -> None:
        store = SQLiteKeyValueStore("~/history.db", enable_tracing=False)

        assert store.database == str(Path.home() / "history.db")

    @pytest.mark.asyncio
    async def test_span_attributes(self) -> None:
        tracer = MockTracer()
        async with SQLiteKeyValueStore(":memory:", tracer=tracer) as store:
            await store.set("k", "v")

        assert tracer.spans == [
            (
                "arewethere.store.set",
                {"db.system": "sqlite", "db.name": ":memory:", "arewethere.store.key": "k"},
            )
        ]
