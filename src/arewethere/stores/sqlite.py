"""
SQLite key-value store implementation.

Keeps values in a single ``key_value_store`` table using aiosqlite. This is
the default durable backend for the command line tool: one small file in
the user's home directory holds the progress history between runs.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from arewethere.exceptions import StoreError
from arewethere.observability import (
    ATTR_DB_NAME,
    ATTR_DB_SYSTEM,
    ATTR_STORE_KEY,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS key_value_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteKeyValueStore:
    """
    SQLite implementation of the key-value store.

    SQLite-specific adaptations:
    - Timestamps stored as TEXT in ISO 8601 format
    - Uses UPSERT with ON CONFLICT syntax (SQLite 3.24+)

    Example:
        >>> async with SQLiteKeyValueStore("~/.arewethere/history.db") as store:
        ...     await store.set("progress-history", "[]")
    """

    def __init__(
        self,
        database: str | Path,
        *,
        busy_timeout: int = 5000,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the SQLite key-value store.

        Args:
            database: Path to SQLite database file or ':memory:' for in-memory
            busy_timeout: Timeout in milliseconds when database is locked (default: 5000)
            tracer: Optional custom Tracer instance.
            enable_tracing: If True and OpenTelemetry is available, emit traces (default: True).
        """
        if str(database) == ":memory:":
            self._database = ":memory:"
        else:
            self._database = str(Path(database).expanduser())
        self._busy_timeout = busy_timeout
        self._connection: aiosqlite.Connection | None = None
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def __aenter__(self) -> SQLiteKeyValueStore:
        """Open the connection and create the schema."""
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    @property
    def database(self) -> str:
        return self._database

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def _connect(self) -> None:
        if self._connection is not None:
            return

        if self._database != ":memory:":
            Path(self._database).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self._database)
        await self._connection.execute(f"PRAGMA busy_timeout = {self._busy_timeout}")

        logger.debug(
            "Connected to SQLite database: %s (busy_timeout=%d)",
            self._database,
            self._busy_timeout,
        )

    async def close(self) -> None:
        """
        Close the database connection.

        Safe to call multiple times.
        """
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.debug("Closed SQLite database connection: %s", self._database)

    async def initialize(self) -> None:
        """
        Connect if needed and create the ``key_value_store`` table.

        This method is idempotent - safe to call multiple times.

        Raises:
            StoreError: If the database cannot be opened or the schema created
        """
        try:
            await self._connect()
            conn = self._ensure_connected()
            await conn.executescript(SCHEMA)
            await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreError("*", f"cannot initialize {self._database}: {e}") from e

        logger.debug("Initialized SQLite key-value store schema: %s", self._database)

    def _ensure_connected(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError(
                "Not connected to database. Use 'async with store:' or call 'initialize()' first."
            )
        return self._connection

    def _span_attributes(self, key: str) -> dict[str, Any]:
        return {
            ATTR_DB_SYSTEM: "sqlite",
            ATTR_DB_NAME: self._database,
            ATTR_STORE_KEY: key,
        }

    async def get(self, key: str) -> str | None:
        with self._tracer.span("arewethere.store.get", self._span_attributes(key)):
            conn = self._ensure_connected()
            try:
                cursor = await conn.execute(
                    "SELECT value FROM key_value_store WHERE key = ?",
                    (key,),
                )
                row = await cursor.fetchone()
            except aiosqlite.Error as e:
                raise StoreError(key, str(e)) from e
            return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        with self._tracer.span("arewethere.store.set", self._span_attributes(key)):
            conn = self._ensure_connected()
            now = datetime.now(UTC).isoformat()
            try:
                await conn.execute(
                    """
                    INSERT INTO key_value_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT (key) DO UPDATE
                    SET value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
                await conn.commit()
            except aiosqlite.Error as e:
                raise StoreError(key, str(e)) from e

    async def delete(self, key: str) -> None:
        with self._tracer.span("arewethere.store.delete", self._span_attributes(key)):
            conn = self._ensure_connected()
            try:
                await conn.execute("DELETE FROM key_value_store WHERE key = ?", (key,))
                await conn.commit()
            except aiosqlite.Error as e:
                raise StoreError(key, str(e)) from e
