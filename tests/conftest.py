"""
Shared pytest fixtures for the arewethere tests.

This module provides:
- Time fixtures (base_time) and observation/history builders
- Status payload factories matching the remote endpoint's JSON shape
- Store fixtures (in_memory_store, sqlite_store)
- A tracker fixture backed by the in-memory store
- A fake status client for poller tests
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio

from arewethere.exceptions import StatusFetchError
from arewethere.history.models import History, Observation
from arewethere.history.tracker import HistoryTracker
from arewethere.models import StatusResponse
from arewethere.observability import NullTracer
from arewethere.stores.in_memory import InMemoryKeyValueStore
from arewethere.stores.sqlite import SQLiteKeyValueStore

# =============================================================================
# Time and History Fixtures
# =============================================================================


@pytest.fixture
def base_time() -> datetime:
    """A fixed, timezone-aware reference instant."""
    return datetime(2025, 11, 24, 16, 30, 0, tzinfo=UTC)


def build_history(start: datetime, *samples: tuple[float, float]) -> History:
    """
    Build a History from (seconds_after_start, percent) pairs.

    Example:
        >>> build_history(t0, (0, 10.0), (600, 20.0))
    """
    return History(
        tuple(
            Observation(timestamp=start + timedelta(seconds=offset), percent=percent)
            for offset, percent in samples
        )
    )


@pytest.fixture
def history_factory(base_time: datetime) -> Callable[..., History]:
    """Factory building histories relative to base_time."""

    def factory(*samples: tuple[float, float]) -> History:
        return build_history(base_time, *samples)

    return factory


# =============================================================================
# Status Payload Fixtures
# =============================================================================


def make_status_payload(
    percent: float = 42.5,
    last_updated: str = "2025-11-24T16:30:00Z",
    **overrides: Any,
) -> dict[str, Any]:
    """Build a status document in the shape the endpoint returns."""
    payload: dict[str, Any] = {
        "migration_data": {
            "ok": True,
            "migration_id": 1234,
            "percent_completed": percent,
            "status": {
                "migration": "in_progress",
                "users": "completed",
                "files": "in_progress",
                "dms": "not_started",
                "mpdms": "failed",
            },
            "migration_details": {
                "date_scheduled": 1764001800,
                "date_started": 1764003600,
                "date_finished": 0,
            },
        },
        "last_updated": last_updated,
    }
    payload["migration_data"].update(overrides)
    return payload


@pytest.fixture
def status_payload() -> dict[str, Any]:
    return make_status_payload()


@pytest.fixture
def payload_factory() -> Callable[..., dict[str, Any]]:
    return make_status_payload


@pytest.fixture
def status_factory() -> Callable[..., StatusResponse]:
    """Factory building validated StatusResponse objects."""

    def factory(percent: float = 42.5, last_updated: str = "2025-11-24T16:30:00Z") -> StatusResponse:
        return StatusResponse.model_validate(make_status_payload(percent, last_updated))

    return factory


# =============================================================================
# Store and Tracker Fixtures
# =============================================================================


@pytest.fixture
def in_memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(enable_tracing=False)


@pytest_asyncio.fixture
async def sqlite_store() -> AsyncGenerator[SQLiteKeyValueStore, None]:
    """In-memory SQLite store with the schema created."""
    async with SQLiteKeyValueStore(":memory:", enable_tracing=False) as store:
        yield store


@pytest.fixture
def tracker(in_memory_store: InMemoryKeyValueStore) -> HistoryTracker:
    return HistoryTracker(in_memory_store, tracer=NullTracer())


# =============================================================================
# Fake Status Client
# =============================================================================


class FakeStatusClient:
    """
    Stand-in for StatusClient returning queued responses.

    Each queued item is either a StatusResponse to return or an exception
    to raise. ``fetch_count`` counts calls; ``gate`` can be used to hold a
    fetch open until the test releases it.
    """

    def __init__(self, *responses: StatusResponse | Exception) -> None:
        self.responses: list[StatusResponse | Exception] = list(responses)
        self.fetch_count = 0
        self.gate: Any = None

    def queue(self, *responses: StatusResponse | Exception) -> None:
        self.responses.extend(responses)

    async def fetch(self) -> StatusResponse:
        self.fetch_count += 1
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            raise StatusFetchError("https://example.test/api/status", "no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client() -> FakeStatusClient:
    return FakeStatusClient()
