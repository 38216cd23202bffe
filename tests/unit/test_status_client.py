"""
Unit tests for StatusClient.

The aiohttp session is replaced with a MagicMock so no network access
is needed.

Tests cover:
- Successful fetch and parsing
- HTTP error statuses
- Connection failures and timeouts
- Invalid JSON and unexpected payload shapes
- Session ownership
- Tracing integration
"""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from arewethere.client import StatusClient
from arewethere.exceptions import StatusFetchError, StatusParseError
from arewethere.observability import MockTracer

URL = "https://example.test/api/status"

# =============================================================================
# Test Fixtures
# =============================================================================


def create_mock_session(
    payload: Any = None,
    *,
    status: int = 200,
    reason: str = "OK",
    json_error: Exception | None = None,
) -> MagicMock:
    """Create a mock aiohttp session whose get() yields one response."""
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=payload, side_effect=json_error)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    return session


def create_client(session: MagicMock, tracer: MockTracer | None = None) -> StatusClient:
    return StatusClient(URL, timeout=2.0, session=session, tracer=tracer, enable_tracing=False)


# =============================================================================
# Test fetch
# =============================================================================


class TestStatusClientFetch:
    """Tests for StatusClient.fetch()."""

    @pytest.mark.asyncio
    async def test_fetch_parses_status(self, status_payload) -> None:
        session = create_mock_session(status_payload)
        client = create_client(session)

        status = await client.fetch()

        assert status.percent == 42.5
        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args == (URL,)
        assert kwargs["headers"] == {"Accept": "application/json"}
        assert kwargs["timeout"].total == 2.0

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self) -> None:
        client = create_client(create_mock_session(status=503, reason="Service Unavailable"))

        with pytest.raises(StatusFetchError) as exc_info:
            await client.fetch()

        assert exc_info.value.status == 503
        assert exc_info.value.url == URL
        assert "HTTP 503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error_raises_fetch_error(self) -> None:
        session = MagicMock()
        session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
        client = create_client(session)

        with pytest.raises(StatusFetchError, match="connection refused") as exc_info:
            await client.fetch()

        assert exc_info.value.status is None
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self) -> None:
        session = MagicMock()
        session.get.return_value.__aenter__.side_effect = asyncio.TimeoutError()
        client = create_client(session)

        with pytest.raises(StatusFetchError, match="TimeoutError"):
            await client.fetch()

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self) -> None:
        session = create_mock_session(json_error=json.JSONDecodeError("Expecting value", "<", 0))
        client = create_client(session)

        with pytest.raises(StatusParseError, match="not valid JSON"):
            await client.fetch()

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises_parse_error(self, status_payload) -> None:
        del status_payload["migration_data"]["percent_completed"]
        client = create_client(create_mock_session(status_payload))

        with pytest.raises(StatusParseError, match="validation error"):
            await client.fetch()

    @pytest.mark.asyncio
    async def test_out_of_range_percent_raises_parse_error(self, payload_factory) -> None:
        client = create_client(create_mock_session(payload_factory(percent=250)))

        with pytest.raises(StatusParseError):
            await client.fetch()

    @pytest.mark.asyncio
    async def test_non_object_body_raises_parse_error(self) -> None:
        client = create_client(create_mock_session(["not", "an", "object"]))

        with pytest.raises(StatusParseError):
            await client.fetch()


# =============================================================================
# Test Session Ownership
# =============================================================================


class TestStatusClientSession:
    """Tests for session lifecycle."""

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self) -> None:
        session = create_mock_session()
        client = create_client(session)

        await client.close()

        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_owned_session_is_closed(self) -> None:
        async with StatusClient(URL, enable_tracing=False) as client:
            session = client._get_session()
            assert not session.closed

        assert session.closed
        await client.close()


# =============================================================================
# Test Tracing
# =============================================================================


class TestStatusClientTracing:
    """Tests for tracer integration."""

    @pytest.mark.asyncio
    async def test_fetch_records_client_span(self, status_payload) -> None:
        tracer = MockTracer()
        client = create_client(create_mock_session(status_payload), tracer=tracer)

        await client.fetch()

        assert tracer.span_names == ["arewethere.status_client.fetch"]
        name, attributes = tracer.spans[0]
        assert attributes == {"http.request.method": "GET", "url.full": URL}
