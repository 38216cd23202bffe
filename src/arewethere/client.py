"""
HTTP client for the migration status endpoint.

Usage:
    >>> async with StatusClient("https://are-we-there-yet.hackclub.com/api/status") as client:
    ...     status = await client.fetch()
    ...     print(f"{status.percent:.2f}%")
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from arewethere.config import DEFAULT_STATUS_URL
from arewethere.exceptions import StatusFetchError, StatusParseError
from arewethere.models import StatusResponse
from arewethere.observability import (
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS_CODE,
    ATTR_HTTP_URL,
    ATTR_PERCENT,
    SpanKindEnum,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)


class StatusClient:
    """
    Fetches and validates the migration status document.

    The client owns its aiohttp session unless one is injected, in which
    case the caller is responsible for closing it.

    Example:
        >>> client = StatusClient(timeout=5.0)
        >>> try:
        ...     status = await client.fetch()
        ... except StatusFetchError:
        ...     ...  # network problem, keep showing the previous status
        ... finally:
        ...     await client.close()
    """

    def __init__(
        self,
        url: str = DEFAULT_STATUS_URL,
        *,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the client.

        Args:
            url: Status endpoint URL.
            timeout: Total request timeout in seconds.
            session: Optional shared aiohttp session (not closed by the client).
            tracer: Optional custom Tracer instance.
            enable_tracing: Whether to enable OpenTelemetry tracing.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> StatusClient:
        self._get_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it. Safe to call twice."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def fetch(self) -> StatusResponse:
        """
        GET the status endpoint and parse the response.

        Returns:
            The validated StatusResponse.

        Raises:
            StatusFetchError: On connection failures, timeouts and HTTP errors.
            StatusParseError: If the body is not JSON or does not match the
                expected shape.
        """
        session = self._get_session()

        with self._tracer.span_with_kind(
            "arewethere.status_client.fetch",
            SpanKindEnum.CLIENT,
            {ATTR_HTTP_METHOD: "GET", ATTR_HTTP_URL: self._url},
        ) as span:
            try:
                async with session.get(
                    self._url,
                    timeout=self._timeout,
                    headers={"Accept": "application/json"},
                ) as response:
                    if span is not None:
                        span.set_attribute(ATTR_HTTP_STATUS_CODE, response.status)

                    if response.status >= 400:
                        raise StatusFetchError(
                            self._url,
                            response.reason or "request failed",
                            status=response.status,
                        )

                    payload = await response.json(content_type=None)
            except (aiohttp.ClientError, TimeoutError) as e:
                raise StatusFetchError(self._url, str(e) or type(e).__name__) from e
            except ValueError as e:
                raise StatusParseError(self._url, f"body is not valid JSON: {e}") from e

            try:
                status = StatusResponse.model_validate(payload)
            except ValidationError as e:
                raise StatusParseError(
                    self._url,
                    f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}",
                ) from e

            if span is not None:
                span.set_attribute(ATTR_PERCENT, status.percent)

            logger.debug(
                "Fetched status from %s: %.2f%% (last updated %s)",
                self._url,
                status.percent,
                status.last_updated.isoformat(),
            )
            return status


__all__ = ["StatusClient"]
