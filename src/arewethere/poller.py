"""
StatusPoller - Poll the status endpoint and feed the progress history.

The poller is the only caller of ``HistoryTracker.record``. It guarantees
that polls never overlap: ``refresh()`` is single-flight, so a manual
refresh that arrives while a timer-driven poll is running simply awaits
that poll's result instead of starting a second request.

Features:
    - Single-flight ``refresh()`` shared by manual and periodic triggers
    - Async iterator ``watch()`` yielding a snapshot after every poll
    - ``request_refresh()`` to wake a waiting watch loop early
    - Failed polls keep the previous status and history
    - ``close()`` cancels any in-flight poll without touching the history

Usage:
    >>> poller = StatusPoller(client, tracker, config)
    >>> async for snapshot in poller.watch():
    ...     print(render_snapshot(snapshot))
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from arewethere.client import StatusClient
from arewethere.config import MonitorConfig
from arewethere.estimation import Estimate, estimate
from arewethere.exceptions import StatusFetchError, StatusParseError
from arewethere.history.models import History
from arewethere.history.tracker import HistoryTracker
from arewethere.models import StatusResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorSnapshot:
    """
    Everything the display layer needs for one render.

    Attributes:
        status: Most recent successfully fetched status, or None before the
            first successful poll.
        history: Retained observations at the time of the snapshot.
        last_error: Message of the most recent failed poll, cleared by the
            next successful one.
        polled_at: When the most recent poll finished, successful or not.
        is_loading: True while a poll is in flight.
    """

    status: StatusResponse | None = None
    history: History = field(default_factory=History)
    last_error: str | None = None
    polled_at: datetime | None = None
    is_loading: bool = False

    @property
    def estimate(self) -> Estimate | None:
        """Completion estimate recomputed from ``history``."""
        return estimate(self.history)

    @property
    def percent(self) -> float | None:
        return self.status.percent if self.status is not None else None

    @property
    def is_complete(self) -> bool:
        return self.status is not None and self.status.is_complete


class StatusPoller:
    """
    Serializes status polls and records their progress.

    Thread Safety:
        Designed for asyncio and not thread-safe. All operations should be
        performed within the same event loop.

    Example:
        >>> poller = StatusPoller(client, tracker, MonitorConfig(refresh_interval=30))
        >>> snapshot = await poller.refresh()
        >>> snapshot.estimate
    """

    def __init__(
        self,
        client: StatusClient,
        tracker: HistoryTracker,
        config: MonitorConfig | None = None,
    ) -> None:
        """
        Initialize the poller.

        Args:
            client: Status endpoint client.
            tracker: History tracker; should already be loaded.
            config: Monitor configuration (defaults to MonitorConfig()).
        """
        self._client = client
        self._tracker = tracker
        self._config = config or MonitorConfig()
        self._snapshot = MonitorSnapshot(history=tracker.history)
        self._inflight: asyncio.Task[MonitorSnapshot] | None = None
        self._wakeup = asyncio.Event()
        self._closed = False

    @property
    def snapshot(self) -> MonitorSnapshot:
        """The latest snapshot; safe to read at any time."""
        return self._snapshot

    @property
    def is_polling(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def refresh(self) -> MonitorSnapshot:
        """
        Poll the status endpoint once and record the result.

        If a poll is already in flight, waits for it and returns its
        snapshot rather than issuing another request.

        Returns:
            The snapshot after the poll completed.

        Raises:
            RuntimeError: If the poller has been closed.
        """
        if self._closed:
            raise RuntimeError("StatusPoller has been closed")

        if self._inflight is None or self._inflight.done():
            self._snapshot = replace(self._snapshot, is_loading=True)
            self._inflight = asyncio.create_task(self._poll())
        else:
            logger.debug("Poll already in progress, joining it")

        # Shield so a cancelled caller does not abandon the shared poll
        return await asyncio.shield(self._inflight)

    async def _poll(self) -> MonitorSnapshot:
        try:
            status = await self._client.fetch()
        except (StatusFetchError, StatusParseError) as e:
            logger.warning("Status poll failed: %s", e)
            self._snapshot = replace(
                self._snapshot,
                last_error=str(e),
                polled_at=datetime.now(UTC),
                is_loading=False,
            )
            return self._snapshot
        except asyncio.CancelledError:
            self._snapshot = replace(self._snapshot, is_loading=False)
            raise

        # Shielded so a cancelled poll still finishes its history write
        try:
            history = await asyncio.shield(
                self._tracker.record(status.percent, self._observed_at(status))
            )
        except asyncio.CancelledError:
            self._snapshot = replace(self._snapshot, is_loading=False)
            raise

        self._snapshot = MonitorSnapshot(
            status=status,
            history=history,
            last_error=None,
            polled_at=datetime.now(UTC),
            is_loading=False,
        )
        return self._snapshot

    def _observed_at(self, status: StatusResponse) -> datetime:
        if self._config.timestamp_source == "client":
            return datetime.now(UTC)
        return status.last_updated

    def request_refresh(self) -> None:
        """Wake a waiting ``watch()`` loop so it polls immediately."""
        self._wakeup.set()

    async def watch(self, interval: float | None = None) -> AsyncIterator[MonitorSnapshot]:
        """
        Poll repeatedly, yielding a snapshot after every poll.

        The loop waits ``interval`` seconds between polls, or less if
        ``request_refresh()`` is called. It ends when the poller is closed,
        or once the migration reports 100% if ``stop_when_complete`` is
        set in the configuration.

        Args:
            interval: Seconds between polls (defaults to
                ``config.refresh_interval``).

        Yields:
            MonitorSnapshot after each poll.

        Raises:
            ValueError: If interval is <= 0.
        """
        interval = self._config.refresh_interval if interval is None else interval
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        while not self._closed:
            # Requests made while polling or while the caller renders still count
            self._wakeup.clear()
            try:
                snapshot = await self.refresh()
            except asyncio.CancelledError:
                if self._closed:
                    return
                raise
            yield snapshot

            if self._config.stop_when_complete and snapshot.is_complete:
                logger.info("Migration reported complete, stopping watch")
                return

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=interval)

    async def close(self) -> None:
        """
        Stop watch loops and cancel any in-flight poll.

        The history is only modified after a fetch completes, so cancelling
        mid-request leaves it untouched.
        """
        self._closed = True
        self._wakeup.set()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._inflight
        self._inflight = None


__all__ = [
    "MonitorSnapshot",
    "StatusPoller",
]
