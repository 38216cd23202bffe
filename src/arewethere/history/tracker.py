"""
HistoryTracker - Retain progress observations across polls and restarts.

The tracker owns the History for the current migration run. Each poll
hands it the latest percentage; the tracker decides whether that reading
extends the run, starts a new run, or is a duplicate, and writes the full
History back to the key-value store whenever it changes.

Retention policy (see ``apply_observation``):
    - Empty history: the observation is appended.
    - Lower percent than the last observation: the remote migration was
      restarted, so the history is replaced by the new observation alone.
      Mixing two runs would poison the rate estimate.
    - Same percent as the last observation: ignored, nothing is written.
    - Higher percent: appended.

The "lower percent means a new run" rule is a heuristic. A transient
downward correction from the server is indistinguishable from a restart
and will discard the history; resets are logged at INFO so that such
events are visible.

A higher percent stamped earlier than the last observation (the server's
``last_updated`` moved backwards) is logged at WARNING and ignored, which
keeps the History in time order.

Usage:
    >>> tracker = HistoryTracker(store)
    >>> await tracker.load()
    >>> history = await tracker.record(42.5, observed_at)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from arewethere.exceptions import StoreError
from arewethere.history.models import History, Observation
from arewethere.observability import (
    ATTR_HISTORY_CHANGED,
    ATTR_HISTORY_KEY,
    ATTR_HISTORY_LENGTH,
    ATTR_HISTORY_RESET,
    ATTR_PERCENT,
    Tracer,
    create_tracer,
)
from arewethere.stores.interface import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "progress-history"


def apply_observation(history: History, observation: Observation) -> History:
    """
    Apply the retention policy to a new observation.

    Args:
        history: History before the observation.
        observation: The newly polled observation.

    Returns:
        The resulting History. The same object is returned when the
        observation repeats the last recorded percent.
    """
    last = history.last
    if last is None:
        return history.append(observation)
    if observation.percent < last.percent:
        return History((observation,))
    if observation.percent == last.percent:
        return history
    return history.append(observation)


class HistoryTracker:
    """
    Owns the progress History and keeps it persisted.

    All mutations go through ``record`` and ``reset``, which are
    serialized with an asyncio.Lock so overlapping polls can never
    interleave their read-modify-write of the History. Persistence is
    best-effort: a failed write is logged and the in-memory History stays
    authoritative for the life of the process.

    Thread Safety:
        Designed for asyncio and not thread-safe. Use from a single event
        loop.

    Example:
        >>> async with SQLiteKeyValueStore(path) as store:
        ...     tracker = HistoryTracker(store)
        ...     await tracker.load()
        ...     await tracker.record(status.percent, status.last_updated)
        ...     result = estimate(tracker.history)
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_HISTORY_KEY,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the tracker with an empty History.

        Call ``load()`` before the first ``record()`` to resume a history
        persisted by an earlier process.

        Args:
            store: Key-value store holding the serialized History.
            key: Key under which the History is stored.
            tracer: Optional custom Tracer instance.
            enable_tracing: Whether to enable OpenTelemetry tracing.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._store = store
        self._key = key
        self._history = History()
        self._lock = asyncio.Lock()

    @property
    def history(self) -> History:
        """The current History (immutable)."""
        return self._history

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> History:
        """
        Load the persisted History, replacing the in-memory one.

        A missing key, an unreadable store or a corrupt value all yield an
        empty History; this never raises.

        Returns:
            The loaded History.
        """
        with self._tracer.span("arewethere.history.load", {ATTR_HISTORY_KEY: self._key}):
            async with self._lock:
                self._history = await self._read()
                logger.debug(
                    "Loaded %d observations from %r",
                    len(self._history),
                    self._key,
                )
                return self._history

    async def _read(self) -> History:
        try:
            raw = await self._store.get(self._key)
        except StoreError as e:
            logger.warning("Could not read progress history, starting empty: %s", e)
            return History()

        if raw is None:
            return History()

        try:
            return History.from_json(raw)
        except ValueError as e:
            logger.warning("Discarding corrupt progress history under %r: %s", self._key, e)
            return History()

    async def record(self, percent: float, observed_at: datetime) -> History:
        """
        Record a polled percentage.

        Args:
            percent: Completion percentage reported by the status source.
            observed_at: Timezone-aware instant of the reading.

        Returns:
            The History after applying the retention policy. Unchanged when
            a higher percent arrives with a timestamp earlier than the last
            observation.

        Raises:
            ValueError: If percent is outside [0, 100] or observed_at is naive.
        """
        observation = Observation(timestamp=observed_at, percent=percent)

        with self._tracer.span(
            "arewethere.history.record",
            {ATTR_HISTORY_KEY: self._key, ATTR_PERCENT: percent},
        ) as span:
            async with self._lock:
                previous = self._history
                last = previous.last

                if (
                    last is not None
                    and percent > last.percent
                    and observation.timestamp < last.timestamp
                ):
                    logger.warning(
                        "Ignoring %.2f%% observed at %s: earlier than the last observation at %s",
                        percent,
                        observation.timestamp.isoformat(),
                        last.timestamp.isoformat(),
                    )
                    updated = previous
                else:
                    updated = apply_observation(previous, observation)

                changed = updated is not previous
                is_reset = changed and last is not None and len(updated) == 1

                if is_reset and last is not None:
                    logger.info(
                        "Progress dropped from %.2f%% to %.2f%%, treating as a new migration run "
                        "(discarding %d observations)",
                        last.percent,
                        percent,
                        len(previous),
                    )

                if changed:
                    self._history = updated
                    await self._write(updated)

                if span is not None:
                    span.set_attribute(ATTR_HISTORY_CHANGED, changed)
                    span.set_attribute(ATTR_HISTORY_RESET, is_reset)
                    span.set_attribute(ATTR_HISTORY_LENGTH, len(updated))

                return self._history

    async def reset(self) -> History:
        """
        Discard all observations and remove the persisted value.

        Returns:
            The new, empty History.
        """
        with self._tracer.span("arewethere.history.reset", {ATTR_HISTORY_KEY: self._key}):
            async with self._lock:
                self._history = History()
                try:
                    await self._store.delete(self._key)
                except StoreError as e:
                    logger.warning("Could not delete persisted progress history: %s", e)
                logger.info("Progress history %r reset", self._key)
                return self._history

    async def _write(self, history: History) -> None:
        try:
            await self._store.set(self._key, history.to_json())
        except StoreError as e:
            logger.warning(
                "Could not persist progress history (%d observations kept in memory): %s",
                len(history),
                e,
            )
