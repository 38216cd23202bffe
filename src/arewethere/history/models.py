"""
Progress observations and the retained history of one migration run.

Both types are immutable: recording a new observation produces a new
History rather than mutating the existing one.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, overload

from arewethere.serialization import json_dumps, json_loads


@dataclass(frozen=True)
class Observation:
    """
    A single (timestamp, percent) sample taken from a status poll.

    Attributes:
        timestamp: When the progress was observed (timezone-aware).
        percent: Completion percentage in [0, 100].
    """

    timestamp: datetime
    percent: float

    def __post_init__(self) -> None:
        """Validate observation values."""
        if self.timestamp.tzinfo is None:
            raise ValueError(f"timestamp must be timezone-aware, got {self.timestamp!r}")

        if not math.isfinite(self.percent) or not 0.0 <= self.percent <= 100.0:
            raise ValueError(f"percent must be within [0, 100], got {self.percent}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "percent": self.percent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Observation:
        """
        Create from dictionary.

        Raises:
            KeyError: If a field is missing.
            ValueError: If a field cannot be parsed or is out of range.
        """
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            percent=float(data["percent"]),
        )


@dataclass(frozen=True)
class History:
    """
    Ordered observations retained for the current migration run.

    Invariants:
        - Observations are in append order. HistoryTracker only appends
          observations that are not older than the last one, so a tracked
          History is also in time order.
        - Percent strictly increases between consecutive observations;
          equal readings are never stored twice and a decrease starts a
          new History.

    Example:
        >>> history = History().append(Observation(t0, 10.0)).append(Observation(t1, 20.0))
        >>> len(history)
        2
        >>> history.last.percent
        20.0
    """

    observations: tuple[Observation, ...] = ()

    def __post_init__(self) -> None:
        for previous, current in zip(self.observations, self.observations[1:], strict=False):
            if current.percent <= previous.percent:
                raise ValueError(
                    f"percent must strictly increase within a run: "
                    f"{previous.percent} followed by {current.percent}"
                )

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.observations)

    @overload
    def __getitem__(self, index: int) -> Observation: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Observation, ...]: ...

    def __getitem__(self, index: int | slice) -> Observation | tuple[Observation, ...]:
        return self.observations[index]

    @property
    def first(self) -> Observation | None:
        """Oldest retained observation, or None if empty."""
        return self.observations[0] if self.observations else None

    @property
    def last(self) -> Observation | None:
        """Most recent observation, or None if empty."""
        return self.observations[-1] if self.observations else None

    def append(self, observation: Observation) -> History:
        """Return a new History with the observation added at the end."""
        return History(self.observations + (observation,))

    def to_list(self) -> list[dict[str, Any]]:
        return [observation.to_dict() for observation in self.observations]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> History:
        return cls(tuple(Observation.from_dict(item) for item in data))

    def to_json(self) -> str:
        """Serialize as a JSON array of ``{"timestamp", "percent"}`` objects."""
        return json_dumps(self.to_list())

    @classmethod
    def from_json(cls, raw: str) -> History:
        """
        Parse the persisted JSON representation.

        Raises:
            ValueError: If the payload is not a valid serialized History.
        """
        try:
            data = json_loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            return cls.from_list(data)
        except (KeyError, TypeError, AttributeError, OverflowError, RecursionError) as e:
            raise ValueError(f"malformed progress history: {e!r}") from e


__all__ = [
    "Observation",
    "History",
]
