"""
Completion-time estimation from retained progress history.

The estimator is a two-point linear model: the rate of progress is taken
from the first and last retained observations only, and the remaining
percentage is extrapolated at that rate. Intermediate samples are ignored,
so a single stale middle reading cannot skew the result, while noise in
either endpoint moves the estimate directly.

Usage:
    >>> from arewethere.estimation import estimate, format_duration
    >>>
    >>> result = estimate(tracker.history)
    >>> if result is None:
    ...     print("Not enough data")
    ... else:
    ...     print(f"{format_duration(result.remaining)} left")
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from arewethere.history.models import History

_MS_PER_MINUTE = 60_000
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR


@dataclass(frozen=True)
class Estimate:
    """
    Projected completion derived from a History.

    Never stored; recompute it from the current History whenever it is
    needed.

    Attributes:
        remaining: Time left until 100% at the observed rate.
        completes_at: Projected instant of completion.
        seconds_per_percent: Observed rate in seconds per percentage point.
    """

    remaining: timedelta
    completes_at: datetime
    seconds_per_percent: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "remaining_seconds": self.remaining.total_seconds(),
            "completes_at": self.completes_at.isoformat(),
            "seconds_per_percent": self.seconds_per_percent,
        }


def estimate(history: History) -> Estimate | None:
    """
    Extrapolate the completion time from the first and last observations.

    Args:
        history: Retained observations for the current run.

    Returns:
        The Estimate, or None when there are fewer than two observations or
        the observed progress rate is zero or negative, or when the rate is
        so slow that the projected completion falls outside the datetime range.
    """
    if len(history) < 2:
        return None

    first = history[0]
    last = history[-1]

    percent_delta = last.percent - first.percent
    time_delta = (last.timestamp - first.timestamp).total_seconds()
    if percent_delta <= 0 or time_delta <= 0:
        return None

    seconds_per_percent = time_delta / percent_delta
    try:
        remaining = timedelta(seconds=(100.0 - last.percent) * seconds_per_percent)
        completes_at = last.timestamp + remaining
    except OverflowError:
        # Progress too slow for the projection to fit in a datetime
        return None

    return Estimate(
        remaining=remaining,
        completes_at=completes_at,
        seconds_per_percent=seconds_per_percent,
    )


def format_duration(value: timedelta | float) -> str:
    """
    Format a duration as ``"1d 2h 3m"``, omitting zero components.

    Args:
        value: A timedelta, or a number of milliseconds.

    Returns:
        The formatted duration, ``"< 1m"`` when shorter than a minute, or
        ``"Unknown"`` for negative or non-finite input.

    Example:
        >>> format_duration(90_000_000)
        '1d 1h'
        >>> format_duration(timedelta(seconds=30))
        '< 1m'
    """
    if isinstance(value, timedelta):
        milliseconds = value.total_seconds() * 1000
    else:
        milliseconds = float(value)

    if not math.isfinite(milliseconds) or milliseconds < 0:
        return "Unknown"

    total = int(milliseconds)
    days, total = divmod(total, _MS_PER_DAY)
    hours, total = divmod(total, _MS_PER_HOUR)
    minutes = total // _MS_PER_MINUTE

    parts = [
        f"{amount}{unit}"
        for amount, unit in ((days, "d"), (hours, "h"), (minutes, "m"))
        if amount
    ]
    return " ".join(parts) if parts else "< 1m"


__all__ = [
    "Estimate",
    "estimate",
    "format_duration",
]
