"""
Text rendering of a MonitorSnapshot.

Every function here is pure: given the same snapshot (and ``now``) it
returns the same text, so the terminal UI can redraw freely.
"""

from __future__ import annotations

from datetime import UTC, datetime

from arewethere.estimation import format_duration
from arewethere.models import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
)
from arewethere.poller import MonitorSnapshot

STATUS_SYMBOLS = {
    STATUS_COMPLETED: "✔",
    STATUS_IN_PROGRESS: "◐",
    STATUS_NOT_STARTED: "○",
    STATUS_FAILED: "✖",
}
DEFAULT_SYMBOL = "○"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_percent_title(percent: float | None) -> str:
    """``"42.50%"``, or ``"Loading..."`` before the first successful poll."""
    if percent is None:
        return "Loading..."
    return f"{percent:.2f}%"


def format_status(value: str | None) -> str:
    """Turn ``"in_progress"`` into ``"In Progress"``; missing values become ``"-"``."""
    if not value:
        return "-"
    return " ".join(word[:1].upper() + word[1:] for word in value.split("_"))


def status_symbol(value: str | None) -> str:
    return STATUS_SYMBOLS.get(value or "", DEFAULT_SYMBOL)


def format_datetime(value: datetime | None) -> str:
    """Local-time rendering of an instant, ``"-"`` when unknown."""
    if value is None:
        return "-"
    return value.astimezone().strftime(DATE_FORMAT)


def format_timestamp(unix_seconds: int | None) -> str:
    """Local-time rendering of a unix timestamp in seconds; 0 and None are ``"-"``."""
    if not unix_seconds:
        return "-"
    return format_datetime(datetime.fromtimestamp(unix_seconds, tz=UTC))


def progress_bar(percent: float, width: int = 40) -> str:
    clamped = min(max(percent, 0.0), 100.0)
    filled = int(width * clamped / 100)
    return "█" * filled + "░" * (width - filled)


def _row(label: str, value: str) -> str:
    return f"  {label:<18} {value}"


def render_snapshot(snapshot: MonitorSnapshot, now: datetime | None = None) -> str:
    """
    Render the full summary shown by ``arewethere status`` and ``watch``.

    Args:
        snapshot: Snapshot to render.
        now: Reference instant for relative values (defaults to the current time).

    Returns:
        Multi-line summary text.
    """
    now = now or datetime.now(UTC)
    status = snapshot.status
    lines = [f"Slack Migration Status: {format_percent_title(snapshot.percent)}"]

    if status is None:
        if snapshot.last_error:
            lines.append(f"  Error: {snapshot.last_error}")
        return "\n".join(lines)

    data = status.migration_data
    lines += [
        f"[{progress_bar(status.percent)}]",
        "",
        "Migration Progress",
        _row("Percent Completed", f"{status.percent}%"),
        _row("Last Updated", format_datetime(status.last_updated)),
        "",
        "Estimate",
    ]

    result = snapshot.estimate
    if status.is_complete:
        lines.append(_row("Remaining", "Done"))
    elif result is None:
        lines.append(_row("Remaining", "Not enough data"))
    else:
        lines += [
            _row("Remaining", format_duration(result.remaining)),
            _row("ETA", format_datetime(result.completes_at)),
        ]
        if result.completes_at < now:
            lines.append(_row("", "(overdue at the observed rate)"))
    lines.append(_row("Samples", str(len(snapshot.history))))

    lines += ["", "Status Details"]
    for label, value in data.status.items():
        lines.append(_row(label, f"{status_symbol(value)} {format_status(value)}"))

    details = data.migration_details
    lines += [
        "",
        "Timeline",
        _row("Started", format_timestamp(details.date_started)),
        _row("Scheduled", format_timestamp(details.date_scheduled)),
        _row(
            "Finished",
            format_timestamp(details.date_finished) if details.date_finished else "Not yet",
        ),
    ]

    if snapshot.last_error:
        lines += ["", f"Last poll failed: {snapshot.last_error}"]

    return "\n".join(lines)


def render_history(snapshot: MonitorSnapshot) -> str:
    """Render the retained observations and the estimate derived from them."""
    history = snapshot.history
    if len(history) == 0:
        return "No progress observations recorded yet."

    lines = [f"{len(history)} observation(s) in the current run:"]
    for observation in history:
        lines.append(f"  {format_datetime(observation.timestamp)}  {observation.percent:6.2f}%")

    result = snapshot.estimate
    if result is None:
        lines.append("Estimate: not enough data")
    else:
        lines.append(
            f"Estimate: {format_duration(result.remaining)} remaining, "
            f"ETA {format_datetime(result.completes_at)} "
            f"({result.seconds_per_percent / 60:.1f} min per %)"
        )
    return "\n".join(lines)


__all__ = [
    "format_percent_title",
    "format_status",
    "status_symbol",
    "format_datetime",
    "format_timestamp",
    "progress_bar",
    "render_snapshot",
    "render_history",
]
