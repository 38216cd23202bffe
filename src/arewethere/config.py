"""
Configuration for the migration status monitor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arewethere.history.tracker import DEFAULT_HISTORY_KEY

DEFAULT_STATUS_URL = "https://are-we-there-yet.hackclub.com/api/status"
DEFAULT_DASHBOARD_URL = "https://are-we-there-yet.hackclub.com"
DEFAULT_DATABASE_PATH = Path.home() / ".arewethere" / "history.db"

TIMESTAMP_SOURCES = ("server", "client")


@dataclass(frozen=True)
class MonitorConfig:
    """
    Configuration for polling and retaining migration progress.

    This class is immutable (frozen); build a new instance to change a
    setting.

    Attributes:
        status_url: JSON status endpoint to poll.
        dashboard_url: Human-facing dashboard opened by ``arewethere open``.
        refresh_interval: Seconds between polls in watch mode (default 60).
        request_timeout: Total HTTP timeout per poll in seconds (default 10).
        history_key: Key under which the progress history is stored.
        database_path: SQLite file holding the progress history.
        timestamp_source: ``"server"`` to timestamp observations with the
            payload's ``last_updated`` value, ``"client"`` to use the local
            clock at the time of the poll.
        stop_when_complete: End watch mode once the migration reaches 100%.
        enable_tracing: Emit OpenTelemetry spans when OTEL is installed.

    Example:
        >>> config = MonitorConfig(refresh_interval=30)
        >>> config.refresh_interval
        30
    """

    status_url: str = DEFAULT_STATUS_URL
    dashboard_url: str = DEFAULT_DASHBOARD_URL
    refresh_interval: float = 60.0
    request_timeout: float = 10.0
    history_key: str = DEFAULT_HISTORY_KEY
    database_path: Path = field(default=DEFAULT_DATABASE_PATH)
    timestamp_source: str = "server"
    stop_when_complete: bool = False
    enable_tracing: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.status_url.startswith(("http://", "https://")):
            raise ValueError(f"status_url must be an http(s) URL, got {self.status_url!r}")

        if self.refresh_interval <= 0:
            raise ValueError(f"refresh_interval must be > 0, got {self.refresh_interval}")

        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")

        if not self.history_key:
            raise ValueError("history_key must not be empty")

        if self.timestamp_source not in TIMESTAMP_SOURCES:
            raise ValueError(
                f"timestamp_source must be one of {TIMESTAMP_SOURCES}, "
                f"got {self.timestamp_source!r}"
            )

        # Accept plain strings from callers and from_dict()
        object.__setattr__(self, "database_path", Path(self.database_path).expanduser())

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON storage.

        Returns:
            Dictionary representation suitable for JSON serialization.
        """
        return {
            "status_url": self.status_url,
            "dashboard_url": self.dashboard_url,
            "refresh_interval": self.refresh_interval,
            "request_timeout": self.request_timeout,
            "history_key": self.history_key,
            "database_path": str(self.database_path),
            "timestamp_source": self.timestamp_source,
            "stop_when_complete": self.stop_when_complete,
            "enable_tracing": self.enable_tracing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonitorConfig:
        """
        Create from dictionary.

        Args:
            data: Dictionary containing configuration values.

        Returns:
            MonitorConfig instance.
        """
        return cls(
            status_url=data.get("status_url", DEFAULT_STATUS_URL),
            dashboard_url=data.get("dashboard_url", DEFAULT_DASHBOARD_URL),
            refresh_interval=data.get("refresh_interval", 60.0),
            request_timeout=data.get("request_timeout", 10.0),
            history_key=data.get("history_key", DEFAULT_HISTORY_KEY),
            database_path=Path(data.get("database_path", DEFAULT_DATABASE_PATH)),
            timestamp_source=data.get("timestamp_source", "server"),
            stop_when_complete=data.get("stop_when_complete", False),
            enable_tracing=data.get("enable_tracing", True),
        )


__all__ = [
    "DEFAULT_STATUS_URL",
    "DEFAULT_DASHBOARD_URL",
    "DEFAULT_DATABASE_PATH",
    "MonitorConfig",
]
