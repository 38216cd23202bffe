"""
Data models for the remote migration status payload.

The status endpoint returns a JSON document of the form::

    {
        "migration_data": {
            "percent_completed": 42.5,
            "status": {"migration": "in_progress", "users": "completed", ...},
            "migration_details": {"date_scheduled": 1764001800, ...}
        },
        "last_updated": "2025-11-24T18:30:00Z"
    }

Only ``percent_completed`` and ``last_updated`` feed the progress history;
everything else is carried through for display.

Models in this module:
    - CategoryStatus: Per-category status strings
    - MigrationDetails: Scheduled/started/finished unix timestamps
    - MigrationData: The ``migration_data`` object
    - StatusResponse: The full response document
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

STATUS_COMPLETED = "completed"
STATUS_IN_PROGRESS = "in_progress"
STATUS_NOT_STARTED = "not_started"
STATUS_FAILED = "failed"


def _from_unix(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


class CategoryStatus(BaseModel):
    """
    Status of each tracked migration category.

    Values are free-form strings from the server, typically one of
    ``completed``, ``in_progress``, ``not_started`` or ``failed``.
    """

    model_config = ConfigDict(frozen=True)

    migration: str | None = None
    users: str | None = None
    files: str | None = None
    dms: str | None = None
    mpdms: str | None = None

    def items(self) -> Iterator[tuple[str, str | None]]:
        """Yield (label, status) pairs in display order."""
        yield "Overall Migration", self.migration
        yield "Users", self.users
        yield "Files", self.files
        yield "DMs", self.dms
        yield "MPDMs", self.mpdms


class MigrationDetails(BaseModel):
    """
    Migration timeline as unix timestamps in seconds.

    The server reports ``0`` for dates that have not happened yet; those
    are normalised to ``None``.
    """

    model_config = ConfigDict(frozen=True)

    date_scheduled: int | None = None
    date_started: int | None = None
    date_finished: int | None = None

    @field_validator("date_scheduled", "date_started", "date_finished")
    @classmethod
    def _zero_is_unset(cls, value: int | None) -> int | None:
        return value or None

    @property
    def scheduled_at(self) -> datetime | None:
        return _from_unix(self.date_scheduled)

    @property
    def started_at(self) -> datetime | None:
        return _from_unix(self.date_started)

    @property
    def finished_at(self) -> datetime | None:
        return _from_unix(self.date_finished)


class MigrationData(BaseModel):
    """The ``migration_data`` object of the status response."""

    model_config = ConfigDict(frozen=True)

    ok: bool | None = None
    migration_id: int | None = None
    percent_completed: float = Field(..., ge=0.0, le=100.0)
    status: CategoryStatus = Field(default_factory=CategoryStatus)
    migration_details: MigrationDetails = Field(default_factory=MigrationDetails)


class StatusResponse(BaseModel):
    """
    Full response from the status endpoint.

    Example:
        >>> response = StatusResponse.model_validate(payload)
        >>> response.percent
        42.5
    """

    model_config = ConfigDict(frozen=True)

    migration_data: MigrationData
    last_updated: datetime

    @field_validator("last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def percent(self) -> float:
        """Completion percentage reported by the server."""
        return self.migration_data.percent_completed

    @property
    def is_complete(self) -> bool:
        """True once the server reports 100%."""
        return self.migration_data.percent_completed >= 100.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


__all__ = [
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "STATUS_NOT_STARTED",
    "STATUS_FAILED",
    "CategoryStatus",
    "MigrationDetails",
    "MigrationData",
    "StatusResponse",
]
