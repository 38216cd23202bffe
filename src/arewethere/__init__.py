"""
arewethere - Track a long-running migration and estimate when it will finish.

This library provides:
- A validated client for the migration status endpoint
- Progress history that survives restarts and detects migration resets
- A two-point linear completion-time estimator
- A single-flight poller and a terminal summary renderer
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("arewethere")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from arewethere.client import StatusClient
from arewethere.config import MonitorConfig
from arewethere.estimation import Estimate, estimate, format_duration
from arewethere.exceptions import (
    ArewethereError,
    StatusFetchError,
    StatusParseError,
    StoreError,
)
from arewethere.history import (
    DEFAULT_HISTORY_KEY,
    History,
    HistoryTracker,
    Observation,
    apply_observation,
)
from arewethere.models import (
    CategoryStatus,
    MigrationData,
    MigrationDetails,
    StatusResponse,
)
from arewethere.poller import MonitorSnapshot, StatusPoller
from arewethere.stores import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore

__all__ = [
    "__version__",
    # History
    "DEFAULT_HISTORY_KEY",
    "History",
    "HistoryTracker",
    "Observation",
    "apply_observation",
    # Estimation
    "Estimate",
    "estimate",
    "format_duration",
    # Status source
    "CategoryStatus",
    "MigrationData",
    "MigrationDetails",
    "StatusResponse",
    "StatusClient",
    # Polling
    "MonitorConfig",
    "MonitorSnapshot",
    "StatusPoller",
    # Stores
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    # Exceptions
    "ArewethereError",
    "StatusFetchError",
    "StatusParseError",
    "StoreError",
]
