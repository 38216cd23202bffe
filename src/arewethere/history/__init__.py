"""Progress history: observations, retention policy and persistence."""

from arewethere.history.models import History, Observation
from arewethere.history.tracker import (
    DEFAULT_HISTORY_KEY,
    HistoryTracker,
    apply_observation,
)

__all__ = [
    "DEFAULT_HISTORY_KEY",
    "History",
    "HistoryTracker",
    "Observation",
    "apply_observation",
]
