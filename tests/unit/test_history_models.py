"""
Unit tests for Observation and History.

Tests cover:
- Observation validation
- History invariants and accessors
- JSON persistence format and round-trips
- Rejection of corrupt persisted data
"""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest

from arewethere.history.models import History, Observation

HUGE_PERCENT_PAYLOAD = (
    '[{"timestamp": "2025-01-01T00:00:00+00:00", "percent": 1' + "0" * 400 + "}]"
)
DEEPLY_NESTED_PAYLOAD = "[" * 100_000


class TestObservation:
    """Tests for Observation dataclass."""

    def test_creation(self, base_time: datetime) -> None:
        observation = Observation(timestamp=base_time, percent=12.5)

        assert observation.timestamp == base_time
        assert observation.percent == 12.5

    def test_is_immutable(self, base_time: datetime) -> None:
        observation = Observation(timestamp=base_time, percent=12.5)

        with pytest.raises(AttributeError):
            observation.percent = 50.0  # type: ignore[misc]

    @pytest.mark.parametrize("percent", [-0.1, 100.1, float("nan")])
    def test_rejects_out_of_range_percent(self, base_time: datetime, percent: float) -> None:
        with pytest.raises(ValueError, match="percent"):
            Observation(timestamp=base_time, percent=percent)

    def test_accepts_bounds(self, base_time: datetime) -> None:
        assert Observation(timestamp=base_time, percent=0.0).percent == 0.0
        assert Observation(timestamp=base_time, percent=100.0).percent == 100.0

    def test_rejects_naive_timestamp(self) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            Observation(timestamp=datetime(2025, 1, 1, 12, 0), percent=10.0)

    def test_from_dict_keeps_offset(self) -> None:
        observation = Observation.from_dict(
            {"timestamp": "2025-11-24T18:30:00+02:00", "percent": 10}
        )

        assert observation.timestamp == datetime(2025, 11, 24, 16, 30, tzinfo=UTC)
        assert observation.timestamp.utcoffset() == timedelta(hours=2)
        assert observation.percent == 10.0


class TestHistory:
    """Tests for History invariants and accessors."""

    def test_empty(self) -> None:
        history = History()

        assert len(history) == 0
        assert history.first is None
        assert history.last is None
        assert list(history) == []

    def test_append_returns_new_history(self, base_time: datetime) -> None:
        empty = History()
        observation = Observation(timestamp=base_time, percent=5.0)

        history = empty.append(observation)

        assert len(empty) == 0
        assert len(history) == 1
        assert history.first == observation
        assert history.last == observation

    def test_indexing_and_slicing(self, history_factory) -> None:
        history = history_factory((0, 10.0), (60, 20.0), (120, 30.0))

        assert history[0].percent == 10.0
        assert history[-1].percent == 30.0
        assert [o.percent for o in history[1:]] == [20.0, 30.0]

    def test_rejects_non_increasing_percent(self, base_time: datetime) -> None:
        first = Observation(timestamp=base_time, percent=20.0)
        second = Observation(timestamp=base_time + timedelta(seconds=60), percent=20.0)

        with pytest.raises(ValueError, match="strictly increase"):
            History((first, second))

    def test_equality(self, history_factory) -> None:
        assert history_factory((0, 1.0), (60, 2.0)) == history_factory((0, 1.0), (60, 2.0))
        assert history_factory((0, 1.0)) != history_factory((0, 2.0))


class TestHistorySerialization:
    """Tests for the persisted JSON representation."""

    def test_json_shape(self, history_factory, base_time: datetime) -> None:
        history = history_factory((0, 10.0), (600, 20.5))

        data = json.loads(history.to_json())

        assert data == [
            {"timestamp": base_time.isoformat(), "percent": 10.0},
            {"timestamp": (base_time + timedelta(seconds=600)).isoformat(), "percent": 20.5},
        ]

    def test_round_trip(self, base_time: datetime) -> None:
        history = History(
            (
                Observation(timestamp=base_time, percent=1.234567891234),
                Observation(
                    timestamp=base_time.astimezone(timezone(timedelta(hours=-5)))
                    + timedelta(microseconds=123456),
                    percent=33.3,
                ),
            )
        )

        assert History.from_json(history.to_json()) == history

    def test_empty_round_trip(self) -> None:
        assert History.from_json(History().to_json()) == History()

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{}",
            '"text"',
            "[1, 2]",
            '[{"percent": 10}]',
            '[{"timestamp": "yesterday", "percent": 10}]',
            '[{"timestamp": 1700000000, "percent": 10}]',
            '[{"timestamp": "2025-01-01T00:00:00+00:00", "percent": 150}]',
            '[{"timestamp": "2025-01-01T00:00:00", "percent": 10}]',
            pytest.param(HUGE_PERCENT_PAYLOAD, id="percent-overflows-float"),
            pytest.param(DEEPLY_NESTED_PAYLOAD, id="deeply-nested"),
        ],
    )
    def test_corrupt_payload_raises_value_error(self, raw: str) -> None:
        with pytest.raises(ValueError):
            History.from_json(raw)
