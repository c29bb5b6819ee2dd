"""Test fixtures for feature store tests."""

from datetime import datetime, timedelta, timezone

import pytest

from config.settings import FeatureStoreSettings
from features.schemas import ActionEvent, FeatureMetadata
from features.store import TemporalFeatureStore


MATCH_START = datetime(2024, 5, 26, 14, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after the match start."""
    return MATCH_START + timedelta(seconds=seconds)


def make_event(seconds: float, event_type: str = "kill", **data) -> ActionEvent:
    """Build an action event at ``seconds`` after match start."""
    return ActionEvent(type=event_type, timestamp=at(seconds), data=data)


def make_metadata(
    player_id: str = "p1",
    action_type: str = "trade-kill",
    phase: str = "mid",
    impact_score: float = 0.0,
    outcome=None,
) -> FeatureMetadata:
    return FeatureMetadata(
        player_id=player_id,
        action_type=action_type,
        phase=phase,
        outcome=outcome,
        impact_score=impact_score,
    )


@pytest.fixture
def store():
    """Empty store with the default read settings."""
    return TemporalFeatureStore(config=FeatureStoreSettings())


@pytest.fixture
def populated_store(store):
    """
    Store with three players across all phases, inserted out of time order.

    Timeline (seconds after match start):
        10 p1 entry        early  +0.4 positive
        20 p2 overpeek     early  -0.6 negative
        45 p1 trade-kill   mid    +0.9 positive
        50 p3 plant        mid    +0.2 neutral
        60 p2 trade-kill   mid    -0.8 negative
        95 p1 clutch       late   +0.75 positive
       120 p3 overpeek     late   -0.1
    """
    rows = [
        (60, "p2", "trade-kill", "mid", -0.8, "negative"),
        (10, "p1", "entry", "early", 0.4, "positive"),
        (95, "p1", "clutch", "late", 0.75, "positive"),
        (20, "p2", "overpeek", "early", -0.6, "negative"),
        (120, "p3", "overpeek", "late", -0.1, None),
        (45, "p1", "trade-kill", "mid", 0.9, "positive"),
        (50, "p3", "plant", "mid", 0.2, "neutral"),
    ]
    for seconds, player, action, phase, impact, outcome in rows:
        store.store(
            make_event(seconds, weapon="vandal"),
            make_metadata(player, action, phase, impact, outcome),
        )
    return store


@pytest.fixture(name="make_event")
def make_event_fixture():
    """Factory for action events keyed by seconds after match start."""
    return make_event


@pytest.fixture(name="make_metadata")
def make_metadata_fixture():
    """Factory for classification metadata."""
    return make_metadata


@pytest.fixture(name="at")
def at_fixture():
    """Convert seconds after match start to a timestamp."""
    return at
