"""
Pydantic schemas for the temporal feature store.

Defines the raw telemetry event handed in by the ingestion path, the
classification metadata computed upstream, the immutable stored Feature
record, the query descriptor and the aggregate views returned to reporting
collaborators.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.utils.validators import (
    validate_action_type,
    validate_impact_score,
    validate_player_id,
)


class GamePhase(str, Enum):
    """Coarse segment of match time an action fell into."""

    EARLY = "early"
    MID = "mid"
    LATE = "late"


class ActionOutcome(str, Enum):
    """Tri-state classification of an action's result."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ActionEvent(BaseModel):
    """
    Raw action event from the match telemetry feed.

    ``data`` is the free-form context payload (position, weapon, health,
    armor, economy and arbitrary extension fields). The store attaches it to
    the feature verbatim and never interprets it.
    """

    type: str = Field(description="Event type reported by the feed (e.g. 'kill')")
    timestamp: datetime = Field(description="When the action occurred (ISO string or datetime)")
    data: Dict[str, Any] = Field(default_factory=dict, description="Opaque context payload")
    sequence_number: Optional[int] = Field(default=None, ge=0)
    game_number: Optional[int] = Field(default=None, ge=1)
    round_number: Optional[int] = Field(default=None, ge=0)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("data", mode="before")
    @classmethod
    def default_data(cls, v):
        """Treat a missing payload as an empty context."""
        return {} if v is None else v

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "type": "kill",
                "timestamp": "2024-05-26T14:23:45.123Z",
                "data": {
                    "playerId": "p1",
                    "weapon": "vandal",
                    "health": 64,
                    "position": {"x": 12.5, "y": -3.0},
                    "impact": 0.8,
                    "outcome": "positive",
                },
                "round_number": 4,
            }
        },
    )


class FeatureMetadata(BaseModel):
    """Classification metadata computed upstream for one action event."""

    player_id: str = Field(min_length=1, description="Subject of the action")
    action_type: str = Field(min_length=1, description="Caller-defined category label")
    phase: GamePhase = Field(description="Game phase the action fell into")
    outcome: Optional[ActionOutcome] = Field(default=None, description="Optional outcome classification")
    impact_score: float = Field(description="Signed estimate of the action's effect on the match")

    @field_validator("player_id")
    @classmethod
    def validate_player(cls, v: str) -> str:
        if not validate_player_id(v):
            raise ValueError("player_id must be a non-empty string")
        return v

    @field_validator("action_type")
    @classmethod
    def validate_action(cls, v: str) -> str:
        if not validate_action_type(v):
            raise ValueError("action_type must be a non-empty string")
        return v

    @field_validator("impact_score")
    @classmethod
    def validate_impact(cls, v: float) -> float:
        if not validate_impact_score(v):
            raise ValueError("impact_score must be a finite real number")
        return v


class Feature(BaseModel):
    """
    One classified player-action record.

    Immutable after creation; ``id`` is allocated by the store and never
    reused.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    player_id: str
    action_type: str
    phase: GamePhase
    context: Dict[str, Any] = Field(default_factory=dict)
    outcome: Optional[ActionOutcome] = None
    impact_score: float

    @property
    def impact_magnitude(self) -> float:
        """Absolute impact, used for direction-agnostic ranking."""
        return abs(self.impact_score)


class TimeSeriesQuery(BaseModel):
    """Conjunctive filter descriptor; absent fields do not filter."""

    player_id: Optional[str] = None
    action_type: Optional[str] = None
    phase: Optional[GamePhase] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    limit: Optional[int] = Field(default=None, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    @model_validator(mode="after")
    def validate_range(self) -> "TimeSeriesQuery":
        """Validate the time window is not inverted."""
        if self.start_time and self.end_time and self.start_time > self.end_time:
            raise ValueError("start_time must not be after end_time")
        return self


class PhaseBreakdown(BaseModel):
    """Per-phase action counts."""

    early: int = 0
    mid: int = 0
    late: int = 0


class PlayerAggregates(BaseModel):
    total_actions: int = Field(ge=0)
    avg_impact_score: float
    positive_actions: int = Field(ge=0)
    negative_actions: int = Field(ge=0)
    phase_breakdown: PhaseBreakdown


class PlayerTimeSeries(BaseModel):
    """A player's features in time order plus aggregates recomputed on read."""

    player_id: str
    features: List[Feature]
    aggregates: PlayerAggregates


class ActionCount(BaseModel):
    action: str
    count: int = Field(ge=0)


class PhaseStatistics(BaseModel):
    """Summary of one game phase."""

    phase: GamePhase
    total_features: int = Field(ge=0)
    avg_impact_score: float = 0.0
    top_actions: List[ActionCount] = Field(default_factory=list)
