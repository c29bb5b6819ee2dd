"""
Ingestion path from the match event feed into the feature store.

The feed delivers raw action events; this module classifies each one into a
game phase from the round clock and stores every event that names a player.
"""

from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from config.settings import PhaseSettings, settings
from app.utils.logger import get_logger
from app.utils.validators import validate_outcome, validate_player_id
from features.schemas import ActionEvent, Feature, FeatureMetadata, GamePhase
from features.store import TemporalFeatureStore

logger = get_logger(__name__)

ROUND_START_EVENT = "round_start"
PLAYER_ID_KEYS = ("playerId", "player_id")


class PhaseTracker:
    """
    Tracks the current game phase from the event stream.

    A ``round_start`` event opens the early phase; every later event is
    bucketed by the time elapsed since that round started.
    """

    def __init__(self, config: Optional[PhaseSettings] = None):
        self.config = config or settings.phase
        self.current_phase = GamePhase.EARLY
        self.round_start_time: Optional[datetime] = None

    def update(self, event: ActionEvent) -> GamePhase:
        """
        Advance the tracker with one event.

        Args:
            event: Incoming action event

        Returns:
            The phase the event falls into
        """
        if event.type == ROUND_START_EVENT:
            self.round_start_time = event.timestamp
            self.current_phase = GamePhase.EARLY
        elif self.round_start_time is not None:
            elapsed = (event.timestamp - self.round_start_time).total_seconds()
            self.current_phase = self.phase_for_elapsed(elapsed)
        return self.current_phase

    def phase_for_elapsed(self, elapsed_seconds: float) -> GamePhase:
        """Map seconds since round start to a phase."""
        if elapsed_seconds < self.config.early_phase_seconds:
            return GamePhase.EARLY
        if elapsed_seconds < self.config.mid_phase_seconds:
            return GamePhase.MID
        return GamePhase.LATE

    def reset(self) -> None:
        self.current_phase = GamePhase.EARLY
        self.round_start_time = None


class FeatureIngestor:
    """
    Feeds classified action events into a TemporalFeatureStore.

    Events without a player id are used only to advance the phase clock.
    """

    def __init__(
        self,
        store: Optional[TemporalFeatureStore] = None,
        tracker: Optional[PhaseTracker] = None
    ):
        """
        Initialize ingestor.

        Args:
            store: Destination store (a new empty store if omitted)
            tracker: Phase tracker (a new tracker from settings if omitted)
        """
        self.store = store if store is not None else TemporalFeatureStore()
        self.tracker = tracker or PhaseTracker()
        self.events_seen = 0
        self.events_skipped = 0

    def ingest(self, event: Union[ActionEvent, Mapping[str, Any]]) -> Optional[Feature]:
        """
        Ingest one raw event.

        Args:
            event: ActionEvent or a mapping in its shape

        Returns:
            The stored Feature, or None if the event names no player
        """
        if not isinstance(event, ActionEvent):
            event = ActionEvent.model_validate(event)

        self.events_seen += 1
        phase = self.tracker.update(event)

        player_id = self._player_id(event.data)
        if player_id is None:
            self.events_skipped += 1
            return None

        metadata = FeatureMetadata(
            player_id=player_id,
            action_type=event.type,
            phase=phase,
            outcome=self._outcome(event.data),
            impact_score=self._impact(event.data),
        )
        return self.store.store(event, metadata)

    def ingest_many(self, events: Iterable[Union[ActionEvent, Mapping[str, Any]]]) -> List[Feature]:
        """Ingest events in feed order, returning the features stored."""
        stored = []
        for event in events:
            feature = self.ingest(event)
            if feature is not None:
                stored.append(feature)

        logger.info(
            f"Ingested {len(stored)} features",
            extra={'events_seen': self.events_seen, 'events_skipped': self.events_skipped}
        )
        return stored

    def reset(self) -> None:
        """Clear the store and restart the phase clock."""
        self.store.clear()
        self.tracker.reset()
        self.events_seen = 0
        self.events_skipped = 0

    @staticmethod
    def _player_id(data: Mapping[str, Any]) -> Optional[str]:
        for key in PLAYER_ID_KEYS:
            value = data.get(key)
            if validate_player_id(value):
                return value
        return None

    @staticmethod
    def _outcome(data: Mapping[str, Any]) -> Optional[str]:
        outcome = data.get("outcome")
        return outcome if validate_outcome(outcome) else None

    @staticmethod
    def _impact(data: Mapping[str, Any]) -> float:
        impact = data.get("impact")
        return 0.0 if impact is None else impact
