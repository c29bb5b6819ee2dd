"""
Temporal feature store for classified match actions.

Holds every stored Feature in a primary map keyed by id, plus secondary
indices by player, by phase and by time. The secondary indices hold ids only
and are mutated exclusively alongside the primary map, under one exclusive
lock, so readers always see the four structures in agreement.
"""

from bisect import bisect_left, bisect_right
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union
import copy
import uuid

from pydantic import ValidationError

from config.settings import FeatureStoreSettings, settings
from app.utils.logger import get_logger
from features.locking import ReadWriteLock
from features.schemas import (
    ActionCount,
    ActionEvent,
    ActionOutcome,
    Feature,
    FeatureMetadata,
    GamePhase,
    PhaseBreakdown,
    PhaseStatistics,
    PlayerAggregates,
    PlayerTimeSeries,
    TimeSeriesQuery,
)

logger = get_logger(__name__)

EventLike = Union[ActionEvent, Mapping[str, Any]]
MetadataLike = Union[FeatureMetadata, Mapping[str, Any]]
QueryLike = Union[TimeSeriesQuery, Mapping[str, Any], None]


def _detached(feature: Feature) -> Feature:
    """Copy handed to callers; the stored record and its context stay private."""
    return feature.model_copy(deep=True)


class TemporalFeatureStore:
    """
    In-memory, append-mostly store of Feature records.

    Features are indexed in four structures:

    - ``_features``: primary map, id -> Feature (insertion ordered)
    - ``_player_index``: player_id -> set of ids
    - ``_phase_index``: GamePhase -> set of ids
    - ``_time_index`` / ``_time_keys``: ids and their timestamps, ascending;
      equal timestamps keep insertion order

    Aggregates are recomputed from the primary set on every read; nothing
    derived is cached.
    """

    def __init__(self, config: Optional[FeatureStoreSettings] = None):
        """
        Initialize an empty feature store.

        Args:
            config: Defaults for the read operations (falls back to settings)
        """
        self.config = config or settings.feature_store
        self._lock = ReadWriteLock()

        self._features: Dict[str, Feature] = {}
        self._player_index: Dict[str, Set[str]] = {}
        self._phase_index: Dict[GamePhase, Set[str]] = {phase: set() for phase in GamePhase}
        self._time_index: List[str] = []
        self._time_keys: List[datetime] = []

        logger.info(
            "Initialized TemporalFeatureStore",
            extra={
                'recent_limit': self.config.recent_limit,
                'high_impact_threshold': self.config.high_impact_threshold,
            }
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def store(self, event: EventLike, metadata: MetadataLike) -> Feature:
        """
        Store one classified action as a Feature.

        Args:
            event: Raw action event supplying the timestamp and context payload
            metadata: Upstream classification (player, action type, phase,
                optional outcome, impact score)

        Returns:
            The stored Feature, carrying its newly allocated id

        Raises:
            ValueError: If the metadata violates the store contract (empty
                player id or action type, unknown phase, non-finite impact)
        """
        try:
            event = event if isinstance(event, ActionEvent) else ActionEvent.model_validate(event)
            metadata = (
                metadata if isinstance(metadata, FeatureMetadata)
                else FeatureMetadata.model_validate(metadata)
            )
        except ValidationError as e:
            logger.error(f"Rejected feature with invalid classification: {e}")
            raise

        feature = Feature(
            id=uuid.uuid4().hex,
            timestamp=event.timestamp,
            player_id=metadata.player_id,
            action_type=metadata.action_type,
            phase=metadata.phase,
            context=copy.deepcopy(event.data),
            outcome=metadata.outcome,
            impact_score=metadata.impact_score,
        )

        with self._lock.write_lock():
            self._features[feature.id] = feature
            self._player_index.setdefault(feature.player_id, set()).add(feature.id)
            self._phase_index[feature.phase].add(feature.id)

            position = bisect_right(self._time_keys, feature.timestamp)
            self._time_keys.insert(position, feature.timestamp)
            self._time_index.insert(position, feature.id)

        logger.debug(
            f"Stored feature {feature.id}",
            extra={
                'player_id': feature.player_id,
                'action_type': feature.action_type,
                'phase': feature.phase.value,
            }
        )
        return _detached(feature)

    def clear(self) -> None:
        """Remove every feature and reset all indices."""
        with self._lock.write_lock():
            removed = len(self._features)
            self._features.clear()
            self._player_index.clear()
            for ids in self._phase_index.values():
                ids.clear()
            self._time_index.clear()
            self._time_keys.clear()

        if removed:
            logger.info(f"Cleared {removed} features from store")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(self, params: QueryLike = None, **filters: Any) -> List[Feature]:
        """
        Query features with conjunctive filters.

        Args:
            params: TimeSeriesQuery or mapping of filters
            **filters: Filters given as keyword arguments instead of ``params``

        Returns:
            Matching features ascending by timestamp, truncated to the
            earliest ``limit`` entries when a limit is given
        """
        query = self._coerce_query(params, filters)
        with self._lock.read_lock():
            features = self._query(query)
        return [_detached(f) for f in features]

    def get(self, feature_id: str) -> Optional[Feature]:
        """Look up a single feature by id."""
        with self._lock.read_lock():
            feature = self._features.get(feature_id)
        return _detached(feature) if feature is not None else None

    def player_ids(self) -> List[str]:
        """Players with at least one stored feature, sorted."""
        with self._lock.read_lock():
            return sorted(self._player_index)

    def get_player_time_series(self, player_id: str) -> Optional[PlayerTimeSeries]:
        """
        Get a player's features and aggregates.

        Args:
            player_id: Player identifier

        Returns:
            PlayerTimeSeries, or None if the player has never been observed
        """
        with self._lock.read_lock():
            features = self._query(TimeSeriesQuery(player_id=player_id))

        if not features:
            return None

        breakdown = Counter(f.phase for f in features)
        outcomes = Counter(f.outcome for f in features)

        aggregates = PlayerAggregates(
            total_actions=len(features),
            avg_impact_score=sum(f.impact_score for f in features) / len(features),
            positive_actions=outcomes.get(ActionOutcome.POSITIVE, 0),
            negative_actions=outcomes.get(ActionOutcome.NEGATIVE, 0),
            phase_breakdown=PhaseBreakdown(
                early=breakdown.get(GamePhase.EARLY, 0),
                mid=breakdown.get(GamePhase.MID, 0),
                late=breakdown.get(GamePhase.LATE, 0),
            ),
        )

        return PlayerTimeSeries(
            player_id=player_id,
            features=[_detached(f) for f in features],
            aggregates=aggregates,
        )

    def get_recent_features(self, limit: Optional[int] = None) -> List[Feature]:
        """
        Get the features with the greatest timestamps.

        Args:
            limit: Window size (defaults to ``recent_limit`` from config)

        Returns:
            Up to ``limit`` features from the tail of the time-ordered view,
            ascending by timestamp
        """
        if limit is None:
            limit = self.config.recent_limit
        if limit <= 0:
            return []

        with self._lock.read_lock():
            features = [self._features[fid] for fid in self._time_index[-limit:]]
        return [_detached(f) for f in features]

    def get_high_impact_features(
        self,
        threshold: Optional[float] = None,
        limit: Optional[int] = None
    ) -> List[Feature]:
        """
        Rank features by impact magnitude.

        Args:
            threshold: Minimum ``|impact_score|`` (defaults to config)
            limit: Maximum features returned (defaults to config)

        Returns:
            Features with ``|impact_score| >= threshold``, descending by
            magnitude; equal magnitudes keep insertion order
        """
        if threshold is None:
            threshold = self.config.high_impact_threshold
        if limit is None:
            limit = self.config.high_impact_limit
        if limit <= 0:
            return []

        with self._lock.read_lock():
            candidates = [
                f for f in self._features.values()
                if f.impact_magnitude >= threshold
            ]

        # sorted() is stable, so ties stay in insertion order
        candidates = sorted(candidates, key=lambda f: f.impact_magnitude, reverse=True)
        return [_detached(f) for f in candidates[:limit]]

    def get_phase_statistics(self, phase: Union[GamePhase, str]) -> PhaseStatistics:
        """
        Summarize one game phase.

        Args:
            phase: Phase to summarize

        Returns:
            PhaseStatistics with the feature count, mean impact (0.0 when the
            phase is empty) and the most frequent action types
        """
        phase = GamePhase(phase)
        with self._lock.read_lock():
            features = self._query(TimeSeriesQuery(phase=phase))

        # Counter preserves first-seen order, so sorting by count alone
        # breaks ties by the action type seen earliest in time
        action_counts = Counter(f.action_type for f in features)
        ranked = sorted(action_counts.items(), key=lambda item: item[1], reverse=True)
        top_actions = [
            ActionCount(action=action, count=count)
            for action, count in ranked[:self.config.top_actions_limit]
        ]

        avg_impact = (
            sum(f.impact_score for f in features) / len(features)
            if features else 0.0
        )

        return PhaseStatistics(
            phase=phase,
            total_features=len(features),
            avg_impact_score=avg_impact,
            top_actions=top_actions,
        )

    def size(self) -> int:
        """Number of features in the primary set."""
        with self._lock.read_lock():
            return len(self._features)

    def verify_integrity(self) -> List[str]:
        """
        Check that every secondary index agrees with the primary set.

        Returns:
            Descriptions of each violation found; empty when consistent
        """
        problems: List[str] = []

        with self._lock.read_lock():
            primary = set(self._features)

            player_ids: List[str] = []
            for player_id, ids in self._player_index.items():
                if not ids:
                    problems.append(f"empty player bucket for {player_id!r}")
                for fid in ids:
                    feature = self._features.get(fid)
                    if feature is None:
                        problems.append(f"player index references unknown id {fid}")
                    elif feature.player_id != player_id:
                        problems.append(f"feature {fid} filed under wrong player {player_id!r}")
                player_ids.extend(ids)
            problems.extend(self._check_coverage("player", player_ids, primary))

            phase_ids: List[str] = []
            for phase, ids in self._phase_index.items():
                for fid in ids:
                    feature = self._features.get(fid)
                    if feature is not None and feature.phase != phase:
                        problems.append(f"feature {fid} filed under wrong phase {phase.value}")
                phase_ids.extend(ids)
            problems.extend(self._check_coverage("phase", phase_ids, primary))

            problems.extend(self._check_coverage("time", self._time_index, primary))
            if len(self._time_keys) != len(self._time_index):
                problems.append("time keys and time index differ in length")
            for i in range(1, len(self._time_keys)):
                if self._time_keys[i - 1] > self._time_keys[i]:
                    problems.append(f"time index out of order at position {i}")
            for fid, key in zip(self._time_index, self._time_keys):
                feature = self._features.get(fid)
                if feature is not None and feature.timestamp != key:
                    problems.append(f"time key mismatch for feature {fid}")

        if problems:
            logger.warning(f"Feature store integrity check found {len(problems)} problem(s)")
        return problems

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, feature_id: object) -> bool:
        with self._lock.read_lock():
            return feature_id in self._features

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _query(self, query: TimeSeriesQuery) -> List[Feature]:
        if query.limit == 0:
            return []

        candidates: Optional[Set[str]] = None

        if query.player_id is not None:
            candidates = self._player_index.get(query.player_id)
            if not candidates:
                return []

        if query.phase is not None:
            phase_ids = self._phase_index[query.phase]
            candidates = phase_ids if candidates is None else candidates & phase_ids

        # Walk the time-ordered view from the first in-range position so the
        # result is already sorted ascending
        start = 0
        if query.start_time is not None:
            start = bisect_left(self._time_keys, query.start_time)

        results: List[Feature] = []
        for position in range(start, len(self._time_index)):
            if query.end_time is not None and self._time_keys[position] > query.end_time:
                break
            fid = self._time_index[position]
            if candidates is not None and fid not in candidates:
                continue
            feature = self._features[fid]
            if query.action_type is not None and feature.action_type != query.action_type:
                continue
            results.append(feature)
            if query.limit is not None and len(results) >= query.limit:
                break

        return results

    @staticmethod
    def _coerce_query(params: QueryLike, filters: Dict[str, Any]) -> TimeSeriesQuery:
        if isinstance(params, TimeSeriesQuery):
            if not filters:
                return params
            params = params.model_dump(exclude_unset=True)
        merged: Dict[str, Any] = dict(params or {})
        merged.update(filters)
        return TimeSeriesQuery.model_validate(merged)

    @staticmethod
    def _check_coverage(name: str, ids: Iterable[str], primary: Set[str]) -> List[str]:
        problems = []
        seen = Counter(ids)
        duplicated = [fid for fid, count in seen.items() if count > 1]
        if duplicated:
            problems.append(f"{name} index holds {len(duplicated)} duplicated id(s)")
        missing = primary - set(seen)
        if missing:
            problems.append(f"{name} index is missing {len(missing)} feature(s)")
        unknown = set(seen) - primary
        if unknown:
            problems.append(f"{name} index references {len(unknown)} unknown id(s)")
        return problems
