"""
Match Telemetry Feature Store - Temporal Feature Module

In-memory store of classified player actions derived from match telemetry.

Architecture:
    ActionEvent → FeatureIngestor (PhaseTracker) → TemporalFeatureStore → exports

Main Components:
    - TemporalFeatureStore: primary record set with player, phase and time indices
    - FeatureIngestor / PhaseTracker: classify feed events and store them
    - ReadWriteLock: shared/exclusive locking around the indices
    - export: pandas views for reporting collaborators

Usage Example:
    from features import TemporalFeatureStore

    store = TemporalFeatureStore()
    store.store(
        {'type': 'kill', 'timestamp': '2024-05-26T14:23:45Z', 'data': {'weapon': 'vandal'}},
        {'player_id': 'p1', 'action_type': 'trade-kill', 'phase': 'mid', 'impact_score': 0.8},
    )
    series = store.get_player_time_series('p1')
"""

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
from features.locking import ReadWriteLock
from features.store import TemporalFeatureStore
from features.ingestion import FeatureIngestor, PhaseTracker
from features.export import (
    features_to_dataframe,
    phase_summary_frame,
    player_summary_frame,
)


__all__ = [
    # Schemas
    'ActionCount',
    'ActionEvent',
    'ActionOutcome',
    'Feature',
    'FeatureMetadata',
    'GamePhase',
    'PhaseBreakdown',
    'PhaseStatistics',
    'PlayerAggregates',
    'PlayerTimeSeries',
    'TimeSeriesQuery',

    # Store
    'ReadWriteLock',
    'TemporalFeatureStore',

    # Ingestion
    'FeatureIngestor',
    'PhaseTracker',

    # Exports
    'features_to_dataframe',
    'phase_summary_frame',
    'player_summary_frame',
]


__version__ = '0.1.0'
