"""
Tabular exports of stored features for reporting collaborators.
"""

from typing import Iterable, List

import pandas as pd

from features.schemas import Feature, GamePhase
from features.store import TemporalFeatureStore

BASE_COLUMNS = [
    'id',
    'timestamp',
    'player_id',
    'action_type',
    'phase',
    'outcome',
    'impact_score',
]

PLAYER_SUMMARY_COLUMNS = [
    'player_id',
    'total_actions',
    'avg_impact_score',
    'positive_actions',
    'negative_actions',
    'early',
    'mid',
    'late',
]


def features_to_dataframe(features: Iterable[Feature]) -> pd.DataFrame:
    """
    Flatten features into a DataFrame.

    Context payload fields become ``context.<key>`` columns (nested
    mappings are flattened with dots).

    Args:
        features: Features in the order rows should appear

    Returns:
        DataFrame with one row per feature
    """
    features = list(features)
    if not features:
        return pd.DataFrame(columns=BASE_COLUMNS)

    base = pd.DataFrame([
        {
            'id': f.id,
            'timestamp': f.timestamp,
            'player_id': f.player_id,
            'action_type': f.action_type,
            'phase': f.phase.value,
            'outcome': f.outcome.value if f.outcome is not None else None,
            'impact_score': f.impact_score,
        }
        for f in features
    ], columns=BASE_COLUMNS)

    context = pd.json_normalize([f.context for f in features])
    if context.empty or len(context.columns) == 0:
        return base

    context.columns = [f"context.{col}" for col in context.columns]
    return pd.concat([base, context], axis=1)


def player_summary_frame(store: TemporalFeatureStore) -> pd.DataFrame:
    """One row of aggregates per observed player, sorted by player id."""
    rows: List[dict] = []
    for player_id in store.player_ids():
        series = store.get_player_time_series(player_id)
        if series is None:
            continue
        agg = series.aggregates
        rows.append({
            'player_id': player_id,
            'total_actions': agg.total_actions,
            'avg_impact_score': agg.avg_impact_score,
            'positive_actions': agg.positive_actions,
            'negative_actions': agg.negative_actions,
            'early': agg.phase_breakdown.early,
            'mid': agg.phase_breakdown.mid,
            'late': agg.phase_breakdown.late,
        })

    return pd.DataFrame(rows, columns=PLAYER_SUMMARY_COLUMNS)


def phase_summary_frame(store: TemporalFeatureStore) -> pd.DataFrame:
    """Feature count and mean impact for each phase, in game order."""
    rows = []
    for phase in GamePhase:
        stats = store.get_phase_statistics(phase)
        rows.append({
            'phase': phase.value,
            'total_features': stats.total_features,
            'avg_impact_score': stats.avg_impact_score,
            'top_action': stats.top_actions[0].action if stats.top_actions else None,
        })
    return pd.DataFrame(rows, columns=['phase', 'total_features', 'avg_impact_score', 'top_action'])
