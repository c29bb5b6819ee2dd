"""
Tests for the pandas exports.
"""

import pandas as pd
import pytest

from features.export import (
    BASE_COLUMNS,
    features_to_dataframe,
    phase_summary_frame,
    player_summary_frame,
)


class TestFeaturesToDataFrame:
    """Tests for features_to_dataframe."""

    def test_rows_follow_query_order(self, populated_store):
        frame = features_to_dataframe(populated_store.query())

        assert len(frame) == 7
        assert list(frame.columns[:len(BASE_COLUMNS)]) == BASE_COLUMNS
        assert frame['timestamp'].is_monotonic_increasing
        assert frame['phase'].tolist() == ['early', 'early', 'mid', 'mid', 'mid', 'late', 'late']

    def test_context_flattened(self, store, make_event, make_metadata):
        """Test nested context fields become dotted columns."""
        store.store(
            make_event(1, weapon="vandal", position={"x": 1.5, "y": -2.0}),
            make_metadata(outcome="positive"),
        )

        frame = features_to_dataframe(store.query())

        assert frame.loc[0, 'context.weapon'] == 'vandal'
        assert frame.loc[0, 'context.position.x'] == 1.5
        assert frame.loc[0, 'outcome'] == 'positive'

    def test_missing_outcome_is_null(self, populated_store):
        frame = features_to_dataframe(populated_store.query(player_id="p3"))

        assert frame['outcome'].tolist()[0] == 'neutral'
        assert pd.isna(frame['outcome'].tolist()[1])

    def test_empty_input(self):
        """Test an empty selection still has the base columns."""
        frame = features_to_dataframe([])

        assert frame.empty
        assert list(frame.columns) == BASE_COLUMNS

    def test_features_without_context(self, store, make_event, make_metadata):
        store.store(make_event(1), make_metadata())

        frame = features_to_dataframe(store.query())

        assert list(frame.columns) == BASE_COLUMNS


class TestSummaryFrames:
    """Tests for player and phase summaries."""

    def test_player_summary(self, populated_store):
        frame = player_summary_frame(populated_store)

        assert frame['player_id'].tolist() == ['p1', 'p2', 'p3']
        p2 = frame.set_index('player_id').loc['p2']
        assert p2['total_actions'] == 2
        assert p2['avg_impact_score'] == pytest.approx(-0.7)
        assert p2['negative_actions'] == 2
        assert p2['early'] == 1 and p2['mid'] == 1 and p2['late'] == 0

    def test_phase_summary(self, populated_store):
        frame = phase_summary_frame(populated_store)

        assert frame['phase'].tolist() == ['early', 'mid', 'late']
        assert frame['total_features'].tolist() == [2, 3, 2]
        assert frame.loc[1, 'top_action'] == 'trade-kill'

    def test_empty_store(self, store):
        assert player_summary_frame(store).empty
        phases = phase_summary_frame(store)
        assert phases['total_features'].tolist() == [0, 0, 0]
        assert phases['top_action'].isna().all()
