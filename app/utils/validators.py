"""
Validation Utilities for Feature Classification Metadata

Boolean checks for the values an ingestion caller supplies alongside a raw
telemetry event: player ids, action types, outcomes and impact scores.
Phases come from the round clock and are checked by the GamePhase enum.
"""

import math
from typing import Any


VALID_OUTCOMES = ("positive", "negative", "neutral")


def validate_player_id(player_id: Any) -> bool:
    """
    Validate a player identifier.

    Args:
        player_id: Identifier of the acting player

    Returns:
        True if a non-blank string, False otherwise
    """
    return isinstance(player_id, str) and bool(player_id.strip())


def validate_action_type(action_type: Any) -> bool:
    """
    Validate an action type label (e.g. "overpeek", "trade-kill").

    Args:
        action_type: Caller-defined category label

    Returns:
        True if a non-blank string, False otherwise
    """
    return isinstance(action_type, str) and bool(action_type.strip())


def validate_outcome(outcome: Any) -> bool:
    """Validate an outcome classification (positive/negative/neutral)."""
    value = getattr(outcome, "value", outcome)
    return isinstance(value, str) and value in VALID_OUTCOMES


def validate_impact_score(impact_score: Any) -> bool:
    """
    Validate an impact score.

    Negative, zero and positive scores are all meaningful; only non-numeric
    and NaN/infinite values are rejected.

    Args:
        impact_score: Signed estimate of the action's effect on the match

    Returns:
        True if a finite real number, False otherwise
    """
    if isinstance(impact_score, bool) or not isinstance(impact_score, (int, float)):
        return False
    return math.isfinite(impact_score)
