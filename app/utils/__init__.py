"""
Utilities Module - Shared helper functions for the temporal feature store
"""

from app.utils.logger import get_logger, setup_logging, set_correlation_id
from app.utils.validators import (
    VALID_OUTCOMES,
    validate_player_id,
    validate_action_type,
    validate_outcome,
    validate_impact_score,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "set_correlation_id",
    "VALID_OUTCOMES",
    "validate_player_id",
    "validate_action_type",
    "validate_outcome",
    "validate_impact_score",
]
