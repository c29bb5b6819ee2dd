"""
Match Telemetry Feature Store - Core Application Package
"""

__version__ = "0.1.0"
__author__ = "Match Analytics Team"

# Package-level imports for common utilities
from app.utils.logger import get_logger
from app.utils.validators import validate_player_id, validate_outcome

__all__ = [
    "get_logger",
    "validate_player_id",
    "validate_outcome",
]
