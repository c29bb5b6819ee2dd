"""
Centralized Settings Module - Environment-based configuration

Uses Pydantic BaseSettings for type-safe configuration management.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from typing import Optional
from functools import lru_cache


class FeatureStoreSettings(BaseSettings):
    """Defaults for the feature store read operations."""

    recent_limit: int = Field(default=50, ge=1, description="Default recency window size")
    high_impact_threshold: float = Field(
        default=0.7,
        ge=0.0,
        description="Minimum |impact_score| for high-impact ranking"
    )
    high_impact_limit: int = Field(default=20, ge=1, description="Maximum high-impact features returned")
    top_actions_limit: int = Field(default=5, ge=1, description="Action types listed in phase statistics")

    class Config:
        env_prefix = "FEATURE_STORE_"


class PhaseSettings(BaseSettings):
    """Round-clock boundaries used to bucket events into game phases."""

    early_phase_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds after round start that count as the early phase"
    )
    mid_phase_seconds: float = Field(
        default=90.0,
        gt=0.0,
        description="Seconds after round start before the late phase begins"
    )

    @model_validator(mode="after")
    def validate_boundaries(self) -> "PhaseSettings":
        """Validate the mid boundary comes after the early boundary."""
        if self.mid_phase_seconds <= self.early_phase_seconds:
            raise ValueError("mid_phase_seconds must be greater than early_phase_seconds")
        return self

    class Config:
        env_prefix = "PHASE_"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json/text)")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    enable_console: bool = Field(default=True, description="Enable console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is json or text."""
        v_lower = v.lower()
        if v_lower not in ("json", "text"):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    class Config:
        env_prefix = "LOG_"


class Settings(BaseSettings):
    """Main settings aggregating all configuration sections."""

    # Environment
    env: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-settings
    feature_store: FeatureStoreSettings = Field(default_factory=FeatureStoreSettings)
    phase: PhaseSettings = Field(default_factory=PhaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment is recognized."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment. Must be one of: {valid_envs}")
        return v.lower()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_nested_delimiter = "__"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Module-level settings instance: ``from config.settings import settings``
settings = get_settings()
