"""Application configuration via Pydantic Settings.

Exercise thresholds, visibility floors and cooldowns are calibration
constants that live beside each analyzer; only runtime concerns are here.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Session aggregation parameters."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    body_weight_kg: float = Field(default=70.0, gt=0)
    history_size: int = Field(default=3000, gt=0)
    target_reps: int | None = Field(default=None, gt=0)


class StateMachineSettings(BaseSettings):
    """Generalized rep state machine parameters."""

    model_config = SettingsConfigDict(env_prefix="MACHINE_")

    error_confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    history_size: int = Field(default=10, gt=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    session: SessionSettings = Field(default_factory=SessionSettings)
    machine: StateMachineSettings = Field(default_factory=StateMachineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings instance."""
    return Settings()
