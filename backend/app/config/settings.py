"""
Application Settings for the Admission Probability Engine

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.domain.scoring import constants
from app.domain.scoring.config import ScoringConfig, ScoringWeights, TierThresholds


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    CACHE_BACKEND controls where predictions are cached:
    - memory: process-local TTL cache (default)
    - none: no caching; every request computes (single-flight still applies)
    """

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    frontend_url: str = "http://localhost:5173"
    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Prediction Configuration
    prediction_max_schools: int = 10
    prediction_cache_ttl_seconds: int = 3600
    prediction_fetch_timeout_seconds: float = 5.0
    cache_backend: Literal["memory", "none"] = "memory"

    # Scoring overrides (per environment; frozen into ScoringConfig at startup)
    scoring_weights_version: str = "v1"
    scoring_weight_academic: float = constants.DEFAULT_SCORING_WEIGHTS["academic"]
    scoring_weight_activity: float = constants.DEFAULT_SCORING_WEIGHTS["activity"]
    scoring_weight_award: float = constants.DEFAULT_SCORING_WEIGHTS["award"]
    scoring_academic_gpa_weight: float = constants.ACADEMIC_GPA_WEIGHT
    scoring_reach_below: float = constants.REACH_UPPER_BOUND
    scoring_match_below: float = constants.MATCH_UPPER_BOUND
    scoring_min_historical_sample: int = constants.MIN_HISTORICAL_SAMPLE

    # Database Configuration (SQLModel/SQLAlchemy)
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_prediction_limits(self) -> "Settings":
        """Reject limits that would make every request fail."""
        if self.prediction_max_schools < 1:
            raise ValueError("PREDICTION_MAX_SCHOOLS must be at least 1")
        if self.prediction_fetch_timeout_seconds <= 0:
            raise ValueError("PREDICTION_FETCH_TIMEOUT_SECONDS must be positive")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"


def build_scoring_config(settings: "Settings") -> ScoringConfig:
    """
    Freeze the scoring overrides into an immutable ScoringConfig.

    Raises ConfigurationError when the weights do not sum to 1.0 or the
    tier thresholds are out of order, so a bad deployment fails at startup.
    """
    return ScoringConfig(
        weights=ScoringWeights(
            academic=settings.scoring_weight_academic,
            activity=settings.scoring_weight_activity,
            award=settings.scoring_weight_award,
            version=settings.scoring_weights_version,
        ),
        tiers=TierThresholds(
            reach_below=settings.scoring_reach_below,
            match_below=settings.scoring_match_below,
        ),
        academic_gpa_weight=settings.scoring_academic_gpa_weight,
        academic_test_weight=1.0 - settings.scoring_academic_gpa_weight,
        min_historical_sample=settings.scoring_min_historical_sample,
        min_partial_sample=min(
            constants.MIN_PARTIAL_SAMPLE, settings.scoring_min_historical_sample
        ),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
