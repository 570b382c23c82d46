"""
API Dependencies

FastAPI dependency providers for the prediction service.

Everything here is built once per process (lru_cache) from Settings;
tests swap implementations through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from app.config.settings import build_scoring_config, get_settings
from app.domain.scoring.admission_scorer import AdmissionScorer
from app.domain.scoring.config import ScoringConfig
from app.infrastructure.cache.prediction_cache import (
    InMemoryPredictionCache,
    NullPredictionCache,
    PredictionCache,
)
from app.infrastructure.db.readers import SqlProfileReader, SqlSchoolReader
from app.infrastructure.services.prediction_service import PredictionService


logger = logging.getLogger(__name__)


@lru_cache
def get_scoring_config() -> ScoringConfig:
    """Immutable scoring configuration, validated on first use."""
    return build_scoring_config(get_settings())


@lru_cache
def get_admission_scorer() -> AdmissionScorer:
    return AdmissionScorer(get_scoring_config())


@lru_cache
def get_prediction_cache() -> PredictionCache:
    settings = get_settings()
    if settings.cache_backend == "none":
        logger.info("[CACHE] Prediction cache disabled")
        return NullPredictionCache()
    return InMemoryPredictionCache()


@lru_cache
def get_prediction_service() -> PredictionService:
    """
    Dependency provider for PredictionService.

    Usage:
        @router.post("/predictions")
        async def predict(
            service: PredictionService = Depends(get_prediction_service)
        ):
            ...
    """
    settings = get_settings()
    return PredictionService(
        profile_reader=SqlProfileReader(),
        school_reader=SqlSchoolReader(),
        cache=get_prediction_cache(),
        scorer=get_admission_scorer(),
        cache_ttl_seconds=settings.prediction_cache_ttl_seconds,
        max_schools=settings.prediction_max_schools,
        fetch_timeout_seconds=settings.prediction_fetch_timeout_seconds,
    )
