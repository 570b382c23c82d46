"""
Prediction cache and single-flight coalescing.
"""

from app.infrastructure.cache.prediction_cache import (
    InMemoryPredictionCache,
    NullPredictionCache,
    PredictionCache,
    build_cache_key,
    profile_fingerprint,
)
from app.infrastructure.cache.single_flight import SingleFlight

__all__ = [
    "InMemoryPredictionCache",
    "NullPredictionCache",
    "PredictionCache",
    "build_cache_key",
    "profile_fingerprint",
    "SingleFlight",
]
