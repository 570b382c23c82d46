"""
Prediction API Routes

Endpoints for admission probability predictions.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.dependencies import get_prediction_service
from app.infrastructure.services.prediction_service import PredictionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["predictions"])


# =============================================================================
# Request/Response Schemas
# =============================================================================

class PredictRequest(BaseModel):
    # Batch size and blank ids are validated by PredictionService
    profile_id: str = Field(..., min_length=1)
    school_ids: List[str]
    force_refresh: bool = False


class PredictionFactorResponse(BaseModel):
    name: str
    impact: str
    weight: float
    detail: str
    improvement: Optional[str] = None


class PredictionComparisonResponse(BaseModel):
    gpa_percentile: Optional[int]
    test_score_percentile: Optional[int]
    activity_strength: str


class ScoreBreakdownResponse(BaseModel):
    academic: float
    activity: float
    award: float
    overall: float


class PredictionResultResponse(BaseModel):
    school_id: str
    school_name: str
    probability: float
    confidence: str
    tier: str
    factors: List[PredictionFactorResponse]
    comparison: PredictionComparisonResponse
    score_breakdown: ScoreBreakdownResponse
    suggestions: List[str]
    engine_version: str
    from_cache: bool


class SchoolErrorResponse(BaseModel):
    school_id: str
    error: str
    message: str


class PredictResponse(BaseModel):
    results: List[PredictionResultResponse]
    errors: List[SchoolErrorResponse]
    processing_time_ms: float


class InvalidateResponse(BaseModel):
    profile_id: str
    invalidated: int


# =============================================================================
# Prediction Endpoints
# =============================================================================

@router.post("/predictions", response_model=PredictResponse)
async def predict(
    request: PredictRequest,
    service: PredictionService = Depends(get_prediction_service),
) -> Dict[str, Any]:
    """
    Predict admission probability for a profile against 1-10 schools.

    Results follow the order of school_ids (duplicates collapsed).
    """
    response = await service.predict(
        request.profile_id,
        request.school_ids,
        force_refresh=request.force_refresh,
    )
    return response.to_dict()


@router.delete("/predictions/cache/{profile_id}", response_model=InvalidateResponse)
async def invalidate_profile_predictions(
    profile_id: str,
    service: PredictionService = Depends(get_prediction_service),
):
    """Drop cached predictions for a profile after it changes."""
    removed = await service.invalidate_profile(profile_id)
    return InvalidateResponse(profile_id=profile_id, invalidated=removed)
