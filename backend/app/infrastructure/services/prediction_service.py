"""
Prediction Service

Batch orchestrator and cache gate for the admission engine.

Flow per request:
1. Validate the batch (before any I/O)
2. Load the profile snapshot
3. Per school, concurrently: cache lookup -> on miss, single-flight
   computation (load school + history, run the pure pipeline in a worker
   thread, write through to the cache)
4. Assemble results, highest probability first (ties keep request order)

Design Pattern: Facade
- Single entry point over the readers, the cache and the scorer
"""

import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from app.domain.scoring.admission_scorer import AdmissionScorer
from app.domain.scoring.interfaces import (
    HistoricalDistribution,
    PredictionResult,
    ProfileMetrics,
    SchoolMetrics,
)
from app.infrastructure.cache.prediction_cache import (
    PredictionCache,
    build_cache_key,
    profile_fingerprint,
)
from app.infrastructure.cache.single_flight import SingleFlight
from app.infrastructure.exceptions import (
    CacheUnavailableError,
    DatabaseError,
    DataUnavailableError,
    InputValidationError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_MAX_SCHOOLS = 10
DEFAULT_FETCH_TIMEOUT_SECONDS = 5.0


class ProfileReader(Protocol):
    async def get_profile(self, profile_id: str) -> ProfileMetrics:
        """Raises NotFoundError when the profile does not exist."""
        ...


class SchoolReader(Protocol):
    async def get_school(self, school_id: str) -> SchoolMetrics:
        """Raises NotFoundError when the school does not exist."""
        ...

    async def get_historical_distribution(
        self, school_id: str
    ) -> Optional[HistoricalDistribution]:
        ...


@dataclass(frozen=True)
class SchoolPredictionError:
    """A per-school failure that did not abort the batch."""
    school_id: str
    error: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "school_id": self.school_id,
            "error": self.error,
            "message": self.message,
        }


@dataclass
class PredictionResponse:
    results: List[PredictionResult] = field(default_factory=list)
    errors: List[SchoolPredictionError] = field(default_factory=list)
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
            "processing_time_ms": round(self.processing_time_ms, 2),
        }


def validate_school_ids(school_ids: Sequence[str], max_schools: int) -> List[str]:
    """
    Check the batch and collapse duplicates (first occurrence wins).

    Raises InputValidationError for an empty list, more than max_schools
    ids, or blank ids.
    """
    if not school_ids:
        raise InputValidationError("school_ids must not be empty", field="school_ids")

    if len(school_ids) > max_schools:
        raise InputValidationError(
            f"At most {max_schools} schools per request, got {len(school_ids)}",
            field="school_ids",
        )

    unique: List[str] = []
    seen = set()
    for school_id in school_ids:
        if not isinstance(school_id, str) or not school_id.strip():
            raise InputValidationError("school_ids must not contain blank ids", field="school_ids")
        school_id = school_id.strip()
        if school_id not in seen:
            seen.add(school_id)
            unique.append(school_id)
    return unique


class PredictionService:
    """
    Admission prediction orchestrator.

    Holds no per-request state. The cache and the single-flight registry
    are the only shared mutable structures; PredictionResult objects are
    immutable and safe to hand to several callers.
    """

    def __init__(
        self,
        profile_reader: ProfileReader,
        school_reader: SchoolReader,
        cache: PredictionCache,
        scorer: AdmissionScorer,
        single_flight: Optional[SingleFlight] = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        max_schools: int = DEFAULT_MAX_SCHOOLS,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    ):
        self.profile_reader = profile_reader
        self.school_reader = school_reader
        self.cache = cache
        self.scorer = scorer
        self.single_flight = single_flight or SingleFlight()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_schools = max_schools
        self.fetch_timeout_seconds = fetch_timeout_seconds

    async def predict(
        self,
        profile_id: str,
        school_ids: Sequence[str],
        force_refresh: bool = False,
    ) -> PredictionResponse:
        """
        Predict admission for one profile against a batch of schools.

        Args:
            profile_id: Applicant profile ID
            school_ids: 1..max_schools school IDs
            force_refresh: Skip cache reads (results are still written)

        Returns:
            PredictionResponse with results sorted by probability, highest
            first; equal probabilities keep request order

        Raises:
            InputValidationError: malformed batch, before any I/O
            DataUnavailableError: unknown profile or school
        """
        started = time.perf_counter()

        if not profile_id or not profile_id.strip():
            raise InputValidationError("profile_id is required", field="profile_id")
        unique_ids = validate_school_ids(school_ids, self.max_schools)

        logger.info(
            f"[PREDICTION] Profile {profile_id}: {len(unique_ids)} schools "
            f"(force_refresh={force_refresh})"
        )

        profile = await self._load_profile(profile_id)
        fingerprint = profile_fingerprint(profile)

        outcomes = await asyncio.gather(
            *(
                self._predict_school(profile, fingerprint, school_id, force_refresh)
                for school_id in unique_ids
            ),
            return_exceptions=True,
        )

        response = PredictionResponse()
        for school_id, outcome in zip(unique_ids, outcomes):
            if isinstance(outcome, PredictionResult):
                response.results.append(outcome)
            elif isinstance(outcome, DataUnavailableError):
                raise outcome
            elif isinstance(outcome, (asyncio.TimeoutError, DatabaseError)):
                logger.warning(f"[PREDICTION] School {school_id} failed: {outcome!r}")
                response.errors.append(self._school_error(school_id, outcome))
            else:
                raise outcome

        response.results.sort(key=lambda r: r.probability, reverse=True)
        response.processing_time_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            f"[PREDICTION] Profile {profile_id}: {len(response.results)} results, "
            f"{len(response.errors)} errors in {response.processing_time_ms:.1f}ms"
        )
        return response

    async def invalidate_profile(self, profile_id: str) -> int:
        """Drop every cached prediction for a profile (call on profile edits)."""
        try:
            removed = await self.cache.invalidate_profile(profile_id)
        except CacheUnavailableError as e:
            logger.warning(f"[CACHE] Invalidation skipped for profile {profile_id}: {e.message}")
            return 0
        logger.info(f"[CACHE] Profile {profile_id}: {removed} predictions invalidated")
        return removed

    # =========================================================================
    # Per-school pipeline
    # =========================================================================

    async def _predict_school(
        self,
        profile: ProfileMetrics,
        fingerprint: str,
        school_id: str,
        force_refresh: bool,
    ) -> PredictionResult:
        key = build_cache_key(
            self.scorer.engine_version, profile.profile_id, fingerprint, school_id
        )

        cache_available = True
        if not force_refresh:
            try:
                cached = await self.cache.get(key)
            except CacheUnavailableError as e:
                logger.warning(f"[CACHE] Read failed, computing directly: {e.message}")
                cached = None
                cache_available = False

            if cached is not None:
                logger.debug(f"[CACHE] Hit: {key}")
                return dataclasses.replace(cached, from_cache=True)

        result, is_leader = await self.single_flight.do(
            key,
            lambda: self._compute_and_store(profile, school_id, key, cache_available),
        )
        if not is_leader:
            logger.debug(f"[PREDICTION] Coalesced onto in-flight computation: {key}")
        return result

    async def _compute_and_store(
        self,
        profile: ProfileMetrics,
        school_id: str,
        key: str,
        write_through: bool,
    ) -> PredictionResult:
        school = await self._load_school(school_id)
        result = await asyncio.to_thread(self.scorer.score_school, profile, school)

        if write_through:
            try:
                await self.cache.set(key, result, self.cache_ttl_seconds)
            except CacheUnavailableError as e:
                logger.warning(f"[CACHE] Write skipped: {e.message}")
        return result

    # =========================================================================
    # External reads
    # =========================================================================

    async def _load_profile(self, profile_id: str) -> ProfileMetrics:
        try:
            return await asyncio.wait_for(
                self.profile_reader.get_profile(profile_id),
                timeout=self.fetch_timeout_seconds,
            )
        except DataUnavailableError:
            raise
        except NotFoundError as e:
            raise DataUnavailableError(
                f"Profile not found: {profile_id}",
                resource="profiles",
                resource_id=profile_id,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise DatabaseError(
                f"Timed out loading profile {profile_id}",
                operation="read",
                table="profiles",
                original_error=e,
            )

    async def _load_school(self, school_id: str) -> SchoolMetrics:
        try:
            return await asyncio.wait_for(
                self._fetch_school(school_id),
                timeout=self.fetch_timeout_seconds,
            )
        except DataUnavailableError:
            raise
        except NotFoundError as e:
            raise DataUnavailableError(
                f"School not found: {school_id}",
                resource="schools",
                resource_id=school_id,
                original_error=e,
            )

    async def _fetch_school(self, school_id: str) -> SchoolMetrics:
        school = await self.school_reader.get_school(school_id)
        historical = await self.school_reader.get_historical_distribution(school_id)
        if historical is not None:
            school = dataclasses.replace(school, historical=historical)
        return school

    @staticmethod
    def _school_error(school_id: str, error: Exception) -> SchoolPredictionError:
        if isinstance(error, asyncio.TimeoutError):
            return SchoolPredictionError(
                school_id=school_id,
                error="TimeoutError",
                message=f"Timed out loading school {school_id}",
            )
        message = error.message if isinstance(error, DatabaseError) else str(error)
        return SchoolPredictionError(
            school_id=school_id,
            error=error.__class__.__name__,
            message=message,
        )
