"""
Prediction Cache

Key-value store for PredictionResult objects with TTL expiry and
per-profile invalidation.

Keys embed the engine version and a fingerprint of the profile snapshot,
so an edited profile (or a new engine version) never hits a stale entry.
Writing a key drops the older keys for the same (profile, school).
"""

import dataclasses
import hashlib
import json
import logging
import time
from typing import Callable, Dict, Optional, Protocol, Set, Tuple
from urllib.parse import quote, unquote

from app.domain.scoring.interfaces import PredictionResult, ProfileMetrics

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "prediction"


def profile_fingerprint(profile: ProfileMetrics) -> str:
    """SHA-256 of the canonical JSON form of a profile snapshot."""
    canonical = json.dumps(
        dataclasses.asdict(profile),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def build_cache_key(
    engine_version: str,
    profile_id: str,
    fingerprint: str,
    school_id: str,
) -> str:
    """
    prediction:{engine_version}:{profile_id}:{fingerprint}:{school_id}

    Ids are percent-encoded, so ids containing ":" still parse back.
    """
    return ":".join(
        (
            CACHE_KEY_PREFIX,
            engine_version,
            quote(profile_id, safe=""),
            fingerprint,
            quote(school_id, safe=""),
        )
    )


def parse_cache_key(key: str) -> Optional[Tuple[str, str]]:
    """(profile_id, school_id) of a key built by build_cache_key, else None."""
    parts = key.split(":")
    if len(parts) != 5 or parts[0] != CACHE_KEY_PREFIX:
        return None
    return unquote(parts[2]), unquote(parts[4])


def profile_id_from_key(key: str) -> Optional[str]:
    parsed = parse_cache_key(key)
    return parsed[0] if parsed is not None else None


class PredictionCache(Protocol):
    """
    Cache backend contract.

    Backends raise CacheUnavailableError when the store cannot be reached;
    callers treat that as a miss.
    """

    async def get(self, key: str) -> Optional[PredictionResult]:
        ...

    async def set(self, key: str, value: PredictionResult, ttl_seconds: int) -> None:
        ...

    async def invalidate(self, key: str) -> None:
        ...

    async def invalidate_profile(self, profile_id: str) -> int:
        """Drop every entry for a profile. Returns the number removed."""
        ...


class InMemoryPredictionCache:
    """
    Process-local cache.

    Runs on the event loop only; every method completes without awaiting,
    so no lock is needed around the dictionaries.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[PredictionResult, float]] = {}
        self._keys_by_profile: Dict[str, Set[str]] = {}

    async def get(self, key: str) -> Optional[PredictionResult]:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            self._remove(key)
            return None
        return value

    async def set(self, key: str, value: PredictionResult, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        self._data[key] = (value, self._clock() + ttl_seconds)

        parsed = parse_cache_key(key)
        if parsed is None:
            return
        profile_id, school_id = parsed
        keys = self._keys_by_profile.setdefault(profile_id, set())

        # Older fingerprints (or engine versions) for this school are unreachable.
        stale = [k for k in keys if k != key and parse_cache_key(k)[1] == school_id]
        for old_key in stale:
            self._data.pop(old_key, None)
            keys.discard(old_key)
        keys.add(key)

    async def invalidate(self, key: str) -> None:
        self._remove(key)

    async def invalidate_profile(self, profile_id: str) -> int:
        keys = self._keys_by_profile.pop(profile_id, set())
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        if removed:
            logger.info(f"[CACHE] Invalidated {removed} predictions for profile {profile_id}")
        return removed

    async def clear(self) -> None:
        self._data.clear()
        self._keys_by_profile.clear()

    def __len__(self) -> int:
        return len(self._data)

    def _remove(self, key: str) -> None:
        self._data.pop(key, None)
        profile_id = profile_id_from_key(key)
        if profile_id is None:
            return
        keys = self._keys_by_profile.get(profile_id)
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._keys_by_profile[profile_id]


class NullPredictionCache:
    """Cache that never stores anything (CACHE_BACKEND=none)."""

    async def get(self, key: str) -> Optional[PredictionResult]:
        return None

    async def set(self, key: str, value: PredictionResult, ttl_seconds: int) -> None:
        return None

    async def invalidate(self, key: str) -> None:
        return None

    async def invalidate_profile(self, profile_id: str) -> int:
        return 0
