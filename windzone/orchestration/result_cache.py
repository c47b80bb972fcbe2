"""
Result Cache - in-memory LRU memoization of wind pressure results.

Entries are keyed by a canonical fingerprint of the calculation inputs and
expire after a TTL. All mutations run under one lock so eviction order is
linearized across threads. Construct one instance per owner and inject it;
there is no module-level cache.
"""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..core.constants import CACHE_DEFAULT_TTL, CACHE_MAX_ENTRIES
from ..core.data_models import (
    CalculationRequest,
    CalculationResult,
    GlazingFailureResults,
    LShapeGeometry,
    WindSpeedData,
)
from ..core.errors import CacheIntegrityError, ValidationError

logger = logging.getLogger(__name__)

CacheParams = Union[CalculationRequest, Mapping[str, Any]]
CachedResult = Union[CalculationResult, GlazingFailureResults]


@dataclass
class CacheEntry:
    """One cached result. Owned by ResultCache."""
    key: str
    data: CachedResult
    checksum: str
    timestamp: float    # clock() at insertion
    ttl: float          # seconds
    hit_count: int = 0

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp >= self.ttl


@dataclass(frozen=True)
class CacheMetrics:
    total_requests: int = 0
    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0                   # %
    average_calculation_time: float = 0.0   # seconds
    timed_calculations: int = 0


# Keys that determine a result; anything else in a mapping is ignored
FINGERPRINT_KEYS = (
    "height", "length", "width", "exposureCategory", "city", "state",
    "riskCategory", "windSpeed", "professionalMode", "topographicFactor",
    "directionalityFactor",
    "asceEdition", "buildingClassification", "includeInternalPressure",
    "effectiveWindArea", "considerGlazingFailure",
    "shape", "length1", "width1", "length2", "width2", "offsetY",
)


def canonical_params(params: CacheParams, wind_data: Optional[WindSpeedData] = None) -> Dict[str, Any]:
    """Flatten calculation inputs into the fingerprinted key set."""
    if isinstance(params, CalculationRequest):
        geometry, wind = params.geometry, params.wind
        data: Dict[str, Any] = {
            "height": geometry.height,
            "length": geometry.bounding_length,
            "width": geometry.bounding_width,
            "exposureCategory": wind.exposure_category.value,
            "city": params.city,
            "state": params.state,
            "riskCategory": wind.risk_category.value,
            "windSpeed": wind_data.value if wind_data is not None else wind.basic_wind_speed,
            "professionalMode": params.professional_mode,
            "topographicFactor": wind.topographic_factor,
            "directionalityFactor": wind.directionality_factor,
            # Inputs that change the result beyond the site and geometry
            "asceEdition": wind.asce_edition,
            "buildingClassification": wind.building_classification.value,
            "includeInternalPressure": wind.include_internal_pressure,
            "effectiveWindArea": wind.effective_wind_area,
            "considerGlazingFailure": wind.consider_glazing_failure,
        }
        if isinstance(geometry, LShapeGeometry):
            data.update({
                "shape": geometry.shape.value,
                "length1": geometry.length1,
                "width1": geometry.width1,
                "length2": geometry.length2,
                "width2": geometry.width2,
                "offsetY": geometry.offset_y,
            })
        return data

    if isinstance(params, Mapping):
        data = {key: params[key] for key in FINGERPRINT_KEYS if key in params}
        if wind_data is not None:
            data["windSpeed"] = wind_data.value
        return data

    raise ValidationError(f"Cannot fingerprint {type(params).__name__}")


def fingerprint(params: CacheParams, wind_data: Optional[WindSpeedData] = None) -> str:
    """Stable SHA-256 key; independent of mapping key order"""
    payload = json.dumps(canonical_params(params, wind_data), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def result_checksum(result: CachedResult) -> str:
    payload = json.dumps(result.to_dict(), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache:
    """
    LRU + TTL cache of calculation results.

    get() promotes hits to most-recently-used; set() purges expired entries
    and evicts the least-recently-used entry when full.
    """

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES,
                 default_ttl: float = CACHE_DEFAULT_TTL,
                 clock: Callable[[], float] = time.monotonic):
        if max_entries <= 0:
            raise ValidationError("Cache capacity must be positive", {"max_entries": max_entries})
        if default_ttl <= 0:
            raise ValidationError("Cache TTL must be positive", {"default_ttl": default_ttl})
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._metrics = CacheMetrics()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, params: CacheParams, wind_data: Optional[WindSpeedData] = None) -> Optional[CachedResult]:
        """Cached result, or None on a miss (absent, expired or corrupt)."""
        key = fingerprint(params, wind_data)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_expired(self._clock()):
                try:
                    self._verify(entry)
                except CacheIntegrityError as exc:
                    logger.warning(f"Dropping corrupt cache entry: {exc}")
                    del self._entries[key]
                else:
                    entry.hit_count += 1
                    self._entries.move_to_end(key)
                    self._record_request(hit=True)
                    return entry.data
            self._record_request(hit=False)
            return None

    def set(self, params: CacheParams, result: CachedResult,
            wind_data: Optional[WindSpeedData] = None, ttl: Optional[float] = None) -> str:
        """Store a result; returns its fingerprint."""
        if ttl is not None and ttl <= 0:
            raise ValidationError("Cache TTL must be positive", {"ttl": ttl})
        key = fingerprint(params, wind_data)
        entry = CacheEntry(
            key=key,
            data=result,
            checksum=result_checksum(result),
            timestamp=self._clock(),
            ttl=ttl if ttl is not None else self.default_ttl,
        )
        with self._lock:
            self._cleanup_expired()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.info(f"Evicted least recently used cache entry {evicted[:12]}")
            self._entries[key] = entry
        return key

    def has(self, params: CacheParams, wind_data: Optional[WindSpeedData] = None) -> bool:
        """True when a live entry exists. Does not touch metrics or LRU order."""
        key = fingerprint(params, wind_data)
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def clear(self) -> None:
        """Drop all entries and reset metrics"""
        with self._lock:
            self._entries.clear()
            self._metrics = CacheMetrics()

    def metrics(self) -> CacheMetrics:
        """Snapshot of the metrics"""
        with self._lock:
            return self._metrics

    def info(self) -> Dict[str, float]:
        with self._lock:
            size = len(self._entries)
        return {
            "entries": size,
            "max_entries": self.max_entries,
            "usage_percent": size / self.max_entries * 100.0,
        }

    def popular_entries(self, limit: int = 10) -> List[Tuple[str, int]]:
        """(key, hit_count) pairs, most hit first"""
        with self._lock:
            ranked = sorted(
                ((entry.key, entry.hit_count) for entry in self._entries.values()),
                key=lambda item: item[1], reverse=True,
            )
        return ranked[:limit]

    def preload(self, calculations: Iterable[Tuple[Any, ...]]) -> int:
        """
        Seed the cache with (params, result) pairs or (params, result, wind_data)
        triples; returns the count stored.
        """
        count = 0
        for item in calculations:
            if len(item) == 2:
                params, result = item
                wind_data = None
            elif len(item) == 3:
                params, result, wind_data = item
            else:
                raise ValidationError(
                    "Preload items must be (params, result) or (params, result, wind_data)",
                    {"index": count, "size": len(item)},
                )
            self.set(params, result, wind_data)
            count += 1
        logger.info(f"Preloaded {count} cache entries")
        return count

    def get_or_compute(self, params: CacheParams,
                       compute: Callable[[], CachedResult],
                       wind_data: Optional[WindSpeedData] = None,
                       ttl: Optional[float] = None) -> CachedResult:
        """Cached result, or compute, time, store and return a fresh one."""
        cached = self.get(params, wind_data)
        if cached is not None:
            return cached
        start = time.perf_counter()
        result = compute()
        self.record_calculation_time(time.perf_counter() - start)
        self.set(params, result, wind_data, ttl)
        return result

    def record_calculation_time(self, seconds: float) -> None:
        """Fold a calculation duration into the running average"""
        with self._lock:
            m = self._metrics
            count = m.timed_calculations + 1
            average = m.average_calculation_time + (seconds - m.average_calculation_time) / count
            self._metrics = replace(m, average_calculation_time=average, timed_calculations=count)

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _record_request(self, hit: bool) -> None:
        m = self._metrics
        total = m.total_requests + 1
        hits = m.hits + (1 if hit else 0)
        self._metrics = replace(
            m,
            total_requests=total,
            hits=hits,
            misses=m.misses + (0 if hit else 1),
            hit_rate=hits / total * 100.0,
        )

    def _cleanup_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")

    @staticmethod
    def _verify(entry: CacheEntry) -> None:
        if result_checksum(entry.data) != entry.checksum:
            raise CacheIntegrityError("Cached result checksum mismatch", {"key": entry.key[:12]})
