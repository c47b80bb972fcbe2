"""
Engine Configuration Module for WindZone.

Holds the tunable policy constants (zone sizing, re-entrant corner heuristic,
Zone 1' increase table) and the cache/workflow settings, with environment
variable loading for hosts.

Usage:
    config = EngineConfig.from_env()
    engine = WindPressureEngine(zoning=config.zoning_policy())
    cache = ResultCache(max_entries=config.cache_max_entries)
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging
import os

from dotenv import load_dotenv

from .coefficient_tables import (
    ZONE1_PRIME_EXPOSURE_BONUS,
    ZONE1_PRIME_HEIGHT_INCREASE,
    ZONE1_PRIME_INCREASE_STEPS,
)
from .constants import (
    ASPECT_RATIO_THRESHOLD,
    CACHE_DEFAULT_TTL,
    CACHE_MAX_ENTRIES,
    COMPONENT_AREA_THRESHOLD,
    CORNER_ZONE_CAP,
    HEIGHT_RATIO_THRESHOLD,
    HEIGHT_TRIGGER_MIN_ASPECT,
    MIN_ZONE_SIZE,
    PERIMETER_ENHANCEMENT_ASPECT,
    PERIMETER_ZONE_CAP,
    REENTRANT_CORNER_GCP,
    WORKFLOW_HISTORY_LIMIT,
    ZONE_AREA_TOLERANCE,
    ZONE_DIMENSION_RATIO,
    ZONE_HEIGHT_RATIO,
)
from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoningPolicy:
    """Zone sizing constants for GeometryZoneDecomposer.

    Attributes:
        corner_cap: Maximum corner zone size (ft)
        perimeter_cap: Maximum perimeter strip width (ft)
        min_zone_size: Floor applied to both sizes (ft)
        dimension_ratio: Fraction of least plan dimension
        height_ratio: Fraction of mean roof height
        reentrant_gcp: Heuristic coefficient for L-shape re-entrant corners
        field_prime_inset: Optional inset (ft) of an inner field_prime zone
        field_prime_factor: Multiplier on the field coefficient for field_prime
        area_tolerance: Allowed partition area mismatch (fraction)
    """
    corner_cap: float = CORNER_ZONE_CAP
    perimeter_cap: float = PERIMETER_ZONE_CAP
    min_zone_size: float = MIN_ZONE_SIZE
    dimension_ratio: float = ZONE_DIMENSION_RATIO
    height_ratio: float = ZONE_HEIGHT_RATIO
    reentrant_gcp: float = REENTRANT_CORNER_GCP
    field_prime_inset: Optional[float] = None
    field_prime_factor: float = 1.0
    area_tolerance: float = ZONE_AREA_TOLERANCE

    def __post_init__(self):
        if self.corner_cap <= 0 or self.perimeter_cap <= 0:
            raise ValidationError("Zone caps must be positive")
        if self.min_zone_size <= 0:
            raise ValidationError("Minimum zone size must be positive")
        if self.reentrant_gcp > 0:
            raise ValidationError(
                "Re-entrant corner coefficient must be suction (<= 0)",
                {"reentrant_gcp": self.reentrant_gcp},
            )
        if self.field_prime_inset is not None and self.field_prime_inset <= 0:
            raise ValidationError(
                "Field prime inset must be positive",
                {"field_prime_inset": self.field_prime_inset},
            )


@dataclass(frozen=True)
class Zone1PrimePolicy:
    """Zone 1' trigger thresholds and the empirical pressure increase table."""
    aspect_ratio_threshold: float = ASPECT_RATIO_THRESHOLD
    height_ratio_threshold: float = HEIGHT_RATIO_THRESHOLD
    height_trigger_min_aspect: float = HEIGHT_TRIGGER_MIN_ASPECT
    component_area_threshold: float = COMPONENT_AREA_THRESHOLD
    # (minimum aspect ratio, % increase), checked in order
    increase_steps: Tuple[Tuple[float, float], ...] = tuple(ZONE1_PRIME_INCREASE_STEPS)
    height_increase: float = ZONE1_PRIME_HEIGHT_INCREASE
    exposure_bonus: float = ZONE1_PRIME_EXPOSURE_BONUS
    perimeter_enhancement_aspect: float = PERIMETER_ENHANCEMENT_ASPECT

    def __post_init__(self):
        aspects = [aspect for aspect, _ in self.increase_steps]
        if aspects != sorted(aspects, reverse=True):
            raise ValidationError("Zone 1' increase steps must be ordered by descending aspect ratio")
        if any(percent < 0 for _, percent in self.increase_steps):
            raise ValidationError("Zone 1' increase percentages cannot be negative")


@dataclass
class EngineConfig:
    """WindZone engine configuration.

    Attributes:
        cache_max_entries: ResultCache capacity (default: 50)
        cache_default_ttl: Cache entry lifetime in seconds (default: 3600)
        history_limit: Workflow undo stack depth (default: 50)
        progress_interval: Seconds between simulated progress ticks (default: 0.2)
        progress_step: Progress increment per tick, % (default: 10)
        corner_cap: Corner zone cap in ft (default: 3.0)
        perimeter_cap: Perimeter zone cap in ft (default: 10.0)
        min_zone_size: Minimum practical zone size in ft (default: 3.0)
        reentrant_gcp: Re-entrant corner heuristic coefficient (default: -3.0)
        log_level: Level passed to configure_logging (default: WARNING)
    """

    cache_max_entries: int = CACHE_MAX_ENTRIES
    cache_default_ttl: float = CACHE_DEFAULT_TTL
    history_limit: int = WORKFLOW_HISTORY_LIMIT
    progress_interval: float = 0.2
    progress_step: float = 10.0
    corner_cap: float = CORNER_ZONE_CAP
    perimeter_cap: float = PERIMETER_ZONE_CAP
    min_zone_size: float = MIN_ZONE_SIZE
    reentrant_gcp: float = REENTRANT_CORNER_GCP
    log_level: str = "WARNING"
    zone1_prime: Zone1PrimePolicy = field(default_factory=Zone1PrimePolicy)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.cache_max_entries <= 0:
            raise ValueError("Cache capacity must be positive")

        if self.cache_default_ttl <= 0:
            raise ValueError("Cache TTL must be positive")

        if self.history_limit < 0:
            raise ValueError("History limit cannot be negative")

        if self.progress_interval <= 0:
            raise ValueError("Progress interval must be positive")

        if self.progress_step <= 0:
            raise ValueError("Progress step must be positive")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "EngineConfig":
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file

        Returns:
            EngineConfig instance with loaded configuration

        Raises:
            ValueError: If a variable cannot be parsed
            FileNotFoundError: If env_file is specified but doesn't exist

        Environment Variables:
            WINDZONE_CACHE_MAX_ENTRIES, WINDZONE_CACHE_TTL,
            WINDZONE_HISTORY_LIMIT, WINDZONE_PROGRESS_INTERVAL,
            WINDZONE_PROGRESS_STEP, WINDZONE_CORNER_CAP,
            WINDZONE_PERIMETER_CAP, WINDZONE_MIN_ZONE_SIZE,
            WINDZONE_REENTRANT_GCP, WINDZONE_LOG_LEVEL
        """
        if env_file:
            cls._load_env_file(env_file)

        return cls(
            cache_max_entries=int(os.getenv("WINDZONE_CACHE_MAX_ENTRIES", str(CACHE_MAX_ENTRIES))),
            cache_default_ttl=float(os.getenv("WINDZONE_CACHE_TTL", str(CACHE_DEFAULT_TTL))),
            history_limit=int(os.getenv("WINDZONE_HISTORY_LIMIT", str(WORKFLOW_HISTORY_LIMIT))),
            progress_interval=float(os.getenv("WINDZONE_PROGRESS_INTERVAL", "0.2")),
            progress_step=float(os.getenv("WINDZONE_PROGRESS_STEP", "10")),
            corner_cap=float(os.getenv("WINDZONE_CORNER_CAP", str(CORNER_ZONE_CAP))),
            perimeter_cap=float(os.getenv("WINDZONE_PERIMETER_CAP", str(PERIMETER_ZONE_CAP))),
            min_zone_size=float(os.getenv("WINDZONE_MIN_ZONE_SIZE", str(MIN_ZONE_SIZE))),
            reentrant_gcp=float(os.getenv("WINDZONE_REENTRANT_GCP", str(REENTRANT_CORNER_GCP))),
            log_level=os.getenv("WINDZONE_LOG_LEVEL", "WARNING").upper(),
        )

    @staticmethod
    def _load_env_file(env_file: str) -> None:
        """Load environment variables from .env file.

        Raises:
            FileNotFoundError: If env_file doesn't exist
        """
        if not os.path.exists(env_file):
            raise FileNotFoundError(f".env file not found: {env_file}")
        load_dotenv(env_file)

    def zoning_policy(self) -> ZoningPolicy:
        """Build the decomposer policy from this configuration."""
        return ZoningPolicy(
            corner_cap=self.corner_cap,
            perimeter_cap=self.perimeter_cap,
            min_zone_size=self.min_zone_size,
            reentrant_gcp=self.reentrant_gcp,
        )


def configure_logging(level: str = "WARNING") -> None:
    """Attach a basic stream handler for hosts that have none.

    The library itself never configures handlers on import.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    logger.debug(f"Logging configured at {level.upper()}")
