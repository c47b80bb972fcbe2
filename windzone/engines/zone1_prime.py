"""
Zone 1' Analyzer - Elongated and tall low-rise buildings
Flags geometries that need enhanced corner / perimeter pressures and
quantifies the increase (ASCE 7-16/7-22 Figure 26.11-1A).
"""

import logging
from typing import FrozenSet, List, Optional

from ..core.config import Zone1PrimePolicy
from ..core.constants import DEFAULT_EFFECTIVE_WIND_AREA
from ..core.data_models import (
    BuildingGeometry,
    ExposureCategory,
    Zone1PrimeAnalysis,
    Zone1PrimeTrigger,
    ZoneType,
)
from ..core.errors import ValidationError

logger = logging.getLogger(__name__)

OPEN_EXPOSURES = (ExposureCategory.C, ExposureCategory.D)

# Confidence scoring
BASE_CONFIDENCE = 95.0
BORDERLINE_CONFIDENCE = 85.0
BORDERLINE_ASPECT = 1.8
BORDERLINE_HEIGHT_RATIO = 0.8
LARGE_AREA_THRESHOLD = 100.0   # sq ft
LARGE_AREA_PENALTY = 5.0

# Warning thresholds
REVIEW_INCREASE_PERCENT = 25.0
WIND_TUNNEL_ASPECT = 4.0
TALL_HEIGHT_RATIO = 2.0


class Zone1PrimeAnalyzer:
    """
    Four independent triggers (aspect ratio, height ratio, exposure effect,
    component size). Zone 1' is required when the aspect ratio trigger
    fires, or the height ratio trigger fires on a building that is at
    least moderately elongated.
    """

    def __init__(self, policy: Optional[Zone1PrimePolicy] = None):
        self.policy = policy or Zone1PrimePolicy()

    def analyze_geometry(self, geometry: BuildingGeometry, exposure: ExposureCategory,
                         effective_wind_area: Optional[float] = None) -> Zone1PrimeAnalysis:
        """Analyze using the footprint's bounding dimensions"""
        return self.analyze(
            geometry.bounding_length, geometry.bounding_width, geometry.height,
            exposure, effective_wind_area,
        )

    def analyze(self, length: float, width: float, height: float,
                exposure: ExposureCategory,
                effective_wind_area: Optional[float] = None) -> Zone1PrimeAnalysis:
        if min(length, width, height) <= 0:
            raise ValidationError(
                "Building dimensions must be positive",
                {"length": length, "width": width, "height": height},
            )
        if effective_wind_area is None:
            effective_wind_area = DEFAULT_EFFECTIVE_WIND_AREA
        policy = self.policy

        aspect_ratio = max(length / width, width / length)
        # h/D with D the across-wind (least) dimension
        height_ratio = height / min(length, width)

        aspect_hit = aspect_ratio >= policy.aspect_ratio_threshold
        height_hit = height_ratio >= policy.height_ratio_threshold
        exposure_hit = exposure in OPEN_EXPOSURES and aspect_hit
        component_hit = effective_wind_area <= policy.component_area_threshold

        triggers = (
            Zone1PrimeTrigger(
                name="aspect_ratio",
                triggered=aspect_hit,
                value=aspect_ratio,
                threshold=policy.aspect_ratio_threshold,
                description="Building aspect ratio (L/W or W/L)",
                impact=(f"{aspect_ratio:.1f}:1 ratio creates wind acceleration at corners"
                        if aspect_hit else "Standard wind flow patterns"),
            ),
            Zone1PrimeTrigger(
                name="height_ratio",
                triggered=height_hit,
                value=height_ratio,
                threshold=policy.height_ratio_threshold,
                description="Height to across-wind dimension ratio (h/D)",
                impact="Tall building enhances corner wind effects" if height_hit else "Low-profile building",
            ),
            Zone1PrimeTrigger(
                name="exposure_effect",
                triggered=exposure_hit,
                value=aspect_ratio,
                threshold=policy.aspect_ratio_threshold,
                description="Exposure category enhancement",
                impact=("Open terrain amplifies elongated building effects"
                        if exposure_hit else "Sheltered or standard conditions"),
            ),
            Zone1PrimeTrigger(
                name="component_size",
                triggered=component_hit,
                value=effective_wind_area,
                threshold=policy.component_area_threshold,
                description="Small component tributary area",
                impact=("Small elements see higher localized pressures"
                        if component_hit else "Large tributary areas"),
            ),
        )

        is_required = aspect_hit or (height_hit and aspect_ratio >= policy.height_trigger_min_aspect)
        increase = self._pressure_increase(aspect_ratio, height_ratio, exposure_hit) if is_required else 0.0

        confidence = BASE_CONFIDENCE
        if aspect_ratio < BORDERLINE_ASPECT and height_ratio < BORDERLINE_HEIGHT_RATIO:
            confidence = BORDERLINE_CONFIDENCE
        if effective_wind_area > LARGE_AREA_THRESHOLD:
            confidence -= LARGE_AREA_PENALTY

        warnings: List[str] = []
        if is_required and increase > REVIEW_INCREASE_PERCENT:
            warnings.append("High pressure increase detected - requires professional engineering review")
        if aspect_ratio >= WIND_TUNNEL_ASPECT:
            warnings.append("Extremely elongated building - consider wind tunnel testing")
        if height_ratio >= TALL_HEIGHT_RATIO:
            warnings.append("Very tall building - additional analysis may be required")

        logger.debug(
            f"Zone 1' analysis: aspect {aspect_ratio:.2f}, h/D {height_ratio:.2f}, "
            f"required={is_required}, increase={increase:.0f}%"
        )

        return Zone1PrimeAnalysis(
            aspect_ratio=aspect_ratio,
            height_ratio=height_ratio,
            is_required=is_required,
            pressure_increase_percent=increase,
            triggers=triggers,
            confidence=confidence,
            explanation=self._explain(aspect_ratio, height_ratio, increase, is_required, length, width),
            warnings=tuple(warnings),
        )

    def enhanced_zone_types(self, analysis: Zone1PrimeAnalysis) -> FrozenSet[ZoneType]:
        """Zone types whose pressures take the Zone 1' increase"""
        if not analysis.is_required or analysis.pressure_increase_percent <= 0:
            return frozenset()
        if analysis.aspect_ratio >= self.policy.perimeter_enhancement_aspect:
            return frozenset({ZoneType.CORNER, ZoneType.PERIMETER})
        return frozenset({ZoneType.CORNER})

    def _pressure_increase(self, aspect_ratio: float, height_ratio: float, exposure_hit: bool) -> float:
        increase = 0.0
        for minimum_aspect, percent in self.policy.increase_steps:
            if aspect_ratio >= minimum_aspect:
                increase = percent
                break
        else:
            if height_ratio >= self.policy.height_ratio_threshold:
                increase = self.policy.height_increase
        if exposure_hit:
            increase += self.policy.exposure_bonus
        return increase

    @staticmethod
    def _explain(aspect_ratio: float, height_ratio: float, increase: float,
                 is_required: bool, length: float, width: float) -> str:
        """Plain-language explanation for reports"""
        if not is_required:
            return (
                f"This {length:g}' x {width:g}' building has a {aspect_ratio:.1f}:1 aspect ratio, "
                f"which creates standard wind flow patterns. Zone 1' enhanced pressures are not required."
            )

        parts = [
            f"This {length:g}' x {width:g}' building requires Zone 1' enhanced pressures "
            f"because it's {aspect_ratio:.1f} times longer than wide."
        ]
        if aspect_ratio >= 3.0:
            lead = "Highly elongated buildings create significant wind acceleration around corners"
        elif aspect_ratio >= 2.5:
            lead = "Elongated buildings cause wind to accelerate around corners"
        else:
            lead = "The building geometry causes enhanced wind effects at corners"
        parts.append(f"{lead}, resulting in {increase:g}% higher loads than standard calculations.")
        if height_ratio >= 1.0:
            parts.append(
                f"The building's height ({height_ratio:.1f}x the width) further amplifies these effects."
            )
        parts.append("These enhanced zones affect corner areas and require stronger fastening patterns for safety.")
        return " ".join(parts)
