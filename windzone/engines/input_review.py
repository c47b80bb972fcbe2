"""
Input Review - reasonableness checks on geometry and wind inputs.

Never raises for valid inputs: findings become result warnings and a
0-100 confidence level for the calculation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from ..core.constants import LOW_RISE_HEIGHT_LIMIT
from ..core.data_models import (
    BuildingGeometry,
    ExposureCategory,
    LShapeGeometry,
    WindParameters,
)


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class Complexity(Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    COMPLEX = "complex"


@dataclass(frozen=True)
class ReviewFinding:
    severity: Severity
    message: str
    reference: str = ""
    recommendation: str = ""

    def as_warning(self) -> str:
        text = self.message
        if self.recommendation:
            text = f"{text} - {self.recommendation}"
        if self.reference:
            text = f"{text} ({self.reference})"
        return text


@dataclass(frozen=True)
class InputReview:
    complexity: Complexity
    findings: Tuple[ReviewFinding, ...]
    requires_professional_analysis: bool
    confidence: float
    recommendations: Tuple[str, ...]

    @property
    def warnings(self) -> List[str]:
        """Warning and critical findings as plain strings"""
        return [f.as_warning() for f in self.findings if f.severity != Severity.INFO]


def review_inputs(geometry: BuildingGeometry, wind: WindParameters) -> InputReview:
    """Review a validated geometry and wind parameter set."""
    findings: List[ReviewFinding] = []
    complexity = Complexity.BASIC
    professional = False
    confidence = 100.0

    def escalate(level: Complexity) -> None:
        nonlocal complexity
        order = [Complexity.BASIC, Complexity.INTERMEDIATE, Complexity.COMPLEX]
        if order.index(level) > order.index(complexity):
            complexity = level

    length, width, height = geometry.bounding_length, geometry.bounding_width, geometry.height

    # Dimension reasonableness
    if length < 10 or width < 10:
        findings.append(ReviewFinding(
            Severity.WARNING, "Very small building dimensions detected",
            recommendation="Verify measurements are in correct units (feet)",
        ))
        confidence -= 10
    if length > 1000 or width > 1000:
        findings.append(ReviewFinding(
            Severity.WARNING, "Very large building detected", "ASCE 7 Section 26.5",
            "Consider wind tunnel testing for large structures",
        ))
        escalate(Complexity.INTERMEDIATE)
        confidence -= 15
    if height > LOW_RISE_HEIGHT_LIMIT:
        findings.append(ReviewFinding(
            Severity.CRITICAL, f"Building exceeds low-rise classification (>{LOW_RISE_HEIGHT_LIMIT:.0f} ft)",
            "ASCE 7 Section 26.2", "High-rise building analysis required",
        ))
        professional = True
        escalate(Complexity.COMPLEX)
        confidence = 0.0

    # Aspect and slenderness
    aspect_ratio = max(length, width) / min(length, width)
    if aspect_ratio > 3:
        findings.append(ReviewFinding(
            Severity.WARNING, f"High aspect ratio detected ({aspect_ratio:.1f}:1)",
            recommendation="Consider additional wind analysis for elongated buildings",
        ))
        escalate(Complexity.INTERMEDIATE)
        confidence -= 10
    if aspect_ratio > 10:
        findings.append(ReviewFinding(
            Severity.CRITICAL, "Extremely high aspect ratio may invalidate simplified method",
            "ASCE 7 Section 26.5.1", "Professional wind analysis strongly recommended",
        ))
        professional = True
        escalate(Complexity.COMPLEX)
        confidence -= 25

    height_to_width = height / min(length, width)
    if height_to_width > 1:
        findings.append(ReviewFinding(
            Severity.WARNING, f"Height-to-width ratio: {height_to_width:.1f}",
            recommendation="Verify simplified method applicability",
        ))
        escalate(Complexity.INTERMEDIATE)
        confidence -= 5
    if height_to_width > 2.5:
        findings.append(ReviewFinding(
            Severity.CRITICAL, "Building height may require different analysis method",
            "ASCE 7 Section 26.5.1", "Consider analytical or wind tunnel procedure",
        ))
        professional = True
        escalate(Complexity.COMPLEX)
        confidence -= 20

    # L-shape specifics
    if isinstance(geometry, LShapeGeometry):
        escalate(Complexity.INTERMEDIATE)
        confidence -= 10
        larger = max(geometry.leg1_area, geometry.leg2_area)
        if abs(geometry.leg1_area - geometry.leg2_area) / larger > 0.5:
            findings.append(ReviewFinding(
                Severity.WARNING, "Significantly unequal L-shape legs detected",
                recommendation="Verify geometry and consider re-entrant corner effects",
            ))
            confidence -= 10
        findings.append(ReviewFinding(
            Severity.INFO, "L-shaped building requires careful zone definition at re-entrant corners",
            "ASCE 7 Figure 26.5-1",
        ))

    # Wind parameters
    if wind.basic_wind_speed < 85:
        findings.append(ReviewFinding(Severity.INFO, "Low wind speed region"))
    if wind.basic_wind_speed > 200:
        findings.append(ReviewFinding(
            Severity.WARNING, "High wind speed requires special attention",
            recommendation="Verify local wind speed requirements",
        ))
        confidence -= 5
    if height > 30 and wind.exposure_category == ExposureCategory.D:
        findings.append(ReviewFinding(
            Severity.WARNING, "High building in open exposure",
            recommendation="Consider enhanced analysis for critical applications",
        ))
        confidence -= 5

    recommendations: List[str] = []
    if complexity == Complexity.INTERMEDIATE:
        recommendations.append("Consider professional review for critical applications")
    if complexity == Complexity.COMPLEX or professional:
        recommendations.append("Professional engineering analysis required")
        recommendations.append("Consider wind tunnel testing for critical structures")
    if confidence < 80:
        recommendations.append("Verify results with alternative calculation methods")

    return InputReview(
        complexity=complexity,
        findings=tuple(findings),
        requires_professional_analysis=professional,
        confidence=max(confidence, 0.0),
        recommendations=tuple(recommendations),
    )
