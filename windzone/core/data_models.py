"""
Data Models for WindZone - Low-Rise Envelope Wind Pressure Engine

All inputs and results are immutable value objects. Geometry is a tagged union
of RectangleGeometry and LShapeGeometry.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple, Union

from .constants import (
    ASCE_EDITIONS,
    DEFAULT_ASCE_EDITION,
    DEFAULT_DIRECTIONALITY_FACTOR,
    DEFAULT_TOPOGRAPHIC_FACTOR,
)
from .errors import ValidationError


Point = Tuple[float, float]


class BuildingShape(Enum):
    """Footprint shape tag"""
    RECTANGLE = "rectangle"
    L_SHAPE = "l_shape"


class ExposureCategory(Enum):
    """Terrain exposure category (ASCE 7 Section 26.7)"""
    B = "B"     # Urban/suburban, wooded terrain
    C = "C"     # Open terrain with scattered obstructions
    D = "D"     # Flat, unobstructed areas and water surfaces


class RiskCategory(Enum):
    """Risk category (ASCE 7 Table 1.5-1)"""
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"


class EnclosureClassification(Enum):
    """Building enclosure classification (ASCE 7 Section 26.2)"""
    ENCLOSED = "enclosed"
    PARTIALLY_ENCLOSED = "partially_enclosed"
    OPEN = "open"


class ZoneType(Enum):
    """Roof pressure zone types"""
    FIELD = "field"
    PERIMETER = "perimeter"
    CORNER = "corner"
    REENTRANT_CORNER = "reentrant_corner"
    FIELD_PRIME = "field_prime"


class LoadCase(Enum):
    """Internal pressure load case that controls a zone's net pressure"""
    POSITIVE_INTERNAL = "positive_internal"   # GCp - GCpi(+)
    NEGATIVE_INTERNAL = "negative_internal"   # GCp - GCpi(-)


class CoefficientSource(Enum):
    """How a pressure coefficient was obtained from the table"""
    EXACT = "exact"
    INTERPOLATED = "interpolated"
    NEAREST = "nearest"         # Area outside table range, nearest row used
    FALLBACK = "fallback"       # No table data, conservative defaults


def _coerce_enum(instance: Any, name: str, enum_cls: type) -> None:
    """Replace a string attribute on a frozen dataclass with its enum member"""
    value = getattr(instance, name)
    if isinstance(value, enum_cls):
        return
    try:
        object.__setattr__(instance, name, enum_cls(value))
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {name}: must be one of {allowed}", {name: value}
        )


def _require_positive(**values: Optional[float]) -> None:
    for name, value in values.items():
        if value is None:
            raise ValidationError(f"Missing dimension: {name}", {name: value})
        if value <= 0:
            raise ValidationError(f"Dimension must be positive: {name}", {name: value})


@dataclass(frozen=True)
class RectangleGeometry:
    """Rectangular footprint (ft)"""
    length: float       # Plan dimension along X
    width: float        # Plan dimension along Y
    height: float       # Mean roof height

    def __post_init__(self):
        _require_positive(length=self.length, width=self.width, height=self.height)

    @property
    def shape(self) -> BuildingShape:
        return BuildingShape.RECTANGLE

    @property
    def footprint_area(self) -> float:
        return self.length * self.width

    @property
    def bounding_length(self) -> float:
        return self.length

    @property
    def bounding_width(self) -> float:
        return self.width

    def footprint_polygons(self) -> List[List[Point]]:
        return [_rectangle(0.0, 0.0, self.length, self.width)]


@dataclass(frozen=True)
class LShapeGeometry:
    """L-shaped footprint built from two rectangular legs (ft).

    Leg 1 sits at the origin; leg 2 is placed against leg 1's east face at
    x = length1, shifted vertically by offset_y.
    """
    length1: float
    width1: float
    length2: float
    width2: float
    height: float
    offset_y: float = 0.0

    def __post_init__(self):
        _require_positive(
            length1=self.length1, width1=self.width1,
            length2=self.length2, width2=self.width2,
            height=self.height,
        )
        # Legs must share part of the junction edge
        if not (-self.width2 < self.offset_y < self.width1):
            raise ValidationError(
                "L-shape legs do not touch along the junction edge",
                {"offset_y": self.offset_y, "width1": self.width1, "width2": self.width2},
            )

    @property
    def shape(self) -> BuildingShape:
        return BuildingShape.L_SHAPE

    @property
    def leg1_area(self) -> float:
        return self.length1 * self.width1

    @property
    def leg2_area(self) -> float:
        return self.length2 * self.width2

    @property
    def footprint_area(self) -> float:
        return self.leg1_area + self.leg2_area

    @property
    def bounding_length(self) -> float:
        return self.length1 + self.length2

    @property
    def bounding_width(self) -> float:
        return max(self.width1, self.offset_y + self.width2) - min(0.0, self.offset_y)

    def footprint_polygons(self) -> List[List[Point]]:
        return [
            _rectangle(0.0, 0.0, self.length1, self.width1),
            _rectangle(self.length1, self.offset_y, self.length2, self.width2),
        ]


BuildingGeometry = Union[RectangleGeometry, LShapeGeometry]


def _rectangle(x: float, y: float, length: float, width: float) -> List[Point]:
    """Counter-clockwise 4-point rectangle starting at its lower-left corner"""
    return [(x, y), (x + length, y), (x + length, y + width), (x, y + width)]


def geometry_from_dict(data: Dict[str, Any]) -> BuildingGeometry:
    """Build a geometry from a loosely-typed payload ({"shape": ..., dims...})"""
    shape = data.get("shape", BuildingShape.RECTANGLE.value)
    if shape == BuildingShape.RECTANGLE.value:
        return RectangleGeometry(
            length=data.get("length"), width=data.get("width"), height=data.get("height"),
        )
    if shape == BuildingShape.L_SHAPE.value:
        return LShapeGeometry(
            length1=data.get("length1"), width1=data.get("width1"),
            length2=data.get("length2"), width2=data.get("width2"),
            height=data.get("height"), offset_y=data.get("offset_y", 0.0),
        )
    raise ValidationError(f"Unsupported building shape: {shape}", {"shape": shape})


@dataclass(frozen=True)
class WindParameters:
    """Wind design parameters for one calculation"""
    basic_wind_speed: float                             # V (mph)
    exposure_category: ExposureCategory = ExposureCategory.C
    asce_edition: str = DEFAULT_ASCE_EDITION
    topographic_factor: float = DEFAULT_TOPOGRAPHIC_FACTOR       # Kzt
    directionality_factor: float = DEFAULT_DIRECTIONALITY_FACTOR  # Kd
    risk_category: RiskCategory = RiskCategory.II
    building_classification: EnclosureClassification = EnclosureClassification.ENCLOSED
    include_internal_pressure: bool = True
    effective_wind_area: Optional[float] = None  # sq ft; None = zone area
    consider_glazing_failure: bool = False

    def __post_init__(self):
        if self.basic_wind_speed is None or self.basic_wind_speed <= 0:
            raise ValidationError(
                "Basic wind speed must be positive",
                {"basic_wind_speed": self.basic_wind_speed},
            )
        _coerce_enum(self, "exposure_category", ExposureCategory)
        _coerce_enum(self, "risk_category", RiskCategory)
        _coerce_enum(self, "building_classification", EnclosureClassification)
        if self.asce_edition not in ASCE_EDITIONS:
            raise ValidationError(
                f"ASCE edition must be one of {', '.join(ASCE_EDITIONS)}",
                {"asce_edition": self.asce_edition},
            )
        if self.topographic_factor <= 0:
            raise ValidationError(
                "Topographic factor must be positive",
                {"topographic_factor": self.topographic_factor},
            )
        if self.directionality_factor <= 0:
            raise ValidationError(
                "Directionality factor must be positive",
                {"directionality_factor": self.directionality_factor},
            )
        if self.effective_wind_area is not None and self.effective_wind_area <= 0:
            raise ValidationError(
                "Effective wind area must be positive",
                {"effective_wind_area": self.effective_wind_area},
            )


@dataclass(frozen=True)
class WindSpeedData:
    """Resolved basic wind speed for a site"""
    value: float                    # mph
    source: str = "database"        # "database" | "interpolated" | "custom" | "manual"
    confidence: float = 100.0
    justification: Optional[str] = None


@dataclass(frozen=True)
class CalculationRequest:
    """Everything a client submits for one calculation ("form data")"""
    geometry: BuildingGeometry
    wind: WindParameters
    city: str = ""
    state: str = ""
    professional_mode: bool = False
    project_name: str = "Untitled Project"

    def with_wind_speed(self, wind_speed: float) -> "CalculationRequest":
        """Copy of this request with the basic wind speed replaced"""
        from dataclasses import replace
        return replace(self, wind=replace(self.wind, basic_wind_speed=wind_speed))


@dataclass(frozen=True)
class PressureZone:
    """A roof pressure zone with its boundary polygon.

    Attributes:
        zone_id: Stable identifier (e.g. "corner-sw", "leg2-perimeter-north")
        zone_type: Zone classification
        boundary: Ordered polygon vertices (closed implicitly, first vertex not repeated)
        area: Plan area (sq ft), always > 0
        base_gcp: Nominal external coefficient (<= 0, suction)
        is_zone1_prime: True once a Zone 1' enhancement applies
        description: Human-readable label
        leg: L-shape leg number (None for rectangles)
    """
    zone_id: str
    zone_type: ZoneType
    boundary: Tuple[Point, ...]
    area: float
    base_gcp: float
    is_zone1_prime: bool = False
    description: str = ""
    leg: Optional[int] = None


@dataclass(frozen=True)
class ZoneLayout:
    """Result of decomposing a footprint into pressure zones"""
    zones: Tuple[PressureZone, ...]
    corner_size: float          # ft
    perimeter_size: float       # ft
    footprint_area: float       # sq ft
    warnings: Tuple[str, ...] = ()

    @property
    def total_area(self) -> float:
        return sum(zone.area for zone in self.zones)

    def zones_of(self, zone_type: ZoneType) -> List[PressureZone]:
        return [zone for zone in self.zones if zone.zone_type == zone_type]


@dataclass(frozen=True)
class Zone1PrimeTrigger:
    """One independent Zone 1' trigger"""
    name: str               # "aspect_ratio" | "height_ratio" | "exposure_effect" | "component_size"
    triggered: bool
    value: float
    threshold: float
    description: str
    impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "triggered": self.triggered,
            "value": self.value,
            "threshold": self.threshold,
            "description": self.description,
            "impact": self.impact,
        }


@dataclass(frozen=True)
class Zone1PrimeAnalysis:
    """Zone 1' (elongated / tall building) assessment"""
    aspect_ratio: float
    height_ratio: float
    is_required: bool
    pressure_increase_percent: float
    triggers: Tuple[Zone1PrimeTrigger, ...]
    confidence: float           # 0-100
    explanation: str
    warnings: Tuple[str, ...] = ()
    asce_reference: str = "ASCE 7-16/7-22 Figure 26.11-1A, Section 26.11.1"

    @property
    def increase_factor(self) -> float:
        return 1.0 + self.pressure_increase_percent / 100.0

    def trigger(self, name: str) -> Zone1PrimeTrigger:
        for trigger in self.triggers:
            if trigger.name == name:
                return trigger
        raise KeyError(f"Unknown Zone 1' trigger: {name}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aspect_ratio": self.aspect_ratio,
            "height_ratio": self.height_ratio,
            "is_required": self.is_required,
            "pressure_increase_percent": self.pressure_increase_percent,
            "triggers": [trigger.to_dict() for trigger in self.triggers],
            "confidence": self.confidence,
            "explanation": self.explanation,
            "warnings": list(self.warnings),
            "asce_reference": self.asce_reference,
        }


@dataclass(frozen=True)
class ZonePressure:
    """Net design pressure for one zone (psf, magnitudes)"""
    zone_id: str
    zone_type: ZoneType
    area: float                     # sq ft
    effective_area: float           # sq ft used for the coefficient lookup
    gcp: float
    coefficient_source: CoefficientSource
    gcpi_positive: float
    gcpi_negative: float
    pressure_positive_case: float   # |qz (GCp - GCpi+)|
    pressure_negative_case: float   # |qz (GCp - GCpi-)|
    net_pressure: float             # Controlling magnitude
    controlling_case: LoadCase
    is_zone1_prime: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone_id": self.zone_id,
            "zone_type": self.zone_type.value,
            "area": self.area,
            "effective_area": self.effective_area,
            "gcp": self.gcp,
            "coefficient_source": self.coefficient_source.value,
            "gcpi_positive": self.gcpi_positive,
            "gcpi_negative": self.gcpi_negative,
            "pressure_positive_case": self.pressure_positive_case,
            "pressure_negative_case": self.pressure_negative_case,
            "net_pressure": self.net_pressure,
            "controlling_case": self.controlling_case.value,
            "is_zone1_prime": self.is_zone1_prime,
        }


@dataclass(frozen=True)
class CalculationResult:
    """Wind pressure calculation results. Never mutated after creation."""
    zones: Tuple[ZonePressure, ...]
    velocity_pressure: float        # qz (psf)
    exposure_coefficient: float     # Kz
    importance_factor: float
    max_pressure: float             # psf
    controlling_zone_id: str
    controlling_load_case: LoadCase
    enclosure: EnclosureClassification
    zone1_prime: Zone1PrimeAnalysis
    asce_edition: str
    warnings: Tuple[str, ...] = ()
    calculation_steps: Tuple[Dict[str, str], ...] = field(default=(), compare=False)

    def zone(self, zone_id: str) -> ZonePressure:
        for zone in self.zones:
            if zone.zone_id == zone_id:
                return zone
        raise KeyError(f"Unknown zone: {zone_id}")

    def pressure_by_type(self) -> Dict[ZoneType, float]:
        """Maximum net pressure per zone type"""
        maxima: Dict[ZoneType, float] = {}
        for zone in self.zones:
            maxima[zone.zone_type] = max(maxima.get(zone.zone_type, 0.0), zone.net_pressure)
        return maxima

    def to_dict(self) -> Dict[str, Any]:
        """Export results as dictionary for JSON serialization"""
        return {
            "zones": [zone.to_dict() for zone in self.zones],
            "velocity_pressure": self.velocity_pressure,
            "exposure_coefficient": self.exposure_coefficient,
            "importance_factor": self.importance_factor,
            "max_pressure": self.max_pressure,
            "controlling_zone_id": self.controlling_zone_id,
            "controlling_load_case": self.controlling_load_case.value,
            "enclosure": self.enclosure.value,
            "zone1_prime": self.zone1_prime.to_dict(),
            "asce_edition": self.asce_edition,
            "warnings": list(self.warnings),
            "calculation_steps": [dict(step) for step in self.calculation_steps],
        }


@dataclass(frozen=True)
class GlazingFailureResults:
    """Results under both enclosure assumptions for a glazing failure check.

    Neither result is preferred here; the presentation layer chooses.
    """
    enclosed: CalculationResult
    partially_enclosed: CalculationResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enclosed": self.enclosed.to_dict(),
            "partially_enclosed": self.partially_enclosed.to_dict(),
        }
