"""
Coefficient Tables per ASCE 7 (Table 26.10-1, Figure 30.3-2A, Table 26.13-1)

These tables are the in-process defaults. Production callers supply their own
rows (resolved from persistence) to the resolver and velocity pressure engine.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ExposureParameters:
    """Power-law terrain parameters for one exposure category"""
    alpha: float    # Power law exponent
    zg: float       # Gradient height (ft)
    zmin: float     # Minimum height for Kz (ft)


@dataclass(frozen=True)
class CoefficientRow:
    """Single external pressure coefficient row (GCp) for an area band"""
    area_min: float         # Effective wind area lower bound (sq ft)
    area_max: float         # Effective wind area upper bound (sq ft)
    gcp_field: float
    gcp_perimeter: float
    gcp_corner: float
    reference: str = ""

    def contains(self, area: float) -> bool:
        return self.area_min <= area <= self.area_max

    def gcp_for(self, column: str) -> float:
        """Get coefficient for a column name ("field", "perimeter", "corner")"""
        return getattr(self, f"gcp_{column}")

    @classmethod
    def from_mapping(cls, row: Dict[str, float]) -> "CoefficientRow":
        """Build a row from a persistence record.

        Accepts both the engine's names (area_min / area_max) and the
        stored column names (effective_wind_area_min / _max, areaMin / areaMax).
        """
        area_min = _first_present(row, ("area_min", "effective_wind_area_min", "areaMin"))
        area_max = _first_present(row, ("area_max", "effective_wind_area_max", "areaMax"))
        return cls(
            area_min=float(area_min),
            area_max=float(area_max),
            gcp_field=float(row["gcp_field"]),
            gcp_perimeter=float(row["gcp_perimeter"]),
            gcp_corner=float(row["gcp_corner"]),
            reference=str(row.get("table_reference", "")),
        )


def _first_present(row: Dict[str, float], keys: Tuple[str, ...]) -> float:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    raise KeyError(f"Coefficient row is missing one of {keys}")


# ASCE 7-16 Table 26.10-1 values; the 2.01 Kz form is kept for every edition
_ASCE7_16_EXPOSURE = {
    "B": ExposureParameters(alpha=7.0, zg=1200.0, zmin=30.0),
    "C": ExposureParameters(alpha=9.5, zg=900.0, zmin=15.0),
    "D": ExposureParameters(alpha=11.5, zg=700.0, zmin=15.0),
}

EXPOSURE_PARAMETERS: Dict[Tuple[str, str], ExposureParameters] = {
    (edition, exposure): params
    for edition in ("ASCE 7-10", "ASCE 7-16", "ASCE 7-22")
    for exposure, params in _ASCE7_16_EXPOSURE.items()
}


# Low-slope roof C&C coefficients, enclosed / partially enclosed buildings.
# Gaps between rows are bridged by linear interpolation.
DEFAULT_COEFFICIENT_ROWS: List[CoefficientRow] = [
    CoefficientRow(0.0, 10.0, -1.0, -1.8, -2.8, "ASCE 7-22 Figure 30.3-2A"),
    CoefficientRow(100.0, 100.0, -0.9, -1.4, -2.0, "ASCE 7-22 Figure 30.3-2A"),
    CoefficientRow(500.0, 1.0e7, -0.8, -1.2, -1.8, "ASCE 7-22 Figure 30.3-2A"),
]


# Internal pressure coefficients (ASCE 7 Table 26.13-1): (GCpi+, GCpi-)
INTERNAL_PRESSURE_TABLE: Dict[str, Tuple[float, float]] = {
    "enclosed": (0.18, -0.18),
    "partially_enclosed": (0.55, -0.55),
    "open": (0.0, 0.0),
}


# Zone 1' stepped pressure increase by aspect ratio: (minimum aspect, % increase)
ZONE1_PRIME_INCREASE_STEPS: List[Tuple[float, float]] = [
    (3.0, 30.0),
    (2.5, 25.0),
    (2.0, 20.0),
]
ZONE1_PRIME_HEIGHT_INCREASE = 15.0   # % when only the height ratio governs
ZONE1_PRIME_EXPOSURE_BONUS = 5.0     # % added in open exposures (C, D)


def get_exposure_parameters(
    exposure: str, edition: str,
    table: Optional[Dict[Tuple[str, str], ExposureParameters]] = None,
) -> Optional[ExposureParameters]:
    """Get exposure parameters for an exposure/edition pair (None if unresolved)"""
    lookup = EXPOSURE_PARAMETERS if table is None else table
    return lookup.get((edition, exposure))


def get_internal_pressure(classification: str) -> Tuple[float, float]:
    """Get (GCpi+, GCpi-) for an enclosure classification"""
    if classification not in INTERNAL_PRESSURE_TABLE:
        raise KeyError(f"Unknown enclosure classification: {classification}")
    return INTERNAL_PRESSURE_TABLE[classification]
