"""
Pressure Coefficient Resolver - ASCE 7 Chapter 30 / Table 26.13-1
Resolves area-dependent external coefficients (GCp) and internal
coefficients (GCpi), and classifies enclosure from wall openings.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.coefficient_tables import (
    CoefficientRow,
    DEFAULT_COEFFICIENT_ROWS,
    get_internal_pressure,
)
from ..core.constants import FALLBACK_GCP
from ..core.data_models import (
    CoefficientSource,
    EnclosureClassification,
    LoadCase,
    ZoneType,
)
from ..core.errors import LookupMiss, ValidationError

logger = logging.getLogger(__name__)

COLUMNS = ("field", "perimeter", "corner")

# Zone types without a column of their own borrow one
_ZONE_COLUMN = {
    ZoneType.FIELD: "field",
    ZoneType.FIELD_PRIME: "field",
    ZoneType.PERIMETER: "perimeter",
    ZoneType.CORNER: "corner",
    ZoneType.REENTRANT_CORNER: "corner",
}


@dataclass(frozen=True)
class ResolvedCoefficients:
    """GCp for every column at one effective wind area"""
    effective_area: float
    gcp_field: float
    gcp_perimeter: float
    gcp_corner: float
    source: CoefficientSource
    reference: str = ""
    miss: Optional[LookupMiss] = None

    @property
    def is_low_confidence(self) -> bool:
        return self.source in (CoefficientSource.NEAREST, CoefficientSource.FALLBACK)

    @property
    def warning(self) -> Optional[str]:
        return str(self.miss) if self.miss is not None else None

    def gcp_for(self, zone_type: Union[ZoneType, str]) -> float:
        column = _ZONE_COLUMN[zone_type] if isinstance(zone_type, ZoneType) else zone_type
        if column not in COLUMNS:
            raise KeyError(f"Unknown coefficient column: {column}")
        return getattr(self, f"gcp_{column}")


@dataclass(frozen=True)
class NetPressure:
    """Both internal pressure load cases for one external coefficient"""
    positive_case: float    # |qz (GCp - GCpi+)|
    negative_case: float    # |qz (GCp - GCpi-)|
    controlling: float
    controlling_case: LoadCase


def net_pressure(gcp: float, gcpi_positive: float, gcpi_negative: float,
                 qz: float = 1.0) -> NetPressure:
    """
    Net pressure = qz (GCp - GCpi), evaluated for both GCpi signs.
    The larger magnitude controls; ties go to the negative internal case.
    """
    positive_case = abs(qz * (gcp - gcpi_positive))
    negative_case = abs(qz * (gcp - gcpi_negative))
    if positive_case > negative_case:
        return NetPressure(positive_case, negative_case, positive_case, LoadCase.POSITIVE_INTERNAL)
    return NetPressure(positive_case, negative_case, negative_case, LoadCase.NEGATIVE_INTERNAL)


def validate_table(rows: Sequence[CoefficientRow]) -> None:
    """
    Check that a coefficient table is usable.
    Rows must be sorted and must not overlap, though adjacent rows may share
    an edge value (the lower row wins there). Coefficients must be suction
    and |GCp| must not grow with area in any column.
    """
    previous: Optional[CoefficientRow] = None
    for index, row in enumerate(rows):
        if row.area_min < 0 or row.area_min > row.area_max:
            raise ValidationError(
                "Coefficient row has an invalid area range",
                {"row": index, "area_min": row.area_min, "area_max": row.area_max},
            )
        for column in COLUMNS:
            if row.gcp_for(column) > 0:
                raise ValidationError(
                    f"Coefficient {column} must be suction (<= 0)",
                    {"row": index, column: row.gcp_for(column)},
                )
        if previous is not None:
            if row.area_min < previous.area_max:
                raise ValidationError(
                    "Coefficient rows must be sorted by area and must not overlap",
                    {"row": index, "area_min": row.area_min, "previous_max": previous.area_max},
                )
            for column in COLUMNS:
                if abs(row.gcp_for(column)) > abs(previous.gcp_for(column)):
                    raise ValidationError(
                        f"|GCp| for {column} increases with area",
                        {"row": index, "gcp": row.gcp_for(column), "previous": previous.gcp_for(column)},
                    )
        previous = row


class PressureCoefficientResolver:
    """
    Area-dependent GCp lookup with gap interpolation.

    Rows come from the persistence collaborator, already sorted by area.
    Exact rows win; areas strictly between two rows are interpolated
    linearly across the gap; areas outside the table use the nearest row;
    an empty table yields conservative fallback values.
    """

    def __init__(self, rows: Optional[Iterable[Union[CoefficientRow, Dict[str, float]]]] = None):
        source = DEFAULT_COEFFICIENT_ROWS if rows is None else rows
        self.rows: Tuple[CoefficientRow, ...] = tuple(
            row if isinstance(row, CoefficientRow) else CoefficientRow.from_mapping(row)
            for row in source
        )
        validate_table(self.rows)

    def resolve(self, effective_area: float) -> ResolvedCoefficients:
        """Resolve all three columns at an effective wind area (sq ft)"""
        if effective_area is None or effective_area <= 0:
            raise ValidationError(
                "Effective wind area must be positive", {"effective_area": effective_area}
            )

        if not self.rows:
            miss = LookupMiss(
                "No coefficient table data; conservative fallback coefficients used (low confidence)",
                {"effective_area": effective_area},
            )
            logger.warning(str(miss))
            return ResolvedCoefficients(
                effective_area=effective_area,
                gcp_field=FALLBACK_GCP["field"],
                gcp_perimeter=FALLBACK_GCP["perimeter"],
                gcp_corner=FALLBACK_GCP["corner"],
                source=CoefficientSource.FALLBACK,
                reference="Conservative defaults",
                miss=miss,
            )

        for row in self.rows:
            if row.contains(effective_area):
                return self._from_row(effective_area, row, CoefficientSource.EXACT)

        first, last = self.rows[0], self.rows[-1]
        if effective_area < first.area_min or effective_area > last.area_max:
            nearest = first if effective_area < first.area_min else last
            miss = LookupMiss(
                f"Effective area {effective_area:.1f} sq ft outside coefficient table; "
                f"nearest row ({nearest.area_min:g}-{nearest.area_max:g} sq ft) used (low confidence)",
                {"effective_area": effective_area},
            )
            logger.warning(str(miss))
            return self._from_row(effective_area, nearest, CoefficientSource.NEAREST, miss)

        lower, upper = self._bracket(effective_area)
        gap = (lower.area_max, upper.area_min)
        values = {
            column: float(np.interp(effective_area, gap, (lower.gcp_for(column), upper.gcp_for(column))))
            for column in COLUMNS
        }
        logger.debug(
            f"Interpolated GCp at {effective_area:.1f} sq ft between "
            f"{lower.area_max:g} and {upper.area_min:g} sq ft"
        )
        return ResolvedCoefficients(
            effective_area=effective_area,
            gcp_field=values["field"],
            gcp_perimeter=values["perimeter"],
            gcp_corner=values["corner"],
            source=CoefficientSource.INTERPOLATED,
            reference=lower.reference or upper.reference,
        )

    def resolve_gcp(self, effective_area: float, zone_type: Union[ZoneType, str]) -> float:
        """GCp for one zone type at an effective wind area"""
        return self.resolve(effective_area).gcp_for(zone_type)

    @staticmethod
    def internal_pressure(classification: EnclosureClassification) -> Tuple[float, float]:
        """(GCpi+, GCpi-) for an enclosure classification"""
        return get_internal_pressure(classification.value)

    def _bracket(self, effective_area: float) -> Tuple[CoefficientRow, CoefficientRow]:
        for lower, upper in zip(self.rows, self.rows[1:]):
            if lower.area_max < effective_area < upper.area_min:
                return lower, upper
        # Unreachable for a validated table once exact and out-of-range areas are handled
        raise LookupMiss("No bracketing rows for effective area", {"effective_area": effective_area})

    @staticmethod
    def _from_row(effective_area: float, row: CoefficientRow, source: CoefficientSource,
                  miss: Optional[LookupMiss] = None) -> ResolvedCoefficients:
        return ResolvedCoefficients(
            effective_area=effective_area,
            gcp_field=row.gcp_field,
            gcp_perimeter=row.gcp_perimeter,
            gcp_corner=row.gcp_corner,
            source=source,
            reference=row.reference,
            miss=miss,
        )


# --- Enclosure classification from openings ---

@dataclass(frozen=True)
class BuildingOpening:
    """A wall opening (door, window, vent, garage door)"""
    area: float                 # sq ft
    location: str = "windward"  # "windward" | "leeward" | "side"
    opening_type: str = "window"
    is_glazed: bool = False
    can_fail: bool = False

    def __post_init__(self):
        if self.area < 0:
            raise ValidationError("Opening area cannot be negative", {"area": self.area})
        if self.location not in ("windward", "leeward", "side"):
            raise ValidationError("Unknown opening location", {"location": self.location})


@dataclass(frozen=True)
class EnclosureAssessment:
    """Enclosure classification derived from wall openings"""
    classification: EnclosureClassification
    gcpi_positive: float
    gcpi_negative: float
    opening_ratio: float
    has_dominant_opening: bool
    failure_scenario_considered: bool
    windward_opening_area: float
    total_opening_area: float
    warnings: Tuple[str, ...] = ()

    @property
    def percent_open_area(self) -> float:
        return self.opening_ratio * 100.0


# Opening ratio limits (fraction of wall area)
ENCLOSED_OPENING_RATIO = 0.01
PARTIAL_OPENING_RATIO = 0.20
DOMINANT_OPENING_FACTOR = 1.1


def classify_enclosure(wall_area: float, openings: Sequence[BuildingOpening],
                       consider_glazing_failure: bool = False) -> EnclosureAssessment:
    """
    Classify a building as enclosed, partially enclosed or open.

    A dominant opening is windward opening area exceeding 1.1 times the
    remaining openings. With glazing failure considered, any failable
    windward glazing makes the building partially enclosed.
    """
    if wall_area <= 0:
        raise ValidationError("Wall area must be positive", {"wall_area": wall_area})

    warnings: List[str] = []
    total = sum(opening.area for opening in openings)
    windward = [opening for opening in openings if opening.location == "windward"]
    windward_area = sum(opening.area for opening in windward)
    ratio = total / wall_area
    dominant = windward_area > DOMINANT_OPENING_FACTOR * (total - windward_area)
    failure_considered = False

    if consider_glazing_failure and any(o.is_glazed and o.can_fail for o in windward):
        failure_considered = True
        dominant = True
        classification = EnclosureClassification.PARTIALLY_ENCLOSED
        warnings.append("Glazing failure scenario considered - building classified as partially enclosed")
    elif ratio > PARTIAL_OPENING_RATIO:
        classification = EnclosureClassification.OPEN
        warnings.append(f"Building opening ratio exceeds {PARTIAL_OPENING_RATIO:.0%} - classified as open")
    elif dominant:
        classification = EnclosureClassification.PARTIALLY_ENCLOSED
        warnings.append("Building has dominant opening - classified as partially enclosed")
    else:
        classification = EnclosureClassification.ENCLOSED
        if ratio > ENCLOSED_OPENING_RATIO:
            warnings.append(
                f"Opening ratio {ratio:.1%} exceeds {ENCLOSED_OPENING_RATIO:.0%} without a "
                f"dominant opening - verify enclosed classification"
            )

    gcpi_positive, gcpi_negative = get_internal_pressure(classification.value)
    return EnclosureAssessment(
        classification=classification,
        gcpi_positive=gcpi_positive,
        gcpi_negative=gcpi_negative,
        opening_ratio=ratio,
        has_dominant_opening=dominant,
        failure_scenario_considered=failure_considered,
        windward_opening_area=windward_area,
        total_opening_area=total,
        warnings=tuple(warnings),
    )
