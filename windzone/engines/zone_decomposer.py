"""
Geometry Zone Decomposer - Roof C&C pressure zones (ASCE 7 Figure 30.3-2A)
Partitions rectangular and L-shaped footprints into corner, perimeter,
field and re-entrant corner zones with boundary polygons.
"""

import logging
import math
from dataclasses import replace
from typing import List, Optional, Tuple

from shapely.geometry import Polygon
from shapely.ops import unary_union

from ..core.config import ZoningPolicy
from ..core.constants import FALLBACK_GCP
from ..core.data_models import (
    BuildingGeometry,
    LShapeGeometry,
    Point,
    PressureZone,
    RectangleGeometry,
    ZoneLayout,
    ZoneType,
)
from ..core.errors import ComputationError, ValidationError

logger = logging.getLogger(__name__)

# Legs whose areas differ by more than this fraction of the larger one
UNEQUAL_LEG_RATIO = 0.5


def _rect(x0: float, y0: float, x1: float, y1: float) -> Tuple[Point, ...]:
    return ((x0, y0), (x1, y0), (x1, y1), (x0, y1))


class GeometryZoneDecomposer:
    """
    Zone decomposition for low-rise roofs.

    Zone width a = min(0.1 x least dimension, 0.4 x height, cap), floored to
    the minimum practical size. Corner squares, perimeter strips and the
    field share one band width so the zones tile the footprint exactly.
    """

    def __init__(self, policy: Optional[ZoningPolicy] = None):
        self.policy = policy or ZoningPolicy()

    def zone_sizes(self, length: float, width: float, height: float) -> Tuple[float, float]:
        """Return (corner_size, perimeter_size) in ft"""
        policy = self.policy
        base = min(policy.dimension_ratio * min(length, width), policy.height_ratio * height)
        corner_size = max(min(base, policy.corner_cap), policy.min_zone_size)
        perimeter_size = max(min(base, policy.perimeter_cap), policy.min_zone_size)
        return corner_size, perimeter_size

    def decompose(self, geometry: BuildingGeometry) -> ZoneLayout:
        """Decompose a footprint into pressure zones."""
        if isinstance(geometry, RectangleGeometry):
            layout = self._decompose_rectangle(geometry)
        elif isinstance(geometry, LShapeGeometry):
            layout = self._decompose_l_shape(geometry)
        else:
            raise ValidationError(
                f"Unsupported geometry type: {type(geometry).__name__}",
                {"geometry": geometry},
            )

        self._verify_partition(layout, geometry)
        logger.info(
            f"Decomposed {geometry.shape.value} footprint into {len(layout.zones)} zones "
            f"(corner {layout.corner_size:.1f} ft, perimeter {layout.perimeter_size:.1f} ft)"
        )
        return layout

    # --- Rectangle ---

    def _decompose_rectangle(self, geometry: RectangleGeometry) -> ZoneLayout:
        corner_size, perimeter_size = self.zone_sizes(geometry.length, geometry.width, geometry.height)
        zones = self._rectangle_zones(
            0.0, 0.0, geometry.length, geometry.width, max(corner_size, perimeter_size)
        )
        return ZoneLayout(
            zones=tuple(zones),
            corner_size=corner_size,
            perimeter_size=perimeter_size,
            footprint_area=geometry.footprint_area,
        )

    def _rectangle_zones(self, x0: float, y0: float, length: float, width: float,
                         band: float, leg: Optional[int] = None) -> List[PressureZone]:
        """Nine-zone tiling of one rectangle with lower-left corner (x0, y0)"""
        if min(length, width) <= 2.0 * band:
            raise ComputationError(
                "Footprint too small for zone layout: field zone would have no area",
                {"length": length, "width": width, "zone_width": band},
            )

        x1, x2, x3 = x0 + band, x0 + length - band, x0 + length
        y1, y2, y3 = y0 + band, y0 + width - band, y0 + width
        prefix = f"leg{leg}-" if leg is not None else ""
        label = f"Leg {leg} " if leg is not None else ""

        def make(zone_id: str, zone_type: ZoneType, boundary: Tuple[Point, ...], description: str):
            return PressureZone(
                zone_id=f"{prefix}{zone_id}",
                zone_type=zone_type,
                boundary=boundary,
                area=Polygon(boundary).area,
                base_gcp=FALLBACK_GCP[zone_type.value],
                description=f"{label}{description}",
                leg=leg,
            )

        zones = [
            make("corner-sw", ZoneType.CORNER, _rect(x0, y0, x1, y1), "Southwest corner"),
            make("corner-se", ZoneType.CORNER, _rect(x2, y0, x3, y1), "Southeast corner"),
            make("corner-ne", ZoneType.CORNER, _rect(x2, y2, x3, y3), "Northeast corner"),
            make("corner-nw", ZoneType.CORNER, _rect(x0, y2, x1, y3), "Northwest corner"),
            make("perimeter-south", ZoneType.PERIMETER, _rect(x1, y0, x2, y1), "South perimeter"),
            make("perimeter-east", ZoneType.PERIMETER, _rect(x2, y1, x3, y2), "East perimeter"),
            make("perimeter-north", ZoneType.PERIMETER, _rect(x1, y2, x2, y3), "North perimeter"),
            make("perimeter-west", ZoneType.PERIMETER, _rect(x0, y1, x1, y2), "West perimeter"),
        ]
        zones.extend(self._field_zones(x1, y1, x2, y2, prefix, label, leg))
        return zones

    def _field_zones(self, x0: float, y0: float, x1: float, y1: float,
                     prefix: str, label: str, leg: Optional[int]) -> List[PressureZone]:
        """Interior field, optionally split into a field_prime core ringed by field strips"""
        field_gcp = FALLBACK_GCP["field"]
        inset = self.policy.field_prime_inset

        def make(zone_id, zone_type, boundary, description, gcp=field_gcp):
            return PressureZone(
                zone_id=f"{prefix}{zone_id}",
                zone_type=zone_type,
                boundary=boundary,
                area=Polygon(boundary).area,
                base_gcp=gcp,
                description=f"{label}{description}",
                leg=leg,
            )

        if inset is None or min(x1 - x0, y1 - y0) <= 2.0 * inset:
            return [make("field", ZoneType.FIELD, _rect(x0, y0, x1, y1), "Interior field")]

        ix0, iy0, ix1, iy1 = x0 + inset, y0 + inset, x1 - inset, y1 - inset
        return [
            make("field-south", ZoneType.FIELD, _rect(x0, y0, x1, iy0), "South field strip"),
            make("field-north", ZoneType.FIELD, _rect(x0, iy1, x1, y1), "North field strip"),
            make("field-west", ZoneType.FIELD, _rect(x0, iy0, ix0, iy1), "West field strip"),
            make("field-east", ZoneType.FIELD, _rect(ix1, iy0, x1, iy1), "East field strip"),
            make("field-prime", ZoneType.FIELD_PRIME, _rect(ix0, iy0, ix1, iy1), "Interior field (1')",
                 gcp=field_gcp * self.policy.field_prime_factor),
        ]

    # --- L-shape ---

    def _decompose_l_shape(self, geometry: LShapeGeometry) -> ZoneLayout:
        warnings: List[str] = []
        g = geometry

        corner1, perimeter1 = self.zone_sizes(g.length1, g.width1, g.height)
        corner2, perimeter2 = self.zone_sizes(g.length2, g.width2, g.height)

        leg1 = self._rectangle_zones(0.0, 0.0, g.length1, g.width1, max(corner1, perimeter1), leg=1)
        # Leg 2 is built at the origin and translated onto leg 1's east face
        leg2 = [
            self._translate(zone, g.length1, g.offset_y)
            for zone in self._rectangle_zones(0.0, 0.0, g.length2, g.width2, max(corner2, perimeter2), leg=2)
        ]

        larger = max(g.leg1_area, g.leg2_area)
        if abs(g.leg1_area - g.leg2_area) > UNEQUAL_LEG_RATIO * larger:
            warnings.append(
                f"L-shape legs have unequal areas ({g.leg1_area:.0f} vs {g.leg2_area:.0f} sq ft); "
                f"zone layout is approximate"
            )

        reentrant_ids = self._reentrant_corner_ids(g)
        if not reentrant_ids:
            warnings.append(
                "L-shape legs are aligned with equal widths (footprint is rectangular); "
                "no re-entrant corner zone created"
            )

        zones = [
            self._as_reentrant(zone) if zone.zone_id in reentrant_ids else zone
            for zone in leg1 + leg2
        ]

        return ZoneLayout(
            zones=tuple(zones),
            corner_size=max(corner1, corner2),
            perimeter_size=max(perimeter1, perimeter2),
            footprint_area=g.footprint_area,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _reentrant_corner_ids(geometry: LShapeGeometry) -> List[str]:
        """Corner squares touching a concave vertex of the junction"""
        ids: List[str] = []
        bottom2 = geometry.offset_y
        top1, top2 = geometry.width1, geometry.offset_y + geometry.width2

        if not math.isclose(bottom2, 0.0, abs_tol=1e-9):
            # Leg 2 starting above leg 1 leaves its SW corner concave, and vice versa
            ids.append("leg2-corner-sw" if bottom2 > 0 else "leg1-corner-se")
        if not math.isclose(top1, top2, abs_tol=1e-9):
            ids.append("leg2-corner-nw" if top2 < top1 else "leg1-corner-ne")
        return ids

    def _as_reentrant(self, zone: PressureZone) -> PressureZone:
        return replace(
            zone,
            zone_type=ZoneType.REENTRANT_CORNER,
            base_gcp=self.policy.reentrant_gcp,
            description=f"{zone.description} (re-entrant)",
        )

    @staticmethod
    def _translate(zone: PressureZone, dx: float, dy: float) -> PressureZone:
        return replace(zone, boundary=tuple((x + dx, y + dy) for x, y in zone.boundary))

    # --- Partition check ---

    def _verify_partition(self, layout: ZoneLayout, geometry: BuildingGeometry) -> None:
        """Zones must cover the footprint once: no gaps, no overlaps."""
        for zone in layout.zones:
            if zone.area <= 0:
                raise ComputationError(
                    "Zone has non-positive area", {"zone_id": zone.zone_id, "area": zone.area}
                )

        footprint = unary_union([Polygon(points) for points in geometry.footprint_polygons()])
        covered = unary_union([Polygon(zone.boundary) for zone in layout.zones])
        tolerance = self.policy.area_tolerance * footprint.area

        if abs(layout.total_area - footprint.area) > tolerance:
            raise ComputationError(
                "Zone areas do not sum to the footprint area",
                {"zone_total": layout.total_area, "footprint": footprint.area},
            )
        if footprint.symmetric_difference(covered).area > tolerance:
            raise ComputationError(
                "Zones do not cover the footprint",
                {"uncovered": footprint.symmetric_difference(covered).area},
            )
