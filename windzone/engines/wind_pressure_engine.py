"""
Wind Pressure Engine - ASCE 7 Components & Cladding
Combines zone decomposition, coefficient resolution, velocity pressure and
the Zone 1' analysis into per-zone net design pressures.
"""

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from ..core.coefficient_tables import CoefficientRow
from ..core.config import EngineConfig
from ..core.data_models import (
    BuildingGeometry,
    CalculationRequest,
    CalculationResult,
    EnclosureClassification,
    GlazingFailureResults,
    PressureZone,
    WindParameters,
    ZonePressure,
    ZoneType,
)
from ..core.errors import ComputationError
from .audit import add_calc_step
from .coefficient_resolver import PressureCoefficientResolver, ResolvedCoefficients, net_pressure
from .input_review import review_inputs
from .velocity_pressure import VelocityPressureCalculator
from .zone1_prime import Zone1PrimeAnalyzer
from .zone_decomposer import GeometryZoneDecomposer

logger = logging.getLogger(__name__)


class WindPressureEngine:
    """
    Net design pressure per zone: p = qz (GCp - GCpi), both GCpi signs.

    Holds only immutable collaborators, so one instance can serve many
    threads at once. Every call builds its own warnings and audit trail.
    """

    def __init__(self,
                 resolver: Optional[PressureCoefficientResolver] = None,
                 velocity: Optional[VelocityPressureCalculator] = None,
                 decomposer: Optional[GeometryZoneDecomposer] = None,
                 zone1_analyzer: Optional[Zone1PrimeAnalyzer] = None,
                 review: bool = True):
        self.resolver = resolver or PressureCoefficientResolver()
        self.velocity = velocity or VelocityPressureCalculator()
        self.decomposer = decomposer or GeometryZoneDecomposer()
        self.zone1_analyzer = zone1_analyzer or Zone1PrimeAnalyzer()
        self.review = review

    @classmethod
    def from_config(cls, config: EngineConfig,
                    rows: Optional[Iterable[Union[CoefficientRow, Dict[str, float]]]] = None
                    ) -> "WindPressureEngine":
        """Build an engine from configuration and an optional coefficient table"""
        return cls(
            resolver=PressureCoefficientResolver(rows),
            decomposer=GeometryZoneDecomposer(config.zoning_policy()),
            zone1_analyzer=Zone1PrimeAnalyzer(config.zone1_prime),
        )

    def calculate_request(self, request: CalculationRequest) -> Union[CalculationResult, GlazingFailureResults]:
        return self.calculate(request.geometry, request.wind)

    def calculate(self, geometry: BuildingGeometry,
                  wind: WindParameters) -> Union[CalculationResult, GlazingFailureResults]:
        """
        Main calculation method.
        With consider_glazing_failure set, returns GlazingFailureResults for
        both enclosure assumptions; otherwise one CalculationResult for the
        building's classification.
        """
        if wind.consider_glazing_failure:
            return self.calculate_glazing_scenarios(geometry, wind)
        return self._calculate_scenario(geometry, wind)

    def _calculate_scenario(self, geometry: BuildingGeometry, wind: WindParameters) -> CalculationResult:
        """One enclosure assumption. Zone 1' increases are applied before the result is built."""
        steps: List[Dict[str, str]] = []
        warnings: List[str] = []

        add_calc_step(
            steps,
            f"WIND PRESSURE CALCULATION - {wind.asce_edition}",
            f"Shape: {geometry.shape.value}\n"
            f"Footprint: {geometry.footprint_area:.0f} sq ft\n"
            f"Mean roof height: {geometry.height:.1f} ft\n"
            f"V = {wind.basic_wind_speed:.0f} mph, Exposure {wind.exposure_category.value}, "
            f"Risk Category {wind.risk_category.value}",
            wind.asce_edition,
        )

        if self.review:
            warnings.extend(review_inputs(geometry, wind).warnings)

        # Step 1: Zones
        layout = self.decomposer.decompose(geometry)
        warnings.extend(layout.warnings)
        add_calc_step(
            steps,
            "Pressure zone layout",
            f"Corner zone a = {layout.corner_size:.1f} ft, perimeter = {layout.perimeter_size:.1f} ft\n"
            f"{len(layout.zones)} zones, total area {layout.total_area:.0f} sq ft",
            f"{wind.asce_edition} Figure 30.3-2A",
        )

        # Step 2: Velocity pressure
        velocity = self.velocity.calculate(geometry.height, wind)
        warnings.extend(velocity.warnings)
        steps.extend(velocity.calculation_steps)

        # Step 3: Internal pressure
        if wind.include_internal_pressure:
            gcpi_positive, gcpi_negative = self.resolver.internal_pressure(wind.building_classification)
        else:
            gcpi_positive, gcpi_negative = 0.0, 0.0
        add_calc_step(
            steps,
            "Internal pressure coefficient GCpi",
            f"{wind.building_classification.value}: GCpi = +{gcpi_positive:.2f} / {gcpi_negative:.2f}"
            + ("" if wind.include_internal_pressure else " (internal pressure excluded)"),
            f"{wind.asce_edition} Table 26.13-1",
        )

        # Step 4: Zone 1'
        zone1 = self.zone1_analyzer.analyze_geometry(
            geometry, wind.exposure_category, wind.effective_wind_area
        )
        enhanced = self.zone1_analyzer.enhanced_zone_types(zone1)
        factor = zone1.increase_factor if enhanced else 1.0

        # Step 5: Zone pressures
        resolved: Dict[float, ResolvedCoefficients] = {}
        zones: List[ZonePressure] = []
        for zone in layout.zones:
            effective_area = zone.area
            if wind.effective_wind_area is not None:
                effective_area = min(wind.effective_wind_area, zone.area)
            if effective_area not in resolved:
                resolved[effective_area] = self.resolver.resolve(effective_area)
                if resolved[effective_area].warning:
                    warnings.append(resolved[effective_area].warning)

            pressure = self.compute_zone_pressure(
                zone, resolved[effective_area], velocity.qz, gcpi_positive, gcpi_negative
            )
            if zone.zone_type in enhanced:
                pressure = self._apply_zone1_prime(pressure, factor)
            zones.append(pressure)
            logger.debug(
                f"{zone.zone_id}: A_eff={effective_area:.1f} sq ft, GCp={pressure.gcp:.3f}, "
                f"p={pressure.net_pressure:.2f} psf"
            )

        if enhanced:
            names = " and ".join(sorted(t.value for t in enhanced))
            warnings.append(
                f"Zone 1' enhancement applied: {names} pressures increased by "
                f"{zone1.pressure_increase_percent:g}% (aspect ratio {zone1.aspect_ratio:.1f}:1)"
            )
            add_calc_step(
                steps,
                "Zone 1' enhancement",
                f"Factor = 1 + {zone1.pressure_increase_percent:g}/100 = {factor:.2f} on {names} zones",
                zone1.asce_reference,
            )
        warnings.extend(zone1.warnings)

        # Step 6: Controlling zone
        controlling = max(zones, key=lambda z: z.net_pressure)
        if not math.isfinite(controlling.net_pressure):
            raise ComputationError(
                "Non-finite design pressure", {"zone_id": controlling.zone_id}
            )
        add_calc_step(
            steps,
            "Controlling zone",
            f"{controlling.zone_id}: p = {controlling.net_pressure:.2f} psf "
            f"({controlling.controlling_case.value})",
            wind.asce_edition,
        )

        logger.info(
            f"Calculated {len(zones)} zones: max {controlling.net_pressure:.2f} psf "
            f"at {controlling.zone_id}"
        )

        return CalculationResult(
            zones=tuple(zones),
            velocity_pressure=velocity.qz,
            exposure_coefficient=velocity.kz,
            importance_factor=velocity.importance_factor,
            max_pressure=controlling.net_pressure,
            controlling_zone_id=controlling.zone_id,
            controlling_load_case=controlling.controlling_case,
            enclosure=wind.building_classification,
            zone1_prime=zone1,
            asce_edition=wind.asce_edition,
            warnings=tuple(_dedupe(warnings)),
            calculation_steps=tuple(steps),
        )

    def calculate_glazing_scenarios(self, geometry: BuildingGeometry,
                                    wind: WindParameters) -> GlazingFailureResults:
        """Results assuming intact glazing (enclosed) and failed glazing (partially enclosed)"""
        return GlazingFailureResults(
            enclosed=self._calculate_scenario(
                geometry, replace(wind, building_classification=EnclosureClassification.ENCLOSED,
                                  consider_glazing_failure=False)
            ),
            partially_enclosed=self._calculate_scenario(
                geometry, replace(wind, building_classification=EnclosureClassification.PARTIALLY_ENCLOSED,
                                  consider_glazing_failure=False)
            ),
        )

    def compute_zone_pressure(self, zone: PressureZone, coefficients: ResolvedCoefficients,
                              qz: float, gcpi_positive: float, gcpi_negative: float) -> ZonePressure:
        """Net pressure for one zone from resolved coefficients."""
        if zone.zone_type == ZoneType.REENTRANT_CORNER:
            # Heuristic coefficient, never milder than the corner column
            gcp = min(zone.base_gcp, coefficients.gcp_corner)
        elif zone.zone_type == ZoneType.FIELD_PRIME:
            gcp = coefficients.gcp_field * self.decomposer.policy.field_prime_factor
        else:
            gcp = coefficients.gcp_for(zone.zone_type)

        net = net_pressure(gcp, gcpi_positive, gcpi_negative, qz)
        return ZonePressure(
            zone_id=zone.zone_id,
            zone_type=zone.zone_type,
            area=zone.area,
            effective_area=coefficients.effective_area,
            gcp=gcp,
            coefficient_source=coefficients.source,
            gcpi_positive=gcpi_positive,
            gcpi_negative=gcpi_negative,
            pressure_positive_case=net.positive_case,
            pressure_negative_case=net.negative_case,
            net_pressure=net.controlling,
            controlling_case=net.controlling_case,
            is_zone1_prime=zone.is_zone1_prime,
        )

    @staticmethod
    def _apply_zone1_prime(pressure: ZonePressure, factor: float) -> ZonePressure:
        return replace(
            pressure,
            pressure_positive_case=pressure.pressure_positive_case * factor,
            pressure_negative_case=pressure.pressure_negative_case * factor,
            net_pressure=pressure.net_pressure * factor,
            is_zone1_prime=True,
        )


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique
