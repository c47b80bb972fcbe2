"""
Velocity Pressure Calculator - ASCE 7 Section 26.10
Calculates the exposure coefficient Kz and velocity pressure qz.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.coefficient_tables import ExposureParameters, get_exposure_parameters
from ..core.constants import (
    FALLBACK_ALPHA,
    FALLBACK_ZG,
    IMPORTANCE_FACTORS,
    KZ_COEFFICIENT,
    VELOCITY_PRESSURE_CONSTANT,
)
from ..core.data_models import ExposureCategory, RiskCategory, WindParameters
from ..core.errors import ValidationError
from .audit import add_calc_step

logger = logging.getLogger(__name__)

# Above this height the low-rise power law should be verified
KZ_VERIFY_HEIGHT = 500.0  # ft


@dataclass(frozen=True)
class VelocityPressureResult:
    """Kz and qz at one height, with the parameters used"""
    kz: float
    qz: float                   # psf
    importance_factor: float
    alpha: float
    zg: float                   # ft
    effective_height: float     # ft, after the exposure minimum
    used_fallback: bool = False
    warnings: Tuple[str, ...] = ()
    calculation_steps: Tuple[Dict[str, str], ...] = field(default=(), compare=False)


class VelocityPressureCalculator:
    """
    Velocity pressure per ASCE 7 Eq. 26.10-1.
    Kz uses the continuous power-law form with alpha / zg per exposure.
    """

    def __init__(self, exposure_table: Optional[Dict[Tuple[str, str], ExposureParameters]] = None):
        # Supplied by the persistence collaborator; in-process defaults otherwise
        self.exposure_table = exposure_table

    def resolve_exposure(
        self, exposure: ExposureCategory, edition: str
    ) -> Tuple[ExposureParameters, bool]:
        """Look up alpha/zg/zmin; returns (parameters, used_fallback)"""
        params = get_exposure_parameters(exposure.value, edition, self.exposure_table)
        if params is None:
            logger.warning(
                f"No exposure parameters for {edition} exposure {exposure.value}; "
                f"using alpha={FALLBACK_ALPHA}, zg={FALLBACK_ZG}"
            )
            return ExposureParameters(alpha=FALLBACK_ALPHA, zg=FALLBACK_ZG, zmin=0.0), True
        return params, False

    @staticmethod
    def exposure_coefficient(height: float, alpha: float, zg: float) -> float:
        """Kz = 2.01 (z / zg)^(2 / alpha)"""
        if height <= 0:
            raise ValidationError("Height must be positive", {"height": height})
        return KZ_COEFFICIENT * (height / zg) ** (2.0 / alpha)

    @staticmethod
    def importance_factor(risk_category: RiskCategory) -> float:
        return IMPORTANCE_FACTORS[risk_category.value]

    @staticmethod
    def velocity_pressure(kz: float, wind_speed: float, importance_factor: float = 1.0,
                          kzt: float = 1.0, kd: float = 0.85) -> float:
        """qz = 0.00256 Kz Kzt Kd (V I)^2 in psf"""
        if wind_speed <= 0:
            raise ValidationError("Wind speed must be positive", {"wind_speed": wind_speed})
        return VELOCITY_PRESSURE_CONSTANT * kz * kzt * kd * (wind_speed * importance_factor) ** 2

    def calculate(self, height: float, wind: WindParameters) -> VelocityPressureResult:
        """
        Calculate Kz and qz at mean roof height.
        Returns VelocityPressureResult with warnings and audit steps.
        """
        if height is None or height <= 0:
            raise ValidationError("Height must be positive", {"height": height})

        steps: List[Dict[str, str]] = []
        warnings: List[str] = []

        params, used_fallback = self.resolve_exposure(wind.exposure_category, wind.asce_edition)
        if used_fallback:
            warnings.append(
                f"Exposure parameters unavailable for {wind.asce_edition} "
                f"exposure {wind.exposure_category.value}; default values used (low confidence)"
            )

        effective_height = max(height, params.zmin)
        if effective_height > height:
            warnings.append(
                f"Height {height:.1f} ft below exposure {wind.exposure_category.value} "
                f"minimum; Kz evaluated at {effective_height:.1f} ft"
            )
        if height > KZ_VERIFY_HEIGHT:
            warnings.append(
                f"Height {height:.1f} ft exceeds {KZ_VERIFY_HEIGHT:.0f} ft - verify calculation method"
            )

        kz = self.exposure_coefficient(effective_height, params.alpha, params.zg)
        add_calc_step(
            steps,
            "Velocity pressure exposure coefficient Kz",
            f"Kz = {KZ_COEFFICIENT} x ({effective_height:.1f}/{params.zg:.0f})^(2/{params.alpha})"
            f" = {kz:.3f}",
            f"{wind.asce_edition} Table 26.10-1",
        )

        importance = self.importance_factor(wind.risk_category)
        qz = self.velocity_pressure(
            kz, wind.basic_wind_speed, importance,
            wind.topographic_factor, wind.directionality_factor,
        )
        add_calc_step(
            steps,
            "Velocity pressure qz",
            f"qz = {VELOCITY_PRESSURE_CONSTANT} x {kz:.3f} x {wind.topographic_factor:.2f}"
            f" x {wind.directionality_factor:.2f} x ({wind.basic_wind_speed:.0f} x {importance:.2f})^2"
            f" = {qz:.2f} psf",
            f"{wind.asce_edition} Eq. 26.10-1",
        )

        logger.debug(f"Velocity pressure at {effective_height:.1f} ft: Kz={kz:.3f}, qz={qz:.2f} psf")

        return VelocityPressureResult(
            kz=kz,
            qz=qz,
            importance_factor=importance,
            alpha=params.alpha,
            zg=params.zg,
            effective_height=effective_height,
            used_fallback=used_fallback,
            warnings=tuple(warnings),
            calculation_steps=tuple(steps),
        )
