"""
Calculation Service - engine plus cache behind one call.

CalculationService.calculate is the calc_fn handed to CalculationWorkflow.
"""

import logging
from typing import Optional, Union

from ..core.config import EngineConfig
from ..core.data_models import (
    CalculationRequest,
    CalculationResult,
    GlazingFailureResults,
    WindSpeedData,
)
from ..engines.wind_pressure_engine import WindPressureEngine
from .result_cache import ResultCache

logger = logging.getLogger(__name__)


class CalculationService:
    """Cached wind pressure calculations for one owner (session, worker)"""

    def __init__(self, engine: WindPressureEngine, cache: Optional[ResultCache] = None):
        self.engine = engine
        self.cache = cache

    @classmethod
    def from_config(cls, config: EngineConfig) -> "CalculationService":
        return cls(
            engine=WindPressureEngine.from_config(config),
            cache=ResultCache(max_entries=config.cache_max_entries, default_ttl=config.cache_default_ttl),
        )

    def calculate(self, request: CalculationRequest,
                  wind_data: Optional[WindSpeedData] = None) -> Union[CalculationResult, GlazingFailureResults]:
        """
        Calculate (or fetch) the result for a request.
        A resolved wind speed overrides the request's basic wind speed.
        Requests that consider glazing failure yield GlazingFailureResults.
        """
        effective = request.with_wind_speed(wind_data.value) if wind_data is not None else request

        if self.cache is None:
            return self.engine.calculate_request(effective)

        result = self.cache.get_or_compute(
            request, lambda: self.engine.calculate_request(effective), wind_data
        )
        logger.debug(f"Calculation for '{request.project_name}' ready ({type(result).__name__})")
        return result

    def calculate_glazing_scenarios(self, request: CalculationRequest,
                                    wind_data: Optional[WindSpeedData] = None) -> GlazingFailureResults:
        """Both enclosure assumptions; never cached, the caller picks one"""
        effective = request.with_wind_speed(wind_data.value) if wind_data is not None else request
        return self.engine.calculate_glazing_scenarios(effective.geometry, effective.wind)
