import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from windzone.core.data_models import (
    CalculationRequest,
    EnclosureClassification,
    ExposureCategory,
    LShapeGeometry,
    RectangleGeometry,
    WindParameters,
)
from windzone.engines.wind_pressure_engine import WindPressureEngine


@pytest.fixture
def rectangle() -> RectangleGeometry:
    """100' x 80' x 30' reference building."""
    return RectangleGeometry(length=100.0, width=80.0, height=30.0)


@pytest.fixture
def l_shape() -> LShapeGeometry:
    return LShapeGeometry(length1=100.0, width1=60.0, length2=50.0, width2=30.0, height=20.0)


@pytest.fixture
def wind() -> WindParameters:
    """Exposure C, 120 mph, ASCE 7-22, enclosed."""
    return WindParameters(
        basic_wind_speed=120.0,
        exposure_category=ExposureCategory.C,
        asce_edition="ASCE 7-22",
        building_classification=EnclosureClassification.ENCLOSED,
    )


@pytest.fixture
def request_data(rectangle, wind) -> CalculationRequest:
    return CalculationRequest(
        geometry=rectangle, wind=wind, city="Miami", state="FL", project_name="Warehouse"
    )


@pytest.fixture
def engine() -> WindPressureEngine:
    return WindPressureEngine()


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
