"""
Unit tests for WindZone data models.

Tests cover:
- Geometry validation (rectangle and L-shape)
- Wind parameter validation and enum coercion
- Geometry payload parsing
- Request helpers
"""

import dataclasses

import pytest

from windzone.core.data_models import (
    BuildingShape,
    EnclosureClassification,
    ExposureCategory,
    LShapeGeometry,
    RectangleGeometry,
    RiskCategory,
    WindParameters,
    geometry_from_dict,
)
from windzone.core.errors import ValidationError


class TestRectangleGeometry:
    """Tests for RectangleGeometry."""

    def test_properties(self):
        geometry = RectangleGeometry(length=100.0, width=80.0, height=30.0)

        assert geometry.shape == BuildingShape.RECTANGLE
        assert geometry.footprint_area == pytest.approx(8000.0)
        assert geometry.bounding_length == 100.0
        assert geometry.bounding_width == 80.0
        assert len(geometry.footprint_polygons()) == 1

    @pytest.mark.parametrize("length,width,height", [
        (0.0, 80.0, 30.0),
        (100.0, -5.0, 30.0),
        (100.0, 80.0, 0.0),
        (None, 80.0, 30.0),
    ])
    def test_non_positive_dimensions_rejected(self, length, width, height):
        """Invalid dimensions raise instead of being clamped."""
        with pytest.raises(ValidationError):
            RectangleGeometry(length=length, width=width, height=height)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            RectangleGeometry(length=-1.0, width=80.0, height=30.0)

    def test_frozen(self):
        geometry = RectangleGeometry(length=100.0, width=80.0, height=30.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            geometry.length = 50.0


class TestLShapeGeometry:
    """Tests for LShapeGeometry."""

    def test_areas_and_bounds(self):
        geometry = LShapeGeometry(length1=100.0, width1=60.0, length2=50.0, width2=30.0, height=20.0)

        assert geometry.shape == BuildingShape.L_SHAPE
        assert geometry.leg1_area == pytest.approx(6000.0)
        assert geometry.leg2_area == pytest.approx(1500.0)
        assert geometry.footprint_area == pytest.approx(7500.0)
        assert geometry.bounding_length == pytest.approx(150.0)
        assert geometry.bounding_width == pytest.approx(60.0)

    def test_bounding_width_with_offset(self):
        geometry = LShapeGeometry(
            length1=100.0, width1=60.0, length2=50.0, width2=80.0, height=20.0, offset_y=-10.0
        )
        # Leg 2 spans y = -10 .. 70
        assert geometry.bounding_width == pytest.approx(80.0)

    def test_missing_leg_dimension_rejected(self):
        with pytest.raises(ValidationError, match="width2"):
            LShapeGeometry(length1=100.0, width1=60.0, length2=50.0, width2=None, height=20.0)

    @pytest.mark.parametrize("offset", [60.0, -30.0, 100.0])
    def test_detached_legs_rejected(self, offset):
        """Legs must share part of the junction edge."""
        with pytest.raises(ValidationError):
            LShapeGeometry(
                length1=100.0, width1=60.0, length2=50.0, width2=30.0, height=20.0, offset_y=offset
            )


class TestGeometryFromDict:
    """Tests for loosely-typed geometry payloads."""

    def test_rectangle_payload(self):
        geometry = geometry_from_dict({"shape": "rectangle", "length": 100, "width": 80, "height": 30})
        assert isinstance(geometry, RectangleGeometry)

    def test_default_shape_is_rectangle(self):
        geometry = geometry_from_dict({"length": 100, "width": 80, "height": 30})
        assert isinstance(geometry, RectangleGeometry)

    def test_l_shape_payload(self):
        geometry = geometry_from_dict({
            "shape": "l_shape", "length1": 100, "width1": 60,
            "length2": 50, "width2": 30, "height": 20,
        })
        assert isinstance(geometry, LShapeGeometry)
        assert geometry.offset_y == 0.0

    def test_l_shape_missing_leg(self):
        with pytest.raises(ValidationError):
            geometry_from_dict({"shape": "l_shape", "length1": 100, "width1": 60, "height": 20})

    def test_unknown_shape(self):
        with pytest.raises(ValidationError, match="Unsupported building shape"):
            geometry_from_dict({"shape": "complex", "length": 100, "width": 80, "height": 30})


class TestWindParameters:
    """Tests for WindParameters."""

    def test_defaults(self):
        wind = WindParameters(basic_wind_speed=115.0)

        assert wind.exposure_category == ExposureCategory.C
        assert wind.asce_edition == "ASCE 7-22"
        assert wind.topographic_factor == 1.0
        assert wind.directionality_factor == 0.85
        assert wind.risk_category == RiskCategory.II
        assert wind.building_classification == EnclosureClassification.ENCLOSED
        assert wind.include_internal_pressure is True
        assert wind.effective_wind_area is None

    def test_string_values_coerced_to_enums(self):
        wind = WindParameters(
            basic_wind_speed=115.0,
            exposure_category="D",
            risk_category="IV",
            building_classification="partially_enclosed",
        )

        assert wind.exposure_category == ExposureCategory.D
        assert wind.risk_category == RiskCategory.IV
        assert wind.building_classification == EnclosureClassification.PARTIALLY_ENCLOSED

    def test_invalid_exposure(self):
        with pytest.raises(ValidationError, match="exposure_category"):
            WindParameters(basic_wind_speed=115.0, exposure_category="A")

    @pytest.mark.parametrize("speed", [0.0, -10.0, None])
    def test_invalid_wind_speed(self, speed):
        with pytest.raises(ValidationError):
            WindParameters(basic_wind_speed=speed)

    def test_unknown_edition(self):
        with pytest.raises(ValidationError, match="ASCE edition"):
            WindParameters(basic_wind_speed=115.0, asce_edition="ASCE 7-05")

    def test_invalid_effective_area(self):
        with pytest.raises(ValidationError):
            WindParameters(basic_wind_speed=115.0, effective_wind_area=0.0)


class TestCalculationRequest:

    def test_with_wind_speed_copies(self, request_data):
        updated = request_data.with_wind_speed(150.0)

        assert updated.wind.basic_wind_speed == 150.0
        assert request_data.wind.basic_wind_speed == 120.0
        assert updated.geometry == request_data.geometry
        assert updated.city == "Miami"
