"""
Tests for input reasonableness review.
"""

import pytest

from windzone.core.data_models import ExposureCategory, RectangleGeometry, WindParameters
from windzone.engines.input_review import Complexity, Severity, review_inputs


class TestReviewInputs:

    def test_reference_building_is_clean(self, rectangle, wind):
        review = review_inputs(rectangle, wind)

        assert review.complexity == Complexity.BASIC
        assert review.findings == ()
        assert review.warnings == []
        assert review.confidence == 100.0
        assert review.requires_professional_analysis is False

    def test_high_rise(self, wind):
        review = review_inputs(RectangleGeometry(length=100.0, width=100.0, height=70.0), wind)

        assert review.complexity == Complexity.COMPLEX
        assert review.requires_professional_analysis is True
        assert review.confidence == 0.0
        assert any(f.severity == Severity.CRITICAL for f in review.findings)
        assert "Professional engineering analysis required" in review.recommendations

    def test_high_aspect_ratio(self, wind):
        review = review_inputs(RectangleGeometry(length=400.0, width=100.0, height=30.0), wind)

        assert review.complexity == Complexity.INTERMEDIATE
        assert review.confidence == 90.0
        assert any("High aspect ratio detected (4.0:1)" in w for w in review.warnings)

    def test_small_dimensions(self, wind):
        review = review_inputs(RectangleGeometry(length=8.0, width=8.0, height=3.0), wind)
        assert any("units (feet)" in w for w in review.warnings)

    def test_l_shape_info_not_in_warnings(self, l_shape, wind):
        review = review_inputs(l_shape, wind)

        assert review.complexity == Complexity.INTERMEDIATE
        assert review.confidence == 80.0
        assert any(f.severity == Severity.INFO for f in review.findings)
        assert len(review.warnings) == 1
        assert "unequal L-shape legs" in review.warnings[0]

    @pytest.mark.parametrize("speed,expected_warnings", [(80.0, 0), (210.0, 1)])
    def test_wind_speed_findings(self, rectangle, speed, expected_warnings):
        review = review_inputs(rectangle, WindParameters(basic_wind_speed=speed))
        assert len(review.warnings) == expected_warnings

    def test_tall_building_in_exposure_d(self):
        geometry = RectangleGeometry(length=100.0, width=80.0, height=40.0)
        wind = WindParameters(basic_wind_speed=120.0, exposure_category=ExposureCategory.D)
        review = review_inputs(geometry, wind)

        assert any("open exposure" in w for w in review.warnings)
        assert review.confidence == 95.0
