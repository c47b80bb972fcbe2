# Wind pressure calculation engines
from .velocity_pressure import VelocityPressureCalculator, VelocityPressureResult
from .coefficient_resolver import (
    PressureCoefficientResolver, ResolvedCoefficients, NetPressure, net_pressure,
    BuildingOpening, EnclosureAssessment, classify_enclosure,
)
from .zone_decomposer import GeometryZoneDecomposer
from .zone1_prime import Zone1PrimeAnalyzer
from .input_review import InputReview, review_inputs
from .wind_pressure_engine import WindPressureEngine
