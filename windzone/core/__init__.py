# Core data models, constants and policy tables
from .data_models import (
    BuildingShape, ExposureCategory, RiskCategory, EnclosureClassification,
    ZoneType, LoadCase, CoefficientSource,
    RectangleGeometry, LShapeGeometry, BuildingGeometry, geometry_from_dict,
    WindParameters, WindSpeedData, CalculationRequest,
    PressureZone, ZoneLayout, Zone1PrimeTrigger, Zone1PrimeAnalysis,
    ZonePressure, CalculationResult, GlazingFailureResults,
)
from .errors import (
    WindZoneError, ValidationError, LookupMiss, ComputationError,
    CacheIntegrityError, WorkflowError,
)
from .coefficient_tables import CoefficientRow, ExposureParameters, DEFAULT_COEFFICIENT_ROWS
from .config import EngineConfig, ZoningPolicy, Zone1PrimePolicy, configure_logging
