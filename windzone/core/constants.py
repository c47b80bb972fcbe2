"""
Engineering Constants for ASCE 7 Components & Cladding Wind Pressures
"""

# Velocity pressure (ASCE 7 Eq. 26.10-1), psf with V in mph
VELOCITY_PRESSURE_CONSTANT = 0.00256

# Continuous Kz coefficient (ASCE 7 Table 26.10-1 footnote)
KZ_COEFFICIENT = 2.01

# Fallback power-law parameters when an exposure/edition pair is unresolved
FALLBACK_ALPHA = 9.5
FALLBACK_ZG = 900.0  # ft

# Default wind factors
DEFAULT_TOPOGRAPHIC_FACTOR = 1.0    # Kzt, flat terrain
DEFAULT_DIRECTIONALITY_FACTOR = 0.85  # Kd, buildings
DEFAULT_EFFECTIVE_WIND_AREA = 10.0  # sq ft, smallest tabulated component area

# Supported standards
ASCE_EDITIONS = ("ASCE 7-10", "ASCE 7-16", "ASCE 7-22", "ASCE 7-24")
DEFAULT_ASCE_EDITION = "ASCE 7-22"

# Importance factors by risk category
IMPORTANCE_FACTORS = {
    "I": 0.87,
    "II": 1.0,
    "III": 1.15,
    "IV": 1.15,
}

# Zone sizing policy (ft)
CORNER_ZONE_CAP = 3.0
PERIMETER_ZONE_CAP = 10.0
MIN_ZONE_SIZE = 3.0
ZONE_DIMENSION_RATIO = 0.1  # 10% of least horizontal dimension
ZONE_HEIGHT_RATIO = 0.4     # 40% of mean roof height

# Re-entrant corner heuristic (not a tabulated ASCE 7 value)
REENTRANT_CORNER_GCP = -3.0

# Zone partition tolerance (fraction of footprint area)
ZONE_AREA_TOLERANCE = 0.01

# Conservative coefficients used when no table data is available
FALLBACK_GCP = {
    "field": -1.0,
    "perimeter": -2.0,
    "corner": -3.0,
}

# Low-rise classification limit (ft)
LOW_RISE_HEIGHT_LIMIT = 60.0

# Zone 1' thresholds
ASPECT_RATIO_THRESHOLD = 2.0
HEIGHT_RATIO_THRESHOLD = 1.0
HEIGHT_TRIGGER_MIN_ASPECT = 1.5
COMPONENT_AREA_THRESHOLD = 10.0  # sq ft
PERIMETER_ENHANCEMENT_ASPECT = 3.0

# Cache and workflow defaults
CACHE_MAX_ENTRIES = 50
CACHE_DEFAULT_TTL = 60.0 * 60.0  # seconds
WORKFLOW_HISTORY_LIMIT = 50
WORKFLOW_EVENT_LOG_LIMIT = 500
PROGRESS_CEILING = 90.0  # % until the final update
