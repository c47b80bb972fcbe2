"""
WindZone - ASCE 7 Components & Cladding Wind Pressure Engine

Zone decomposition, pressure coefficient resolution, velocity pressure,
Zone 1' analysis, result caching and calculation workflow for low-rise
building envelopes.
"""

__version__ = "0.1.0"
