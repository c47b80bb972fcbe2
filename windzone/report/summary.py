"""Tabular and text summaries of a wind pressure result."""

from typing import Dict

import pandas as pd

from windzone.core.data_models import CalculationResult, ZoneType


def build_zone_pressure_dataframe(result: CalculationResult) -> pd.DataFrame:
    """Build per-zone pressure table for report and UI views."""
    if not result.zones:
        raise ValueError("Result has no zones")

    return pd.DataFrame(
        {
            "Zone": [zone.zone_id for zone in result.zones],
            "Type": [zone.zone_type.value for zone in result.zones],
            "Area (sq ft)": [zone.area for zone in result.zones],
            "Effective Area (sq ft)": [zone.effective_area for zone in result.zones],
            "GCp": [zone.gcp for zone in result.zones],
            "Source": [zone.coefficient_source.value for zone in result.zones],
            "p (+GCpi) (psf)": [zone.pressure_positive_case for zone in result.zones],
            "p (-GCpi) (psf)": [zone.pressure_negative_case for zone in result.zones],
            "Net (psf)": [zone.net_pressure for zone in result.zones],
            "Case": [zone.controlling_case.value for zone in result.zones],
            "Zone 1'": [zone.is_zone1_prime for zone in result.zones],
        }
    )


def build_pressure_summary(result: CalculationResult) -> Dict[str, float]:
    """Build summary values displayed under the zone table."""
    summary = {
        "velocity_pressure": float(result.velocity_pressure),
        "exposure_coefficient": float(result.exposure_coefficient),
        "importance_factor": float(result.importance_factor),
        "max_pressure": float(result.max_pressure),
        "total_area": float(sum(zone.area for zone in result.zones)),
        "zone1_prime_increase": float(
            result.zone1_prime.pressure_increase_percent if result.zone1_prime.is_required else 0.0
        ),
    }
    for zone_type, pressure in result.pressure_by_type().items():
        summary[f"max_{zone_type.value}"] = float(pressure)
    return summary


def describe_result(result: CalculationResult) -> str:
    """One-paragraph narrative of the controlling zone and zone areas."""
    frame = build_zone_pressure_dataframe(result)
    areas = frame.groupby("Type")["Area (sq ft)"].sum()
    controlling = result.zone(result.controlling_zone_id)

    parts = [
        f"Velocity pressure qz = {result.velocity_pressure:.2f} psf "
        f"(Kz = {result.exposure_coefficient:.3f}, {result.asce_edition}).",
    ]
    ordered = [t.value for t in ZoneType if t.value in areas.index]
    parts.append(
        "Zone areas: " + ", ".join(f"{name} {areas[name]:.0f} sq ft" for name in ordered) + "."
    )
    parts.append(
        f"Controlling zone {controlling.zone_id} ({controlling.zone_type.value}) at "
        f"{result.max_pressure:.2f} psf, {result.controlling_load_case.value.replace('_', ' ')} case, "
        f"{result.enclosure.value.replace('_', ' ')} building."
    )
    if result.zone1_prime.is_required:
        parts.append(result.zone1_prime.explanation)
    return " ".join(parts)
