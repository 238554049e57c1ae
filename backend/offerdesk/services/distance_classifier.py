"""
Distance classifier for vendor offers.

WHAT: Map a vendor-to-warehouse distance to a proximity category and label
WHY: Help the decision-maker rank offers; never affects eligibility
HOW: Round meters to whole kilometers (half-up), then look up the band table
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


class ProximityCategory(str, Enum):
    """Coarse distance buckets, nearest first."""

    NEARBY = "NEARBY"
    REGIONAL = "REGIONAL"
    LONG_DISTANCE = "LONG_DISTANCE"
    OUT_OF_RANGE = "OUT_OF_RANGE"


@dataclass(frozen=True)
class Proximity:
    """Classification of one distance."""
    category: ProximityCategory
    label: str
    distance_km: int

    @property
    def display(self) -> str:
        return f"{self.distance_km}km {self.label}"


# Upper bound (inclusive, whole km) of each band; anything beyond is out of range
PROXIMITY_BANDS: tuple[tuple[int, ProximityCategory, str], ...] = (
    (50, ProximityCategory.NEARBY, "Nearby"),
    (250, ProximityCategory.REGIONAL, "Regional"),
    (500, ProximityCategory.LONG_DISTANCE, "Long distance"),
)
OUT_OF_RANGE_LABEL = "Out of range"


def meters_to_km(distance_meters: float) -> int:
    """
    Convert meters to whole kilometers, rounding halves up.

    50499 m -> 50 km, 50500 m -> 51 km. Decimal avoids the binary float
    artifacts of a plain division.
    """
    km = Decimal(str(distance_meters)) / Decimal(1000)
    return int(km.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def classify(distance_meters: float) -> Proximity:
    """
    Classify a distance in meters.

    Args:
        distance_meters: Non-negative distance. Callers show
            "Distance unavailable" instead of calling this with None.

    Returns:
        Proximity with category, label and the rounded kilometers

    Raises:
        ValueError: distance is missing, not a number or negative
    """
    if distance_meters is None or isinstance(distance_meters, bool):
        raise ValueError("distance_meters is required")
    if not math.isfinite(distance_meters):
        raise ValueError(f"distance_meters must be finite, got {distance_meters}")
    if distance_meters < 0:
        raise ValueError(f"distance_meters must be >= 0, got {distance_meters}")

    distance_km = meters_to_km(distance_meters)
    for upper_km, category, label in PROXIMITY_BANDS:
        if distance_km <= upper_km:
            return Proximity(category=category, label=label, distance_km=distance_km)

    return Proximity(
        category=ProximityCategory.OUT_OF_RANGE,
        label=OUT_OF_RANGE_LABEL,
        distance_km=distance_km
    )
