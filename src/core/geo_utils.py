"""
WildWatch - Geospatial Utilities
Coordinate validation and great-circle distance.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from dataclasses import dataclass

from src.core.constants import (
    EARTH_RADIUS_MILES,
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
)


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point with latitude and longitude in decimal degrees."""
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        """Serialize as the {lat, lon} shape used in API responses."""
        return {"lat": self.latitude, "lon": self.longitude}

    @property
    def is_valid(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)

    @classmethod
    def from_optional(
        cls,
        latitude: Optional[float],
        longitude: Optional[float]
    ) -> Optional["GeoPoint"]:
        """Build a point from nullable columns; None when either is missing."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude=float(latitude), longitude=float(longitude))


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """
    Check that a coordinate pair lies within the valid WGS84 ranges.

    NaN and infinite values are rejected.
    """
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return (
        LATITUDE_RANGE[0] <= latitude <= LATITUDE_RANGE[1] and
        LONGITUDE_RANGE[0] <= longitude <= LONGITUDE_RANGE[1]
    )


def spherical_distance_miles(
    lat1: float, lon1: float,
    lat2: float, lon2: float,
    radius: float = EARTH_RADIUS_MILES
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Uses the spherical law of cosines, which is accurate enough for the
    sub-mile radii used by the nearby search.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees
        radius: Sphere radius, in the unit of the returned distance

    Returns:
        Distance in miles (with the default radius)
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2 - lon1)

    cos_angle = (
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon) +
        math.sin(lat1_rad) * math.sin(lat2_rad)
    )
    # Rounding can push identical points just past 1.0, where acos is undefined
    cos_angle = max(-1.0, min(1.0, cos_angle))

    return radius * math.acos(cos_angle)


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """Distance in miles between two GeoPoints."""
    return spherical_distance_miles(a.latitude, a.longitude, b.latitude, b.longitude)


def round_half_up(value: float, places: int) -> float:
    """
    Round to a number of decimal places with ties going up.

    Works on the shortest decimal form of the float, so 1.0005 becomes 1.001
    where the built-in round() would give 1.0.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
