"""
WildWatch - Core Utilities
Central configuration, logging, errors and geospatial helpers.
"""

from src.core.config import settings
from src.core.exceptions import (
    WildWatchError,
    InvalidArgument,
    NotFound,
    UniqueConstraintViolation,
    StoreUnavailable,
)
from src.core.geo_utils import (
    GeoPoint,
    is_valid_coordinate,
    spherical_distance_miles,
    distance_between,
    round_half_up,
)

__all__ = [
    "settings",
    "WildWatchError",
    "InvalidArgument",
    "NotFound",
    "UniqueConstraintViolation",
    "StoreUnavailable",
    "GeoPoint",
    "is_valid_coordinate",
    "spherical_distance_miles",
    "distance_between",
    "round_half_up",
]
