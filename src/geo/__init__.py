"""
WildWatch - Geo Module
Proximity search over wildlife reports.
"""

from src.geo.proximity import (
    GeoProximityQuery,
    ProximityQuery,
    ProximityMatch,
    ProximityResult,
    normalize_report_count,
)

__all__ = [
    "GeoProximityQuery",
    "ProximityQuery",
    "ProximityMatch",
    "ProximityResult",
    "normalize_report_count",
]
