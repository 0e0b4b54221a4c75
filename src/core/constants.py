"""
WildWatch - Constants
Static values used throughout the application.
"""

from typing import Tuple

# =============================================================================
# PUBLIC IDENTIFIERS
# =============================================================================

# Report and post ids are 8-digit integers; upper bound is exclusive
ID_RANGE_LOW: int = 10_000_000
ID_RANGE_HIGH: int = 100_000_000

# =============================================================================
# GEOGRAPHY
# =============================================================================

# Earth's radius in miles
EARTH_RADIUS_MILES: float = 3959.0

LATITUDE_RANGE: Tuple[float, float] = (-90.0, 90.0)
LONGITUDE_RANGE: Tuple[float, float] = (-180.0, 180.0)

# Fixed search radius for /reports/nearby
NEARBY_RADIUS_MILES: float = 0.5

# Decimal places kept on returned distances
DISTANCE_PRECISION: int = 3

# =============================================================================
# RESULT COUNTS
# =============================================================================

MIN_REPORT_COUNT: int = 1
MAX_REPORT_COUNT: int = 100
DEFAULT_NEARBY_COUNT: int = 50
DEFAULT_LATEST_COUNT: int = 10

PAGE_SIZE: int = 10
