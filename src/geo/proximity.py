"""
Nearby report search.

Attribute filters are pushed down to the store; distances are computed here
with the spherical law of cosines, then filtered by radius, ranked and capped.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from src.core.constants import (
    DEFAULT_NEARBY_COUNT,
    DISTANCE_PRECISION,
    MAX_REPORT_COUNT,
    MIN_REPORT_COUNT,
    NEARBY_RADIUS_MILES,
)
from src.core.exceptions import InvalidArgument
from src.core.geo_utils import GeoPoint, distance_between, round_half_up
from src.database.models import Report, animal_key_for
from src.database.stores import ReportFilter

logger = logging.getLogger(__name__)


class ReportScanner(Protocol):
    def scan(self, record_filter: Optional[ReportFilter] = None) -> List[Report]:
        ...


def normalize_report_count(
    report_count: Optional[int],
    default: int = DEFAULT_NEARBY_COUNT
) -> int:
    """Clamp a requested result cap: anything outside 1-100 becomes the default."""
    if report_count is None:
        return default
    if report_count < MIN_REPORT_COUNT or report_count > MAX_REPORT_COUNT:
        return default
    return report_count


@dataclass
class ProximityQuery:
    """Nearby search parameters, built once per request."""
    center: GeoPoint
    animal_type: Optional[str] = None
    severity: Optional[int] = None
    report_count: Optional[int] = None
    radius_miles: float = NEARBY_RADIUS_MILES

    @property
    def limit(self) -> int:
        return normalize_report_count(self.report_count)

    def to_filter(self) -> ReportFilter:
        return ReportFilter(
            animal_type=animal_key_for(self.animal_type),
            severity=self.severity,
            require_location=True,
        )


@dataclass
class ProximityMatch:
    """A report and its distance from the search center."""
    report: Report
    distance_miles: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.report.to_dict()
        data["distance_miles"] = self.distance_miles
        return data


@dataclass
class ProximityResult:
    """Ranked, capped nearby search result."""
    center: GeoPoint
    radius_miles: float
    matches: List[ProximityMatch] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return len(self.matches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reports": [m.to_dict() for m in self.matches],
            "search_center": self.center.to_dict(),
            "search_radius_miles": self.radius_miles,
            "total_found": self.total_found,
        }


class GeoProximityQuery:
    """
    Finds reports within a fixed radius of a point.

    Results are sorted by distance, closest first; equidistant reports are
    ordered by descending report id so newer reports win ties.
    """

    def __init__(self, store: ReportScanner):
        self.store = store

    def find(self, query: ProximityQuery) -> ProximityResult:
        """
        Run a nearby search.

        Args:
            query: Search center, optional filters and result cap

        Returns:
            ProximityResult with distances rounded to 3 decimals

        Raises:
            InvalidArgument: center coordinates out of range (no store access)
            StoreUnavailable: the candidate scan failed
        """
        center = query.center
        if not center.is_valid:
            raise InvalidArgument(
                f"Coordinates out of valid range: lat={center.latitude}, lon={center.longitude} "
                "(latitude must be within [-90, 90], longitude within [-180, 180])"
            )

        candidates = self.store.scan(query.to_filter())
        wanted_animal = animal_key_for(query.animal_type)

        in_range = []
        for report in candidates:
            location = report.location
            if location is None:
                continue
            if wanted_animal and animal_key_for(report.animal_type) != wanted_animal:
                continue
            if query.severity is not None and report.severity != query.severity:
                continue

            distance = distance_between(center, location)
            if distance > query.radius_miles:
                continue
            in_range.append((distance, report))

        in_range.sort(key=lambda pair: (pair[0], -pair[1].report_id))
        matches = [
            ProximityMatch(
                report=report,
                distance_miles=round_half_up(distance, DISTANCE_PRECISION),
            )
            for distance, report in in_range[:query.limit]
        ]

        logger.debug(
            f"Nearby search at ({center.latitude}, {center.longitude}): "
            f"{len(candidates)} candidates, {len(matches)} returned"
        )

        return ProximityResult(
            center=center,
            radius_miles=query.radius_miles,
            matches=matches,
        )
