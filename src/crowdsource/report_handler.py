"""
Wildlife report handler
Receives, stores and lists reports submitted by the community
"""

import gzip
import json
import logging
from typing import Optional, List, Dict, Any

from src.core.constants import (
    DEFAULT_LATEST_COUNT,
    MAX_REPORT_COUNT,
    MIN_REPORT_COUNT,
    PAGE_SIZE,
)
from src.core.exceptions import InvalidArgument, NotFound
from src.core.geo_utils import is_valid_coordinate
from src.crowdsource.image_store import ImageStore
from src.crowdsource.pagination import Page, check_page
from src.database.models import Report
from src.database.stores import ReportFilter, ReportStore
from src.identity.allocator import IdentifierAllocator

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ReportHandler:
    """
    Handles wildlife reports from the community.

    Creation allocates a random public id, re-encodes the optional photo and
    inserts the row; reads attach the photo as a data URI.
    """

    def __init__(
        self,
        store: ReportStore,
        images: ImageStore,
        allocator: Optional[IdentifierAllocator] = None,
        page_size: int = PAGE_SIZE
    ):
        """
        Initialize report handler.

        Args:
            store: Report persistence
            images: Photo storage
            allocator: Id allocator; defaults to one probing this store
            page_size: Reports per listing page
        """
        self.store = store
        self.images = images
        self.allocator = allocator or IdentifierAllocator(store.exists, name="report_id")
        self.page_size = page_size

    def create_report(
        self,
        severity: Optional[int],
        animal_type: Optional[str],
        description: Optional[str],
        date_reported: Optional[str],
        location_lat: Optional[float] = None,
        location_lon: Optional[float] = None,
        location_name: Optional[str] = None,
        user_id: Optional[str] = None,
        image_data: Optional[bytes] = None
    ) -> Report:
        """
        Create a new wildlife report.

        Args:
            severity: Positive severity level
            animal_type: Free-text animal label
            description: What was seen
            date_reported: Date of the sighting, as submitted
            location_lat: Latitude, optional (both or neither)
            location_lon: Longitude, optional (both or neither)
            location_name: Human-readable place name
            user_id: Submitting user, None for anonymous reports
            image_data: Raw uploaded image bytes

        Returns:
            The stored Report

        Raises:
            InvalidArgument: missing fields, bad coordinates or non-image upload
        """
        if any(_is_blank(v) for v in (severity, animal_type, description, date_reported)):
            raise InvalidArgument("Missing required report data")
        if isinstance(severity, bool) or not isinstance(severity, int) or severity < 1:
            raise InvalidArgument("severity must be a positive integer")

        if (location_lat is None) != (location_lon is None):
            raise InvalidArgument("location_lat and location_lon must be given together")
        if location_lat is not None and not is_valid_coordinate(location_lat, location_lon):
            raise InvalidArgument("Coordinates out of valid range")

        # Encode before touching the store so a bad upload leaves nothing behind
        jpeg_data = self.images.to_jpeg(image_data) if image_data else None

        def insert(report_id: int) -> Report:
            return self.store.insert(Report(
                report_id=report_id,
                user_id=user_id,
                location_lat=location_lat,
                location_lon=location_lon,
                location_name=location_name,
                severity=severity,
                animal_type=animal_type.strip(),
                description=description,
                date_reported=date_reported,
                image_exists=jpeg_data is not None,
            ))

        report = self.allocator.allocate_and_insert(insert)

        if jpeg_data is not None:
            self.images.write(report.report_id, jpeg_data)

        logger.info(
            f"New report created: {report.report_id} "
            f"({report.animal_type}, severity {report.severity}) at ({location_lat}, {location_lon})"
        )

        return report

    def serialize(self, report: Report, include_image: bool = True) -> Dict[str, Any]:
        """Report as a dict, with the photo inlined as a data URI when present."""
        data = report.to_dict()
        if include_image:
            data["image"] = self.images.data_uri(report.report_id) if report.image_exists else None
        return data

    def get_report(self, report_id: int) -> Report:
        """
        Get report by ID.

        Raises:
            NotFound: no report with that id
        """
        report = self.store.get_by_id(report_id)
        if report is None:
            raise NotFound("Report not found")
        return report

    def get_page(self, page: int, report_filter: Optional[ReportFilter] = None) -> Page:
        """One page of reports, newest first."""
        if page < 1:
            raise InvalidArgument("Invalid page number")
        total = self.store.count(report_filter)
        total_pages = check_page(page, total, self.page_size)

        reports = self.store.page(page, self.page_size, report_filter) if total else []
        return Page(items=reports, page=page, total_pages=total_pages)

    def get_latest(
        self,
        report_count: Optional[int] = None,
        report_filter: Optional[ReportFilter] = None
    ) -> List[Report]:
        """
        Newest reports.

        Raises:
            InvalidArgument: report_count outside 1-100
        """
        if report_count is None:
            report_count = DEFAULT_LATEST_COUNT
        if report_count < MIN_REPORT_COUNT or report_count > MAX_REPORT_COUNT:
            raise InvalidArgument(
                f"Invalid report_count (must be {MIN_REPORT_COUNT}-{MAX_REPORT_COUNT})"
            )
        return self.store.latest(report_count, report_filter)

    def get_personal_reports(self, user_id: str) -> List[Report]:
        """All reports submitted by one user, newest first."""
        return self.store.scan(ReportFilter(user_id=user_id))

    def get_image(self, report_id: int) -> bytes:
        """
        Stored JPEG for a report.

        Raises:
            NotFound: no image file for that id
        """
        data = self.images.read(report_id)
        if data is None:
            raise NotFound("Image not found")
        return data

    def export_gzip(self) -> bytes:
        """Every report as a gzip-compressed JSON array."""
        reports = [r.to_dict() for r in self.store.scan()]
        payload = json.dumps(reports).encode("utf-8")
        logger.info(f"Exported {len(reports)} reports")
        return gzip.compress(payload)

