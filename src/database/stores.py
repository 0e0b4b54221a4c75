"""
Persistence boundary for WildWatch records.

Stores wrap a DatabaseConnection, open one session per operation, and turn
SQLAlchemy failures into the application's error taxonomy:
IntegrityError -> UniqueConstraintViolation, anything else -> StoreUnavailable.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import StoreUnavailable, UniqueConstraintViolation
from .connection import DatabaseConnection
from .models import DiscussionPost, Report, User, animal_key_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportFilter:
    """Attribute filters shared by report scans and listings."""
    animal_type: Optional[str] = None   # case-insensitive, surrounding whitespace ignored
    severity: Optional[int] = None
    user_id: Optional[str] = None
    require_location: bool = False


class RecordStore:
    """Point lookup, counting, paging and insert for one primary-keyed model."""

    model = None
    id_key = None
    label = "record"

    def __init__(self, db: DatabaseConnection):
        self.db = db

    @property
    def id_column(self):
        return getattr(self.model, self.id_key)

    @contextmanager
    def _session(self, action: str) -> Generator[Session, None, None]:
        try:
            with self.db.get_session() as session:
                yield session
        except IntegrityError as e:
            logger.warning(f"Duplicate key while trying to {action} {self.label}: {e.orig}")
            raise UniqueConstraintViolation(f"{self.label} already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action} {self.label}: {e}")
            raise StoreUnavailable(f"could not {action} {self.label}") from e

    def get_by_id(self, record_id: int):
        """Fetch a record by id, or None."""
        with self._session("fetch") as session:
            return session.get(self.model, record_id)

    def exists(self, record_id: int) -> bool:
        """Collision probe used by the id allocator."""
        with self._session("probe") as session:
            stmt = select(self.id_column).where(self.id_column == record_id).limit(1)
            return session.execute(stmt).first() is not None

    def insert(self, record):
        """
        Insert a new record.

        Raises:
            UniqueConstraintViolation: the id is already taken
            StoreUnavailable: any other database failure
        """
        with self._session("insert") as session:
            session.add(record)
        return record

    def _filtered(self, stmt, record_filter):
        return stmt

    def count(self, record_filter=None) -> int:
        with self._session("count") as session:
            stmt = self._filtered(select(func.count()).select_from(self.model), record_filter)
            return session.execute(stmt).scalar_one()

    def page(self, page: int, page_size: int, record_filter=None) -> list:
        """Records for a 1-based page, newest id first."""
        offset = (page - 1) * page_size
        with self._session("page") as session:
            stmt = self._filtered(select(self.model), record_filter)
            stmt = stmt.order_by(self.id_column.desc()).limit(page_size).offset(offset)
            return list(session.scalars(stmt))


class ReportStore(RecordStore):
    """The single store for wildlife reports."""

    model = Report
    id_key = "report_id"
    label = "report"

    def _filtered(self, stmt, record_filter: Optional[ReportFilter]):
        if record_filter is None:
            return stmt
        animal_key = animal_key_for(record_filter.animal_type)
        if animal_key:
            stmt = stmt.where(Report.animal_key == animal_key)
        if record_filter.severity is not None:
            stmt = stmt.where(Report.severity == record_filter.severity)
        if record_filter.user_id is not None:
            stmt = stmt.where(Report.user_id == record_filter.user_id)
        if record_filter.require_location:
            stmt = stmt.where(
                Report.location_lat.is_not(None),
                Report.location_lon.is_not(None),
            )
        return stmt

    def scan(self, record_filter: Optional[ReportFilter] = None) -> List[Report]:
        """All reports matching the filter, newest id first."""
        with self._session("scan") as session:
            stmt = self._filtered(select(Report), record_filter)
            return list(session.scalars(stmt.order_by(Report.report_id.desc())))

    def latest(self, count: int, record_filter: Optional[ReportFilter] = None) -> List[Report]:
        return self.page(1, count, record_filter)


class DiscussionStore(RecordStore):
    """Store for discussion board posts."""

    model = DiscussionPost
    id_key = "post_id"
    label = "post"


class UserStore:
    """Read-only access to accounts for session checks."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def find_session(self, user_id: str, auth_token: str) -> Optional[User]:
        """The user owning this (user_id, auth_token) pair, or None."""
        try:
            with self.db.get_session() as session:
                stmt = select(User).where(
                    User.user_id == user_id,
                    User.auth_token == auth_token,
                )
                return session.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up session for user {user_id}: {e}")
            raise StoreUnavailable("could not verify session") from e
