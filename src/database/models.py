"""
SQLAlchemy models for WildWatch
Wildlife reports, discussion posts and the user accounts they belong to.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column, Integer, BigInteger, Float, String, Text, Boolean,
    DateTime, Index
)
from sqlalchemy.orm import declarative_base, validates

from src.core.geo_utils import GeoPoint

Base = declarative_base()


def animal_key_for(animal_type: Optional[str]) -> Optional[str]:
    """Lookup key for an animal label: trimmed and lowercased, None when blank."""
    if animal_type is None:
        return None
    return animal_type.strip().lower() or None


class User(Base):
    """
    Registered account.

    Rows are written by the account service; this backend only reads them
    to verify session cookies.
    """
    __tablename__ = "users"

    user_id = Column(String(32), primary_key=True)
    username = Column(String(64), unique=True, nullable=False)
    password = Column(String(128), nullable=False)
    salt = Column(String(64), nullable=False)

    # Session
    auth_token = Column(String(128))
    token_expiry = Column(BigInteger)  # unix seconds

    admin = Column(Boolean, default=False)

    def __repr__(self):
        return f"<User({self.user_id}, username={self.username})>"


class Report(Base):
    """
    Wildlife incident report submitted by a user.

    Location is optional; reports without coordinates never show up in
    nearby searches.
    """
    __tablename__ = "reports"

    # Public 8-digit id, drawn at random rather than autoincremented
    report_id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(String(32), nullable=True, index=True)

    # Location
    location_lat = Column(Float, nullable=True)
    location_lon = Column(Float, nullable=True)
    location_name = Column(String(200))

    # Incident details
    severity = Column(Integer, nullable=False)
    animal_type = Column(String(100), nullable=False)
    # animal_key_for(animal_type); animal filters compare against this
    animal_key = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    date_reported = Column(String(64), nullable=False)

    # Metadata
    date_created = Column(DateTime, default=datetime.utcnow)
    image_exists = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("idx_report_location", location_lat, location_lon),
        Index("idx_report_animal_severity", animal_key, severity),
    )

    def __repr__(self):
        return f"<Report({self.report_id}, animal={self.animal_type}, severity={self.severity})>"

    @validates("animal_type")
    def _sync_animal_key(self, key, value):
        self.animal_key = animal_key_for(value)
        return value

    @property
    def location(self) -> Optional[GeoPoint]:
        return GeoPoint.from_optional(self.location_lat, self.location_lon)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "report_id": self.report_id,
            "user_id": self.user_id,
            "location_lat": self.location_lat,
            "location_lon": self.location_lon,
            "location_name": self.location_name,
            "severity": self.severity,
            "animal_type": self.animal_type,
            "description": self.description,
            "date_reported": self.date_reported,
            "date_created": self.date_created.isoformat() if self.date_created else None,
            "image_exists": bool(self.image_exists),
        }


class DiscussionPost(Base):
    """Message posted to the community discussion board."""
    __tablename__ = "discussion"

    post_id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(String(32), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    date_created = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<DiscussionPost({self.post_id}, title={self.title[:30]})>"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "post_id": self.post_id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "date_created": self.date_created.isoformat() if self.date_created else None,
        }
