"""
Pytest configuration and fixtures
"""
import io
import time

import pytest
import sys
from pathlib import Path

from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.crowdsource.image_store import ImageStore
from src.database.connection import DatabaseConnection
from src.database.models import Report, User
from src.database.stores import DiscussionStore, ReportStore, UserStore


SEATTLE = (47.6062, -122.3321)
NORTH_SEATTLE = (47.6500, -122.3500)


@pytest.fixture
def memory_db():
    """Fresh in-memory SQLite database with all tables."""
    db = DatabaseConnection("sqlite://")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def report_store(memory_db):
    return ReportStore(memory_db)


@pytest.fixture
def discussion_store(memory_db):
    return DiscussionStore(memory_db)


@pytest.fixture
def user_store(memory_db):
    return UserStore(memory_db)


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(images_dir=str(tmp_path / "images"))


@pytest.fixture
def make_report():
    """Factory for unsaved Report rows."""
    def _make(report_id, lat=None, lon=None, animal_type="deer", severity=2, **kwargs):
        return Report(
            report_id=report_id,
            location_lat=lat,
            location_lon=lon,
            animal_type=animal_type,
            severity=severity,
            description=kwargs.pop("description", f"{animal_type} sighting"),
            date_reported=kwargs.pop("date_reported", "2025-05-01"),
            image_exists=kwargs.pop("image_exists", False),
            **kwargs
        )
    return _make


@pytest.fixture
def sample_reports(make_report):
    """Deer downtown and a bear ~3 miles north, outside the nearby radius."""
    return [
        make_report(20000001, *SEATTLE, animal_type="deer", severity=2),
        make_report(20000002, *NORTH_SEATTLE, animal_type="bear", severity=1),
    ]


@pytest.fixture
def png_bytes():
    """Small RGBA PNG, which has to be flattened to become a JPEG."""
    img = Image.new("RGBA", (8, 8), (120, 200, 40, 255))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def add_user(memory_db):
    """Insert an account row with a session token."""
    def _add(user_id="000000000042", token="token-abc", expires_in=3600, db=None):
        target = db or memory_db
        with target.get_session() as session:
            session.add(User(
                user_id=user_id,
                username=f"user_{user_id}",
                password="x" * 64,
                salt="s" * 32,
                auth_token=token,
                token_expiry=int(time.time()) + expires_in,
            ))
        return user_id, token
    return _add
