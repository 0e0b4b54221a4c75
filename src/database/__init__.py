"""
Database module for WildWatch
SQLAlchemy persistence for reports, discussion posts and users
"""

from .connection import DatabaseConnection, get_db, init_db
from .models import (
    Base,
    User,
    Report,
    DiscussionPost,
    animal_key_for,
)
from .stores import (
    ReportFilter,
    RecordStore,
    ReportStore,
    DiscussionStore,
    UserStore,
)

__all__ = [
    "DatabaseConnection",
    "get_db",
    "init_db",
    "Base",
    "User",
    "Report",
    "DiscussionPost",
    "animal_key_for",
    "ReportFilter",
    "RecordStore",
    "ReportStore",
    "DiscussionStore",
    "UserStore",
]
