"""
WildWatch - Crowdsource Module
Handles community wildlife reports, photos and the discussion board.
"""

from src.crowdsource.report_handler import ReportHandler
from src.crowdsource.image_store import ImageStore
from src.crowdsource.discussion import DiscussionBoard
from src.crowdsource.pagination import Page, check_page

__all__ = [
    # Reports
    "ReportHandler",
    "ImageStore",
    # Discussion
    "DiscussionBoard",
    # Paging
    "Page",
    "check_page",
]
