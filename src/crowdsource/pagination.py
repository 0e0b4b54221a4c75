"""
Fixed-size page arithmetic shared by report and discussion listings.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List

from src.core.exceptions import InvalidArgument


@dataclass
class Page:
    """One page of records plus navigation info."""
    items: List[Any] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages


def total_pages_for(total_rows: int, page_size: int) -> int:
    return math.ceil(total_rows / page_size)


def check_page(page: int, total_rows: int, page_size: int) -> int:
    """
    Validate a 1-based page number against the row count.

    An empty table accepts any positive page and yields an empty page.

    Returns:
        Total number of pages

    Raises:
        InvalidArgument: page < 1, or past the last page
    """
    if page < 1:
        raise InvalidArgument("Invalid page number")

    total_pages = total_pages_for(total_rows, page_size)
    if page > total_pages and total_pages != 0:
        raise InvalidArgument("Page number exceeds total pages")

    return total_pages
