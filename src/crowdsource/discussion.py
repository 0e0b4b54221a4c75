"""
Community discussion board
"""

import logging
from typing import Optional

from src.core.constants import PAGE_SIZE
from src.core.exceptions import InvalidArgument, NotFound
from src.crowdsource.pagination import Page, check_page
from src.database.models import DiscussionPost
from src.database.stores import DiscussionStore
from src.identity.allocator import IdentifierAllocator

logger = logging.getLogger(__name__)


class DiscussionBoard:
    """Creates, fetches and pages discussion posts."""

    def __init__(
        self,
        store: DiscussionStore,
        allocator: Optional[IdentifierAllocator] = None,
        page_size: int = PAGE_SIZE
    ):
        self.store = store
        self.allocator = allocator or IdentifierAllocator(store.exists, name="post_id")
        self.page_size = page_size

    def create_post(self, user_id: str, title: Optional[str], message: Optional[str]) -> DiscussionPost:
        """
        Publish a post for an authenticated user.

        Raises:
            InvalidArgument: title or message missing
        """
        if not title or not title.strip() or not message or not message.strip():
            raise InvalidArgument("Missing required post data")

        post = self.allocator.allocate_and_insert(
            lambda post_id: self.store.insert(DiscussionPost(
                post_id=post_id,
                user_id=user_id,
                title=title,
                message=message,
            ))
        )
        logger.info(f"New post created: {post.post_id} by user {user_id}")
        return post

    def get_post(self, post_id: int) -> DiscussionPost:
        post = self.store.get_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def get_page(self, page: int) -> Page:
        """One page of posts, newest first."""
        if page < 1:
            raise InvalidArgument("Invalid page number")
        total = self.store.count()
        total_pages = check_page(page, total, self.page_size)

        posts = self.store.page(page, self.page_size) if total else []
        return Page(items=posts, page=page, total_pages=total_pages)
