"""
Session verification against the account service's users table.

Registration, login and password hashing belong to the account service;
this backend only checks that a (user_id, auth_token) cookie pair is live.
"""

import logging
import time
from typing import Callable, Optional

from src.database.stores import UserStore

logger = logging.getLogger(__name__)


class SessionVerifier:
    """Checks auth cookies against stored tokens and their expiry."""

    def __init__(self, users: UserStore, clock: Callable[[], float] = time.time):
        self.users = users
        self.clock = clock

    def check(self, user_id: Optional[str], auth_token: Optional[str]) -> bool:
        """
        True when the token belongs to the user and has not expired.

        Raises:
            StoreUnavailable: the users table could not be read
        """
        if not user_id or not auth_token:
            return False

        user = self.users.find_session(user_id, auth_token)
        if user is None:
            logger.info(f"Rejected session for user {user_id}: unknown token")
            return False

        if not user.token_expiry or user.token_expiry < int(self.clock()):
            logger.info(f"Rejected session for user {user_id}: token expired")
            return False

        return True
