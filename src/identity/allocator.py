"""
Public identifier allocation for reports and discussion posts.

Ids are drawn uniformly from a fixed 8-digit range using the OS CSPRNG and
probed against the backing store before use. The probe does not reserve the
id: the primary-key constraint at insert time is the final word, and
allocate_and_insert retries once when it fires.
"""

import logging
import random
import secrets
from typing import Callable, Optional, TypeVar

from src.core.constants import ID_RANGE_HIGH, ID_RANGE_LOW
from src.core.exceptions import UniqueConstraintViolation

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IdentifierAllocator:
    """
    Draws unused ids from [low, high).

    The allocator knows nothing about record types; it is handed an
    existence check, usually a store's point lookup.
    """

    def __init__(
        self,
        exists: Callable[[int], bool],
        low: int = ID_RANGE_LOW,
        high: int = ID_RANGE_HIGH,
        rng: Optional[random.Random] = None,
        name: str = "id"
    ):
        """
        Args:
            exists: Returns True when the id is already in use
            low: Smallest id (inclusive)
            high: Upper bound (exclusive)
            rng: Random source; defaults to secrets.SystemRandom
            name: Label used in log messages
        """
        if low >= high:
            raise ValueError(f"empty id range [{low}, {high})")

        self.exists = exists
        self.low = low
        self.high = high
        self.rng = rng or secrets.SystemRandom()
        self.name = name

    def _draw(self) -> int:
        return self.rng.randrange(self.low, self.high)

    def allocate(self) -> int:
        """
        Return an id not currently present in the store.

        Store errors raised by the existence check (StoreUnavailable)
        propagate immediately.
        """
        while True:
            candidate = self._draw()
            if not self.exists(candidate):
                return candidate
            logger.warning(f"{self.name} {candidate} already taken, drawing again")

    def allocate_and_insert(self, insert: Callable[[int], T]) -> T:
        """
        Allocate an id and insert with it, retrying once on a duplicate key.

        Args:
            insert: Performs the insert for the given id and returns its result

        Returns:
            Whatever insert returned

        Raises:
            UniqueConstraintViolation: the retry collided as well
        """
        new_id = self.allocate()
        try:
            return insert(new_id)
        except UniqueConstraintViolation:
            logger.warning(f"{self.name} {new_id} was claimed before insert, retrying once")

        return insert(self.allocate())
