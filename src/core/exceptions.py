"""
WildWatch - Error Taxonomy
Exceptions shared by the stores, services and the REST API.
"""


class WildWatchError(Exception):
    """Base class for application errors."""


class InvalidArgument(WildWatchError):
    """Malformed or out-of-range input the caller can correct."""


class NotFound(WildWatchError):
    """No record exists for the requested id."""


class UniqueConstraintViolation(WildWatchError):
    """An insert collided with an existing primary key."""


class StoreUnavailable(WildWatchError):
    """The backing database could not be reached or failed a query."""
