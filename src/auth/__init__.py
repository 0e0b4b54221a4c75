"""
WildWatch - Auth Module
Session cookie verification.
"""

from src.auth.session import SessionVerifier

__all__ = [
    "SessionVerifier",
]
