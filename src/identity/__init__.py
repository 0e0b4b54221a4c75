"""
WildWatch - Identity Module
Collision-free public ids for reports and discussion posts.
"""

from src.identity.allocator import IdentifierAllocator

__all__ = [
    "IdentifierAllocator",
]
