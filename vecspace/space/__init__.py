"""Vector space module."""

from vecspace.space.store import VecSpace

__all__ = [
    "VecSpace",
]
