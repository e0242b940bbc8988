"""Word vector records and vector math."""

from vecspace.vectors.models import (
    AsVector,
    OwnedVector,
    Vector,
    add,
    cosine,
    dot,
    length,
)

__all__ = [
    "AsVector",
    "OwnedVector",
    "Vector",
    "add",
    "cosine",
    "dot",
    "length",
]
