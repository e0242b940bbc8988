"""Top-k similarity search module."""

from vecspace.search.models import SearchHit
from vecspace.search.topk import cosine_scorer, top_k

__all__ = [
    "SearchHit",
    "cosine_scorer",
    "top_k",
]
