"""Bounded top-k selection over scored vectors."""

import heapq
import math
from collections.abc import Callable, Iterable
from typing import TypeVar

from vecspace.exceptions import ValidationError
from vecspace.search.models import SearchHit
from vecspace.vectors.models import AsVector, Vector, dot, length

V = TypeVar("V", bound=Vector)


def top_k(
    vectors: Iterable[V],
    k: int,
    score: Callable[[V], float],
) -> list[SearchHit]:
    """Select the ``k`` best scoring vectors in a single pass.

    Keeps a min-heap of at most ``k`` candidates, so memory is O(k) and
    time O(n log k). A candidate replaces the current minimum only when it
    is strictly better.

    Ordering is total: descending score, then ascending scan position, so
    among equal scores the earlier vector wins. The result is therefore
    identical to a stable descending sort truncated to ``k``. NaN scores
    rank below every number.

    Args:
        vectors: Vectors to scan, in order.
        k: Number of results wanted.
        score: Scoring function, higher is better.

    Returns:
        Up to ``k`` hits ordered best first.

    Raises:
        ValidationError: If ``k`` is negative.
    """
    if k < 0:
        raise ValidationError("k must not be negative", details={"k": k})
    if k == 0:
        return []

    # Items are (rank, -index, score, vector); (rank, -index) is unique so
    # comparisons never reach the vector.
    heap: list[tuple[float, int, float, V]] = []
    for index, vec in enumerate(vectors):
        value = float(score(vec))
        rank = -math.inf if math.isnan(value) else value
        item = (rank, -index, value, vec)
        if len(heap) < k:
            heapq.heappush(heap, item)
        elif item > heap[0]:
            heapq.heapreplace(heap, item)

    heap.sort(reverse=True)
    return [
        SearchHit(score=value, index=-neg_index, vector=vec)
        for _, neg_index, value, vec in heap
    ]


def cosine_scorer(query: AsVector) -> Callable[[AsVector], float]:
    """Build a scoring function returning the cosine similarity to ``query``.

    The query norm is computed once. Zero dot products and zero lengths
    score 0.0.
    """
    query_length = length(query)

    def score(vec: AsVector) -> float:
        product = dot(query, vec)
        if product == 0.0:
            return 0.0
        div = query_length * length(vec)
        if div == 0.0:
            return 0.0
        return product / div

    return score
