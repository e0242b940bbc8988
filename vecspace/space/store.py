"""Memory-lean storage for large numbers of word vectors."""

import time
from collections.abc import Callable, Iterable, Iterator

import numpy as np

from vecspace.exceptions import DimensionMismatchError, ValidationError
from vecspace.logging_config import get_logger
from vecspace.observability.metrics import track_search
from vecspace.search.models import SearchHit
from vecspace.search.topk import top_k
from vecspace.vectors.models import AsVector, FloatArray, Vector

logger = get_logger(__name__)

# Records allocated on the first growth of an empty buffer.
_MIN_GROWTH = 16


class VecSpace:
    """A vector space holding many word vectors of one dimension.

    All vector data lives in one flat float32 buffer; vector ``i`` occupies
    ``buffer[i * dim : (i + 1) * dim]``. Terms are kept in a list aligned
    with the buffer. An optional term index maps each term to the position
    of its most recent insertion.

    The space is append only. Vectors handed out by :meth:`get`,
    :meth:`find_term` and iteration are read-only views into the buffer.
    """

    def __init__(self, dimension: int = 0) -> None:
        """Create an empty space.

        Args:
            dimension: Dimension of every vector. ``0`` defers the choice to
                the first inserted vector.

        Raises:
            ValidationError: If ``dimension`` is negative.
        """
        if dimension < 0:
            raise ValidationError(
                "Dimension must not be negative",
                details={"dimension": dimension},
            )

        self._dimension = dimension
        self._buffer: FloatArray = np.empty(0, dtype=np.float32)
        self._view: FloatArray = self._readonly(self._buffer)
        self._words: list[str] = []
        self._term_map: dict[str, int] | None = None

    @staticmethod
    def _readonly(buffer: FloatArray) -> FloatArray:
        view = buffer.view()
        view.flags.writeable = False
        return view

    def with_termmap(self) -> "VecSpace":
        """Enable the term index and index all existing vectors.

        Calling it again rebuilds the index from scratch.

        Returns:
            This space, for chaining.
        """
        self._term_map = {}
        if not self.is_empty():
            self._index_terms()
        return self

    @property
    def has_termmap(self) -> bool:
        return self._term_map is not None

    def __len__(self) -> int:
        return len(self._words)

    def is_empty(self) -> bool:
        return not self._words

    def dim(self) -> int:
        return self._dimension

    @property
    def nbytes(self) -> int:
        """Bytes allocated for vector data."""
        return self._buffer.nbytes

    def capacity(self) -> int:
        """Number of vectors the buffer holds without reallocating."""
        if self._dimension == 0:
            return 0
        return self._buffer.shape[0] // self._dimension

    def reserve(self, additional: int) -> None:
        """Reserve room for at least ``additional`` more vectors.

        Has no effect while the dimension is still undecided.
        """
        if additional < 0:
            raise ValidationError(
                "Cannot reserve a negative amount",
                details={"additional": additional},
            )
        required = (len(self._words) + additional) * self._dimension
        if required > self._buffer.shape[0]:
            self._reallocate(required)

    def shrink_to_fit(self) -> None:
        """Release buffer capacity beyond the stored vectors."""
        used = self._used()
        if self._buffer.shape[0] != used:
            self._reallocate(used)
        if self._term_map is not None:
            self._term_map = dict(self._term_map)

    def _used(self) -> int:
        return len(self._words) * self._dimension

    def _reallocate(self, size: int) -> None:
        used = self._used()
        buffer = np.empty(size, dtype=np.float32)
        buffer[:used] = self._buffer[:used]
        self._buffer = buffer
        self._view = self._readonly(buffer)

    def _grow_for(self, count: int) -> None:
        required = (len(self._words) + count) * self._dimension
        capacity = self._buffer.shape[0]
        if required <= capacity:
            return
        self._reallocate(max(required, capacity * 2, _MIN_GROWTH * self._dimension))

    def insert(self, vec: AsVector) -> None:
        """Append a vector.

        The data is copied into the space. If the space was created with
        dimension 0 and is empty, it adopts the vector's dimension.

        Raises:
            DimensionMismatchError: If the vector's dimension differs from
                the space's. The space is left unchanged.
        """
        data = vec.data
        given = data.shape[0]

        if self._dimension == 0 and not self._words:
            self._dimension = given
        elif given != self._dimension:
            raise DimensionMismatchError(expected=self._dimension, given=given)

        pos = len(self._words)
        self._grow_for(1)
        start = pos * self._dimension
        self._buffer[start : start + self._dimension] = data

        term = vec.term
        self._words.append(term)
        if self._term_map is not None:
            self._term_map[term] = pos

    def extend(self, vectors: Iterable[AsVector]) -> None:
        """Insert many vectors.

        A dimension mismatch aborts the whole call: the space is restored
        to its state before the call, including a dimension adopted from
        the first vector, before the error propagates.

        Raises:
            DimensionMismatchError: If any vector has the wrong dimension.
        """
        checkpoint = self._checkpoint()
        try:
            for vec in vectors:
                self.insert(vec)
        except DimensionMismatchError as e:
            logger.error(
                f"Aborting extend: {e.message}",
                extra={"rolled_back": len(self._words) - checkpoint[0]},
            )
            self._rollback(checkpoint)
            raise

    def _checkpoint(self) -> tuple[int, int, bool]:
        """Snapshot of length, dimension and index mode for :meth:`_rollback`."""
        return len(self._words), self._dimension, self._term_map is not None

    def _rollback(self, checkpoint: tuple[int, int, bool]) -> None:
        """Undo every append made since ``checkpoint`` was taken."""
        length, dimension, indexed = checkpoint
        if not indexed:
            self._term_map = None
        self._truncate(length)
        self._dimension = dimension

    def _truncate(self, length: int) -> None:
        """Drop every vector at position ``length`` and after."""
        if length >= len(self._words):
            return
        del self._words[length:]
        if self._term_map is not None:
            # Earlier occurrences of removed terms must become visible again.
            self._index_terms()

    def get(self, index: int) -> Vector | None:
        """Borrow the vector at ``index``, or None if out of range."""
        if not 0 <= index < len(self._words):
            return None
        start = index * self._dimension
        return Vector._borrow(
            self._view[start : start + self._dimension],
            self._words[index],
        )

    def find_term(self, term: str) -> Vector | None:
        """Look up a vector by term.

        Requires the term index; without it this always returns None.
        When a term was inserted several times the latest one is returned.
        """
        index = self.find_term_idx(term)
        if index is None:
            return None
        return self.get(index)

    def find_term_idx(self, term: str) -> int | None:
        """Position of the latest vector stored under ``term``."""
        if self._term_map is None:
            return None
        return self._term_map.get(term)

    def top_k(
        self,
        k: int,
        score: Callable[[Vector], float],
    ) -> list[SearchHit]:
        """Find the ``k`` vectors scoring highest under ``score``.

        See :func:`vecspace.search.topk.top_k` for ordering and tie rules.

        Args:
            k: Number of results.
            score: Scoring function, higher is more similar.

        Returns:
            Hits ordered best first.
        """
        start_time = time.perf_counter()
        hits = top_k(self, k, score)
        duration = time.perf_counter() - start_time

        track_search(duration=duration, scanned=len(self), returned=len(hits))
        logger.debug(
            f"Top-{k} search over {len(self)} vectors",
            extra={"duration": duration, "returned": len(hits)},
        )
        return hits

    def clear(self) -> None:
        """Remove all vectors.

        The buffer is released rather than reused, so vectors borrowed
        before the call keep their data.
        """
        self._words.clear()
        self._buffer = np.empty(0, dtype=np.float32)
        self._view = self._readonly(self._buffer)
        if self._term_map is not None:
            self._term_map.clear()

    def iter(self) -> Iterator[Vector]:
        """Iterate over all vectors in insertion order."""
        view = self._view
        words = self._words
        dim = self._dimension
        for index in range(len(words)):
            start = index * dim
            yield Vector._borrow(view[start : start + dim], words[index])

    def __iter__(self) -> Iterator[Vector]:
        return self.iter()

    def terms(self) -> Iterator[str]:
        """Iterate over all terms in insertion order."""
        return iter(self._words)

    def matrix(self) -> FloatArray:
        """Read-only ``(len, dim)`` view of all stored vector data."""
        return self._view[: self._used()].reshape(len(self._words), self._dimension)

    def _index_terms(self) -> None:
        self._term_map = {term: pos for pos, term in enumerate(self._words)}
        logger.debug(f"Indexed {len(self._term_map)} terms")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VecSpace):
            return NotImplemented
        return (
            self._dimension == other._dimension
            and self._words == other._words
            and np.array_equal(self.matrix(), other.matrix())
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"VecSpace(len={len(self)}, dim={self._dimension})"
