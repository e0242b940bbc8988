"""Word vector record types and vector math.

Two flavours share one read interface (:class:`AsVector`):

* :class:`Vector` borrows its data. It wraps a read-only numpy view into
  storage owned by someone else, usually a :class:`~vecspace.space.VecSpace`
  buffer or a parser's scratch array.
* :class:`OwnedVector` holds a private copy. Sums of vectors and promoted
  copies (:meth:`Vector.to_owned`) are owned.

The math helpers at module level accept anything implementing
:class:`AsVector`, so borrowed and owned vectors mix freely.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from vecspace.exceptions import DimensionMismatchError, ValidationError

FloatArray = NDArray[np.float32]


@runtime_checkable
class AsVector(Protocol):
    """Read access shared by borrowed and owned vectors."""

    @property
    def data(self) -> FloatArray: ...

    @property
    def term(self) -> str: ...

    def dim(self) -> int: ...


def _check_dims(a: AsVector, b: AsVector) -> None:
    if a.dim() != b.dim():
        raise DimensionMismatchError(expected=a.dim(), given=b.dim())


def dot(a: AsVector, b: AsVector) -> float:
    """Dot product of two vectors of equal dimension.

    Raises:
        DimensionMismatchError: If the dimensions differ.
    """
    _check_dims(a, b)
    return float(np.dot(a.data, b.data))


def length(v: AsVector) -> float:
    """Euclidean (2-)norm of a vector."""
    data = v.data
    return float(np.sqrt(np.dot(data, data)))


def cosine(a: AsVector, b: AsVector) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when the dot product is exactly zero or either vector has
    zero length, so zero vectors never produce NaN.

    Raises:
        DimensionMismatchError: If the dimensions differ.
    """
    product = dot(a, b)
    if product == 0.0:
        return 0.0

    div = length(a) * length(b)
    if div == 0.0:
        return 0.0

    return product / div


def add(a: AsVector, b: AsVector) -> "OwnedVector":
    """Elementwise sum of two vectors.

    The term of the result is both terms joined by a single space, left
    operand first.

    Raises:
        DimensionMismatchError: If the dimensions differ.
    """
    _check_dims(a, b)
    return OwnedVector._adopt(
        np.add(a.data, b.data, dtype=np.float32),
        f"{a.term} {b.term}",
    )


class Vector:
    """A word vector borrowing its data.

    The data is a read-only view; nothing is copied on construction when
    ``data`` already is a float32 array. The view keeps its backing buffer
    alive, so a vector taken from a space stays valid even after the space
    has grown or been cleared.
    """

    __slots__ = ("_data", "_term")

    def __init__(self, data: Sequence[float] | FloatArray, term: str) -> None:
        array = np.asarray(data, dtype=np.float32)
        if array.ndim != 1:
            raise ValidationError(
                "Vector data must be one dimensional",
                details={"shape": array.shape},
            )
        view = array.view()
        view.flags.writeable = False
        self._data = view
        self._term = term

    @classmethod
    def _borrow(cls, data: FloatArray, term: str) -> "Vector":
        # Caller guarantees a 1-D read-only float32 view.
        vec = cls.__new__(cls)
        vec._data = data
        vec._term = term
        return vec

    @property
    def data(self) -> FloatArray:
        return self._data

    @property
    def term(self) -> str:
        return self._term

    def dim(self) -> int:
        return self._data.shape[0]

    def dot(self, other: AsVector) -> float:
        """Dot product with ``other``."""
        return dot(self, other)

    def length(self) -> float:
        """Euclidean norm."""
        return length(self)

    def cosine(self, other: AsVector) -> float:
        """Cosine similarity with ``other``."""
        return cosine(self, other)

    def to_owned(self) -> "OwnedVector":
        """Copy data and term into an independent vector."""
        return OwnedVector(self._data, self._term)

    def __add__(self, other: AsVector) -> "OwnedVector":
        if not isinstance(other, AsVector):
            return NotImplemented
        return add(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._term == other._term and np.array_equal(self._data, other._data)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(term={self._term!r}, dim={self.dim()})"


class OwnedVector(Vector):
    """A word vector owning a private copy of its data."""

    __slots__ = ()

    def __init__(self, data: Sequence[float] | FloatArray, term: str) -> None:
        array = np.array(data, dtype=np.float32, copy=True)
        if array.ndim != 1:
            raise ValidationError(
                "Vector data must be one dimensional",
                details={"shape": array.shape},
            )
        self._data = array
        self._term = term

    @classmethod
    def _adopt(cls, data: FloatArray, term: str) -> "OwnedVector":
        # Takes ownership of a freshly computed array without copying it.
        vec = cls.__new__(cls)
        vec._data = data
        vec._term = term
        return vec

    @classmethod
    def from_values(cls, values: Sequence[float], term: str) -> "OwnedVector":
        """Build an owned vector from plain floats."""
        return cls(values, term)

    def as_ref(self) -> Vector:
        """Borrow this vector's data without copying."""
        return Vector(self._data, self._term)

    def to_owned(self) -> "OwnedVector":
        return OwnedVector(self._data, self._term)
