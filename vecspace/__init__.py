"""Word embedding vector space with word2vec text/binary codec."""

from vecspace.codec import CodecOptions, Exporter, Word2VecParser, export_file
from vecspace.search import SearchHit, cosine_scorer
from vecspace.space import VecSpace
from vecspace.vectors import OwnedVector, Vector

__version__ = "0.1.0"

__all__ = [
    "CodecOptions",
    "Exporter",
    "OwnedVector",
    "SearchHit",
    "VecSpace",
    "Vector",
    "Word2VecParser",
    "__version__",
    "cosine_scorer",
    "export_file",
]
