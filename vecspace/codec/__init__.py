"""word2vec text/binary codec module."""

from vecspace.codec.exporter import Exporter, export_file
from vecspace.codec.models import CodecOptions
from vecspace.codec.parser import Word2VecParser

__all__ = [
    "CodecOptions",
    "Exporter",
    "Word2VecParser",
    "export_file",
]
