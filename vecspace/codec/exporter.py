"""Writer for word2vec text and binary files.

Produces exactly the layout :class:`~vecspace.codec.parser.Word2VecParser`
reads: an optional ``count dimension`` header line followed by one record
per vector.
"""

import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import BinaryIO

import numpy as np

from vecspace.codec.models import CodecOptions
from vecspace.config import CodecSettings, get_settings
from vecspace.exceptions import TransportError, ValidationError, VecSpaceError
from vecspace.logging_config import get_logger
from vecspace.observability.metrics import track_export
from vecspace.space.store import VecSpace
from vecspace.vectors.models import AsVector, Vector

logger = get_logger(__name__)

_FLOAT_LE = np.dtype("<f4")


class Exporter:
    """Exports vectors to a binary writer.

    The header must be written before any record when header mode is on;
    :meth:`export_space` and :meth:`export_space_filtered` take care of
    that. Callers driving :meth:`export_vectors` themselves must call
    :meth:`write_header` first.
    """

    def __init__(self, writer: BinaryIO, options: CodecOptions | None = None) -> None:
        """Create an exporter.

        Args:
            writer: Binary stream receiving the output.
            options: Format options (defaults to text with header).
        """
        self._writer = writer
        self._options = options or CodecOptions()
        self._header_written = False

    @classmethod
    def from_settings(
        cls,
        writer: BinaryIO,
        settings: CodecSettings | None = None,
    ) -> "Exporter":
        """Create an exporter configured from environment settings."""
        settings = settings or get_settings().codec
        return cls(writer, CodecOptions.from_settings(settings))

    @property
    def options(self) -> CodecOptions:
        return self._options

    def use_binary(self) -> "Exporter":
        """Export in the binary format."""
        return Exporter(self._writer, self._options.with_changes(binary=True))

    def no_header(self) -> "Exporter":
        """Don't write a header line."""
        return Exporter(self._writer, self._options.with_changes(header=False))

    def cust_term_separator(self, sep: str) -> "Exporter":
        """Use a custom term/value separator character."""
        return Exporter(self._writer, self._options.with_changes(term_separator=sep))

    def cust_vec_separator(self, sep: str) -> "Exporter":
        """Use a custom value/value separator character."""
        return Exporter(self._writer, self._options.with_changes(vec_separator=sep))

    def export_space(self, space: VecSpace) -> int:
        """Export every vector of ``space``.

        Returns:
            Number of bytes written.
        """
        return self.export_space_filtered(space, None)

    def export_space_filtered(
        self,
        space: VecSpace,
        predicate: Callable[[Vector], bool] | None,
    ) -> int:
        """Export the vectors of ``space`` accepted by ``predicate``.

        The header count must be known before the first record, so the
        predicate runs once to count matches and once while writing. It
        must therefore be deterministic. No subset is collected in memory.

        Args:
            space: Space to export.
            predicate: Filter over vectors; None exports everything.

        Returns:
            Number of bytes written.

        Raises:
            ValidationError: If a term cannot be represented in the format.
            TransportError: If writing fails.
        """
        start_time = time.perf_counter()
        written = 0
        try:
            if self._options.header:
                if predicate is None:
                    count = len(space)
                else:
                    count = sum(1 for vec in space if predicate(vec))
                written += self.write_header(count, space.dim())

            if predicate is None:
                vectors: Iterable[Vector] = space
            else:
                vectors = (vec for vec in space if predicate(vec))
            written += self.export_vectors(vectors)
        except VecSpaceError as e:
            track_export(
                binary=self._options.binary,
                duration=time.perf_counter() - start_time,
                bytes_written=written,
                success=False,
            )
            logger.error(f"Export failed: {e.message}", extra={"code": e.code.value})
            raise

        duration = time.perf_counter() - start_time
        track_export(
            binary=self._options.binary,
            duration=duration,
            bytes_written=written,
        )
        logger.info(
            f"Exported {written} bytes",
            extra={"dimension": space.dim(), "duration": duration},
        )
        return written

    def write_header(self, count: int, dimension: int) -> int:
        """Write the ``count dimension`` header line.

        Returns:
            Number of bytes written.
        """
        self._header_written = True
        return self._write(f"{count} {dimension}\n".encode("ascii"))

    def export_vectors(self, vectors: Iterable[AsVector]) -> int:
        """Write records for ``vectors``.

        Returns:
            Number of bytes written.

        Raises:
            RuntimeError: In header mode, if no header was written yet.
        """
        if self._options.header and not self._header_written:
            raise RuntimeError("write_header must be called before export_vectors")

        encode = self._encode_binary if self._options.binary else self._encode_text
        written = 0
        for vec in vectors:
            written += self._write(encode(vec))
        return written

    def _check_term(self, term: str) -> None:
        if not term:
            raise ValidationError("Cannot export an empty term")
        if "\n" in term:
            raise ValidationError(
                "Term contains a line break",
                details={"term": term},
            )
        forbidden = " " if self._options.binary else self._options.term_separator
        if forbidden in term:
            raise ValidationError(
                f"Term contains the separator {forbidden!r}",
                details={"term": term},
            )

    def _encode_text(self, vec: AsVector) -> bytes:
        term = vec.term
        self._check_term(term)
        # str() of a float32 scalar is its shortest round-tripping form.
        values = self._options.vec_separator.join(map(str, vec.data))
        return f"{term}{self._options.term_separator}{values}\n".encode("utf-8")

    def _encode_binary(self, vec: AsVector) -> bytes:
        term = vec.term
        self._check_term(term)
        data = np.asarray(vec.data, dtype=_FLOAT_LE)
        return term.encode("utf-8") + b" " + data.tobytes()

    def _write(self, data: bytes) -> int:
        """Write all of ``data``, retrying after partial writes."""
        view = memoryview(data)
        written = 0
        while written < len(data):
            try:
                n = self._writer.write(view[written:])
            except OSError as e:
                raise TransportError(
                    f"Failed to write output: {e}",
                    details={"error": str(e), "written": written},
                ) from e
            # None from a non-blocking raw stream means it would block.
            if not n:
                raise TransportError(
                    "Writer accepted no bytes",
                    details={"written": written, "pending": len(data) - written},
                )
            written += n
        return written


def export_file(
    space: VecSpace,
    path: str | Path,
    options: CodecOptions | None = None,
    predicate: Callable[[Vector], bool] | None = None,
) -> int:
    """Export ``space`` to a file, replacing any existing content.

    Returns:
        Number of bytes written.
    """
    try:
        with open(path, "wb") as f:
            return Exporter(f, options).export_space_filtered(space, predicate)
    except OSError as e:
        raise TransportError(
            f"Failed to write {path}: {e}",
            details={"path": str(path), "error": str(e)},
        ) from e
