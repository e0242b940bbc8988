"""Streaming parser for word2vec text and binary files.

File layout::

    <count> <dimension>\\n          optional header, ASCII in both formats
    <term> <v1> <v2> ... <vn>\\n    text record
    <term> <n little-endian f32>    binary record, no delimiter after it

The header lists the record count first and the dimension second. The
count is informative only: the stream ends at the physical end of input.
"""

import time
from pathlib import Path
from typing import BinaryIO

import numpy as np

from vecspace.codec.models import CodecOptions
from vecspace.codec.stream import ByteReader
from vecspace.config import CodecSettings, get_settings
from vecspace.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EncodingError,
    EndOfStream,
    ErrorCode,
    MalformedInputError,
    TransportError,
    VecSpaceError,
)
from vecspace.logging_config import get_logger
from vecspace.observability.metrics import track_parse
from vecspace.space.store import VecSpace
from vecspace.vectors.models import Vector

logger = get_logger(__name__)

_FLOAT_LE = np.dtype("<f4")

# Upper bound on the buffer preallocated from the header count.
_MAX_RESERVE_BYTES = 64 << 20

# Accepted by float() but not part of the decimal float syntax.
_NON_DECIMAL = frozenset("_ \t\v\f")


class Word2VecParser:
    """Parser for word2vec ``.vec``/``.txt`` and ``.bin`` files.

    Builder methods return a new parser and leave the receiver untouched::

        space = Word2VecParser().binary().index_terms(True).parse_file(path)
    """

    def __init__(self, options: CodecOptions | None = None) -> None:
        self._options = options or CodecOptions()

    @classmethod
    def from_settings(cls, settings: CodecSettings | None = None) -> "Word2VecParser":
        """Create a parser configured from environment settings."""
        settings = settings or get_settings().codec
        return cls(CodecOptions.from_settings(settings))

    @property
    def options(self) -> CodecOptions:
        return self._options

    def binary(self) -> "Word2VecParser":
        """Parse the binary format."""
        return Word2VecParser(self._options.with_changes(binary=True))

    def no_header(self) -> "Word2VecParser":
        """Don't treat the first line as a header."""
        return Word2VecParser(self._options.with_changes(header=False))

    def cust_term_separator(self, sep: str) -> "Word2VecParser":
        """Use a custom term/value separator character."""
        return Word2VecParser(self._options.with_changes(term_separator=sep))

    def cust_vec_separator(self, sep: str) -> "Word2VecParser":
        """Use a custom value/value separator character."""
        return Word2VecParser(self._options.with_changes(vec_separator=sep))

    def index_terms(self, index: bool = True) -> "Word2VecParser":
        """Whether to index terms for fast term lookup."""
        return Word2VecParser(self._options.with_changes(index_terms=index))

    def parse(self, stream: BinaryIO) -> VecSpace:
        """Parse a whole stream into a new vector space.

        Args:
            stream: Binary stream positioned at the start of the file.

        Returns:
            The populated space.

        Raises:
            MalformedInputError: If the header or a record is invalid.
            EncodingError: If a term or text line is not valid UTF-8.
            TransportError: If reading fails.
            DimensionMismatchError: If a record's length differs from the
                header's or the first record's dimension.
            ConfigurationError: For binary input without header, whose
                dimension cannot be known.
        """
        start_time = time.perf_counter()
        try:
            space = self._parse(stream)
        except VecSpaceError as e:
            track_parse(
                binary=self._options.binary,
                duration=time.perf_counter() - start_time,
                records=0,
                success=False,
            )
            logger.error(f"Parse failed: {e.message}", extra={"code": e.code.value})
            raise

        duration = time.perf_counter() - start_time
        track_parse(binary=self._options.binary, duration=duration, records=len(space))
        logger.info(
            f"Parsed {len(space)} vectors",
            extra={"dimension": space.dim(), "duration": duration},
        )
        return space

    def parse_file(self, path: str | Path) -> VecSpace:
        """Parse a word2vec file from disk."""
        try:
            with open(path, "rb") as f:
                return self.parse(f)
        except OSError as e:
            raise TransportError(
                f"Failed to open {path}: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

    def parse_into(self, stream: BinaryIO, space: VecSpace) -> int:
        """Parse a stream and append its vectors to an existing space.

        With a header, the header dimension must equal the space's
        dimension (an empty space of dimension 0 accepts any). On failure
        the space is restored to its previous length, dimension and index
        mode.

        Returns:
            Number of vectors appended.
        """
        start_time = time.perf_counter()
        checkpoint = space._checkpoint()
        try:
            reader = ByteReader(stream, self._options.read_chunk_size)
            _, expected, count = self._await_header(reader, space)
            added = self._stream(reader, space, expected)
        except VecSpaceError:
            space._rollback(checkpoint)
            track_parse(
                binary=self._options.binary,
                duration=time.perf_counter() - start_time,
                records=0,
                success=False,
            )
            raise

        self._check_count(count, added)
        track_parse(
            binary=self._options.binary,
            duration=time.perf_counter() - start_time,
            records=added,
        )
        return added

    def _parse(self, stream: BinaryIO) -> VecSpace:
        if not self._options.header and self._options.binary:
            raise ConfigurationError(
                "Binary input without header needs a known dimension; "
                "use parse_into with a sized space"
            )

        reader = ByteReader(stream, self._options.read_chunk_size)
        space, expected, count = self._await_header(reader, None)
        added = self._stream(reader, space, expected)
        self._check_count(count, added)
        return space

    def _await_header(
        self,
        reader: ByteReader,
        space: VecSpace | None,
    ) -> tuple[VecSpace, int, int | None]:
        """Consume the header and prepare a space for streaming.

        Args:
            reader: Input positioned at the start of the file.
            space: Space to append to, or None to create one.

        Returns:
            The target space, the dimension records must have (0 while
            unknown) and the header count (None without header).
        """
        count: int | None = None

        if self._options.header:
            count, dimension = self._read_header(reader)
            if space is None:
                space = VecSpace(dimension)
            elif not (space.is_empty() and space.dim() == 0) and dimension != space.dim():
                raise DimensionMismatchError(expected=space.dim(), given=dimension)
            expected = dimension
            space.reserve(self._reserve_hint(count, dimension))
            logger.debug(
                "Read word2vec header",
                extra={"count": count, "dimension": dimension},
            )
        else:
            if space is None:
                space = VecSpace(0)
            expected = space.dim()
            if self._options.binary and expected == 0:
                raise ConfigurationError(
                    "Binary input without header needs a space with a known dimension"
                )

        if self._options.index_terms and not space.has_termmap:
            space.with_termmap()

        return space, expected, count

    @staticmethod
    def _reserve_hint(count: int, dimension: int) -> int:
        """Vectors to preallocate for a header announcing ``count``.

        The count is not trusted: beyond the cap the buffer grows as
        records actually arrive.
        """
        limit = _MAX_RESERVE_BYTES // (max(dimension, 1) * _FLOAT_LE.itemsize)
        return min(count, limit)

    def _stream(self, reader: ByteReader, space: VecSpace, expected: int) -> int:
        added = 0
        while True:
            try:
                if self._options.binary:
                    vec = self._read_binary_record(reader, expected)
                else:
                    vec = self._read_text_record(reader, expected)
            except EndOfStream:
                return added

            space.insert(vec)
            added += 1

    def _check_count(self, count: int | None, added: int) -> None:
        if count is not None and count != added:
            logger.warning(
                f"Header announced {count} vectors but {added} were read",
                extra={"count": count, "read": added},
            )

    def _read_header(self, reader: ByteReader) -> tuple[int, int]:
        offset = reader.offset
        line, found = reader.read_until(b"\n")
        if not found and not line:
            raise MalformedInputError(
                "Missing header: input is empty",
                code=ErrorCode.MALFORMED_HEADER,
            )

        parts = line.split()
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise MalformedInputError(
                "Invalid header: expected '<count> <dimension>'",
                code=ErrorCode.MALFORMED_HEADER,
                details={"offset": offset, "found": line[:80].decode("latin-1")},
            )

        return int(parts[0]), int(parts[1])

    def _decode(self, data: bytes, offset: int) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"Invalid UTF-8 at byte {offset + e.start}",
                details={"offset": offset + e.start, "error": str(e)},
            ) from e

    def _read_text_record(self, reader: ByteReader, expected: int) -> Vector:
        while True:
            offset = reader.offset
            line, found = reader.read_until(b"\n")
            if line.endswith(b"\r"):
                line = line[:-1]
            if line:
                break
            if not found:
                raise EndOfStream()

        text = self._decode(line, offset)
        opts = self._options

        term, sep, values = text.partition(opts.term_separator)
        if not sep:
            raise MalformedInputError(
                "Missing term separator",
                details={"offset": offset, "separator": opts.term_separator},
            )
        if not term:
            raise MalformedInputError("Empty term", details={"offset": offset})

        # fastText writes a separator before the line break.
        values = values.rstrip(opts.vec_separator)
        if any(ch in values for ch in _NON_DECIMAL if ch != opts.vec_separator):
            raise MalformedInputError(
                f"Invalid float in record for {term!r}: unexpected '_' or whitespace",
                details={"offset": offset, "term": term},
            )
        tokens = values.split(opts.vec_separator) if values else []
        try:
            data = np.fromiter(map(float, tokens), dtype=np.float32, count=len(tokens))
        except ValueError as e:
            raise MalformedInputError(
                f"Invalid float in record for {term!r}: {e}",
                details={"offset": offset, "term": term},
            ) from e

        if expected and data.shape[0] != expected:
            raise DimensionMismatchError(
                expected=expected,
                given=data.shape[0],
                details={"offset": offset, "term": term},
            )

        return Vector(data, term)

    def _read_binary_record(self, reader: ByteReader, expected: int) -> Vector:
        # The reference word2vec tool ends every vector with a newline.
        reader.skip(b"\n")
        if reader.at_eof():
            raise EndOfStream()

        offset = reader.offset
        term_bytes, found = reader.read_until(b" ")
        if not found:
            raise MalformedInputError(
                "Truncated record: no space after term",
                code=ErrorCode.TRUNCATED_RECORD,
                details={"offset": offset},
            )
        if not term_bytes:
            raise MalformedInputError("Empty term", details={"offset": offset})

        term = self._decode(term_bytes, offset)

        size = expected * _FLOAT_LE.itemsize
        raw = reader.read_exact(size)
        if len(raw) != size:
            raise MalformedInputError(
                f"Truncated record for {term!r}: expected {size} bytes, got {len(raw)}",
                code=ErrorCode.TRUNCATED_RECORD,
                details={"offset": offset, "term": term},
            )

        data = np.frombuffer(raw, dtype=_FLOAT_LE).astype(np.float32, copy=False)
        return Vector(data, term)
