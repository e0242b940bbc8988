"""Chunked byte reader used by the word2vec parser.

Holds at most one read chunk plus the record being assembled, so parsing
memory does not grow with the input size.
"""

from typing import BinaryIO

from vecspace.exceptions import ConfigurationError, TransportError


class ByteReader:
    """Buffered reader with delimiter scans and exact-length reads."""

    def __init__(self, raw: BinaryIO, chunk_size: int = 1 << 20) -> None:
        self._raw = raw
        self._chunk_size = chunk_size
        self._buf = b""
        self._pos = 0
        self._consumed = 0
        self._eof = False

    @property
    def offset(self) -> int:
        """Number of bytes handed out or skipped so far."""
        return self._consumed + self._pos

    def _fill(self) -> bool:
        """Append one chunk to the buffer. Returns False at end of input."""
        if self._eof:
            return False
        try:
            chunk = self._raw.read(self._chunk_size)
        except OSError as e:
            raise TransportError(
                f"Failed to read input: {e}",
                details={"offset": self.offset, "error": str(e)},
            ) from e

        if isinstance(chunk, str):
            raise ConfigurationError("Input stream must be opened in binary mode")
        if not chunk:
            self._eof = True
            return False

        self._consumed += self._pos
        self._buf = self._buf[self._pos :] + chunk
        self._pos = 0
        return True

    def read_until(self, delim: bytes) -> tuple[bytes, bool]:
        """Read up to the next ``delim`` and consume it.

        Returns:
            The bytes before the delimiter and whether the delimiter was
            found. At end of input the remaining bytes are returned with
            ``False``.
        """
        scanned = 0
        while True:
            idx = self._buf.find(delim, self._pos + scanned)
            if idx != -1:
                data = self._buf[self._pos : idx]
                self._pos = idx + len(delim)
                return data, True

            scanned = len(self._buf) - self._pos
            if not self._fill():
                data = self._buf[self._pos :]
                self._pos = len(self._buf)
                return data, False

    def read_exact(self, size: int) -> bytes:
        """Read ``size`` bytes, or fewer if the input ends first."""
        while len(self._buf) - self._pos < size:
            if not self._fill():
                break
        data = self._buf[self._pos : self._pos + size]
        self._pos += len(data)
        return data

    def skip(self, chars: bytes) -> None:
        """Skip any run of bytes contained in ``chars``."""
        while True:
            buf = self._buf
            while self._pos < len(buf) and buf[self._pos] in chars:
                self._pos += 1
            if self._pos < len(buf) or not self._fill():
                return

    def at_eof(self) -> bool:
        """True when no bytes remain."""
        return self._pos >= len(self._buf) and not self._fill()
