"""Application exception hierarchy.

All custom exceptions inherit from VecSpaceError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "VEC-1000"
    CONFIGURATION_ERROR = "VEC-1001"
    VALIDATION_ERROR = "VEC-1002"

    # Vector space errors (2xxx)
    DIMENSION_MISMATCH = "VEC-2000"

    # Codec errors (3xxx)
    MALFORMED_HEADER = "VEC-3000"
    MALFORMED_RECORD = "VEC-3001"
    TRUNCATED_RECORD = "VEC-3002"
    ENCODING_ERROR = "VEC-3003"
    END_OF_STREAM = "VEC-3004"

    # I/O errors (4xxx)
    TRANSPORT_ERROR = "VEC-4000"


class VecSpaceError(Exception):
    """Base exception for all vecspace errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(VecSpaceError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(VecSpaceError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class DimensionMismatchError(VecSpaceError):
    """A vector's dimension disagrees with the space it is used with.

    Attributes:
        expected: Dimension required by the space or left operand.
        given: Dimension of the offending vector.
    """

    def __init__(
        self,
        expected: int,
        given: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.expected = expected
        self.given = given
        super().__init__(
            f"Tried to use a {given} dimensional vector with {expected} dimensions",
            ErrorCode.DIMENSION_MISMATCH,
            {"expected": expected, "given": given, **(details or {})},
        )


class CodecError(VecSpaceError):
    """Base class for word2vec parse and export failures."""


class MalformedInputError(CodecError):
    """Input does not follow the word2vec format."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.MALFORMED_RECORD,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EncodingError(CodecError):
    """Text could not be decoded as UTF-8."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.ENCODING_ERROR, details)


class TransportError(CodecError):
    """The underlying stream failed to read or write."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TRANSPORT_ERROR, details)


class EndOfStream(CodecError):
    """Clean end of input at a record boundary.

    Raised and caught inside the parser; never escapes a parse call.
    """

    def __init__(self) -> None:
        super().__init__("End of stream", ErrorCode.END_OF_STREAM)
