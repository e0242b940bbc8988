"""Tests for application exceptions."""

import pytest

from vecspace.exceptions import (
    CodecError,
    ConfigurationError,
    DimensionMismatchError,
    EncodingError,
    EndOfStream,
    ErrorCode,
    MalformedInputError,
    TransportError,
    ValidationError,
    VecSpaceError,
)


class TestErrorCode:
    """Tests for error codes."""

    def test_error_code_format(self) -> None:
        """Error codes follow VEC-XXXX format."""
        for code in ErrorCode:
            assert code.value.startswith("VEC-")
            assert len(code.value) == 8  # VEC-XXXX

    def test_error_code_uniqueness(self) -> None:
        """All error codes are unique."""
        codes = [code.value for code in ErrorCode]
        assert len(codes) == len(set(codes))


class TestVecSpaceError:
    """Tests for base exception."""

    def test_basic_exception(self) -> None:
        """Base exception stores message and code."""
        error = VecSpaceError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}

    def test_to_dict(self) -> None:
        """Exception converts to a serializable dict."""
        error = VecSpaceError(
            "Something went wrong",
            details={"path": "vectors.bin"},
        )

        assert error.to_dict() == {
            "error": {
                "code": "VEC-1000",
                "message": "Something went wrong",
                "details": {"path": "vectors.bin"},
            }
        }

    def test_str_representation(self) -> None:
        """Exception string is the message."""
        assert str(VecSpaceError("Test error")) == "Test error"


class TestDimensionMismatchError:
    """Tests for dimension mismatch errors."""

    def test_attributes(self) -> None:
        """Expected and given dimensions are kept."""
        error = DimensionMismatchError(expected=3, given=4)

        assert error.expected == 3
        assert error.given == 4
        assert error.code == ErrorCode.DIMENSION_MISMATCH
        assert error.message == "Tried to use a 4 dimensional vector with 3 dimensions"

    def test_details_merged(self) -> None:
        """Extra details are merged with the dimensions."""
        error = DimensionMismatchError(expected=3, given=2, details={"term": "cat"})

        assert error.details == {"expected": 3, "given": 2, "term": "cat"}


class TestSpecificExceptions:
    """Tests for specific exception classes."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ConfigurationError("bad"), ErrorCode.CONFIGURATION_ERROR),
            (ValidationError("bad"), ErrorCode.VALIDATION_ERROR),
            (MalformedInputError("bad"), ErrorCode.MALFORMED_RECORD),
            (EncodingError("bad"), ErrorCode.ENCODING_ERROR),
            (TransportError("bad"), ErrorCode.TRANSPORT_ERROR),
            (EndOfStream(), ErrorCode.END_OF_STREAM),
        ],
    )
    def test_default_codes(self, error: VecSpaceError, code: ErrorCode) -> None:
        """Each exception carries its own code."""
        assert error.code == code
        assert isinstance(error, VecSpaceError)

    def test_malformed_custom_code(self) -> None:
        """Malformed input can report a more specific code."""
        error = MalformedInputError("no header", code=ErrorCode.MALFORMED_HEADER)
        assert error.code == ErrorCode.MALFORMED_HEADER

    def test_codec_hierarchy(self) -> None:
        """Codec failures share a common base."""
        for cls in (MalformedInputError, EncodingError, TransportError, EndOfStream):
            assert issubclass(cls, CodecError)
        assert not issubclass(DimensionMismatchError, CodecError)
