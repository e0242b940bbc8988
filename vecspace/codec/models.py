"""word2vec codec options."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from vecspace.config import CodecSettings
from vecspace.exceptions import ConfigurationError


class CodecOptions(BaseModel):
    """Options shared by the word2vec parser and exporter.

    Parser and exporter must use matching options for a file to round-trip.

    Attributes:
        header: Whether the file starts with a ``count dimension`` line.
        term_separator: Character between term and values (text only).
        vec_separator: Character between two values (text only).
        binary: Binary sub-format instead of text.
        index_terms: Build the term index while parsing (parser only).
        read_chunk_size: Bytes requested per read (parser only).
    """

    model_config = ConfigDict(frozen=True)

    header: bool = Field(default=True, description="Header line present")
    term_separator: str = Field(
        default=" ",
        min_length=1,
        max_length=1,
        description="Term/value separator",
    )
    vec_separator: str = Field(
        default=" ",
        min_length=1,
        max_length=1,
        description="Value/value separator",
    )
    binary: bool = Field(default=False, description="Binary sub-format")
    index_terms: bool = Field(default=False, description="Index terms on parse")
    read_chunk_size: int = Field(default=1 << 20, gt=0, description="Read size")

    @classmethod
    def from_settings(cls, settings: CodecSettings) -> "CodecOptions":
        """Build options from environment configuration."""
        return cls.model_validate(settings.model_dump())

    def with_changes(self, **changes: Any) -> "CodecOptions":
        """Return validated options with ``changes`` applied.

        Raises:
            ConfigurationError: If a changed value is invalid.
        """
        try:
            return CodecOptions.model_validate({**self.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid codec option: {e.errors()[0]['msg']}",
                details={"changes": changes},
            ) from e
