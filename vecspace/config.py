"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class CodecSettings(BaseSettings):
    """Default word2vec parser and exporter options."""

    model_config = SettingsConfigDict(env_prefix="CODEC_")

    header: bool = Field(
        default=True,
        description="Treat the first line as a 'count dimension' header",
    )
    term_separator: str = Field(
        default=" ",
        min_length=1,
        max_length=1,
        description="Character between the term and its values (text format)",
    )
    vec_separator: str = Field(
        default=" ",
        min_length=1,
        max_length=1,
        description="Character between two values (text format)",
    )
    binary: bool = Field(
        default=False,
        description="Use the binary sub-format instead of text",
    )
    index_terms: bool = Field(
        default=False,
        description="Build the term index while parsing",
    )
    read_chunk_size: int = Field(
        default=1 << 20,
        gt=0,
        description="Bytes requested from the input per read",
    )


class SearchSettings(BaseSettings):
    """Similarity search configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    default_k: int = Field(
        default=10,
        ge=0,
        description="Number of neighbours returned when k is not given",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Log at DEBUG level, overriding log_level",
    )

    # Nested settings
    codec: CodecSettings = Field(default_factory=CodecSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
