"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

import pytest

from vecspace.config import get_settings
from vecspace.space.store import VecSpace
from vecspace.vectors.models import Vector


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_vectors() -> list[Vector]:
    """Three 3-dimensional vectors, the last two sharing a term."""
    return [
        Vector([1.2, 2.0, 4.4], "term1"),
        Vector([2.3, 1.0, 3.4], "term3"),
        Vector([3.1, 9.4, 3.0], "term3"),
    ]


@pytest.fixture
def space(sample_vectors: list[Vector]) -> VecSpace:
    """Space holding the sample vectors.

    Returns:
        VecSpace of dimension 3 without term index.
    """
    space = VecSpace(3)
    space.extend(sample_vectors)
    return space
