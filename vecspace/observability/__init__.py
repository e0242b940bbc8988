"""Observability module for metrics and monitoring."""

from vecspace.observability.metrics import (
    get_metrics,
    track_export,
    track_parse,
    track_search,
)

__all__ = [
    "get_metrics",
    "track_export",
    "track_parse",
    "track_search",
]
