"""Prometheus metrics for vecspace.

Provides metrics instrumentation for:
- word2vec parse duration and record counts
- export duration and bytes written
- top-k search latency and result sizes
"""

from prometheus_client import Counter, Histogram, generate_latest

# Codec Metrics
PARSE_DURATION = Histogram(
    "vecspace_parse_duration_seconds",
    "word2vec parse duration in seconds",
    ["format", "status"],
    buckets=[0.01, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)

PARSE_TOTAL = Counter(
    "vecspace_parse_total",
    "Total parse calls",
    ["format", "status"],
)

RECORDS_PARSED = Counter(
    "vecspace_records_parsed_total",
    "Total vectors read from word2vec input",
    ["format"],
)

EXPORT_DURATION = Histogram(
    "vecspace_export_duration_seconds",
    "word2vec export duration in seconds",
    ["format", "status"],
    buckets=[0.01, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)

EXPORT_BYTES = Counter(
    "vecspace_export_bytes_total",
    "Total bytes written by exports",
    ["format"],
)

# Search Metrics
SEARCH_DURATION = Histogram(
    "vecspace_search_duration_seconds",
    "Top-k search duration in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

SEARCH_RESULTS_RETURNED = Histogram(
    "vecspace_search_results_returned",
    "Number of hits returned per top-k search",
    buckets=[0, 1, 5, 10, 20, 50, 100, 500],
)

SEARCH_VECTORS_SCANNED = Counter(
    "vecspace_search_vectors_scanned_total",
    "Total vectors scored by top-k searches",
)


def _format_label(binary: bool) -> str:
    return "binary" if binary else "text"


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def track_parse(
    binary: bool,
    duration: float,
    records: int,
    success: bool = True,
) -> None:
    """Track a parse call.

    Args:
        binary: Whether the binary sub-format was read.
        duration: Parse duration in seconds.
        records: Number of vectors read.
        success: Whether the parse succeeded.
    """
    fmt = _format_label(binary)
    status = "success" if success else "error"

    PARSE_DURATION.labels(format=fmt, status=status).observe(duration)
    PARSE_TOTAL.labels(format=fmt, status=status).inc()
    if success:
        RECORDS_PARSED.labels(format=fmt).inc(records)


def track_export(
    binary: bool,
    duration: float,
    bytes_written: int,
    success: bool = True,
) -> None:
    """Track an export call.

    Args:
        binary: Whether the binary sub-format was written.
        duration: Export duration in seconds.
        bytes_written: Number of bytes written.
        success: Whether the export succeeded.
    """
    fmt = _format_label(binary)
    status = "success" if success else "error"

    EXPORT_DURATION.labels(format=fmt, status=status).observe(duration)
    EXPORT_BYTES.labels(format=fmt).inc(bytes_written)


def track_search(
    duration: float,
    scanned: int,
    returned: int,
) -> None:
    """Track a top-k search.

    Args:
        duration: Search duration in seconds.
        scanned: Number of vectors scored.
        returned: Number of hits returned.
    """
    SEARCH_DURATION.observe(duration)
    SEARCH_VECTORS_SCANNED.inc(scanned)
    SEARCH_RESULTS_RETURNED.observe(returned)
