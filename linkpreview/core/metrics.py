from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# Preview pipeline
# ---------------------------------------------------------------------------
preview_requests_total = Counter(
    "preview_requests_total",
    "Total number of preview operations by outcome",
    ["status"],
)
preview_cache_lookups_total = Counter(
    "preview_cache_lookups_total",
    "Response cache lookups by result",
    ["result"],
)
redirect_hops = Histogram(
    "redirect_hops",
    "Number of redirect hops followed per resolved URL",
    buckets=[0, 1, 2, 3, 5, 10],
)
fetch_duration_seconds = Histogram(
    "fetch_duration_seconds",
    "Time spent fetching and decoding a page",
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10, 30],
)
extraction_duration_seconds = Histogram(
    "extraction_duration_seconds",
    "Time spent sanitizing and crawling page markup",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
