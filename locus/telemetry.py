from __future__ import annotations

from prometheus_client import REGISTRY, Counter, Histogram

PROMETHEUS_REGISTRY = REGISTRY

DATASOURCE_REQUESTS_TOTAL = Counter(
    "locus_datasource_requests_total",
    "Number of upstream requests issued by data-source adapters.",
    ("source", "operation", "outcome"),
    registry=PROMETHEUS_REGISTRY,
)

DATASOURCE_REQUEST_DURATION_SECONDS = Histogram(
    "locus_datasource_request_duration_seconds",
    "Latency distribution of data-source operations, including parsing.",
    ("source", "operation"),
    registry=PROMETHEUS_REGISTRY,
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        8.0,
        15.0,
    ),
)


def record_request(source: str, operation: str, outcome: str, duration: float) -> None:
    """Record one adapter operation in the Prometheus registry."""

    DATASOURCE_REQUESTS_TOTAL.labels(
        source=source, operation=operation, outcome=outcome
    ).inc()
    DATASOURCE_REQUEST_DURATION_SECONDS.labels(
        source=source, operation=operation
    ).observe(duration)


__all__ = [
    "DATASOURCE_REQUESTS_TOTAL",
    "DATASOURCE_REQUEST_DURATION_SECONDS",
    "PROMETHEUS_REGISTRY",
    "record_request",
]
