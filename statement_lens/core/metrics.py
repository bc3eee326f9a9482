from __future__ import annotations

from prometheus_client import Counter, Histogram

PROXY_REQUESTS_TOTAL = Counter(
    "statement_lens_proxy_requests_total",
    "Proxy requests grouped by endpoint and outcome",
    labelnames=("endpoint", "outcome"),
)

UPSTREAM_LATENCY_SECONDS = Histogram(
    "statement_lens_upstream_latency_seconds",
    "Latency of upstream model calls",
    labelnames=("model", "status"),
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60, 120, float("inf")),
)

DOCUMENT_SIZE_BYTES = Histogram(
    "statement_lens_document_size_bytes",
    "Size of encoded documents accepted by the encoder",
    buckets=(64_000, 256_000, 1_000_000, 4_000_000, 10_000_000, 21_000_000, float("inf")),
)


def record_proxy_outcome(*, endpoint: str, outcome: str) -> None:
    PROXY_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome=outcome).inc()


def observe_upstream_latency(*, model: str, status: int | None, latency: float) -> None:
    status_label = str(status) if status is not None else "transport_error"
    UPSTREAM_LATENCY_SECONDS.labels(model=model, status=status_label).observe(latency)


def observe_document_size(*, size_bytes: int) -> None:
    DOCUMENT_SIZE_BYTES.observe(size_bytes)


__all__ = [
    "observe_document_size",
    "observe_upstream_latency",
    "record_proxy_outcome",
]
