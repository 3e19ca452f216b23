"""Prometheus metrics for the HTTP surface and the voice query pipeline."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "trace_http_requests_total",
    "HTTP requests by route and status",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "trace_http_request_seconds",
    "Time until the response starts, per route",
    ("method", "route"),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 180.0),
)

UPLOAD_SIZE = Histogram(
    "trace_upload_bytes",
    "Declared request body size of uploads",
    ("route",),
    buckets=(16e3, 64e3, 256e3, 1e6, 4e6, 16e6, 64e6, 256e6),
)

ERROR_COUNTER = Counter(
    "trace_http_errors_total",
    "Requests answered with a 5xx status",
    ("method", "route"),
)

QUERY_OUTCOMES = Counter(
    "trace_query_outcomes_total",
    "Voice queries by final outcome",
    ("response_type",),
)

QUERY_STAGE_LATENCY = Histogram(
    "trace_query_stage_seconds",
    "Time spent in each voice query pipeline stage",
    ("stage",),
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
)

DEGRADED_PARSES = Counter(
    "trace_degraded_parses_total",
    "AI responses that did not match the expected JSON shape",
    ("stage",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
    *,
    upload_bytes: int = 0,
) -> None:
    """Record metrics for a completed HTTP request."""

    route = route or "unknown"
    method = method or "UNKNOWN"

    REQUEST_COUNT.labels(method=method, route=route, status=str(status_code)).inc()
    REQUEST_LATENCY.labels(method=method, route=route).observe(max(duration_seconds, 0))
    if upload_bytes > 0:
        UPLOAD_SIZE.labels(route=route).observe(upload_bytes)
    if status_code >= 500:
        ERROR_COUNTER.labels(method=method, route=route).inc()


@contextmanager
def observe_stage(stage: str) -> Iterator[None]:
    """Time a pipeline stage, including stages that raise."""

    start = time.perf_counter()
    try:
        yield
    finally:
        QUERY_STAGE_LATENCY.labels(stage=stage).observe(time.perf_counter() - start)


def record_outcome(response_type: str) -> None:
    QUERY_OUTCOMES.labels(response_type=response_type).inc()


def record_degraded_parse(stage: str) -> None:
    DEGRADED_PARSES.labels(stage=stage).inc()
