"""Telemetry helpers and metrics."""

from .metrics import (
    DEGRADED_PARSES,
    ERROR_COUNTER,
    QUERY_OUTCOMES,
    QUERY_STAGE_LATENCY,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    UPLOAD_SIZE,
    observe_request,
    observe_stage,
    record_degraded_parse,
    record_outcome,
)

__all__ = [
    "DEGRADED_PARSES",
    "ERROR_COUNTER",
    "QUERY_OUTCOMES",
    "QUERY_STAGE_LATENCY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "UPLOAD_SIZE",
    "observe_request",
    "observe_stage",
    "record_degraded_parse",
    "record_outcome",
]
