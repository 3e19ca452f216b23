"""Request metrics middleware."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from trace_api.telemetry import observe_request

# Scrapes and probes would otherwise dominate the request series.
_UNTRACKED_PATHS = frozenset({"/metrics", "/health"})


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _upload_bytes(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", "0"))
    except ValueError:
        return 0


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Count requests, their latency and upload size per route."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in _UNTRACKED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # Event streams are timed to their first byte only.
            observe_request(
                request.method,
                _route_label(request),
                status_code,
                time.perf_counter() - started,
                upload_bytes=_upload_bytes(request),
            )


__all__ = ["TelemetryMiddleware"]
