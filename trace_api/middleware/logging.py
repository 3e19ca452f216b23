"""Per-request access log for the API."""

from __future__ import annotations

import json
import logging
import time
from typing import Any
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("trace_api.middleware.structured")

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_COLORS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
)
_DEFAULT_COLOR = "\u001b[36m"
_RESET = "\u001b[0m"


def _color_for(status: int) -> str:
    for floor, color in _STATUS_COLORS:
        if status >= floor:
            return color
    return _DEFAULT_COLOR


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log one coloured line per request and echo a request id back to the client.

    Uploads log their declared size; event streams are flagged since the
    logged duration only covers the time until the stream starts.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12]
        started = time.perf_counter()
        entry: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
            "upload_bytes": request.headers.get("content-length"),
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            entry.update(status=500, ms=_elapsed_ms(started), error=repr(exc))
            logger.exception(_console_line(entry))
            raise

        entry.update(status=response.status_code, ms=_elapsed_ms(started))
        if response.media_type == "text/event-stream" or response.headers.get(
            "content-type", ""
        ).startswith("text/event-stream"):
            entry["stream"] = True
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(_console_line(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _console_line(entry: dict[str, Any]) -> str:
    status = entry.get("status") or 0
    message = " ".join(
        f"{key}={'-' if value is None else value}" for key, value in entry.items()
    )
    return f"{_color_for(status)}{message}{_RESET}"


__all__ = ["REQUEST_ID_HEADER", "StructuredLoggingMiddleware"]
