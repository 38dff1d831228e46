"""Custom FastAPI middlewares for observability."""
from __future__ import annotations

import logging
import time
from typing import Callable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .monitoring import observe_request

logger = logging.getLogger("khqrkit.http")

REQUEST_ID_HEADER = "X-Request-ID"


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request metadata, latency, and status codes; tag each request with an id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": _route_path(request),
                    "duration_ms": round(duration_ms, 2),
                },
            )
            observe_request(request.method, _route_path(request), 500, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        level = logging.INFO
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING

        route_path = _route_path(request)
        logger.log(
            level,
            "request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": route_path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        observe_request(request.method, route_path, response.status_code, duration_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
