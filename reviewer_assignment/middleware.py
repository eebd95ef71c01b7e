# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request-scoped middleware: X-Request-ID correlation and HTTP metrics.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from reviewer_assignment.core.logging import request_id_var
from reviewer_assignment.metrics.prometheus import HTTP_ERRORS, REQUEST_COUNT, REQUEST_LATENCY

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# probes and docs stay out of the request metrics
UNTRACKED_PATHS = frozenset({
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
})


def _incoming_request_id(request: Request) -> str:
    candidate = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH:
        return candidate
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request id (or mint one), bind it for logging and
    echo it on the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = _incoming_request_id(request)
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests, time them and count error responses.

    The endpoint label is the matched route template so that ids in query
    strings never explode label cardinality; unrouted paths share one label.
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or "unmatched"
        method = request.method
        status = str(response.status_code)

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(elapsed)
        if response.status_code >= 400:
            HTTP_ERRORS.labels(method=method, endpoint=endpoint, status=status).inc()
        return response
