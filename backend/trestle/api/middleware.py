"""Trace middleware: one trace id per request, bound into every log line."""

import time
from typing import Awaitable, Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from trestle.api.errors import unhandled_exception_handler
from trestle.core.logging import get_logger

TRACE_HEADER = "X-Trace-Id"

logger = get_logger(__name__)


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Accepts an incoming X-Trace-Id (or mints one), exposes it on
    request.state for error bodies, echoes it on the response and logs
    the completed request.

    Exceptions no handler claimed become the bare 500 problem response
    here, so failed requests carry the trace id like every other one.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid4())
        request.state.trace_id = trace_id
        structlog.contextvars.bind_contextvars(trace_id=trace_id)
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await unhandled_exception_handler(request, exc)
            response.headers[TRACE_HEADER] = trace_id
            logger.info(
                "request.completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("trace_id")
