"""Request logging middleware."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by monitors; logged at DEBUG only
QUIET_PATHS = ("/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with its id, status and duration.

    A caller-supplied ``X-Request-ID`` is reused so print and export
    requests can be traced from the client that opened them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        target = f"{request.method} {request.url.path}"

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"[REQUEST {request_id}] {target} failed after {elapsed_ms:.1f}ms: {str(e)}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.log(level, f"[REQUEST {request_id}] {target} -> {response.status_code} ({elapsed_ms:.1f}ms)")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
