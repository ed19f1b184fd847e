"""FastAPI middleware for request tracing and access logging."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from diyapi.logging import get_logger

REQUEST_ID_HEADER = "Request-Id"

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID and write one access log line for it.

    - Reads Request-Id from request headers, or generates a UUID if missing
    - Binds request_id to structlog context (auto-included in all logs,
      including the ones written by errs.http_error_response)
    - Adds Request-Id to response headers
    - Logs method, path, status and duration once the response is ready
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_logged",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 3),
            user_agent=request.headers.get("user-agent"),
        )

        return response
