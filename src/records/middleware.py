"""Request tracing."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from records.logging import get_logger

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


def _duration_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Give each request an ID and write one log line when it finishes.

    The ID comes from the caller's X-Request-ID header when present, a fresh
    UUID otherwise. It is bound into the structlog context for every event
    logged while handling the request, and returned on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors are rendered as 500 further out; record the timing here
            logger.error("request_failed", duration_ms=_duration_ms(start))
            raise

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_duration_ms(start),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
