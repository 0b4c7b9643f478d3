"""Request/response logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("classroom.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log incoming requests and responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.0fms",
                method,
                path,
                (time.perf_counter() - start) * 1000,
            )
            raise

        logger.info(
            "%s %s %d (%.0fms)",
            method,
            path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response


__all__ = ["RequestLoggingMiddleware"]
