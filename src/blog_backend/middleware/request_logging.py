"""Request logging middleware: one line per request with status and duration."""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from blog_backend.managers.logging_manager import get_logger

logger = get_logger("request", prefix="[Request]")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        query_string = f"?{request.url.query}" if request.url.query else ""
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "%s %s%s failed after %.3fs",
                request.method,
                request.url.path,
                query_string,
                time.time() - start_time,
                exc_info=True,
            )
            raise

        logger.info(
            '%s %s%s %s %s %.3fs "%s"',
            request.method,
            request.url.path,
            query_string,
            response.status_code,
            request.client.host if request.client else "unknown",
            time.time() - start_time,
            request.headers.get("User-Agent", "Unknown"),
        )
        return response
