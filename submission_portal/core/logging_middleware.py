import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("submission_portal.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request; client errors at WARNING."""

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s from %s failed after %.2fs",
                request.method,
                request.url.path,
                client,
                time.monotonic() - start,
            )
            raise

        duration = time.monotonic() - start
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s from %s -> %s (%.2fs)",
            request.method,
            request.url.path,
            client,
            response.status_code,
            duration,
        )

        return response
