"""
Cyber Kitchen Backend — Request Logging Middleware
====================================================

What:  One access-log line per HTTP request.
How:   Times the rest of the stack and logs method, path, status, duration,
       response size, request ID and client IP.
Who:   Applied to every request via Starlette middleware.

Log levels:
    5xx → ERROR, 4xx → WARNING, API calls → INFO
    Image hits under the media URL prefix → DEBUG (a recipe list view
    loads dozens of them)
    /health → not logged

Request bodies are never logged (recipe collections can be large and
uploads are binary).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cyberkitchen.config import settings
from cyberkitchen.middleware.request_id import request_id_var

logger = logging.getLogger("cyberkitchen.access")

QUIET_PATHS = {"/health"}


def access_log_level(path: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if path.startswith(settings.media_url_prefix + "/"):
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log for the API and the static media mount."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        size = response.headers.get("content-length", "-")

        logger.log(
            access_log_level(path, response.status_code),
            "%s %s %d %s bytes %.1fms [%s] from %s",
            request.method,
            path,
            response.status_code,
            size,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
