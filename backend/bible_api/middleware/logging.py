"""
Telugu Bible API — Access Log Middleware
==========================================

What:  One access-log line per HTTP request on the `bible_api.access` logger.
Why:   Shows which endpoints are read, which searches fail and how long
       the store takes.
How:   Times the downstream call, then logs the matched route template
       (so /books/john and /books/psalms group together), status, duration,
       response size and whether an API key was presented.
When:  Runs inside RequestIDMiddleware so the request ID is already set.

What we log vs what we DON'T log:
    ✅ Log: method, path, route template, status, duration, size, request ID, IP
    ✅ Log: a masked API key, when one was sent
    ❌ Don't log: query strings (the `key` parameter is an API key), headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bible_api.config import settings
from bible_api.middleware.request_id import request_id_var
from bible_api.middleware.usage import extract_api_key
from bible_api.services.usage_service import mask_token

logger = logging.getLogger("bible_api.access")

# Probes run every few seconds and would drown the useful lines
SKIPPED_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request, prefix: str = "") -> str:
    """
    '/bible-api/books/{book_name}' for a matched route, '-' otherwise.

    Depending on the FastAPI release, a route included with a prefix reports
    its template with or without it; the request path decides which.
    """
    route = request.scope.get("route")
    template = getattr(route, "path_format", None)
    if not template:
        return "-"
    if prefix and request.url.path.startswith(prefix + "/") and not template.startswith(prefix + "/"):
        template = prefix + template
    return template


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Typical durations:
        - GET /bible-api/books: 2-10ms (66 rows)
        - GET /bible-api/books/psalms: 20-80ms (2461 rows)
        - GET /bible-api/search: 5-50ms with the GIN index
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        token = extract_api_key(request)
        record = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "route": route_template(request, settings.api_prefix),
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "bytes": response.headers.get("content-length", "-"),
            "api_key": mask_token(token) if token else "-",
            "client_ip": request.client.host if request.client else "unknown",
        }

        logger.log(
            level_for_status(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms %(bytes)sB "
            "route=%(route)s key=%(api_key)s [%(request_id)s] from %(client_ip)s",
            record,
            extra={"access": record},
        )
        return response
