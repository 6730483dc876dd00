"""
Telugu Bible API — CORS and Pre-flight Middleware
===================================================

What:  Answers every OPTIONS request with an empty 200 and stamps permissive
       cross-origin headers on every response.
Why:   The API is called directly from browsers on arbitrary origins (the
       dashboard playground, third-party sites). Clients rely on the headers
       being present unconditionally, including on 4xx/5xx envelopes and on
       requests that carry no Origin header.
How:   OPTIONS short-circuits before routing, so no route needs an OPTIONS
       handler and unknown paths still pre-flight successfully. Exceptions no
       handler claimed become the 500 envelope here, inside the header stamping.

Why not Starlette's CORSMiddleware:
    It only treats a request as pre-flight when both Origin and
    Access-Control-Request-Method are present, and only adds headers when an
    Origin header is sent. A bare `OPTIONS /bible-api/books` would fall
    through to routing and come back as "Endpoint not found".
"""

import logging
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from bible_api.middleware.request_id import request_id_var
from bible_api.schemas.envelope import ErrorResult

logger = logging.getLogger(__name__)


class CORSPreflightMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, headers: Dict[str, str]):
        super().__init__(app)
        self.headers = dict(headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self.headers)

        try:
            response = await call_next(request)
        except Exception as e:
            # Starlette's own 500 handler sits outside this middleware and
            # would answer without the cross-origin headers
            logger.error(
                "[%s] Unexpected error: %s",
                request_id_var.get(""),
                str(e),
                exc_info=True,
            )
            response = JSONResponse(
                status_code=500,
                content=ErrorResult(error="Internal server error").model_dump(mode="json"),
            )

        for name, value in self.headers.items():
            response.headers[name] = value
        return response
