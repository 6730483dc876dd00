"""
Telugu Bible API — Usage Tracking Middleware
==============================================

What:  Hands any presented API key to the UsageTracker.
Why:   Key usage is tracked for every request, whatever the route and whatever
       the outcome, but keys are never required or validated.
How:   Reads `x-api-key`, falling back to the `key` query parameter, AFTER the
       downstream response is produced, then schedules a detached update.
       The response is returned unchanged either way.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bible_api.services.usage_service import mask_token

logger = logging.getLogger(__name__)


def extract_api_key(request: Request) -> Optional[str]:
    """Header wins over query parameter; blank values count as absent."""
    token = request.headers.get("x-api-key") or request.query_params.get("key")
    if token is None:
        return None
    token = token.strip()
    return token or None


class UsageTrackingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        token = extract_api_key(request)
        if token:
            tracker = getattr(request.app.state, "usage_tracker", None)
            if tracker is None:
                logger.debug("No usage tracker installed; skipping key usage update")
            else:
                try:
                    tracker.schedule(token)
                except Exception as e:
                    logger.warning(
                        "Could not schedule usage update for API key %s: %s",
                        mask_token(token),
                        str(e),
                    )

        return response
