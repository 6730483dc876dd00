"""
Telugu Bible API — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the three error kinds the API reports.
Why:   Services raise meaningful errors; global handlers (registered in main.py)
       turn them into the `{success: false, error: ...}` envelope with the right
       HTTP status. Route handlers never build error responses by hand.
How:   Each exception carries a client-safe message and an optional context
       dict that is logged but never returned.

Exception Hierarchy:
    BibleApiError (base)
    ├── ValidationError   → 400 Bad Request (missing q, malformed numbers)
    ├── NotFoundError     → 404 Not Found (unknown book)
    └── DatabaseError     → 500 Internal Server Error (store failure or timeout)
"""

from typing import Any, Dict, Optional


class BibleApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BibleApiError):
    """
    Raised when a query parameter is missing or malformed.

    HTTP: 400 Bad Request

    Example response:
        {"success": false, "error": "Search query required"}
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(BibleApiError):
    """
    Raised when a requested resource does not exist.

    The message is passed through to the client verbatim, so callers choose the
    exact wording ("Book not found").
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(BibleApiError):
    """
    Raised when the verse store fails, is unreachable, or exceeds the
    configured timeout.

    HTTP: 500 Internal Server Error

    The message returned to the client is always generic. Driver errors can
    reveal table names and SQL, so those details go to the server log only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
