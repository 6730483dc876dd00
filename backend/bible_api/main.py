"""
Telugu Bible API — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error envelopes
       and the store lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn bible_api.main:app) and by the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────┐ ┌────────┐ ┌─────────┐ ┌────────────┐   │
    │  │ Req ID │→│  CORS  │→│ Logging │→│ Key usage  │   │
    │  └────────┘ └────────┘ └─────────┘ └────────────┘   │
    │                                                     │
    │  Routes ({prefix} = /bible-api):                    │
    │  ┌──────────────┐ ┌─────────────────┐ ┌──────────┐  │
    │  │ GET /books   │ │ GET /books/{b}  │ │GET search│  │
    │  └──────────────┘ └─────────────────┘ └──────────┘  │
    │                                                     │
    │  Exception Handlers → {success: false, error}       │
    │  Validation→400 │ NotFound→404 │ Database→500       │
    │  Unknown route → 404 + available_endpoints          │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration
    3. Build engine + session factory (unless injected)
    4. Create the usage tracker (unless injected)

    Shutdown:
    1. Drain pending key-usage updates
    2. Dispose the engine if this app created it
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from bible_api import __version__
from bible_api.config import settings
from bible_api.database import build_engine, build_session_factory
from bible_api.exceptions import BibleApiError
from bible_api.middleware.cors import CORSPreflightMiddleware
from bible_api.middleware.logging import RequestLoggingMiddleware
from bible_api.middleware.request_id import RequestIDMiddleware, request_id_var
from bible_api.middleware.usage import UsageTrackingMiddleware
from bible_api.routes import health, verses
from bible_api.routes.endpoints import available_endpoints
from bible_api.schemas.envelope import EndpointNotFoundResult, ErrorResult
from bible_api.services.usage_service import UsageTracker

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the verse store for the lifetime of the process.

    A session factory injected through create_app() is used as-is and left
    open on shutdown; its creator owns it.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Telugu Bible API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    engine = None
    if getattr(app.state, "session_factory", None) is None:
        engine = build_engine(settings)
        app.state.session_factory = build_session_factory(engine)
        logger.info("Verse store engine created (%s)", engine.url.render_as_string(hide_password=True))

    if getattr(app.state, "usage_tracker", None) is None:
        app.state.usage_tracker = UsageTracker(app.state.session_factory)

    logger.info("Serving verse API under %s", settings.api_prefix or "/")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Telugu Bible API shutting down...")

    await app.state.usage_tracker.drain(timeout=settings.usage_drain_timeout_seconds)

    if engine is not None:
        await engine.dispose()
        app.state.session_factory = None

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(status_code: int, body: ErrorResult) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure onto the `{success: false, error}` envelope.

    Handler hierarchy:
        BibleApiError subclasses  → their status_code (400 / 404 / 500)
        HTTP 404 / 405 (routing)  → 404 "Endpoint not found" + available_endpoints
        Other HTTPException       → its status with the detail as error
        RequestValidationError    → 400
        Exception (fallback)      → 500

    Store errors never reach the client verbatim; DatabaseError carries a
    generic message and the details are logged here.
    """

    @app.exception_handler(BibleApiError)
    async def handle_app_error(request: Request, exc: BibleApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _envelope(exc.status_code, ErrorResult(error=exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # Wrong method on a known path is reported like an unknown path
        if exc.status_code in (404, 405):
            return _envelope(
                404,
                EndpointNotFoundResult(
                    error="Endpoint not found",
                    available_endpoints=available_endpoints(settings.api_prefix),
                ),
            )
        return _envelope(exc.status_code, ErrorResult(error=str(exc.detail)))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _envelope(400, ErrorResult(error=message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _envelope(500, ErrorResult(error="Internal server error"))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    usage_tracker: Optional[UsageTracker] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session_factory: Pre-built store handle. When omitted, the lifespan
            handler builds one from settings.database_url.
        usage_tracker: Pre-built tracker. Defaults to one writing through
            `session_factory`.
    """
    app = FastAPI(
        title="Telugu Bible API",
        description=(
            "Read-only access to the Telugu Bible: list books, read verses by "
            "book/chapter/verse, and search verse text."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        redirect_slashes=False,
        lifespan=lifespan,
    )

    app.state.session_factory = session_factory
    if usage_tracker is None and session_factory is not None:
        usage_tracker = UsageTracker(session_factory)
    app.state.usage_tracker = usage_tracker

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute.
    # Execution order: RequestID → CORS → Logging → Usage → GZip → routes
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(UsageTrackingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSPreflightMiddleware, headers=settings.cors_headers)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(verses.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


# uvicorn expects `bible_api.main:app` to be importable
app = create_app()
