"""
Telugu Bible API — Database Session Management
================================================

What:  Async SQLAlchemy engine construction, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   The engine and session factory are built once at startup and stored on
       `app.state`; each request borrows a session through `get_db_session`.
Who:   Used by route handlers via FastAPI's dependency injection system,
       and by the usage tracker for its own short-lived sessions.
When:  Engine is created in the lifespan handler (or injected by tests);
       sessions are created per-request.

Architecture Decision:
    There is no module-level engine. The application factory receives (or
    builds) the session factory explicitly, so tests can point the whole app at
    a throwaway SQLite file and the process owns exactly one pool whose
    lifetime matches the lifespan.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bible_api.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for autogenerate and the
    test suite uses for `create_all`.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings`.

    Pool sizing only applies to server databases; SQLite's async adapter
    manages its own pool and rejects `pool_size`/`max_overflow`.
    """
    kwargs = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: ORM rows stay readable after the dependency commits
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Takes the session factory installed on `app.state` at startup
        2. Yields a fresh session to the route handler
        3. On success: commits (a no-op for the read-only verse routes)
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
