"""
Telugu Bible API — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked session, seeded database, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── session_factory: File-backed aiosqlite database, schema created, data seeded
    ├── app: create_app() wired to session_factory
    └── test_client: HTTPX AsyncClient talking to `app` over ASGITransport

Seed data:
    Books are inserted out of canonical order and verses out of
    (chapter, verse) order, so ordering assertions prove the queries sort.
"""

import os

# Must run before any bible_api import: the settings singleton reads these
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_PREFIX"] = "/bible-api"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from bible_api.database import Base, build_session_factory
from bible_api.models import ApiKey, Book, Verse

TEST_API_KEY = "tbapi_1234567890abcdef1234567890abcdef12345678"

SEED_BOOKS = [
    # (name, telugu_name, testament, book_order)
    ("john", "యోహాను", "new", 43),
    ("genesis", "ఆదికాండము", "old", 1),
    ("psalms", "కీర్తనల గ్రంథము", "old", 19),
]

SEED_VERSES = [
    # (book, chapter, verse, text)
    ("john", 3, 17, "లోకమునకు తీర్పు తీర్చుటకు దేవుడు తన కుమారుని లోకములోనికి పంపలేదు."),
    ("john", 1, 1, "ఆదియందు వాక్యముండెను."),
    ("john", 3, 16, "దేవుడు లోకమును ఎంతో ప్రేమించెను."),
    ("john", 3, 1, "పరిసయ్యులలో నీకొదేము అను పేరుగల మనుష్యుడొకడుండెను."),
    ("genesis", 1, 3, "దేవుడు వెలుగు కలుగును గాకని పలుకగా వెలుగు కలిగెను."),
    ("genesis", 1, 1, "ఆదియందు దేవుడు భూమ్యాకాశములను సృజించెను."),
    ("genesis", 1, 2, "భూమి నిరాకారముగాను శూన్యముగాను ఉండెను."),
    ("psalms", 23, 1, "యెహోవా నా కాపరి; నాకు లేమి కలుగదు."),
]


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_book(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = book
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """
    Provides a session factory over a fresh, seeded SQLite database.

    File-backed (not :memory:) so the request session and the usage
    tracker's session each get their own connection.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bible.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(engine)
    async with factory() as session:
        books = {
            name: Book(name=name, telugu_name=telugu, testament=testament, book_order=order)
            for name, telugu, testament, order in SEED_BOOKS
        }
        session.add_all(books.values())
        await session.flush()
        session.add_all(
            Verse(book_id=books[book].id, chapter=chapter, verse=verse, text=text)
            for book, chapter, verse, text in SEED_VERSES
        )
        session.add(ApiKey(name="Mobile app", key_hash=TEST_API_KEY))
        await session.commit()

    yield factory

    await engine.dispose()


@pytest.fixture
def app(session_factory):
    from bible_api.main import create_app
    return create_app(session_factory=session_factory)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_books(test_client):
            response = await test_client.get("/bible-api/books")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
