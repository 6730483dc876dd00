"""
Telugu Bible API — Verse Route Handlers
=========================================

What:  Handles the three verse endpoints under the API prefix.
Why:   The public read surface consumed by apps and the dashboard playground.
How:   Every route is registered from the Endpoint table. Query parameters
       arrive as raw strings and are validated by VerseService, so malformed
       input produces the API's own 400 envelope instead of FastAPI's 422.
Who:   Mounted by create_app() with prefix=settings.api_prefix.

Caching:
    Verse data is immutable reference data, so successful responses are
    publicly cacheable for an hour.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bible_api.database import get_db_session
from bible_api.routes.endpoints import Endpoint
from bible_api.schemas.envelope import (
    BooksResult,
    BookVersesResult,
    ErrorResult,
    SearchResult,
)
from bible_api.services.verse_service import verse_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Verses"])

CACHE_CONTROL = "public, max-age=3600"


@router.api_route(
    Endpoint.LIST_BOOKS.path,
    methods=[Endpoint.LIST_BOOKS.method],
    response_model=BooksResult,
    responses={
        500: {"description": "Store error", "model": ErrorResult},
    },
    summary="List all books in canonical order",
)
async def list_books(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> BooksResult:
    result = await verse_service.list_books(db)
    response.headers["Cache-Control"] = CACHE_CONTROL
    return result


@router.api_route(
    Endpoint.BOOK_VERSES.path,
    methods=[Endpoint.BOOK_VERSES.method],
    response_model=BookVersesResult,
    responses={
        400: {"description": "chapter or verse is not a positive integer", "model": ErrorResult},
        404: {"description": "Book not found", "model": ErrorResult},
        500: {"description": "Store error", "model": ErrorResult},
    },
    summary="List the verses of one book",
    description=(
        "Returns every verse of the book, ordered by chapter then verse. "
        "`chapter` narrows to one chapter; `verse` narrows further to a single "
        "verse but is ignored unless `chapter` is also given."
    ),
)
async def get_book_verses(
    book_name: str,
    response: Response,
    chapter: Optional[str] = Query(default=None, description="Chapter number"),
    verse: Optional[str] = Query(
        default=None,
        description="Verse number (only applied together with chapter)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> BookVersesResult:
    """
    Args:
        book_name: Case-sensitive book slug, e.g. "john"
    """
    result = await verse_service.get_book_verses(
        db=db,
        book_name=book_name,
        chapter=chapter,
        verse=verse,
    )
    response.headers["Cache-Control"] = CACHE_CONTROL
    return result


@router.api_route(
    Endpoint.SEARCH.path,
    methods=[Endpoint.SEARCH.method],
    response_model=SearchResult,
    responses={
        400: {"description": "Missing q or invalid limit", "model": ErrorResult},
        500: {"description": "Store error", "model": ErrorResult},
    },
    summary="Search verse text",
    description=(
        "Full-text search over verse text. Results are ordered canonically "
        "(book, chapter, verse) and capped at `limit` (default 20)."
    ),
)
async def search_verses(
    q: Optional[str] = Query(default=None, description="Search text, e.g. దేవుడు"),
    limit: Optional[str] = Query(default=None, description="Maximum number of results"),
    db: AsyncSession = Depends(get_db_session),
) -> SearchResult:
    return await verse_service.search_verses(db=db, q=q, limit=limit)
