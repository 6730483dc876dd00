"""
Telugu Bible API — Verse Service (Query Construction)
=======================================================

What:  Implements the three read operations behind the verse endpoints.
Why:   Keeps validation and SQL construction independent of HTTP so it can be
       unit-tested with a mocked session.
How:   Each method validates its raw query-string inputs, builds one SQLAlchemy
       statement per store round-trip, and shapes the rows into an envelope.
Who:   Called by routes/verses.py.

Query Plans:
    list_books        SELECT * FROM bible_books ORDER BY book_order
    get_book_verses   SELECT ... FROM bible_books WHERE name = :name
                      SELECT chapter, verse, text FROM bible_verses
                      WHERE book_id = :id [AND chapter = :c [AND verse = :v]]
                      ORDER BY chapter, verse
    search_verses     SELECT v.chapter, v.verse, v.text, b.name, b.telugu_name
                      FROM bible_verses v JOIN bible_books b ON b.id = v.book_id
                      WHERE <text match> ORDER BY b.book_order, v.chapter, v.verse
                      LIMIT :limit

Error Handling Strategy:
    Malformed input → ValidationError (400) before any query runs.
    Unknown book → NotFoundError (404).
    Anything the store raises, and timeouts → DatabaseError (500).
"""

import asyncio
import logging
from typing import Any, Optional

from sqlalchemy import func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from bible_api.config import Settings, settings
from bible_api.exceptions import DatabaseError, NotFoundError, ValidationError
from bible_api.models.bible import Book, Verse
from bible_api.schemas.envelope import (
    BookOut,
    BookRef,
    BooksResult,
    BookVersesResult,
    SearchBookRef,
    SearchHit,
    SearchResult,
    VerseOut,
)

logger = logging.getLogger(__name__)


def parse_positive_int(raw: Optional[str], field: str) -> Optional[int]:
    """
    Parse an optional query-string number.

    Absent or empty values mean "no filter" and return None. Anything else must
    be a whole number >= 1, otherwise ValidationError names the parameter.
    """
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValidationError(
            message=f"Invalid {field}: must be a positive integer",
            field=field,
            context={"value": raw},
        )
    if value < 1:
        raise ValidationError(
            message=f"Invalid {field}: must be a positive integer",
            field=field,
            context={"value": raw},
        )
    return value


def _dialect_name(db: AsyncSession) -> str:
    bind = getattr(db, "bind", None)
    return getattr(getattr(bind, "dialect", None), "name", "")


class VerseService:
    """
    Read operations over the books and verses tables.

    Stateless apart from configuration: the session is passed to every call,
    so one instance serves all requests concurrently.
    """

    def __init__(self, config: Settings = settings):
        self.config = config

    async def _execute(self, db: AsyncSession, statement: Any, operation: str):
        """
        Run one statement with the configured timeout.

        Every failure, including the timeout, becomes DatabaseError so the
        caller sees a single "store unavailable" kind. No retries.
        """
        try:
            return await asyncio.wait_for(
                db.execute(statement),
                timeout=self.config.store_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Store timed out after %.1fs during %s",
                self.config.store_timeout_seconds,
                operation,
            )
            raise DatabaseError(context={"operation": operation, "reason": "timeout"})
        except Exception as e:
            logger.error("Store error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                context={"operation": operation, "error_type": type(e).__name__},
            )

    async def list_books(self, db: AsyncSession) -> BooksResult:
        """All books in canonical order."""
        result = await self._execute(
            db,
            select(Book).order_by(Book.book_order),
            "list_books",
        )
        books = [BookOut.model_validate(book) for book in result.scalars().all()]
        return BooksResult(data=books, count=len(books))

    async def get_book_verses(
        self,
        db: AsyncSession,
        book_name: str,
        chapter: Optional[str] = None,
        verse: Optional[str] = None,
    ) -> BookVersesResult:
        """
        Verses of one book, optionally narrowed to a chapter or a single verse.

        Filter rules:
            chapter only      → every verse of that chapter
            chapter + verse   → at most one verse
            verse only        → ignored; the whole book is returned

        Args:
            db: Async database session
            book_name: Exact, case-sensitive Book.name ("john")
            chapter: Raw query-string value or None
            verse: Raw query-string value or None

        Raises:
            ValidationError: chapter (or verse, when chapter is given) is not a positive integer
            NotFoundError: No book has this name
            DatabaseError: Store failure or timeout
        """
        chapter_no = parse_positive_int(chapter, "chapter")
        verse_no: Optional[int] = None
        if chapter_no is not None:
            verse_no = parse_positive_int(verse, "verse")
        elif verse is not None and verse.strip():
            logger.info(
                "Ignoring verse=%r for book %r: verse filter requires chapter",
                verse,
                book_name,
            )

        # ── Resolve the book ──────────────────────────────────────────────
        result = await self._execute(
            db,
            select(Book).where(Book.name == book_name),
            "get_book",
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(message="Book not found", resource="book", resource_id=book_name)

        # ── Build the verse query ─────────────────────────────────────────
        query = select(Verse).where(Verse.book_id == book.id)
        if chapter_no is not None:
            query = query.where(Verse.chapter == chapter_no)
            if verse_no is not None:
                query = query.where(Verse.verse == verse_no)
        query = query.order_by(Verse.chapter, Verse.verse)

        result = await self._execute(db, query, "list_verses")
        verses = [VerseOut.model_validate(row) for row in result.scalars().all()]

        logger.debug(
            "Book %s chapter=%s verse=%s → %d verses",
            book.name,
            chapter_no,
            verse_no,
            len(verses),
        )
        return BookVersesResult(
            book=BookRef.model_validate(book),
            data=verses,
            count=len(verses),
        )

    def _text_match(self, db: AsyncSession, query_text: str):
        """
        Dialect-appropriate predicate on Verse.text.

        PostgreSQL uses full-text search:
            to_tsvector(cfg, text) @@ plainto_tsquery(cfg, :q)
        which the GIN index from the initial migration serves. Other dialects
        (SQLite in the test suite) fall back to a substring match.

        The configuration is rendered as a literal, not a bound parameter:
        the planner only uses the index when the expression is identical to
        to_tsvector('simple', text).
        """
        if _dialect_name(db) == "postgresql":
            regconfig = literal_column(f"'{self.config.search_text_config}'")
            document = func.to_tsvector(regconfig, Verse.text)
            return document.op("@@", is_comparison=True)(func.plainto_tsquery(regconfig, query_text))
        return Verse.text.contains(query_text, autoescape=True)

    async def search_verses(
        self,
        db: AsyncSession,
        q: Optional[str],
        limit: Optional[str] = None,
    ) -> SearchResult:
        """
        Text search over verse text, capped at `limit` hits.

        Ordering is canonical (book_order, chapter, verse) so the same query
        always returns the same page regardless of planner choices.

        Raises:
            ValidationError: q missing/blank, or limit not in 1..search_max_limit
            DatabaseError: Store failure or timeout
        """
        query_text = (q or "").strip()
        if not query_text:
            raise ValidationError(message="Search query required", field="q")

        limit_no = parse_positive_int(limit, "limit")
        if limit_no is None:
            limit_no = self.config.search_default_limit
        if limit_no > self.config.search_max_limit:
            raise ValidationError(
                message=f"Invalid limit: must not exceed {self.config.search_max_limit}",
                field="limit",
                context={"value": limit},
            )

        statement = (
            select(
                Verse.chapter,
                Verse.verse,
                Verse.text,
                Book.name,
                Book.telugu_name,
            )
            .join(Book, Verse.book_id == Book.id)
            .where(self._text_match(db, query_text))
            .order_by(Book.book_order, Verse.chapter, Verse.verse)
            .limit(limit_no)
        )

        result = await self._execute(db, statement, "search_verses")
        hits = [
            SearchHit(
                chapter=row.chapter,
                verse=row.verse,
                text=row.text,
                book=SearchBookRef(name=row.name, telugu_name=row.telugu_name),
            )
            for row in result.all()
        ]

        logger.info("Search %r (limit %d) → %d hits", query_text, limit_no, len(hits))
        return SearchResult(query=q, data=hits, count=len(hits))


# Stateless; shared by all requests
verse_service = VerseService()
