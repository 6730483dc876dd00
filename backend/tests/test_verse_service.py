"""
Telugu Bible API — Verse Service Unit Tests
=============================================

What:  Tests for VerseService validation and query construction.
Why:   Input rules and store-failure mapping must hold without a database.
How:   Uses the mock DB session; statements are inspected by compiling them.

What we test:
    ✅ Query-string number parsing (absent, empty, malformed, non-positive)
    ✅ Store errors and timeouts become DatabaseError
    ✅ Unknown book raises NotFoundError before the verse query
    ✅ Chapter/verse filters reach the SQL
    ✅ PostgreSQL search uses full-text matching
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from bible_api.config import Settings
from bible_api.exceptions import DatabaseError, NotFoundError, ValidationError
from bible_api.models.bible import Book, Verse
from bible_api.services.verse_service import VerseService, parse_positive_int


def _result(scalar=None, scalars=(), rows=()):
    """A stand-in for the Result object returned by AsyncSession.execute."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = list(scalars)
    result.all.return_value = list(rows)
    return result


def _sql(statement, dialect=None) -> str:
    return str(statement.compile(dialect=dialect))


def _params(statement) -> list:
    return list(statement.compile().params.values())


JOHN = Book(id=uuid.uuid4(), name="john", telugu_name="యోహాను", testament="new", book_order=43)


class TestParsePositiveInt:

    @pytest.mark.parametrize("raw", [None, "", "  "])
    def test_absent_means_no_filter(self, raw):
        assert parse_positive_int(raw, "chapter") is None

    def test_valid_number(self):
        assert parse_positive_int("3", "chapter") == 3
        assert parse_positive_int(" 16 ", "verse") == 16

    @pytest.mark.parametrize("raw", ["abc", "1.5", "0", "-1", "3a"])
    def test_rejects_malformed(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_positive_int(raw, "chapter")

        assert exc_info.value.status_code == 400
        assert exc_info.value.field == "chapter"
        assert "chapter" in exc_info.value.message


class TestListBooks:

    def setup_method(self):
        self.service = VerseService()

    @pytest.mark.asyncio
    async def test_orders_by_book_order(self, mock_db_session):
        mock_db_session.execute.return_value = _result(scalars=[JOHN])

        result = await self.service.list_books(mock_db_session)

        assert result.count == 1
        assert result.data[0].name == "john"
        statement = mock_db_session.execute.call_args.args[0]
        assert "ORDER BY bible_books.book_order" in _sql(statement)

    @pytest.mark.asyncio
    async def test_store_error_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = ConnectionRefusedError("connection refused")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.list_books(mock_db_session)

        assert exc_info.value.status_code == 500
        assert "connection refused" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_becomes_database_error(self, mock_db_session):
        service = VerseService(Settings(store_timeout_seconds=0.01))

        async def slow_execute(statement):
            await asyncio.sleep(1)

        mock_db_session.execute = AsyncMock(side_effect=slow_execute)

        with pytest.raises(DatabaseError) as exc_info:
            await service.list_books(mock_db_session)

        assert exc_info.value.context["reason"] == "timeout"


class TestGetBookVerses:

    def setup_method(self):
        self.service = VerseService()

    @pytest.mark.asyncio
    async def test_unknown_book(self, mock_db_session):
        mock_db_session.execute.return_value = _result(scalar=None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_book_verses(mock_db_session, "nosuchbook")

        assert exc_info.value.message == "Book not found"
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_malformed_chapter_checked_before_query(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.get_book_verses(mock_db_session, "john", chapter="abc")

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chapter_and_verse_filters(self, mock_db_session):
        verse = Verse(book_id=JOHN.id, chapter=3, verse=16, text="దేవుడు లోకమును ఎంతో ప్రేమించెను.")
        mock_db_session.execute.side_effect = [
            _result(scalar=JOHN),
            _result(scalars=[verse]),
        ]

        result = await self.service.get_book_verses(
            mock_db_session, "john", chapter="3", verse="16"
        )

        assert result.book.name == "john"
        assert result.count == 1
        assert result.data[0].verse == 16

        statement = mock_db_session.execute.call_args_list[1].args[0]
        sql = _sql(statement)
        assert "bible_verses.chapter =" in sql
        assert "bible_verses.verse =" in sql
        assert 3 in _params(statement)
        assert 16 in _params(statement)
        assert "ORDER BY bible_verses.chapter, bible_verses.verse" in sql

    @pytest.mark.asyncio
    async def test_verse_without_chapter_not_filtered(self, mock_db_session):
        mock_db_session.execute.side_effect = [_result(scalar=JOHN), _result()]

        await self.service.get_book_verses(mock_db_session, "john", verse="junk")

        sql = _sql(mock_db_session.execute.call_args_list[1].args[0])
        assert "bible_verses.chapter =" not in sql
        assert "bible_verses.verse =" not in sql


class TestSearchVerses:

    def setup_method(self):
        self.service = VerseService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("q", [None, "", " \t "])
    async def test_query_required(self, mock_db_session, q):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.search_verses(mock_db_session, q)

        assert exc_info.value.message == "Search query required"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_limit_above_maximum(self, mock_db_session):
        service = VerseService(Settings(search_max_limit=50))

        with pytest.raises(ValidationError) as exc_info:
            await service.search_verses(mock_db_session, "దేవుడు", limit="51")

        assert exc_info.value.field == "limit"

    @pytest.mark.asyncio
    async def test_default_limit_and_ordering(self, mock_db_session):
        mock_db_session.execute.return_value = _result()

        result = await self.service.search_verses(mock_db_session, "దేవుడు")

        assert result.count == 0
        assert result.query == "దేవుడు"
        statement = mock_db_session.execute.call_args.args[0]
        sql = _sql(statement)
        assert "LIMIT" in sql
        assert 20 in _params(statement)
        assert "ORDER BY bible_books.book_order, bible_verses.chapter, bible_verses.verse" in sql

    @pytest.mark.asyncio
    async def test_rows_shaped_into_hits(self, mock_db_session):
        row = MagicMock(chapter=3, verse=16, text="దేవుడు లోకమును ఎంతో ప్రేమించెను.")
        row.name = "john"
        row.telugu_name = "యోహాను"
        mock_db_session.execute.return_value = _result(rows=[row])

        result = await self.service.search_verses(mock_db_session, "దేవుడు", limit="5")

        assert result.count == 1
        assert result.data[0].book.name == "john"
        assert result.data[0].book.telugu_name == "యోహాను"

    @pytest.mark.asyncio
    async def test_postgresql_uses_full_text_search(self, mock_db_session):
        mock_db_session.bind.dialect.name = "postgresql"
        mock_db_session.execute.return_value = _result()

        await self.service.search_verses(mock_db_session, "దేవుడు")

        sql = _sql(mock_db_session.execute.call_args.args[0], dialect=postgresql.dialect())
        # Same expression as idx_bible_verses_text_fts, or the planner skips the index
        assert "to_tsvector('simple', bible_verses.text) @@ plainto_tsquery('simple', " in sql

    @pytest.mark.asyncio
    async def test_postgresql_uses_configured_text_search_config(self, mock_db_session):
        service = VerseService(Settings(search_text_config="english"))
        mock_db_session.bind.dialect.name = "postgresql"
        mock_db_session.execute.return_value = _result()

        await service.search_verses(mock_db_session, "దేవుడు")

        sql = _sql(mock_db_session.execute.call_args.args[0], dialect=postgresql.dialect())
        assert "to_tsvector('english', bible_verses.text)" in sql
        assert "plainto_tsquery('english', " in sql
