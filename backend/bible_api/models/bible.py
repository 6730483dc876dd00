"""
Telugu Bible API — Book and Verse SQLAlchemy Models
=====================================================

What:  ORM models for the `bible_books` and `bible_verses` tables.
Why:   Typed query construction for the three read operations.
Who:   Used by VerseService for every query and by Alembic for schema management.
When:  Rows are loaded once by an external import job and never mutated here.

Table Design Rationale:
    - bible_books.name is the URL slug ("john") and therefore unique.
    - bible_books.book_order is the canonical position (1 = Genesis) and unique,
      so ordering by it is total.
    - bible_verses is keyed logically by (book_id, chapter, verse); the unique
      constraint doubles as the index for "book → chapter → verse" lookups.
    - The full-text GIN index on bible_verses.text is PostgreSQL-only and lives
      in the Alembic migration, not here, so `create_all` works on SQLite.
"""

import enum
import uuid

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bible_api.database import Base


class Testament(str, enum.Enum):
    """Partition of the canon. Stored as its lowercase value."""

    OLD = "old"
    NEW = "new"


class Book(Base):
    """
    One book of the Bible, e.g. John (name="john", telugu_name="యోహాను").

    Query Patterns:
        - List all: ORDER BY book_order
        - Resolve slug: WHERE name = :name  (unique index)
    """

    __tablename__ = "bible_books"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Canonical lowercase slug used in URLs. Matching is exact and case-sensitive.
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    telugu_name: Mapped[str] = mapped_column(String(100), nullable=False)

    testament: Mapped[str] = mapped_column(String(3), nullable=False)

    book_order: Mapped[int] = mapped_column(Integer, nullable=False)

    verses: Mapped[list["Verse"]] = relationship(back_populates="book", lazy="raise")

    __table_args__ = (
        UniqueConstraint("name", name="uq_bible_books_name"),
        UniqueConstraint("book_order", name="uq_bible_books_book_order"),
        CheckConstraint("testament IN ('old', 'new')", name="ck_bible_books_testament"),
        CheckConstraint("book_order > 0", name="ck_bible_books_book_order_positive"),
    )

    def __repr__(self) -> str:
        return f"<Book(name='{self.name}', book_order={self.book_order})>"


class Verse(Base):
    """
    The smallest addressable unit of text: (book, chapter, verse).

    Query Patterns:
        - Book listing: WHERE book_id = :id [AND chapter = :c [AND verse = :v]]
          ORDER BY chapter, verse  → served by uq_bible_verses_reference
        - Search: full-text match on text, joined to bible_books
    """

    __tablename__ = "bible_verses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("bible_books.id", ondelete="CASCADE"),
        nullable=False,
    )

    chapter: Mapped[int] = mapped_column(Integer, nullable=False)

    verse: Mapped[int] = mapped_column(Integer, nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    book: Mapped[Book] = relationship(back_populates="verses", lazy="raise")

    __table_args__ = (
        UniqueConstraint("book_id", "chapter", "verse", name="uq_bible_verses_reference"),
        CheckConstraint("chapter > 0", name="ck_bible_verses_chapter_positive"),
        CheckConstraint("verse > 0", name="ck_bible_verses_verse_positive"),
    )

    def __repr__(self) -> str:
        return f"<Verse(book_id={self.book_id}, {self.chapter}:{self.verse})>"
