"""Create bible_books, bible_verses and api_keys tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Creates the reference tables read by the verse API and the api_keys
       table whose last_used_at the API bumps.
How:   PostgreSQL-specific pieces: gen_random_uuid() defaults and a GIN
       full-text index over bible_verses.text using the 'simple' configuration
       (must match SEARCH_TEXT_CONFIG for the planner to use it).

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bible_books",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(50), nullable=False, comment="Lowercase URL slug, e.g. 'john'"),
        sa.Column("telugu_name", sa.String(100), nullable=False),
        sa.Column("testament", sa.String(3), nullable=False, comment="'old' or 'new'"),
        sa.Column("book_order", sa.Integer(), nullable=False, comment="Canonical position, 1 = Genesis"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_bible_books_name"),
        sa.UniqueConstraint("book_order", name="uq_bible_books_book_order"),
        sa.CheckConstraint("testament IN ('old', 'new')", name="ck_bible_books_testament"),
        sa.CheckConstraint("book_order > 0", name="ck_bible_books_book_order_positive"),
    )

    op.create_table(
        "bible_verses",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("book_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("chapter", sa.Integer(), nullable=False),
        sa.Column("verse", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False, comment="Telugu verse text"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["book_id"], ["bible_books.id"],
            name="fk_bible_verses_book_id",
            ondelete="CASCADE",
        ),
        # Also serves WHERE book_id = ? [AND chapter = ? [AND verse = ?]] ORDER BY chapter, verse
        sa.UniqueConstraint("book_id", "chapter", "verse", name="uq_bible_verses_reference"),
        sa.CheckConstraint("chapter > 0", name="ck_bible_verses_chapter_positive"),
        sa.CheckConstraint("verse > 0", name="ck_bible_verses_verse_positive"),
    )

    op.create_index(
        "idx_bible_verses_text_fts",
        "bible_verses",
        [sa.text("to_tsvector('simple', text)")],
        postgresql_using="gin",
    )

    op.create_table(
        "api_keys",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("key_hash", sa.String(255), nullable=False, comment="Token presented by clients"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("last_used_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key_hash", name="uq_api_keys_key_hash"),
    )


def downgrade() -> None:
    op.drop_table("api_keys")
    op.drop_index("idx_bible_verses_text_fts", table_name="bible_verses")
    op.drop_table("bible_verses")
    op.drop_table("bible_books")
