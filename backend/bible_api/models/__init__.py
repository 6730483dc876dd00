"""
ORM models. Importing this package registers every table on `Base.metadata`
(Alembic autogenerate and the test suite's `create_all` rely on that).
"""

from bible_api.models.api_key import ApiKey
from bible_api.models.bible import Book, Testament, Verse

__all__ = ["ApiKey", "Book", "Testament", "Verse"]
