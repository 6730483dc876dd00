"""
Telugu Bible API — Endpoint Table
===================================

What:  The closed set of verse endpoints, as an enum.
Why:   Route registration (routes/verses.py) and the "Endpoint not found"
       response (main.py) read the same table, so the advertised list can
       never drift from what is actually served.
"""

import enum
from typing import List


class Endpoint(enum.Enum):
    """(method, path pattern, documented example) per endpoint, relative to the API prefix."""

    LIST_BOOKS = ("GET", "/books", "/books")
    BOOK_VERSES = ("GET", "/books/{book_name}", "/books/{book_name}?chapter=1&verse=1")
    SEARCH = ("GET", "/search", "/search?q=దేవుడు&limit=20")

    def __init__(self, method: str, path: str, example: str):
        self.method = method
        self.path = path
        self.example = example

    def describe(self, prefix: str) -> str:
        """E.g. 'GET /bible-api/search?q=దేవుడు&limit=20'."""
        return f"{self.method} {prefix}{self.example}"


def available_endpoints(prefix: str) -> List[str]:
    return [endpoint.describe(prefix) for endpoint in Endpoint]
