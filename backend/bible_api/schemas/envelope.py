"""
Telugu Bible API — Pydantic Response Envelopes
================================================

What:  One explicit result type per operation plus the error shapes.
Why:   Every response the API can produce is an enumerable, testable model
       instead of an ad hoc dict. FastAPI also generates the OpenAPI docs
       from these.
How:   All envelopes share a `success` discriminator typed as a literal:
       success results carry `data` and `count`; error results carry `error`.

Envelope Inventory:
    BooksResult              GET /books
    BookVersesResult         GET /books/{book_name}
    SearchResult             GET /search
    ErrorResult              any 400 / 404 / 500
    EndpointNotFoundResult   unknown method or path (404)
"""

import uuid
from typing import List, Literal

from pydantic import BaseModel, Field, model_validator

from bible_api.models.bible import Testament


# ══════════════════════════════════════════════════════════════════════════
# Row Shapes: what appears inside `data`
# ══════════════════════════════════════════════════════════════════════════


class BookOut(BaseModel):
    """A full Book record as listed by GET /books."""
    id: uuid.UUID = Field(description="Book identifier")
    name: str = Field(description="Canonical lowercase slug, e.g. 'john'")
    telugu_name: str = Field(description="Display name in Telugu")
    testament: Testament = Field(description="'old' or 'new'")
    book_order: int = Field(description="Canonical position (1 = Genesis)")

    model_config = {"from_attributes": True}


class BookRef(BaseModel):
    """The resolved book echoed back by GET /books/{book_name}."""
    id: uuid.UUID
    name: str
    telugu_name: str

    model_config = {"from_attributes": True}


class VerseOut(BaseModel):
    chapter: int = Field(description="Chapter number (1-based)")
    verse: int = Field(description="Verse number within the chapter (1-based)")
    text: str = Field(description="Telugu verse text")

    model_config = {"from_attributes": True}


class SearchBookRef(BaseModel):
    name: str
    telugu_name: str

    model_config = {"from_attributes": True}


class SearchHit(VerseOut):
    """A matching verse with its owning book, so clients can cite it."""
    book: SearchBookRef


# ══════════════════════════════════════════════════════════════════════════
# Success Envelopes
# ══════════════════════════════════════════════════════════════════════════


class _ListEnvelope(BaseModel):
    success: Literal[True] = True
    count: int = Field(description="Number of items in data")

    @model_validator(mode="after")
    def check_count(self):
        """`count` always equals len(data); a mismatch is a programming error."""
        if self.count != len(self.data):
            raise ValueError(f"count={self.count} does not match {len(self.data)} items")
        return self


class BooksResult(_ListEnvelope):
    """
    What:  Response for GET /books.
    Example:
        {"success": true, "data": [{"name": "genesis", ...}], "count": 66}
    """
    data: List[BookOut]


class BookVersesResult(_ListEnvelope):
    """
    What:  Response for GET /books/{book_name}?chapter=&verse=.
    Why book is echoed: clients render the Telugu title without a second call.
    """
    book: BookRef
    data: List[VerseOut]


class SearchResult(_ListEnvelope):
    """
    What:  Response for GET /search?q=&limit=.
    The query is echoed exactly as received so clients can label results.
    """
    query: str
    data: List[SearchHit]


# ══════════════════════════════════════════════════════════════════════════
# Error Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ErrorResult(BaseModel):
    """
    What:  Shape of every failed request.
    Example:
        {"success": false, "error": "Book not found"}
    """
    success: Literal[False] = False
    error: str = Field(description="Human-readable error description")


class EndpointNotFoundResult(ErrorResult):
    """Unknown route: the error plus the three endpoints that do exist."""
    available_endpoints: List[str]


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
