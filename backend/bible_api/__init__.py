"""
Telugu Bible API — Application Package Initializer
====================================================

What: Marks the `bible_api` directory as a Python package.
Why:  Enables module imports like `from bible_api.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service follows the same layered shape for every request:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelope shaping
    ├─────────────────────────────────────┤
    │         Services (Query Logic)      │  ← Validation, query construction
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic envelopes
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Books and verses are immutable reference data loaded out of band.
    The only write this service performs is the best-effort API key
    `last_used_at` bump, which runs outside the request path.
"""

__version__ = "1.0.0"
