"""
Telugu Bible API — Services Layer
===================================

What:  Query logic sitting between routes (HTTP) and the database (persistence).
Why:   Routes handle HTTP; services validate parameters, build queries and map
       store failures onto the application exception hierarchy.

Service Inventory:
    - VerseService: books listing, verses-by-book, text search
    - UsageTracker: detached best-effort `api_keys.last_used_at` updates
"""
