"""
Telugu Bible API — Routes Package
===================================

Route Inventory:
    - endpoints.py: Endpoint enum, the dispatch table for the verse API
    - verses.py:    GET /books, GET /books/{book_name}, GET /search
    - health.py:    GET /health (outside the API prefix)

Routes handle HTTP concerns only and delegate all logic to the services layer.
"""
