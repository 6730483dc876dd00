"""
Telugu Bible API — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [CORS / Pre-flight] → [Logging] → [Usage Tracking] → [GZip] → Route

    1. Request ID first: every response, pre-flight included, carries X-Request-ID
    2. CORS: OPTIONS short-circuits here with an empty 200; every other
       response (errors included) gets the cross-origin headers on the way out
    3. Logging: method, path, status and duration with the request ID
    4. Usage Tracking: schedules the api_keys.last_used_at bump after the
       response is produced, never blocking it
"""
