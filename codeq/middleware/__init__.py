"""
CodeQ Backend - Middleware Package
==================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit FIRST: reject abusive clients before touching the database
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: method, path, status and duration with the request ID

    Responses travel back through the same chain in reverse, so the
    request ID header is set on every response, 429s excepted.
"""
