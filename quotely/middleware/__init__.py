# Middleware package init
"""
Quotely API — Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit: reject abusive clients before any work is done
    2. Request ID: correlation ID for logs, error bodies and X-Request-ID
    3. Logging: one access line per request, level chosen by status code
"""
