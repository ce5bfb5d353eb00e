# Middleware package init
"""
Scrol Backend — Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    CORS runs outermost so a preflight OPTIONS is answered before any other
    processing, and every response leaving the app carries the CORS map.
    Error responses built by the exception handlers stamp the same map
    themselves; the 500 fallback handler runs outside user middleware.
"""
