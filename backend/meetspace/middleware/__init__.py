"""
MeetSpace Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request, plus the access gate
       applied to protected routes.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route → [Access Gate dependency]

    Request ID runs first so the access log and every exception handler can
    read the id from the ContextVar. The access gate is a FastAPI dependency,
    not a middleware, so it runs only for routes that declare it.
"""
