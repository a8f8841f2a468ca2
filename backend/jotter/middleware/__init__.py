# Middleware package init
"""
Jotter Backend: Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [CORS] → [Request ID] → [Rate Limit] → [Logging] → Route Handler

    1. CORS: FastAPI's CORSMiddleware (answers preflight, decorates every response)
    2. Request ID: correlation ID for log lines, error bodies and 429s
    3. Rate Limit: rejects abusive clients before auth or storage work
    4. Logging: one access line with status and duration
"""
