# Middleware package init
"""
SVG Holder Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Upload Limit] → Route Handler

    - Request ID first, so every log line of the request can carry it
    - Logging captures response status and duration on the way back out
    - CORS is FastAPI's CORSMiddleware (handles preflight)
    - Upload Limit refuses oversized POST /api/svgs bodies before form parsing
"""
