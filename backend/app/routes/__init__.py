# Routes package init
"""
SVG Holder Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return envelopes.

Route Inventory:
    - svgs.py:    /api/svgs CRUD + search (prefix configurable via API_PREFIX)
    - health.py:  GET /health and GET /api/health

Routes stay thin: extract request data, call SvgService, wrap the result.
Business rules live in app.services.
"""
