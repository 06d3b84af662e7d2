# Services package init
"""
SVG Holder Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services accept plain values, apply the upload rules, and return
       pydantic models. The service instance is built once by create_app()
       and reached from routes through a FastAPI dependency.

Service Inventory:
    - SvgValidator (validation.py): upload and update rules, first failure wins
    - SvgStore (svg_store.py):      queries over the `svgs` table, one session
    - SvgService (svg_service.py):  the six operations, error classification
"""
