"""API Layer - FastAPI routes, response mapping and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All failures leave through response_mapper.error_response

Design Decisions:
    - Thin routes delegate to services/crud_dispatcher (ADR: ExMA impureim sandwich)
"""
