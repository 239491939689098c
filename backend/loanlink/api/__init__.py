"""API Layer — FastAPI routes, session guard and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to services; authorization goes through core/access_policy.py
"""
