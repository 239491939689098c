"""Infrastructure Layer — database, document store, payment provider, observability.

Invariants:
    - Only this layer touches SQLAlchemy engines, httpx clients and logging handlers
"""
