"""API Schemas — Pydantic models validating request bodies at the HTTP boundary.

Invariants:
    - Write models forbid unknown fields: clients cannot smuggle fee or ownership fields
"""
