"""Database Infrastructure — SQLAlchemy Base shared by all document tables.

Invariants:
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite in tests
"""
