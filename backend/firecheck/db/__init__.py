"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - Single async engine per adapter (owned by DatabaseSessionManager)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for local files and tests
"""
