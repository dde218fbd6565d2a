"""Database Session Manager — async engine, per-call sessions and driver error mapping.

Invariants:
    - Every session rolls back on exception (no partial cascade ever commits)
    - SQLAlchemy/driver exceptions leave this module only as core errors:
        IntegrityError -> ConflictError, everything else -> PersistenceUnavailableError
    - FireCheckError raised inside a session passes through untouched (after rollback)
    - Server URLs get pool_pre_ping; SQLite URLs get the driver's default pool

Design Decisions:
    - One manager per SqlPersistenceAdapter, created by the composition root: no
      module-level singleton, the store session owns its engine
    - expire_on_commit=False: rows are read after commit without a lazy reload
    - Error mapping as an ordered table: first matching class wins, subclasses first
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from firecheck.core.errors import (
    ConflictError, FireCheckError, PersistenceUnavailableError,
)
from firecheck.db.base import Base

logger = logging.getLogger(__name__)

# (exception class, operation label, client-safe message)
_UNAVAILABLE = (
    (OperationalError, "execute", "Connection or operational error"),
    (DBAPIError, "query", "Database driver error"),
    (SQLAlchemyError, "unknown", "Database operation failed"),
    (OSError, "connect", "Database unreachable"),
)


def map_database_error(exc: Exception) -> FireCheckError:
    """Translate a driver/ORM failure into the adapter error contract."""
    if isinstance(exc, IntegrityError):
        return ConflictError("Integrity constraint violated")
    for exc_type, operation, message in _UNAVAILABLE:
        if isinstance(exc, exc_type):
            return PersistenceUnavailableError(message, operation)
    return PersistenceUnavailableError(str(exc), "unknown")


class DatabaseSessionManager:
    """Owns the async engine behind one SQL persistence adapter."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {}
        # SQLite pools reject pool sizing arguments
        if not database_url.startswith("sqlite"):
            engine_kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
            }
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """One unit of work: rolled back and mapped on any failure, always closed."""
        session = self._session_factory()
        try:
            yield session
        except FireCheckError:
            await session.rollback()
            raise
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            mapped = map_database_error(e)
            logger.error(
                f"Database failure ({type(e).__name__}): {e}",
                extra={"error_code": mapped.code, "operation": getattr(mapped, "operation", None)},
            )
            raise mapped from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create all tables (local development and tests; production uses alembic)."""
        import firecheck.models  # noqa: F401  registers every table on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
