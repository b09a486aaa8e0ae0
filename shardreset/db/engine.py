"""Async SQLAlchemy engine and session factory for the meta store.

Uses psycopg3, which serves both the async runtime (``postgresql+psycopg://``)
and Alembic's synchronous migrations with the same URL.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async engine for the meta store.

    Resets are short bursts of sequential queries, so the pool stays small:
    ``pool_size=5``, ``max_overflow=5``.  ``pool_pre_ping`` guards against
    connections dropped while a test suite was idle.  Any default can be
    overridden via *kwargs*.
    """
    defaults = {
        "echo": False,
        "pool_size": 5,
        "max_overflow": 5,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    defaults.update(kwargs)  # type: ignore[arg-type]
    return create_async_engine(database_url, **defaults)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` keeps rows readable after commit.  The
    orchestrator relies on this: the stale workspace row is still handed to
    the seeder after it has been deleted and committed.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
