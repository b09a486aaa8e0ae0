"""Per-base backend connection registry.

Each workspace base points at a backend database (a sqlite file, or a MySQL /
PostgreSQL database created for the shard).  The registry lazily opens one
synchronous SQLAlchemy engine per base and owns it until ``release``.

Engines are synchronous because seed scripts and DDL are plain blocking
drivers (sqlite3, PyMySQL, psycopg); every blocking call is pushed to a worker
thread with ``anyio.to_thread.run_sync`` so the event loop stays free.

The registry is an explicit object handed to the orchestrator and seeders;
tests build their own instance.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, TypeVar

from anyio import to_thread
from loguru import logger
from sqlalchemy import Engine, create_engine, make_url, text
from sqlalchemy.pool import NullPool

if TYPE_CHECKING:
    from shardreset.db.tables import Base

T = TypeVar("T")


class ConnectionRegistry:
    """Owns the backend engines of all live workspace bases, keyed by ``base_id``."""

    def __init__(self) -> None:
        self._engines: dict[str, Engine] = {}

    def get(self, base: Base) -> Engine:
        """Return the engine for *base*, creating it on first use."""
        engine = self._engines.get(base.base_id)
        if engine is None:
            engine = _create_backend_engine(base.config["url"])
            self._engines[base.base_id] = engine
            logger.debug("Connections: opened engine for base {} ({})", base.base_id, base.backend)
        return engine

    async def run(self, base: Base, fn: Callable[[Engine], T]) -> T:
        """Run blocking ``fn(engine)`` for *base* in a worker thread."""
        engine = self.get(base)
        return await to_thread.run_sync(partial(fn, engine))

    async def release(self, base: Base) -> None:
        """Dispose the engine of *base*.  No-op if it was never opened."""
        engine = self._engines.pop(base.base_id, None)
        if engine is None:
            return
        await to_thread.run_sync(engine.dispose)
        logger.debug("Connections: released base {}", base.base_id)

    async def recreate_database(self, server_url: str, name: str) -> str:
        """Drop and create database *name* on the server at *server_url*.

        Returns the URL of the fresh database.
        """
        return await to_thread.run_sync(partial(_recreate_database, server_url, name))

    async def close(self) -> None:
        """Dispose every open engine (process shutdown)."""
        engines = list(self._engines.values())
        self._engines.clear()
        for engine in engines:
            await to_thread.run_sync(engine.dispose)

    @property
    def open_count(self) -> int:
        return len(self._engines)


# -- Sync helpers (run in thread pool) -----------------------------------------


def _create_backend_engine(url: str) -> Engine:
    if make_url(url).get_backend_name() == "sqlite":
        # A pooled sqlite connection would keep the file open across releases.
        return create_engine(url, poolclass=NullPool)
    return create_engine(url, pool_pre_ping=True, pool_size=2, max_overflow=2)


def _recreate_database(server_url: str, name: str) -> str:
    url = make_url(server_url)
    engine = create_engine(url, poolclass=NullPool, isolation_level="AUTOCOMMIT")
    quoted = engine.dialect.identifier_preparer.quote(name)
    try:
        with engine.connect() as conn:
            if url.get_backend_name() == "postgresql":
                conn.execute(text(f"DROP DATABASE IF EXISTS {quoted} WITH (FORCE)"))
            else:
                conn.execute(text(f"DROP DATABASE IF EXISTS {quoted}"))
            conn.execute(text(f"CREATE DATABASE {quoted}"))
    finally:
        engine.dispose()
    logger.info("Connections: recreated database {} on {}", name, url.render_as_string(hide_password=True))
    return url.set(database=name).render_as_string(hide_password=False)
