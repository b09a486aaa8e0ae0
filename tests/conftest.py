"""Integration fixtures: a real meta store (PostgreSQL) and cache (Redis).

Both run in testcontainers, started once per session and only when an
``integration`` test asks for them (Docker required).  The meta store schema
comes from the packaged Alembic migrations, run on a connection we hand to
``env.py``.  Each test gets a session whose commits are savepoint releases
inside one outer transaction that is rolled back afterwards, and a Redis
database that is flushed afterwards.

Unit tests need none of this: they use mocks, temporary sqlite files and
``httpx.MockTransport`` (see ``tests/reset/conftest.py``).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import redis.asyncio as aioredis
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer

from shardreset.cache import RedisCache
from shardreset.settings import get_settings

ALEMBIC_INI = Path(__file__).parent.parent / "shardreset" / "alembic.ini"


@pytest.fixture(scope="session")
def pg_url() -> Iterator[str]:
    """Meta store URL (``postgresql+psycopg://``), migrated to head."""
    with PostgresContainer("postgres:17", username="shard", password="shard", dbname="meta", driver="psycopg") as pg:
        url = pg.get_connection_url()

        cfg = Config(str(ALEMBIC_INI))
        engine = create_engine(url)
        with engine.begin() as conn:
            cfg.attributes["connection"] = conn
            cfg.attributes["configure_logger"] = False
            command.upgrade(cfg, "head")
        engine.dispose()

        with pytest.MonkeyPatch.context() as mp:
            mp.setenv("SHARD_DATABASE_URL", url)
            get_settings.cache_clear()
            yield url
        get_settings.cache_clear()


@pytest.fixture(scope="session")
def redis_url() -> Iterator[str]:
    with RedisContainer("redis:7") as container:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        yield f"redis://{host}:{port}/0"


@pytest.fixture(scope="session")
def async_engine(pg_url: str) -> Iterator[AsyncEngine]:
    engine = create_async_engine(pg_url)
    yield engine
    engine.sync_engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Meta store session; everything it writes is rolled back after the test.

    ``join_transaction_mode="create_savepoint"`` turns the managers'
    ``commit()`` (and the orchestrator's ``rollback()``) into savepoint
    operations.  ``expire_on_commit=False`` matches the production factory.
    """
    async with async_engine.connect() as conn:
        outer = await conn.begin()
        session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
        try:
            yield session
        finally:
            await session.close()
            await outer.rollback()


@pytest.fixture
async def redis_client(redis_url: str) -> AsyncIterator[aioredis.Redis]:
    client = aioredis.from_url(redis_url)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture
def redis_cache(redis_client: aioredis.Redis) -> RedisCache:
    return RedisCache(redis_client)
