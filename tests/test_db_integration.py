"""Integration smoke tests for the meta store and Redis fixtures.

Verifies the testcontainers + Alembic migration + savepoint rollback
pipeline works end-to-end.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import RedisCache, cache_key
from shardreset.db.tables import User
from shardreset.models.enums import CacheScope

pytestmark = pytest.mark.integration


async def test_alembic_migrations_applied(db_session: AsyncSession):
    result = await db_session.execute(
        text("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public' ORDER BY table_name")
    )
    tables = {row[0] for row in result}
    assert {"workspaces", "bases", "models", "users", "workspace_users"} <= tables


async def test_savepoint_rollback_isolation(db_session: AsyncSession):
    """Rows inserted in a test should not persist to the next test."""
    db_session.add(User(user_id="smoke-user", email="smoke@x.com", roles=[]))
    await db_session.commit()  # commits savepoint, not the real txn

    result = await db_session.execute(select(User).where(User.user_id == "smoke-user"))
    assert result.scalar_one().email == "smoke@x.com"


async def test_savepoint_rollback_clean_state(db_session: AsyncSession):
    result = await db_session.execute(select(User).where(User.user_id == "smoke-user"))
    assert result.scalar_one_or_none() is None, "Savepoint rollback did not clean up previous test's data"


async def test_redis_cache_roundtrip(redis_cache: RedisCache):
    key = cache_key(CacheScope.USER, "smoke@x.com")
    await redis_cache.set(key, {"user_id": "u1", "roles": ["editor"]})
    assert await redis_cache.get(key) == {"user_id": "u1", "roles": ["editor"]}

    await redis_cache.delete(key)
    await redis_cache.delete(key)  # absent key is fine
    assert await redis_cache.get(key) is None
