"""Read-through cache used by the meta store managers.

Keys follow ``<scope>:<identifier>`` (see :class:`CacheScope`).  Readers
populate entries on miss; the reset core only ever deletes them, before the
rows they mirror disappear.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shardreset.models.enums import CacheScope


class CacheError(RuntimeError):
    """Raised when the cache backend cannot be reached or rejects a command."""


def cache_key(scope: CacheScope, *parts: str) -> str:
    """Build ``<scope>:<part>[:<part>...]``."""
    return ":".join([scope.value, *parts])


@runtime_checkable
class Cache(Protocol):
    """Async key-value cache protocol (JSON values)."""

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` on miss."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        """Delete a key.  No-op if absent."""
        ...


class RedisCache:
    """Redis implementation of the Cache protocol.

    Values are stored as JSON strings.  Transport errors surface as
    :class:`CacheError` so callers do not depend on redis-py exceptions.
    """

    def __init__(self, client: aioredis.Redis, default_ttl: int | None = 3600) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            raise CacheError(f"GET {key} failed: {exc}") from exc
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            await self._client.set(key, json.dumps(value, default=str), ex=ttl or self._default_ttl)
        except RedisError as exc:
            raise CacheError(f"SET {key} failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise CacheError(f"DEL {key} failed: {exc}") from exc
