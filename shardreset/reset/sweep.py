"""Removal of the test users a shard created during its previous run."""

from __future__ import annotations

from typing import Final

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import Cache, cache_key
from shardreset.managers.users import delete_user, list_users
from shardreset.models.enums import CacheScope
from shardreset.reset.naming import user_email_prefix

SUPER_ROLE: Final[str] = "super"


async def sweep_users(db: AsyncSession, cache: Cache, parallel_id: str) -> list[str]:
    """Delete every non-super user whose email carries the shard's prefix.

    The ``USER:<email>`` entry is deleted before the row so a concurrent reader
    cannot re-cache a row that is about to vanish.  Returns deleted emails.
    """
    prefix = user_email_prefix(parallel_id)
    candidates = [u for u in await list_users(db) if SUPER_ROLE not in (u.roles or [])]

    deleted: list[str] = []
    for user in candidates:
        if not user.email.startswith(prefix):
            continue
        await cache.delete(cache_key(CacheScope.USER, user.email))
        await delete_user(db, user.user_id)
        deleted.append(user.email)

    logger.info("Sweep: removed {} users with prefix {}", len(deleted), prefix)
    return deleted
