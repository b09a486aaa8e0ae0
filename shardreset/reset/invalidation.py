"""Cache invalidation for the members of a workspace about to be deleted.

Membership cache entries are keyed by workspace *and* user, so they cannot be
found without walking the membership list.  A failure on one member is
recorded and skipped: the stale entry is bounded (its row is being deleted)
and the rest of the sweep still runs.
"""

from __future__ import annotations

from typing import Final

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import Cache, CacheError, cache_key
from shardreset.db.tables import Workspace
from shardreset.managers.users import get_user
from shardreset.managers.workspace_users import list_workspace_users
from shardreset.models.enums import CacheScope
from shardreset.models.reset import CacheInvalidationWarning

# Memberships beyond this count keep their cache entries (single page only).
MEMBERSHIP_SCAN_LIMIT: Final[int] = 1000


async def invalidate_workspace_users(
    db: AsyncSession,
    cache: Cache,
    workspace: Workspace,
) -> list[CacheInvalidationWarning]:
    """Delete ``WORKSPACE_USER:<workspace>:<user>`` for every member.

    Returns one warning per membership that could not be invalidated.
    """
    memberships = await list_workspace_users(db, workspace.workspace_id, limit=MEMBERSHIP_SCAN_LIMIT, offset=0)
    warnings: list[CacheInvalidationWarning] = []

    for membership in memberships:
        try:
            # A failed lookup only rolls back its savepoint; the session stays usable.
            async with db.begin_nested():
                user = await get_user(db, membership.user_id)
            await cache.delete(cache_key(CacheScope.WORKSPACE_USER, workspace.workspace_id, user.user_id))
        except (LookupError, SQLAlchemyError, CacheError) as exc:
            logger.warning(
                "Invalidation: skipped member {} of workspace {}: {}",
                membership.user_id,
                workspace.workspace_id,
                exc,
            )
            warnings.append(
                CacheInvalidationWarning(
                    workspace_id=workspace.workspace_id,
                    user_id=membership.user_id,
                    cause=str(exc) or type(exc).__name__,
                )
            )

    logger.debug(
        "Invalidation: workspace {} ({} members, {} skipped)",
        workspace.workspace_id,
        len(memberships),
        len(warnings),
    )
    return warnings
