"""Workspace membership operations.

Memberships are only created by seeders and tests; the reset core reads them
to find the ``WORKSPACE_USER`` cache entries it must invalidate.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import Cache, cache_key
from shardreset.db.tables import WorkspaceUser
from shardreset.models.enums import CacheScope
from shardreset.models.user import MembershipInfo


class MembershipNotFoundError(LookupError):
    """Raised when a user is not a member of the workspace."""


async def add_workspace_user(
    db: AsyncSession,
    *,
    workspace_id: str,
    user_id: str,
    roles: str = "viewer",
) -> WorkspaceUser:
    membership = WorkspaceUser(workspace_id=workspace_id, user_id=user_id, roles=roles)
    db.add(membership)
    await db.commit()
    await db.refresh(membership)
    return membership


async def list_workspace_users(
    db: AsyncSession,
    workspace_id: str,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[WorkspaceUser]:
    """List memberships of a workspace, oldest first."""
    stmt = (
        select(WorkspaceUser)
        .where(WorkspaceUser.workspace_id == workspace_id)
        .order_by(WorkspaceUser.created_at, WorkspaceUser.user_id)
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_workspace_user(db: AsyncSession, cache: Cache, workspace_id: str, user_id: str) -> MembershipInfo:
    """Get a membership, populating ``WORKSPACE_USER:<workspace>:<user>`` on a miss.

    Raises ``MembershipNotFoundError`` if the user is not a member.
    """
    key = cache_key(CacheScope.WORKSPACE_USER, workspace_id, user_id)
    cached = await cache.get(key)
    if cached is not None:
        return MembershipInfo.model_validate(cached)

    membership = await db.get(WorkspaceUser, (workspace_id, user_id))
    if membership is None:
        raise MembershipNotFoundError(f"{user_id} in {workspace_id}")

    info = MembershipInfo.model_validate(membership)
    await cache.set(key, info.model_dump(mode="json"))
    return info
