"""Workspace and base CRUD operations.

Encapsulates workspace data access: create, lookup by id or title, delete,
plus the bases each workspace owns.  Deleting a workspace cascades to its
bases, table metadata and memberships at the database level.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.db.tables import Base, Workspace
from shardreset.models.enums import BackendType


class DuplicateWorkspaceError(ValueError):
    """Raised when a workspace with the given title already exists."""


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is not found."""


async def create_workspace(
    db: AsyncSession,
    *,
    title: str,
    backend: BackendType,
    meta: dict | None = None,
) -> Workspace:
    """Create a new workspace.  Raises ``DuplicateWorkspaceError`` if the title is taken."""
    if await get_workspace_by_title(db, title) is not None:
        raise DuplicateWorkspaceError(title)

    workspace = Workspace(
        workspace_id=uuid.uuid4().hex,
        title=title,
        backend=BackendType(backend).value,
        meta=meta or {},
    )
    db.add(workspace)
    await db.commit()
    await db.refresh(workspace)
    return workspace


async def get_workspace(db: AsyncSession, workspace_id: str) -> Workspace:
    """Get a workspace by ID.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


async def get_workspace_by_title(db: AsyncSession, title: str) -> Workspace | None:
    result = await db.execute(select(Workspace).where(Workspace.title == title))
    return result.scalar_one_or_none()


async def delete_workspace(db: AsyncSession, workspace_id: str) -> None:
    """Delete a workspace.  Raises ``WorkspaceNotFoundError`` if missing."""
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    await db.delete(workspace)
    await db.commit()


# -- Bases -------------------------------------------------------------------


async def list_bases(db: AsyncSession, workspace_id: str) -> list[Base]:
    """List the bases of a workspace, primary (lowest order) first."""
    stmt = select(Base).where(Base.workspace_id == workspace_id).order_by(Base.order, Base.created_at)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_base(
    db: AsyncSession,
    *,
    workspace_id: str,
    backend: BackendType,
    config: dict,
    order: int = 0,
) -> Base:
    base = Base(
        base_id=uuid.uuid4().hex,
        workspace_id=workspace_id,
        backend=BackendType(backend).value,
        config=config,
        order=order,
    )
    db.add(base)
    await db.commit()
    await db.refresh(base)
    return base
