"""Table / view metadata registered for workspace bases."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.db.tables import Model
from shardreset.models.enums import TableKind


async def list_tables(db: AsyncSession, workspace_id: str, base_id: str | None = None) -> list[Model]:
    """List tables and views of a workspace, optionally restricted to one base."""
    stmt = select(Model).where(Model.workspace_id == workspace_id)
    if base_id is not None:
        stmt = stmt.where(Model.base_id == base_id)
    stmt = stmt.order_by(Model.order, Model.table_name)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_tables(
    db: AsyncSession,
    *,
    workspace_id: str,
    base_id: str,
    entries: list[tuple[str, TableKind]],
) -> list[Model]:
    """Register ``(table_name, kind)`` entries in the given order, in one commit."""
    rows = [
        Model(
            model_id=uuid.uuid4().hex,
            workspace_id=workspace_id,
            base_id=base_id,
            table_name=name,
            kind=TableKind(kind).value,
            order=position,
        )
        for position, (name, kind) in enumerate(entries, start=1)
    ]
    db.add_all(rows)
    await db.commit()
    return rows
