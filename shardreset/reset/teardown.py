"""Workspace teardown: drop backend objects, delete the record, free connections.

File-backed workspaces keep their database file across resets (same title,
same path), so their tables and views are dropped one by one.  Server backends
skip that step; their whole database is recreated by the seeder.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from anyio import to_thread
from loguru import logger
from sqlalchemy import Engine, make_url, text
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.connections import ConnectionRegistry
from shardreset.db.tables import Base, Model, Workspace
from shardreset.managers.tables import list_tables
from shardreset.managers.workspaces import delete_workspace, list_bases
from shardreset.models.enums import BackendType, TableKind


async def drop_tables(db: AsyncSession, connections: ConnectionRegistry, workspace: Workspace) -> int:
    """Drop every table and view registered on the workspace's primary base.

    Uses ``IF EXISTS`` so objects already removed by a crashed run are fine.
    A base with nothing registered (seed interrupted before registration) has
    its database file removed instead.
    Returns the number of DROP statements issued.
    """
    bases = await list_bases(db, workspace.workspace_id)
    if not bases:
        return 0
    primary = bases[0]
    tables = await list_tables(db, workspace.workspace_id, primary.base_id)
    if not tables:
        # Seeding stopped before registering anything: the file may still hold
        # the objects, unknown to us.  Start the next seed from no file.
        await connections.release(primary)
        await to_thread.run_sync(_remove_database_file, primary.config["url"])
        return 0

    await connections.run(primary, partial(_drop_objects, tables=tables))
    logger.info("Teardown: dropped {} objects of workspace {}", len(tables), workspace.title)
    return len(tables)


async def teardown_workspace(
    db: AsyncSession,
    connections: ConnectionRegistry,
    workspace: Workspace,
    backend: BackendType,
) -> list[Base]:
    """Drop objects (file-backed only), delete the workspace, release its bases.

    Bases are listed before the delete cascades them away.  Returns the
    released bases.
    """
    bases = await list_bases(db, workspace.workspace_id)
    if backend.is_file_backed:
        await drop_tables(db, connections, workspace)

    await delete_workspace(db, workspace.workspace_id)

    for base in bases:
        await connections.release(base)

    logger.info("Teardown: removed workspace {} ({} bases released)", workspace.title, len(bases))
    return bases


# -- Sync helpers (run in thread pool) -----------------------------------------


def _drop_objects(engine: Engine, *, tables: list[Model]) -> None:
    # Views first: a view may still reference a table in the same batch.
    ordered = sorted(tables, key=lambda t: t.kind != TableKind.VIEW)
    quote = engine.dialect.identifier_preparer.quote
    with engine.begin() as conn:
        for table in ordered:
            verb = "VIEW" if table.kind == TableKind.VIEW else "TABLE"
            conn.execute(text(f"DROP {verb} IF EXISTS {quote(table.table_name)}"))


def _remove_database_file(url: str) -> None:
    database = make_url(url).database
    if not database:
        return
    path = Path(database)
    if path.exists():
        logger.warning("Teardown: removing sqlite file {} with no registered objects", path)
        path.unlink()
