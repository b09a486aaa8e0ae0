"""SQL-script seeder shared by all built-in backends.

Seed scripts live under ``{seed_dir}/{backend}/``:

- ``schema.sql`` -- always run (tables, views)
- ``data.sql``   -- run unless an empty workspace was requested

Statements are split on a ``;`` that ends a line, and whole-line ``--``
comments are skipped, so procedural bodies spanning several statements are
not supported.  After the scripts run, the backend is introspected and each
table and view is registered in the meta store.

Subclasses only decide where the backend database lives
(:meth:`SqlSeeder.provision`).
"""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from anyio import to_thread
from loguru import logger
from sqlalchemy import Engine, inspect

from shardreset.managers.tables import create_tables
from shardreset.managers.workspaces import create_base, create_workspace
from shardreset.models.enums import BackendType, TableKind
from shardreset.reset.errors import SeedFailure

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from shardreset.connections import ConnectionRegistry
    from shardreset.seeders.base import SeedRequest


class SqlSeeder:
    """Base class: run seed scripts against a freshly provisioned database."""

    backend: BackendType

    def __init__(self, connections: ConnectionRegistry, seed_dir: str | Path) -> None:
        self._connections = connections
        self._seed_dir = Path(seed_dir) / self.backend.value

    async def provision(self, request: SeedRequest) -> str:
        """Prepare an empty backend database and return its SQLAlchemy URL."""
        raise NotImplementedError

    async def seed(self, db: AsyncSession, request: SeedRequest) -> None:
        scripts = await to_thread.run_sync(partial(self._read_scripts, empty=request.empty))
        url = await self.provision(request)

        workspace = await create_workspace(
            db,
            title=request.title,
            backend=self.backend,
            meta=_carry_forward_meta(request),
        )
        base = await create_base(db, workspace_id=workspace.workspace_id, backend=self.backend, config={"url": url})

        await self._connections.run(base, partial(_execute_scripts, scripts=scripts))
        entries = await self._connections.run(base, _introspect)
        await create_tables(db, workspace_id=workspace.workspace_id, base_id=base.base_id, entries=entries)

        logger.info(
            "Seed: {} ready on {} ({} objects, empty={})",
            request.title,
            self.backend,
            len(entries),
            request.empty,
        )

    def _read_scripts(self, *, empty: bool) -> list[str]:
        names = ["schema.sql"] if empty else ["schema.sql", "data.sql"]
        scripts = []
        for name in names:
            path = self._seed_dir / name
            if not path.is_file():
                msg = f"Seed script not found: {path}"
                raise SeedFailure(msg)
            scripts.append(path.read_text(encoding="utf-8"))
        return scripts


def _carry_forward_meta(request: SeedRequest) -> dict:
    stale = request.stale_workspace
    meta = dict(stale.meta or {}) if stale is not None else {}
    meta["parallel_id"] = request.parallel_id
    meta["previous_workspace_id"] = stale.workspace_id if stale is not None else None
    return meta


# -- Sync helpers (run in thread pool) -----------------------------------------


def split_statements(script: str) -> list[str]:
    """Split a seed script into statements (see module docstring for the rules)."""
    statements: list[str] = []
    current: list[str] = []
    for line in script.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        current.append(line)
        if stripped.endswith(";"):
            statement = "\n".join(current).strip().rstrip(";").strip()
            if statement:
                statements.append(statement)
            current = []
    tail = "\n".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def _execute_scripts(engine: Engine, *, scripts: list[str]) -> None:
    # Raw DBAPI cursor without parameters: seed data may contain "%" and ":n".
    with engine.begin() as conn:
        cursor = conn.connection.cursor()
        try:
            for script in scripts:
                for statement in split_statements(script):
                    cursor.execute(statement)
        finally:
            cursor.close()


def _introspect(engine: Engine) -> list[tuple[str, TableKind]]:
    inspector = inspect(engine)
    tables = [(name, TableKind.TABLE) for name in sorted(inspector.get_table_names())]
    views = [(name, TableKind.VIEW) for name in sorted(inspector.get_view_names())]
    return tables + views
