"""File-backed seeder: one sqlite file per shard under ``{data_root}/sqlite``.

The file path is derived from the workspace title, so a reset reuses the file
its predecessor left behind (emptied by teardown).  A file nobody references
any more -- left by a run that crashed before registering its workspace -- is
removed first.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from anyio import to_thread
from loguru import logger

from shardreset.models.enums import BackendType
from shardreset.reset.errors import SeedFailure
from shardreset.seeders.sql import SqlSeeder

if TYPE_CHECKING:
    from shardreset.connections import ConnectionRegistry
    from shardreset.seeders.base import SeedRequest


class SqliteSeeder(SqlSeeder):
    backend = BackendType.SQLITE

    def __init__(self, connections: ConnectionRegistry, seed_dir: str | Path, data_root: str | Path) -> None:
        super().__init__(connections, seed_dir)
        self._files_dir = Path(data_root) / "sqlite"

    def database_path(self, title: str) -> Path:
        return self._files_dir / f"{title}.db"

    async def provision(self, request: SeedRequest) -> str:
        path = self.database_path(request.title)
        if path.resolve().parent != self._files_dir.resolve():
            msg = f"Workspace title {request.title!r} resolves outside {self._files_dir}"
            raise SeedFailure(msg)
        await to_thread.run_sync(self._prepare_file, path, request.stale_workspace is None)
        return f"sqlite:///{path.resolve()}"

    @staticmethod
    def _prepare_file(path: Path, orphaned: bool) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if orphaned and path.exists():
            logger.warning("Seed: removing orphaned sqlite file {}", path)
            path.unlink()
