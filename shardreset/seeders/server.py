"""Server-backed seeders (MySQL, PostgreSQL).

Each shard gets its own database on the configured server.  Provisioning
drops and recreates it, which discards every table of the previous run at
once -- server workspaces therefore never need per-table drops on teardown.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from shardreset.models.enums import BackendType
from shardreset.reset.naming import shard_database_name
from shardreset.seeders.sql import SqlSeeder

if TYPE_CHECKING:
    from shardreset.connections import ConnectionRegistry
    from shardreset.seeders.base import SeedRequest


class ServerSeeder(SqlSeeder):
    def __init__(self, connections: ConnectionRegistry, seed_dir: str | Path, server_url: str) -> None:
        super().__init__(connections, seed_dir)
        self._server_url = server_url

    async def provision(self, request: SeedRequest) -> str:
        name = shard_database_name(self.backend, request.parallel_id)
        return await self._connections.recreate_database(self._server_url, name)


class MysqlSeeder(ServerSeeder):
    backend = BackendType.MYSQL


class PostgresSeeder(ServerSeeder):
    backend = BackendType.POSTGRES
