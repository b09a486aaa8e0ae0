"""Backend seeders and the default backend -> seeder mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shardreset.models.enums import BackendType
from shardreset.seeders.base import Seeder, SeedRequest
from shardreset.seeders.server import MysqlSeeder, PostgresSeeder
from shardreset.seeders.sqlite import SqliteSeeder

if TYPE_CHECKING:
    from shardreset.connections import ConnectionRegistry
    from shardreset.settings import ShardSettings


def build_seeders(settings: ShardSettings, connections: ConnectionRegistry) -> dict[BackendType, Seeder]:
    """Return the built-in seeder for every backend."""
    return {
        BackendType.SQLITE: SqliteSeeder(connections, settings.seed_dir, settings.data_root),
        BackendType.MYSQL: MysqlSeeder(connections, settings.seed_dir, settings.mysql_url),
        BackendType.POSTGRES: PostgresSeeder(connections, settings.seed_dir, settings.postgres_url),
    }


__all__ = ["MysqlSeeder", "PostgresSeeder", "SeedRequest", "Seeder", "SqliteSeeder", "build_seeders"]
