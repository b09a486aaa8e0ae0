"""Shared enumerations used across the reset service."""

from __future__ import annotations

from enum import StrEnum

# -- Backends ----------------------------------------------------------------


class BackendType(StrEnum):
    """Database backend a shard workspace is seeded on."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRES = "postgres"

    @classmethod
    def _missing_(cls, value: object) -> BackendType | None:
        # Test harnesses historically send "pg".
        if isinstance(value, str) and value.lower() in ("pg", "postgresql"):
            return cls.POSTGRES
        return None

    @property
    def is_file_backed(self) -> bool:
        """File-backed backends have their tables dropped one by one on teardown."""
        return self is BackendType.SQLITE


# -- Tables ------------------------------------------------------------------


class TableKind(StrEnum):
    TABLE = "table"
    VIEW = "view"


# -- Cache -------------------------------------------------------------------


class CacheScope(StrEnum):
    """Namespace prefix of a cache key (``<scope>:<identifier>``)."""

    USER = "USER"
    WORKSPACE_USER = "WORKSPACE_USER"


# -- Reset -------------------------------------------------------------------


class FailureKind(StrEnum):
    REQUEST = "request"
    AUTH = "auth"
    LOOKUP = "lookup"
    TEARDOWN = "teardown"
    SEED = "seed"
