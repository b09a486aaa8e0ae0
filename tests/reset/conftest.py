"""Shared fixtures for reset pipeline tests."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from shardreset.connections import ConnectionRegistry
from shardreset.models.enums import BackendType

SQLITE_SCHEMA = """\
-- Minimal film catalogue
CREATE TABLE actor (
    actor_id INTEGER PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL
);
CREATE TABLE film (
    film_id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    rental_rate REAL
);
CREATE TABLE film_actor (
    actor_id INTEGER NOT NULL REFERENCES actor (actor_id),
    film_id INTEGER NOT NULL REFERENCES film (film_id)
);
CREATE VIEW actor_info AS
    SELECT a.actor_id, a.first_name, a.last_name, COUNT(fa.film_id) AS films
    FROM actor a LEFT JOIN film_actor fa ON fa.actor_id = a.actor_id
    GROUP BY a.actor_id;
"""

SQLITE_DATA = """\
INSERT INTO actor VALUES (1, 'PENELOPE', 'GUINESS');
INSERT INTO actor VALUES (2, 'NICK', 'WAHLBERG');
INSERT INTO film VALUES (1, 'ACADEMY DINOSAUR: 100% EPIC', 0.99);
INSERT INTO film_actor VALUES (1, 1);
"""


@pytest.fixture
def seed_dir(tmp_path: Path) -> Path:
    """Seed scripts for the sqlite backend under ``{tmp}/seeds/sqlite``."""
    root = tmp_path / "seeds"
    (root / "sqlite").mkdir(parents=True)
    (root / "sqlite" / "schema.sql").write_text(SQLITE_SCHEMA, encoding="utf-8")
    (root / "sqlite" / "data.sql").write_text(SQLITE_DATA, encoding="utf-8")
    return root


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
async def connections():
    registry = ConnectionRegistry()
    yield registry
    await registry.close()


@pytest.fixture
def cache() -> AsyncMock:
    """Cache double; assert on ``cache.delete.await_args_list``."""
    mock = AsyncMock()
    mock.get.return_value = None
    return mock


@pytest.fixture
def session() -> AsyncMock:
    """Meta store session double; ``begin_nested()`` works with ``async with``."""
    mock = AsyncMock()
    mock.begin_nested = MagicMock()
    return mock


# -- Row doubles (attribute bags standing in for ORM rows) --------------------


def _workspace(workspace_id: str = "ws-old", title: str = "sampleREST7", **meta) -> SimpleNamespace:
    return SimpleNamespace(workspace_id=workspace_id, title=title, backend=BackendType.SQLITE, meta=meta)


def _base(url: str, base_id: str = "base-1", backend: BackendType = BackendType.SQLITE) -> SimpleNamespace:
    return SimpleNamespace(base_id=base_id, backend=backend, config={"url": url}, order=0)


def _user(user_id: str, email: str, roles: list[str] | None = None) -> SimpleNamespace:
    return SimpleNamespace(user_id=user_id, email=email, roles=roles or [])


@pytest.fixture
def make_workspace():
    return _workspace


@pytest.fixture
def make_base():
    return _base


@pytest.fixture
def make_user():
    return _user
