"""Alembic environment for the meta store.

The URL comes from ``SHARD_DATABASE_URL``.  Callers that already hold a
connection (tests, embedding code) can pass it as
``config.attributes["connection"]`` instead; migrations then run on it.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import Connection, create_engine, pool

from shardreset.db.tables import MetaBase
from shardreset.settings import get_settings

config = context.config
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = MetaBase.metadata


def _database_url() -> str:
    url = get_settings().database_url
    if not url:
        msg = "SHARD_DATABASE_URL is not set; cannot run meta store migrations."
        raise RuntimeError(msg)
    return url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    # Never autogenerate DROP TABLE for tables the models do not know about.
    return not (type_ == "table" and reflected and compare_to is None)


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_object=_include_object,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
elif (connection := config.attributes.get("connection")) is not None:
    _migrate(connection)
else:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as conn:
            _migrate(conn)
    finally:
        engine.dispose()
