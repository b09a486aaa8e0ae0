from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shardreset.models.enums import BackendType

if TYPE_CHECKING:
    from shardreset.models.reset import ResetOutcome
    from shardreset.settings import ShardSettings


@click.group()
def main() -> None:
    """shardreset - reset per-shard test workspaces."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from SHARD_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from SHARD_PORT or 8081).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the reset HTTP service."""
    import uvicorn

    from shardreset.settings import ShardSettings

    settings = ShardSettings()

    uvicorn.run(
        "shardreset.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


def _parallel_id(ctx: click.Context, param: click.Parameter, value: str) -> str:
    from shardreset.reset.naming import is_valid_parallel_id

    if not is_valid_parallel_id(value):
        msg = "letters, digits and underscores only"
        raise click.BadParameter(msg, ctx=ctx, param=param)
    return value


@main.command()
@click.argument("parallel_id", callback=_parallel_id)
@click.option(
    "--backend",
    type=click.Choice([b.value for b in BackendType]),
    default=BackendType.SQLITE.value,
    show_default=True,
    help="Backend the shard workspace is seeded on.",
)
@click.option("--empty", is_flag=True, default=False, help="Seed the schema only, without reference data.")
def reset(parallel_id: str, backend: str, empty: bool) -> None:
    """Reset the workspace of shard PARALLEL_ID and print the result as JSON."""
    import asyncio

    from shardreset.log import setup_logging
    from shardreset.models.reset import ResetFailure
    from shardreset.settings import ShardSettings

    settings = ShardSettings()
    setup_logging(settings.log_level)

    if not settings.database_url or not settings.redis_url:
        raise click.UsageError("SHARD_DATABASE_URL and SHARD_REDIS_URL must be set.")

    outcome = asyncio.run(_run_reset(settings, parallel_id, BackendType(backend), empty))
    click.echo(outcome.model_dump_json(indent=2))
    if isinstance(outcome, ResetFailure):
        raise SystemExit(1)


async def _run_reset(settings: ShardSettings, parallel_id: str, backend: BackendType, empty: bool) -> ResetOutcome:
    """Run one reset with short-lived collaborators."""
    import httpx

    from shardreset.app import build_orchestrator, create_redis
    from shardreset.connections import ConnectionRegistry
    from shardreset.db.engine import create_engine, create_session_factory

    engine = create_engine(settings.database_url)
    redis = create_redis(settings)
    connections = ConnectionRegistry()
    try:
        async with httpx.AsyncClient(timeout=settings.auth_timeout) as http_client:
            orchestrator = build_orchestrator(settings, redis=redis, http_client=http_client, connections=connections)
            async with create_session_factory(engine)() as db:
                return await orchestrator.reset(db, parallel_id, backend, empty_workspace=empty)
    finally:
        await connections.close()
        await redis.aclose()
        await engine.dispose()


# -- Meta store migrations -----------------------------------------------------


def _alembic(command_name: str, *args, **kwargs) -> None:
    """Run an Alembic command against the migrations shipped in the package."""
    from pathlib import Path

    from alembic import command
    from alembic.config import Config

    cfg = Config(str(Path(__file__).parent / "alembic.ini"))
    getattr(command, command_name)(cfg, *args, **kwargs)


@main.group()
def db() -> None:
    """Meta store migration commands (reads SHARD_DATABASE_URL)."""


@db.command()
@click.option("--revision", default="head", show_default=True, help="Target revision.")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of applying it.")
def upgrade(revision: str, sql: bool) -> None:
    """Apply migrations up to REVISION."""
    _alembic("upgrade", revision, sql=sql)
    if not sql:
        click.echo(f"Meta store upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", show_default=True, help="Target revision (-1 = one step back).")
def downgrade(revision: str) -> None:
    """Roll migrations back to REVISION."""
    _alembic("downgrade", revision)
    click.echo(f"Meta store downgraded to {revision}.")


@db.command()
@click.argument("message")
def migrate(message: str) -> None:
    """Autogenerate a migration from changes to the ORM tables."""
    _alembic("revision", message=message, autogenerate=True)
    click.echo(f"Migration generated: {message}")


@db.command()
def current() -> None:
    """Show the applied revision."""
    _alembic("current", verbose=True)


@db.command()
def history() -> None:
    """Show migration history."""
    _alembic("history", verbose=True)


if __name__ == "__main__":
    main()
