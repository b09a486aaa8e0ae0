"""FastAPI application: lifespan wiring of the reset service and its routes.

The reset endpoint is only enabled when both the meta store
(``SHARD_DATABASE_URL``) and the cache (``SHARD_REDIS_URL``) are configured;
otherwise it answers 503 and ``/api/health`` still reports the process alive.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from shardreset.auth import RootAuthenticator
from shardreset.cache import RedisCache
from shardreset.connections import ConnectionRegistry
from shardreset.db.engine import create_engine, create_session_factory
from shardreset.log import setup_logging
from shardreset.reset.orchestrator import ResetOrchestrator
from shardreset.seeders import build_seeders
from shardreset.settings import ShardSettings, get_settings


def build_orchestrator(
    settings: ShardSettings,
    *,
    redis: aioredis.Redis,
    http_client: httpx.AsyncClient,
    connections: ConnectionRegistry,
) -> ResetOrchestrator:
    """Wire the orchestrator with its collaborators (shared by app and CLI)."""
    authenticator = RootAuthenticator(
        http_client,
        url=settings.auth_url,
        email=settings.root_email,
        password=settings.root_password,
    )
    return ResetOrchestrator(
        authenticator=authenticator,
        cache=RedisCache(redis),
        connections=connections,
        seeders=build_seeders(settings, connections),
    )


def create_redis(settings: ShardSettings) -> aioredis.Redis:
    return aioredis.from_url(
        settings.redis_url,
        decode_responses=False,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Reset service starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None
    _app.state.orchestrator = None

    connections = ConnectionRegistry()
    http_client = httpx.AsyncClient(timeout=settings.auth_timeout)

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info("Meta store: connected")
    else:
        logger.warning("SHARD_DATABASE_URL not set -- reset disabled")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = create_redis(settings)
        logger.info("Redis: connected")
    else:
        logger.warning("SHARD_REDIS_URL not set -- reset disabled")

    # -- Orchestrator ----------------------------------------------------------
    if _app.state.db_session_factory is not None and _app.state.redis is not None:
        _app.state.orchestrator = build_orchestrator(
            settings,
            redis=_app.state.redis,
            http_client=http_client,
            connections=connections,
        )
        logger.info("Orchestrator: initialised (seed_dir={}, data_root={})", settings.seed_dir, settings.data_root)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Reset service shutting down (open backend engines={})", connections.open_count)

    await connections.close()
    await http_client.aclose()

    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("Meta store: disposed")


app = FastAPI(title="Shard Reset Service", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from shardreset.routers.reset import router as reset_router  # noqa: E402

api.include_router(reset_router)

app.include_router(api)
