"""FastAPI dependency injection for the meta store session and the orchestrator.

Usage in route handlers::

    @router.post("/reset")
    async def reset(body: ResetRequest, db: DbSession, orchestrator: Orchestrator) -> ResetResponse:
        ...

Dependencies raise HTTP 503 if the backing service was not configured
(SHARD_DATABASE_URL / SHARD_REDIS_URL unset).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.reset.orchestrator import ResetOrchestrator


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request."""
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (SHARD_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def get_orchestrator(request: Request) -> ResetOrchestrator:
    """Return the process-wide orchestrator built during lifespan."""
    orchestrator: ResetOrchestrator | None = request.app.state.orchestrator
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reset unavailable (SHARD_DATABASE_URL and SHARD_REDIS_URL are required).",
        )
    return orchestrator


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

Orchestrator = Annotated[ResetOrchestrator, Depends(get_orchestrator)]
"""Annotated dependency: the shared reset orchestrator."""
