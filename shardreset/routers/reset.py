"""Test reset endpoint (RPC-style).

Called by the browser test harness before each suite; one call per shard.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from shardreset.deps import DbSession, Orchestrator
from shardreset.models.api import ResetErrorDetail, ResetRequest, ResetResponse
from shardreset.models.reset import ResetFailure

router = APIRouter(prefix="/test", tags=["test"])


@router.post("/reset", response_model=ResetResponse)
async def reset(body: ResetRequest, db: DbSession, orchestrator: Orchestrator) -> ResetResponse:
    """Tear down and reseed the workspace of ``body.parallel_id``."""
    outcome = await orchestrator.reset(
        db,
        body.parallel_id,
        body.db_type,
        empty_workspace=body.is_empty_project,
    )
    if isinstance(outcome, ResetFailure):
        detail = ResetErrorDetail(kind=outcome.kind, cause=outcome.cause, warnings=outcome.warnings)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail.model_dump(mode="json"))
    return ResetResponse(token=outcome.token, workspace=outcome.workspace, warnings=outcome.warnings)
