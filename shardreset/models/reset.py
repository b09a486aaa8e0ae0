"""Outcome models of a reset run.

A reset either yields a :class:`ResetResult` (token + fresh workspace) or a
:class:`ResetFailure`.  Both carry the non-fatal cache invalidation warnings
collected along the way so callers can assert on partial-failure counts.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shardreset.models.enums import BackendType, FailureKind
from shardreset.models.workspace import WorkspaceInfo


class CacheInvalidationWarning(BaseModel):
    """A membership whose cache entry could not be invalidated."""

    workspace_id: str
    user_id: str
    cause: str


class ResetResult(BaseModel):
    token: str
    workspace: WorkspaceInfo
    warnings: list[CacheInvalidationWarning] = Field(default_factory=list)


class ResetFailure(BaseModel):
    parallel_id: str
    backend: BackendType
    kind: FailureKind
    cause: str
    warnings: list[CacheInvalidationWarning] = Field(default_factory=list)


ResetOutcome = ResetResult | ResetFailure
