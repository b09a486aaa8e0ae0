"""API request / response schemas for the reset endpoint.

The request mirrors what the browser test harness posts before each suite;
the response reuses the domain models from ``workspace.py`` / ``reset.py``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shardreset.models.enums import BackendType, FailureKind
from shardreset.models.reset import CacheInvalidationWarning
from shardreset.models.workspace import WorkspaceInfo

# Ids end up in file paths and database names.
PARALLEL_ID_PATTERN = r"^[A-Za-z0-9_]+$"


class ResetRequest(BaseModel):
    parallel_id: str = Field(pattern=PARALLEL_ID_PATTERN, description="Test shard identifier.")
    db_type: BackendType = BackendType.SQLITE
    is_empty_project: bool = Field(default=False, description="Seed schema only, without reference data.")


class ResetResponse(BaseModel):
    token: str
    workspace: WorkspaceInfo
    warnings: list[CacheInvalidationWarning] = Field(default_factory=list)


class ResetErrorDetail(BaseModel):
    kind: FailureKind
    cause: str
    warnings: list[CacheInvalidationWarning] = Field(default_factory=list)
