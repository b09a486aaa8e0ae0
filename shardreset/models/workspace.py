"""Workspace handle returned to the test harness after a reset.

A workspace is the named container of a shard's tables and views.  The
handle is a read-only snapshot assembled from the meta store rows.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from shardreset.models.enums import BackendType, TableKind


class BaseInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_id: str
    backend: BackendType
    order: int = 0


class TableInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    model_id: str
    base_id: str
    table_name: str
    kind: TableKind


class WorkspaceInfo(BaseModel):
    """Snapshot of a seeded workspace (meta store rows, no backend data)."""

    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    title: str
    backend: BackendType
    meta: dict = Field(default_factory=dict)
    bases: list[BaseInfo] = Field(default_factory=list, description="Ordered bases, first = primary")
    tables: list[TableInfo] = Field(default_factory=list)
    created_at: datetime | None = None
