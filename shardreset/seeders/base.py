"""Seeder interface.

A seeder provisions a fresh workspace for one backend: it creates the
workspace record under the requested title, builds the backend schema (and
reference data unless an empty workspace was asked for), and registers the new
base with the connection registry.  The orchestrator only relies on this
contract; how a seeder does it is its own business.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from shardreset.db.tables import Workspace
    from shardreset.models.enums import BackendType


@dataclass(frozen=True)
class SeedRequest:
    backend: BackendType
    token: str
    """Root bearer token, for seeders that provision through the HTTP API."""
    title: str
    parallel_id: str
    stale_workspace: Workspace | None
    """Deleted predecessor (detached row), for data worth carrying forward."""
    empty: bool = False


@runtime_checkable
class Seeder(Protocol):
    async def seed(self, db: AsyncSession, request: SeedRequest) -> None:
        """Create the workspace titled ``request.title``.  Raise on failure."""
        ...
