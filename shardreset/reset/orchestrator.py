"""Reset orchestrator -- tears down a shard's workspace and seeds a fresh one.

One reset runs these steps strictly in sequence, each awaited before the next:

1. sign in as root (token for the harness and the seeders)
2. look up the shard's workspace by its deterministic title
3. if it exists: invalidate member cache entries, drop backend objects
   (file-backed only), delete the record, release its connections
4. seed a new workspace through the backend's seeder
5. sweep the shard's leftover test users
6. re-read the seeded workspace and hand it back with the token

Any fatal error is converted into a ``ResetFailure`` at the top level; the
caller decides whether to retry.  Teardown steps are idempotent, so a reset
abandoned half-way is completed by the next one for the same shard.

Resets of *different* shards are independent.  Resets of the *same* shard must
be serialized by the caller: nothing here locks the delete-then-recreate
window, and two overlapping runs can interleave teardown and seeding.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING

from loguru import logger

from shardreset.managers.tables import list_tables
from shardreset.managers.workspaces import get_workspace_by_title, list_bases
from shardreset.models.enums import BackendType
from shardreset.models.reset import CacheInvalidationWarning, ResetFailure, ResetOutcome, ResetResult
from shardreset.models.workspace import BaseInfo, TableInfo, WorkspaceInfo
from shardreset.reset.errors import (
    AuthFailure,
    InvalidShardId,
    LookupFailure,
    ResetError,
    SeedFailure,
    TeardownFailure,
)
from shardreset.reset.invalidation import invalidate_workspace_users
from shardreset.reset.naming import is_valid_parallel_id, workspace_title
from shardreset.reset.sweep import sweep_users
from shardreset.reset.teardown import teardown_workspace
from shardreset.seeders.base import SeedRequest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from shardreset.auth import RootAuthenticator
    from shardreset.cache import Cache
    from shardreset.connections import ConnectionRegistry
    from shardreset.seeders.base import Seeder


@contextmanager
def _failing_as(error_cls: type[ResetError], action: str) -> Iterator[None]:
    """Re-raise anything but a ``ResetError`` as *error_cls*."""
    try:
        yield
    except ResetError:
        raise
    except Exception as exc:
        msg = f"{action}: {exc}"
        raise error_cls(msg) from exc


class ResetOrchestrator:
    """Entry point of a shard reset.

    Instantiated once per process with its collaborators.  Stateless between
    calls; each ``reset`` receives the meta store session to work with.
    """

    def __init__(
        self,
        *,
        authenticator: RootAuthenticator,
        cache: Cache,
        connections: ConnectionRegistry,
        seeders: Mapping[BackendType, Seeder],
    ) -> None:
        missing = [b.value for b in BackendType if b not in seeders]
        if missing:
            msg = f"No seeder registered for backend(s): {', '.join(missing)}"
            raise ValueError(msg)
        self._authenticator = authenticator
        self._cache = cache
        self._connections = connections
        self._seeders = dict(seeders)

    async def reset(
        self,
        db: AsyncSession,
        parallel_id: str,
        backend: BackendType,
        *,
        empty_workspace: bool = False,
    ) -> ResetOutcome:
        """Reset the workspace of shard *parallel_id* on *backend*.

        Never raises for reset errors: returns ``ResetResult`` on success and
        ``ResetFailure`` otherwise.  Non-fatal invalidation warnings are
        attached to either.
        """
        with logger.contextualize(shard=f"{backend.value}:{parallel_id}"):
            return await self._run(db, parallel_id, backend, empty_workspace)

    async def _run(
        self,
        db: AsyncSession,
        parallel_id: str,
        backend: BackendType,
        empty_workspace: bool,
    ) -> ResetOutcome:
        warnings: list[CacheInvalidationWarning] = []
        logger.info("Reset: shard {} on {} (empty={})", parallel_id, backend, empty_workspace)
        try:
            if not is_valid_parallel_id(parallel_id):
                msg = f"Invalid parallel id {parallel_id!r}: letters, digits and underscores only"
                raise InvalidShardId(msg)

            with _failing_as(AuthFailure, "Root sign-in failed"):
                token = await self._authenticator.sign_in()
            title = await self._reset_workspace(db, parallel_id, backend, token, empty_workspace, warnings)

            with _failing_as(TeardownFailure, "User sweep failed"):
                await sweep_users(db, self._cache, parallel_id)

            with _failing_as(LookupFailure, "Workspace lookup failed"):
                info = await self._load_workspace(db, title)
        except ResetError as exc:
            logger.error("Reset: shard {} on {} failed ({}): {}", parallel_id, backend, exc.kind, exc)
            await db.rollback()
            return ResetFailure(
                parallel_id=parallel_id,
                backend=backend,
                kind=exc.kind,
                cause=str(exc),
                warnings=warnings,
            )

        logger.info(
            "Reset: shard {} ready as {} ({} tables, {} warnings)",
            parallel_id,
            info.title,
            len(info.tables),
            len(warnings),
        )
        return ResetResult(token=token, workspace=info, warnings=warnings)

    # -- Steps -----------------------------------------------------------------

    async def _reset_workspace(
        self,
        db: AsyncSession,
        parallel_id: str,
        backend: BackendType,
        token: str,
        empty_workspace: bool,
        warnings: list[CacheInvalidationWarning],
    ) -> str:
        title = workspace_title(backend, parallel_id)

        with _failing_as(LookupFailure, f"Lookup of workspace {title} failed"):
            stale = await get_workspace_by_title(db, title)

        if stale is not None:
            logger.info("Reset: tearing down {} ({})", title, stale.workspace_id)
            with _failing_as(TeardownFailure, f"Teardown of workspace {title} failed"):
                warnings.extend(await invalidate_workspace_users(db, self._cache, stale))
                await teardown_workspace(db, self._connections, stale, backend)
        else:
            logger.info("Reset: no existing workspace {}, skipping teardown", title)

        request = SeedRequest(
            backend=backend,
            token=token,
            title=title,
            parallel_id=parallel_id,
            stale_workspace=stale,
            empty=empty_workspace,
        )
        with _failing_as(SeedFailure, f"Seeding {title} on {backend} failed"):
            await self._seeders[backend].seed(db, request)
        return title

    async def _load_workspace(self, db: AsyncSession, title: str) -> WorkspaceInfo:
        workspace = await get_workspace_by_title(db, title)
        if workspace is None:
            msg = f"Seeder did not create workspace {title}"
            raise SeedFailure(msg)
        bases = await list_bases(db, workspace.workspace_id)
        tables = await list_tables(db, workspace.workspace_id)
        return WorkspaceInfo(
            workspace_id=workspace.workspace_id,
            title=workspace.title,
            backend=BackendType(workspace.backend),
            meta=workspace.meta or {},
            bases=[BaseInfo.model_validate(b) for b in bases],
            tables=[TableInfo.model_validate(t) for t in tables],
            created_at=workspace.created_at,
        )
