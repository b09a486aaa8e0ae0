"""Integration tests for the meta store managers (PostgreSQL + Redis)."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import RedisCache, cache_key
from shardreset.managers.tables import create_tables, list_tables
from shardreset.managers.users import (
    DuplicateUserError,
    UserNotFoundError,
    create_user,
    delete_user,
    get_user_by_email,
    list_users,
)
from shardreset.managers.workspace_users import (
    MembershipNotFoundError,
    add_workspace_user,
    get_workspace_user,
    list_workspace_users,
)
from shardreset.managers.workspaces import (
    DuplicateWorkspaceError,
    WorkspaceNotFoundError,
    create_base,
    create_workspace,
    delete_workspace,
    get_workspace,
    get_workspace_by_title,
    list_bases,
)
from shardreset.models.enums import BackendType, CacheScope, TableKind

pytestmark = pytest.mark.integration


async def _seeded_workspace(db: AsyncSession, title: str = "sampleREST1"):
    workspace = await create_workspace(db, title=title, backend=BackendType.SQLITE, meta={"parallel_id": "1"})
    base = await create_base(
        db,
        workspace_id=workspace.workspace_id,
        backend=BackendType.SQLITE,
        config={"url": "sqlite:///tmp/x.db"},
    )
    await create_tables(
        db,
        workspace_id=workspace.workspace_id,
        base_id=base.base_id,
        entries=[("film", TableKind.TABLE), ("actor", TableKind.TABLE), ("actor_info", TableKind.VIEW)],
    )
    return workspace, base


# -- Workspaces ----------------------------------------------------------------


async def test_workspace_crud(db_session: AsyncSession):
    workspace, base = await _seeded_workspace(db_session)

    assert (await get_workspace(db_session, workspace.workspace_id)).title == "sampleREST1"
    assert (await get_workspace_by_title(db_session, "sampleREST1")).workspace_id == workspace.workspace_id
    assert await get_workspace_by_title(db_session, "sampleREST2") is None
    assert [b.base_id for b in await list_bases(db_session, workspace.workspace_id)] == [base.base_id]

    tables = await list_tables(db_session, workspace.workspace_id)
    # Registration order is kept.
    assert [(t.table_name, t.kind) for t in tables] == [("film", "table"), ("actor", "table"), ("actor_info", "view")]


async def test_duplicate_title_rejected(db_session: AsyncSession):
    await create_workspace(db_session, title="pgExtREST3", backend=BackendType.POSTGRES)
    with pytest.raises(DuplicateWorkspaceError):
        await create_workspace(db_session, title="pgExtREST3", backend=BackendType.POSTGRES)


async def test_delete_workspace_cascades(db_session: AsyncSession):
    workspace, _ = await _seeded_workspace(db_session)
    user = await create_user(db_session, email="member@x.com")
    await add_workspace_user(db_session, workspace_id=workspace.workspace_id, user_id=user.user_id)

    await delete_workspace(db_session, workspace.workspace_id)
    db_session.expunge_all()

    assert await list_bases(db_session, workspace.workspace_id) == []
    assert await list_tables(db_session, workspace.workspace_id) == []
    assert await list_workspace_users(db_session, workspace.workspace_id) == []
    with pytest.raises(WorkspaceNotFoundError):
        await get_workspace(db_session, workspace.workspace_id)
    with pytest.raises(WorkspaceNotFoundError):
        await delete_workspace(db_session, workspace.workspace_id)


# -- Users ---------------------------------------------------------------------


async def test_user_read_through_cache(db_session: AsyncSession, redis_cache: RedisCache):
    user = await create_user(db_session, email="nc_test_1_a@x.com", roles=["editor"])
    key = cache_key(CacheScope.USER, "nc_test_1_a@x.com")
    assert await redis_cache.get(key) is None

    info = await get_user_by_email(db_session, redis_cache, "nc_test_1_a@x.com")

    assert info.user_id == user.user_id
    assert (await redis_cache.get(key))["roles"] == ["editor"]

    # Entry outlives the row until someone deletes it.
    await delete_user(db_session, user.user_id)
    assert (await get_user_by_email(db_session, redis_cache, "nc_test_1_a@x.com")).user_id == user.user_id


async def test_user_miss_is_not_cached(db_session: AsyncSession, redis_cache: RedisCache):
    with pytest.raises(UserNotFoundError):
        await get_user_by_email(db_session, redis_cache, "ghost@x.com")
    assert await redis_cache.get(cache_key(CacheScope.USER, "ghost@x.com")) is None


async def test_duplicate_email_and_listing(db_session: AsyncSession):
    await create_user(db_session, email="admin@nc.com", roles=["super"])
    with pytest.raises(DuplicateUserError):
        await create_user(db_session, email="admin@nc.com")
    assert [u.email for u in await list_users(db_session)] == ["admin@nc.com"]


async def test_delete_user_cascades_memberships(db_session: AsyncSession):
    workspace, _ = await _seeded_workspace(db_session)
    user = await create_user(db_session, email="nc_test_1_b@x.com")
    await add_workspace_user(db_session, workspace_id=workspace.workspace_id, user_id=user.user_id, roles="editor")

    await delete_user(db_session, user.user_id)
    db_session.expunge_all()

    assert await list_workspace_users(db_session, workspace.workspace_id) == []
    with pytest.raises(UserNotFoundError):
        await delete_user(db_session, user.user_id)


# -- Memberships ---------------------------------------------------------------


async def test_membership_read_through_cache(db_session: AsyncSession, redis_cache: RedisCache):
    workspace, _ = await _seeded_workspace(db_session)
    user = await create_user(db_session, email="m@x.com")
    await add_workspace_user(db_session, workspace_id=workspace.workspace_id, user_id=user.user_id, roles="editor")

    info = await get_workspace_user(db_session, redis_cache, workspace.workspace_id, user.user_id)

    assert info.roles == "editor"
    key = cache_key(CacheScope.WORKSPACE_USER, workspace.workspace_id, user.user_id)
    assert (await redis_cache.get(key))["user_id"] == user.user_id


async def test_membership_missing(db_session: AsyncSession, redis_cache: RedisCache):
    workspace, _ = await _seeded_workspace(db_session)
    with pytest.raises(MembershipNotFoundError):
        await get_workspace_user(db_session, redis_cache, workspace.workspace_id, "nobody")


async def test_list_workspace_users_paginates(db_session: AsyncSession):
    workspace, _ = await _seeded_workspace(db_session)
    for i in range(3):
        user = await create_user(db_session, email=f"p{i}@x.com")
        await add_workspace_user(db_session, workspace_id=workspace.workspace_id, user_id=user.user_id)

    assert len(await list_workspace_users(db_session, workspace.workspace_id, limit=2)) == 2
    assert len(await list_workspace_users(db_session, workspace.workspace_id, limit=2, offset=2)) == 1
