"""User CRUD operations.

``get_user_by_email`` reads through the ``USER:<email>`` cache entry; every
other function talks to the meta store directly.  Deleting a user does not
touch the cache -- callers that delete users must drop the entry first.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shardreset.cache import Cache, cache_key
from shardreset.db.tables import User
from shardreset.models.enums import CacheScope
from shardreset.models.user import UserInfo


class DuplicateUserError(ValueError):
    """Raised when a user with the given email already exists."""


class UserNotFoundError(LookupError):
    """Raised when a user is not found."""


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    roles: list[str] | None = None,
    display_name: str | None = None,
) -> User:
    """Create a user.  Raises ``DuplicateUserError`` if the email is taken."""
    existing = await db.execute(select(User.user_id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateUserError(email)

    user = User(
        user_id=uuid.uuid4().hex,
        email=email,
        roles=roles or [],
        display_name=display_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def list_users(db: AsyncSession) -> list[User]:
    """List all users, oldest first."""
    result = await db.execute(select(User).order_by(User.created_at, User.email))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    """Get a user by ID.  Raises ``UserNotFoundError`` if missing."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def get_user_by_email(db: AsyncSession, cache: Cache, email: str) -> UserInfo:
    """Get a user by email, populating ``USER:<email>`` on a cache miss.

    Raises ``UserNotFoundError`` if missing (misses are not cached).
    """
    key = cache_key(CacheScope.USER, email)
    cached = await cache.get(key)
    if cached is not None:
        return UserInfo.model_validate(cached)

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(email)

    info = UserInfo.model_validate(user)
    await cache.set(key, info.model_dump(mode="json"))
    return info


async def delete_user(db: AsyncSession, user_id: str) -> None:
    """Delete a user and, by cascade, its memberships.  Raises ``UserNotFoundError``."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    await db.delete(user)
    await db.commit()
