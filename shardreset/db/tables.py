"""SQLAlchemy ORM models for the meta store.

These are the single source of truth for the meta schema; Alembic reads
``MetaBase.metadata`` to autogenerate migrations.  Child rows (bases, table
metadata, memberships) reference their parents with ``ON DELETE CASCADE`` so
that deleting a workspace or user never leaves orphans behind.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Timezone-aware timestamp type for all datetime columns.
TimestampTZ = DateTime(timezone=True)


class MetaBase(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


MetaBase.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Workspace(MetaBase):
    __tablename__ = "workspaces"

    workspace_id: Mapped[str] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(unique=True)
    backend: Mapped[str]
    meta: Mapped[dict] = mapped_column(JSONB, nullable=False, server_default="{}")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now(), onupdate=func.now())


class Base(MetaBase):
    """Backend connection descriptor owned by a workspace."""

    __tablename__ = "bases"
    __table_args__ = (Index("ix_bases_workspace_id", "workspace_id"),)

    base_id: Mapped[str] = mapped_column(primary_key=True)
    workspace_id: Mapped[str] = mapped_column(ForeignKey("workspaces.workspace_id", ondelete="CASCADE"))
    backend: Mapped[str]
    config: Mapped[dict] = mapped_column(JSONB, nullable=False)
    order: Mapped[int] = mapped_column(server_default="0")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())


class Model(MetaBase):
    """A table or view registered for a workspace base."""

    __tablename__ = "models"
    __table_args__ = (Index("ix_models_workspace_id_base_id", "workspace_id", "base_id"),)

    model_id: Mapped[str] = mapped_column(primary_key=True)
    workspace_id: Mapped[str] = mapped_column(ForeignKey("workspaces.workspace_id", ondelete="CASCADE"))
    base_id: Mapped[str] = mapped_column(ForeignKey("bases.base_id", ondelete="CASCADE"))
    table_name: Mapped[str]
    kind: Mapped[str] = mapped_column(server_default="table")
    order: Mapped[int] = mapped_column(server_default="0")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())


class User(MetaBase):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True)
    display_name: Mapped[str | None] = mapped_column(Text)
    roles: Mapped[list] = mapped_column(JSONB, nullable=False, server_default="[]")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())


class WorkspaceUser(MetaBase):
    __tablename__ = "workspace_users"
    __table_args__ = (Index("ix_workspace_users_user_id", "user_id"),)

    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    roles: Mapped[str] = mapped_column(server_default="viewer")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, server_default=func.now())
