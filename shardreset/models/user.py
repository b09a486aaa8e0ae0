"""User and membership snapshots served by the read-through cache."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    display_name: str | None = None
    roles: list[str] = Field(default_factory=list)


class MembershipInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workspace_id: str
    user_id: str
    roles: str
