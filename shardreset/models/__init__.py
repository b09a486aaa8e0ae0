"""Data models for the reset service."""

from shardreset.models.api import ResetErrorDetail, ResetRequest, ResetResponse
from shardreset.models.enums import BackendType, CacheScope, FailureKind, TableKind
from shardreset.models.reset import CacheInvalidationWarning, ResetFailure, ResetOutcome, ResetResult
from shardreset.models.user import MembershipInfo, UserInfo
from shardreset.models.workspace import BaseInfo, TableInfo, WorkspaceInfo

__all__ = [
    "BackendType",
    "BaseInfo",
    "CacheInvalidationWarning",
    "CacheScope",
    "FailureKind",
    "MembershipInfo",
    "ResetErrorDetail",
    "ResetFailure",
    "ResetOutcome",
    "ResetRequest",
    "ResetResponse",
    "ResetResult",
    "TableInfo",
    "TableKind",
    "UserInfo",
    "WorkspaceInfo",
]
