"""Deterministic names shared with the test harness.

Harnesses locate their shard's workspace and users purely by these names, so
they must not change without a coordinated harness release.
"""

from __future__ import annotations

import re
from typing import Final

from shardreset.models.api import PARALLEL_ID_PATTERN
from shardreset.models.enums import BackendType

TITLE_PREFIXES: Final[dict[BackendType, str]] = {
    BackendType.SQLITE: "sampleREST",
    BackendType.MYSQL: "externalREST",
    BackendType.POSTGRES: "pgExtREST",
}

TEST_EMAIL_PREFIX: Final[str] = "nc_test_"

_PARALLEL_ID_RE = re.compile(PARALLEL_ID_PATTERN)


def is_valid_parallel_id(parallel_id: str) -> bool:
    return _PARALLEL_ID_RE.fullmatch(parallel_id) is not None


def workspace_title(backend: BackendType, parallel_id: str) -> str:
    """``<backendPrefix><parallelId>``, e.g. ``sampleREST7``."""
    return f"{TITLE_PREFIXES[backend]}{parallel_id}"


def user_email_prefix(parallel_id: str) -> str:
    """``nc_test_<parallelId>_``; trailing underscore keeps ``1`` from matching ``11``."""
    return f"{TEST_EMAIL_PREFIX}{parallel_id}_"


def shard_database_name(backend: BackendType, parallel_id: str) -> str:
    """Name of the server-side database backing a shard (mysql / postgres).

    Case is kept: ids differing only in case are different shards.  The name
    is always quoted by the backend dialect.
    """
    return f"shard_{backend.value}_{parallel_id}"
