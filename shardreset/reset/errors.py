"""Fatal error categories of a reset run.

Each category maps to a :class:`FailureKind`; the orchestrator converts any
of them into a ``ResetFailure`` at its top-level boundary.  Non-fatal cache
invalidation problems are not exceptions; see ``CacheInvalidationWarning``.
"""

from __future__ import annotations

from shardreset.models.enums import FailureKind


class ResetError(RuntimeError):
    """Base class for fatal reset errors."""

    kind: FailureKind


class AuthFailure(ResetError):
    """Root sign-in was rejected or the auth service was unreachable."""

    kind = FailureKind.AUTH


class LookupFailure(ResetError):
    """A meta store query failed."""

    kind = FailureKind.LOOKUP


class TeardownFailure(ResetError):
    """Dropping tables, deleting rows or releasing connections failed."""

    kind = FailureKind.TEARDOWN


class SeedFailure(ResetError):
    """The backend seeder failed or did not produce the workspace."""

    kind = FailureKind.SEED


class InvalidShardId(ResetError):
    """The parallel-run id is not usable in titles, file paths and database names."""

    kind = FailureKind.REQUEST
