"""Release bounded context: domain model and error taxonomy."""

from __future__ import annotations

from cutrel.release.model import (
    ReleaseRequest,
    ReleaseSession,
    RemoteTarget,
    Stage,
    Tier,
    release_branch_name,
    release_tag_name,
)

__all__ = [
    "ReleaseRequest",
    "ReleaseSession",
    "RemoteTarget",
    "Stage",
    "Tier",
    "release_branch_name",
    "release_tag_name",
]
