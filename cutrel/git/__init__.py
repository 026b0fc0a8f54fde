"""Git operations used by the release stages.

Usage:
    from cutrel.git import Repository

    repo = Repository(Path("/path/to/repo"))
    if repo.tag_exists("v1.2.3"):
        ...
"""

from cutrel.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]
