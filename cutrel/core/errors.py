"""Error codes for CLI exit status.

Every failure path of a release terminates the process with one of these
codes. The values are part of the command line contract and must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the release command.

    - 0: Success
    - 1: User error (bad VERSION, invalid config, declined confirmation)
    - 2: Environment error (preflight, connectivity, version lookup)
    - 3: Stage error (failed before the point of no return, rolled back)
    - 4: Escalated (failed after the point of no return, manual action needed)
    - 5: Recovery failed (the rollback itself failed)
    - 130: Interrupted before the point of no return (rolled back)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    STAGE_ERROR = 3
    ESCALATED = 4
    RECOVERY_FAILED = 5
    INTERRUPTED = 130

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

