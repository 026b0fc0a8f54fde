"""Failure policies.

Which policy handles a failure depends only on the session tier:

- ``RecoverablePolicy`` (reversible tier): report, then put the working
  copy back the way it was found. The rollback tolerates no further
  failure; a secondary failure is fatal and reported as such.
- ``EscalatedPolicy`` (irreversible tier): report loudly and touch nothing.
  A pushed tag or uploaded artifact may already have been observed by
  another system, so a human decides what to do.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from cutrel.core.result import Err, Ok, Result
from cutrel.git.repository import Repository
from cutrel.output.console import ConsoleProtocol, Style
from cutrel.output.errors import failure_exit_code, print_failure
from cutrel.output.release_log import ReleaseLog
from cutrel.release.errors import RecoveryError, ReleaseFailure
from cutrel.release.model import ReleaseSession, Tier


def revert_local_changes(
    *, session: ReleaseSession, repo: Repository, log: ReleaseLog
) -> Result[None, RecoveryError]:
    """Return the working copy to its pre-release state.

    Idempotent: on an untouched working copy every step is a no-op, and a
    second call after a successful one finds nothing left to undo.
    """
    log.stage("revert", "discarding uncommitted changes")
    reset = repo.reset_hard()
    if isinstance(reset, Err):
        return Err(RecoveryError(step="reset", message=reset.error.message))

    log.stage("revert", "removing untracked files")
    clean = repo.clean_untracked()
    if isinstance(clean, Err):
        return Err(RecoveryError(step="clean", message=clean.error.message))

    if repo.current_branch() == session.release_branch:
        log.stage("revert", f"switching back to {session.initial_branch}")
        checkout = repo.checkout(session.initial_branch)
        if isinstance(checkout, Err):
            return Err(RecoveryError(step="checkout", message=checkout.error.message))

    if repo.branch_exists(session.release_branch):
        log.stage("revert", f"deleting branch {session.release_branch}")
        deleted = repo.delete_branch(session.release_branch)
        if isinstance(deleted, Err):
            return Err(RecoveryError(step="delete-branch", message=deleted.error.message))

    if repo.tag_exists(session.tag):
        log.stage("revert", f"deleting tag {session.tag}")
        untagged = repo.delete_tag(session.tag)
        if isinstance(untagged, Err):
            return Err(RecoveryError(step="delete-tag", message=untagged.error.message))

    return Ok(None)


class FailurePolicy(Protocol):
    """Strategy invoked when a failure (or interrupt) ends the release."""

    @property
    def tier(self) -> Tier: ...

    def handle(self, session: ReleaseSession, failure: ReleaseFailure) -> int:
        """Report the failure, apply the policy and return the exit code."""
        ...


class RecoverablePolicy:
    def __init__(self, *, repo: Repository, log: ReleaseLog) -> None:
        self._repo = repo
        self._log = log

    @property
    def tier(self) -> Tier:
        return Tier.REVERSIBLE

    def handle(self, session: ReleaseSession, failure: ReleaseFailure) -> int:
        console = self._log.console
        print_failure(failure, console)
        console.header("Rolling back local changes")

        reverted = revert_local_changes(session=session, repo=self._repo, log=self._log)
        if isinstance(reverted, Err):
            print_failure(reverted.error, console)
            return failure_exit_code(reverted.error)

        console.print(
            f"Working copy restored to {session.initial_branch}; "
            f"{session.release_branch} and {session.tag} removed.",
            Style.WARNING,
        )
        return failure_exit_code(failure)


class EscalatedPolicy:
    def __init__(self, *, console: ConsoleProtocol) -> None:
        self._console = console

    @property
    def tier(self) -> Tier:
        return Tier.IRREVERSIBLE

    def handle(self, session: ReleaseSession, failure: ReleaseFailure) -> int:
        print_failure(failure, self._console)
        completed = ", ".join(session.completed) or "none"
        self._console.alarm(
            "RELEASE FAILED AFTER THE POINT OF NO RETURN",
            [
                f"version:         {session.request.version} ({session.request.mode})",
                f"failed at:       {session.current_stage or 'unknown'}",
                f"completed:       {completed}",
                f"release branch:  {session.release_branch} (kept)",
                f"tag:             {session.tag} (kept, may already be pushed)",
                f"original branch: {session.initial_branch}",
                "",
                "Nothing was rolled back. Remote state may be partially updated.",
                "Manual intervention required: inspect the remote tag, the",
                "distribution host and the artifact repository before retrying.",
            ],
        )
        return failure_exit_code(failure)


@dataclass(frozen=True, slots=True)
class PolicySet:
    """Tagged dispatch from tier to policy."""

    recoverable: FailurePolicy
    escalated: FailurePolicy

    def for_tier(self, tier: Tier) -> FailurePolicy:
        match tier:
            case Tier.PREFLIGHT | Tier.REVERSIBLE:
                return self.recoverable
            case Tier.IRREVERSIBLE:
                return self.escalated
