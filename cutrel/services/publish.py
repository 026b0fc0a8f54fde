"""Publish stage: the only stage that mutates remote state.

Runs after the point of no return. A dry run prints the exact commands and,
unless ``--no-revert`` was given, puts the working copy back the way it was
found. A real run pushes the tag, syncs the artifact directory to the
distribution host and uploads to the artifact repository.
"""

from __future__ import annotations

from pathlib import Path

from cutrel.core.config import ReleaseConfig
from cutrel.core.result import Err, Ok, Result
from cutrel.git.repository import Repository
from cutrel.output.release_log import ReleaseLog
from cutrel.platform.process import CommandRunner
from cutrel.release.errors import StageFailure
from cutrel.release.model import ReleaseSession
from cutrel.services.recovery import revert_local_changes

STAGE = "publish"


def push_tag_command(remote: str, tag: str) -> list[str]:
    return ["git", "push", remote, f"refs/tags/{tag}"]


def sync_command(*, artifacts: Path, destination: str, downloads_dir: str) -> list[str]:
    """rsync the artifact directory, keeping the remote downloads untouched."""
    return [
        "rsync",
        "-rlpvz",
        "--chmod=g+w",
        f"--exclude=/{downloads_dir.strip('/')}/",
        f"{artifacts}/",
        destination,
    ]


class PublishStage:
    def __init__(
        self,
        *,
        session: ReleaseSession,
        repo: Repository,
        runner: CommandRunner,
        config: ReleaseConfig,
        log: ReleaseLog,
    ) -> None:
        self._session = session
        self._repo = repo
        self._runner = runner
        self._config = config
        self._log = log

    def commands(self) -> list[list[str]]:
        """Remote-mutating commands, in execution order."""
        remote = self._config.remote
        return [
            push_tag_command(remote.git_remote, self._session.tag),
            sync_command(
                artifacts=self._repo.path / self._config.build.artifacts_dir,
                destination=self._session.request.remote.destination,
                downloads_dir=remote.downloads_dir,
            ),
            list(self._config.build.upload),
        ]

    def run(self) -> Result[None, StageFailure]:
        if self._session.request.dry_run:
            return self._dry_run()
        return self._real_run()

    def _dry_run(self) -> Result[None, StageFailure]:
        self._log.stage(STAGE, "remote commands are printed, not executed")
        for cmd in self.commands():
            self._log.command(cmd)

        if self._session.request.skip_revert:
            self._log.note(
                f"--no-revert: keeping {self._session.release_branch} and {self._session.tag}"
            )
            return Ok(None)

        reverted = revert_local_changes(session=self._session, repo=self._repo, log=self._log)
        if isinstance(reverted, Err):
            return Err(
                StageFailure(
                    stage=STAGE,
                    message=f"dry-run cleanup failed at {reverted.error.step}: "
                    f"{reverted.error.message}",
                    hint=reverted.error.hint,
                )
            )
        return Ok(None)

    def _real_run(self) -> Result[None, StageFailure]:
        remote = self._config.remote
        push, sync, upload = self.commands()

        self._log.stage(STAGE, f"pushing {self._session.tag} to {remote.git_remote}")
        self._log.command(push)
        pushed = self._repo.push_tag(remote.git_remote, self._session.tag)
        if isinstance(pushed, Err):
            return Err(
                StageFailure(stage=STAGE, message=f"tag push failed: {pushed.error.message}")
            )

        self._log.stage(STAGE, f"syncing artifacts to {self._session.request.remote}")
        synced = self._external(sync)
        if isinstance(synced, Err):
            return synced

        self._log.stage(STAGE, "uploading to the artifact repository")
        uploaded = self._external(upload)
        if isinstance(uploaded, Err):
            return uploaded

        self._log.stage(STAGE, f"switching back to {self._session.initial_branch}")
        checkout = self._repo.checkout(self._session.initial_branch)
        if isinstance(checkout, Err):
            return Err(
                StageFailure(
                    stage=STAGE,
                    message=f"release published but checkout failed: {checkout.error.message}",
                )
            )
        return Ok(None)

    def _external(self, cmd: list[str]) -> Result[None, StageFailure]:
        self._log.command(cmd)
        result = self._runner.run(cmd, cwd=self._repo.path, stream=True)
        if isinstance(result, Err):
            return Err(
                StageFailure(stage=STAGE, message=str(result.error), hint=result.error.detail)
            )
        return Ok(None)
