"""Local release stages.

Everything here runs before the point of no return and only touches the
working copy and the local build output, so any failure can be rolled back.
Stages are listed in their one valid order by ``ReleaseStages.build``.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from cutrel.core.config import ReleaseConfig
from cutrel.core.result import Err, Ok, Result
from cutrel.git.repository import GitError, Repository
from cutrel.output.release_log import ReleaseLog
from cutrel.platform.process import CommandRunner, ProcessError
from cutrel.release.errors import StageFailure
from cutrel.release.model import ReleaseSession, Stage, Tier
from cutrel.services.substitute import substitute_version


def release_build_command(config: ReleaseConfig, *, dry_run: bool) -> list[str]:
    """Build command line; a real run splices in the publish options."""
    argv = list(config.build.build)
    if dry_run:
        return argv
    return [argv[0], *config.build.publish_options, *argv[1:]]


def commit_message(version: str) -> str:
    return f"Release {version}"


def tag_message(version: str) -> str:
    return f"Release {version}"


class ReleaseStages:
    def __init__(
        self,
        *,
        session: ReleaseSession,
        repo: Repository,
        runner: CommandRunner,
        config: ReleaseConfig,
        log: ReleaseLog,
        current_version: str,
    ) -> None:
        self._session = session
        self._repo = repo
        self._runner = runner
        self._config = config
        self._log = log
        self._current_version = current_version

    @property
    def artifacts_path(self) -> Path:
        return self._repo.path / self._config.build.artifacts_dir

    def build(self) -> tuple[Stage, ...]:
        request = self._session.request
        compat_skip = "real run" if not request.dry_run else "--no-mima"
        return (
            Stage("branch", Tier.REVERSIBLE, self.create_branch),
            Stage("substitute", Tier.REVERSIBLE, self.substitute),
            Stage("clean", Tier.REVERSIBLE, self.clean_build),
            Stage(
                "test",
                Tier.REVERSIBLE,
                self.run_tests,
                enabled=request.run_tests,
                skip_reason="--run-tests not given",
            ),
            Stage("build", Tier.REVERSIBLE, self.build_artifacts),
            Stage(
                "compat",
                Tier.REVERSIBLE,
                self.check_compat,
                enabled=request.dry_run and not request.skip_compat_check,
                advisory=True,
                skip_reason=compat_skip,
            ),
            Stage("commit-tag", Tier.REVERSIBLE, self.commit_and_tag),
        )

    def create_branch(self) -> Result[None, StageFailure]:
        branch = self._session.release_branch
        self._log.stage("branch", f"creating {branch} from {self._session.initial_branch}")
        return self._git("branch", self._repo.create_branch(branch))

    def substitute(self) -> Result[None, StageFailure]:
        version = self._session.request.version
        self._log.stage("substitute", f"{self._current_version} -> {version}")
        result = substitute_version(self._repo, self._current_version, version)
        if isinstance(result, Err):
            return result
        for rel in result.value:
            self._log.note(f"rewrote {rel}")
        return Ok(None)

    def clean_build(self) -> Result[None, StageFailure]:
        self._log.stage("clean", "cleaning build state")
        return self._tool("clean", self._config.build.clean)

    def run_tests(self) -> Result[None, StageFailure]:
        self._log.stage("test", "running the test suite")
        return self._tool("test", self._config.build.test)

    def build_artifacts(self) -> Result[None, StageFailure]:
        request = self._session.request
        self._log.stage("build", f"building release artifacts ({request.mode})")
        built = self._tool("build", release_build_command(self._config, dry_run=request.dry_run))
        if isinstance(built, Err):
            return built
        if not self.artifacts_path.is_dir():
            return Err(
                StageFailure(
                    stage="build",
                    message=f"build produced no artifact directory: {self.artifacts_path}",
                    hint="Check [build] artifacts_dir in release.toml.",
                )
            )
        return Ok(None)

    def check_compat(self) -> Result[None, StageFailure]:
        self._log.stage("compat", "checking binary compatibility (advisory)")
        return self._tool("compat", self._config.build.compat)

    def commit_and_tag(self) -> Result[None, StageFailure]:
        version = self._session.request.version
        tag = self._session.tag
        self._log.stage("commit-tag", f"committing and tagging {tag}")

        added = self._git("commit-tag", self._repo.add_all())
        if isinstance(added, Err):
            return added

        committed = self._git("commit-tag", self._repo.commit(commit_message(version)))
        if isinstance(committed, Err):
            return committed

        return self._git("commit-tag", self._repo.tag_annotated(tag, tag_message(version)))

    def _tool(self, stage: str, argv: Sequence[str]) -> Result[None, StageFailure]:
        self._log.command(argv)
        result = self._runner.run(list(argv), cwd=self._repo.path, stream=True)
        return result.map(_discard).map_err(lambda e: _tool_failure(stage, e))

    def _git(self, stage: str, result: Result[None, GitError]) -> Result[None, StageFailure]:
        return result.map_err(
            lambda e: StageFailure(stage=stage, message=f"git {e.command} failed: {e.message}")
        )


def _tool_failure(stage: str, error: ProcessError) -> StageFailure:
    return StageFailure(stage=stage, message=str(error), hint=error.detail)


def _discard(_: str) -> None:
    return None
