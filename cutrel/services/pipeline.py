"""Release state machine.

Runs preflight, connectivity, version lookup and the local stages in their
fixed order, crosses the point of no return, then publishes. Every failure
and every interrupt is handed to the policy selected by the session tier;
nothing else in the pipeline branches on the tier.

Usage:
    pipeline = ReleasePipeline(
        request=request,
        config=config,
        repo=Repository(root),
        runner=ProcessRunner(),
        console=RichConsole(),
        confirm=lambda msg: typer.confirm(msg, default=False),
    )
    raise typer.Exit(code=pipeline.run())
"""

from __future__ import annotations

from collections.abc import Callable

from cutrel.core.config import ReleaseConfig
from cutrel.core.errors import ErrorCode
from cutrel.core.result import Err
from cutrel.git.repository import Repository
from cutrel.output.console import ConsoleProtocol, Style
from cutrel.output.errors import failure_exit_code, print_failure
from cutrel.output.release_log import ReleaseLog
from cutrel.platform.process import CommandRunner
from cutrel.release.errors import (
    AdvisoryWarning,
    EscalatedStageError,
    InterruptFailure,
    ReleaseFailure,
    ReversibleStageError,
    StageFailure,
)
from cutrel.release.model import ReleaseRequest, ReleaseSession, Stage, Tier
from cutrel.services.connectivity import check_connectivity
from cutrel.services.interrupts import InterruptRouter, ReleaseInterrupted
from cutrel.services.preflight import PreflightValidator
from cutrel.services.publish import PublishStage
from cutrel.services.recovery import (
    EscalatedPolicy,
    FailurePolicy,
    PolicySet,
    RecoverablePolicy,
)
from cutrel.services.stages import ReleaseStages
from cutrel.services.version import resolve_current_version


def classify(failure: StageFailure, tier: Tier) -> ReversibleStageError | EscalatedStageError:
    """Map a stage failure into the taxonomy of the tier it happened in."""
    if tier is Tier.IRREVERSIBLE:
        return EscalatedStageError(stage=failure.stage, message=failure.message, hint=failure.hint)
    return ReversibleStageError(stage=failure.stage, message=failure.message, hint=failure.hint)


class ReleasePipeline:
    def __init__(
        self,
        *,
        request: ReleaseRequest,
        config: ReleaseConfig,
        repo: Repository,
        runner: CommandRunner,
        console: ConsoleProtocol,
        confirm: Callable[[str], bool],
        preflight: PreflightValidator | None = None,
        router: InterruptRouter | None = None,
    ) -> None:
        self._request = request
        self._config = config
        self._repo = repo
        self._runner = runner
        self._console = console
        self._log = ReleaseLog(console, dry_run=request.dry_run)
        self._preflight = preflight or PreflightValidator(
            repo=repo,
            config=config,
            runner=runner,
            console=console,
            confirm=confirm,
        )
        self._router = router or InterruptRouter()
        self._policies = PolicySet(
            recoverable=RecoverablePolicy(repo=repo, log=self._log),
            escalated=EscalatedPolicy(console=console),
        )
        self.session: ReleaseSession | None = None

    def run(self) -> int:
        """Run the whole release and return the process exit code."""
        self._console.header(f"Releasing {self._request.version} ({self._request.mode})")

        preflight = self._preflight.run(self._request.version)
        if isinstance(preflight, Err):
            print_failure(preflight.error, self._console)
            return failure_exit_code(preflight.error)

        session = ReleaseSession.start(self._request, initial_branch=preflight.value)
        self.session = session
        self._router.follow(lambda: self._interrupt_policy(session))

        with self._router:
            try:
                return self._run_session(session)
            except ReleaseInterrupted as interrupt:
                failure = InterruptFailure(
                    signal_name=interrupt.signal_name,
                    tier=interrupt.policy.tier,
                    stage=session.current_stage,
                )
                return interrupt.policy.handle(session, failure)

    def _interrupt_policy(self, session: ReleaseSession) -> FailurePolicy | None:
        if session.tier is Tier.PREFLIGHT:
            return None
        return self._policies.for_tier(session.tier)

    def _run_session(self, session: ReleaseSession) -> int:
        session.begin()

        session.current_stage = "connectivity"
        reachable = check_connectivity(
            target=self._request.remote,
            runner=self._runner,
            cwd=self._repo.path,
            log=self._log,
        )
        if isinstance(reachable, Err):
            return self._fail(session, reachable.error)

        session.current_stage = "version"
        current = resolve_current_version(
            build=self._config.build,
            runner=self._runner,
            cwd=self._repo.path,
            log=self._log,
        )
        if isinstance(current, Err):
            return self._fail(session, current.error)

        stages = ReleaseStages(
            session=session,
            repo=self._repo,
            runner=self._runner,
            config=self._config,
            log=self._log,
            current_version=current.value,
        ).build()

        for stage in stages:
            failed = self._run_stage(session, stage)
            if failed is not None:
                return failed

        session.enter_irreversible()
        self._log.transition(f"point of no return: {session.tag} committed, publishing")

        publish = PublishStage(
            session=session,
            repo=self._repo,
            runner=self._runner,
            config=self._config,
            log=self._log,
        )
        failed = self._run_stage(session, Stage("publish", Tier.IRREVERSIBLE, publish.run))
        if failed is not None:
            return failed

        session.current_stage = None
        self._summary(session)
        return int(ErrorCode.OK)

    def _run_stage(self, session: ReleaseSession, stage: Stage) -> int | None:
        """Run one stage; return an exit code if the release must stop."""
        if stage.tier is not session.tier:
            raise RuntimeError(
                f"stage {stage.name} belongs to {stage.tier}, session is {session.tier}"
            )

        if not stage.enabled:
            self._log.skipped(stage.name, stage.skip_reason)
            return None

        session.current_stage = stage.name
        result = stage.action()
        if isinstance(result, Err):
            if stage.advisory:
                warning = AdvisoryWarning(
                    stage=stage.name,
                    message=result.error.message,
                    hint=result.error.hint,
                )
                session.warnings.append(warning)
                self._log.warning(f"[{stage.name}] advisory check failed: {warning.message}")
                return None
            return self._fail(session, classify(result.error, session.tier))

        session.record(stage.name)
        self._log.done(stage.name)
        return None

    def _fail(self, session: ReleaseSession, failure: ReleaseFailure) -> int:
        return self._policies.for_tier(session.tier).handle(session, failure)

    def _summary(self, session: ReleaseSession) -> None:
        request = session.request
        self._console.header("Summary")
        self._console.print(f"completed: {', '.join(session.completed)}")
        for warning in session.warnings:
            self._console.warning(f"{warning.stage}: {warning.message}")

        if request.dry_run:
            if request.skip_revert:
                self._console.print(
                    f"{session.release_branch} and {session.tag} kept for inspection "
                    f"(currently on {self._repo.current_branch()})",
                    Style.DIM,
                )
            else:
                self._console.print(
                    f"working copy restored to {session.initial_branch}", Style.DIM
                )
            self._console.success(f"dry run of {request.version} complete")
            return

        self._console.success(f"released {request.version} as {session.tag}")
        self._console.print(
            "Remaining manual steps: approve the release in the artifact repository "
            "and announce it.",
            Style.DIM,
        )
