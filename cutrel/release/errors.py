"""Error taxonomy for a release run.

Errors are plain values carried by ``Err``. Which one a failure becomes
decides how the run ends:

- ``PreflightError``: environment/tool/branch-state violation, nothing mutated.
- ``ConnectivityError`` / ``ResolverError``: failed before any stage ran.
- ``ReversibleStageError``: a stage before the point of no return failed;
  local mutations are rolled back.
- ``AdvisoryWarning``: an advisory check failed; reported, never fatal.
- ``EscalatedStageError``: a failure at or after the point of no return;
  reported only, a human must decide.
- ``RecoveryError``: the rollback itself failed.
- ``InterruptFailure``: SIGINT/SIGTERM received while a stage was running.
"""

from __future__ import annotations

from dataclasses import dataclass

from cutrel.release.model import Tier


@dataclass(frozen=True, slots=True)
class PreflightError:
    check: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ConnectivityError:
    target: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ResolverError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class StageFailure:
    """Outcome of a failed stage, before it is classified by tier."""

    stage: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReversibleStageError:
    stage: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class AdvisoryWarning:
    stage: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class EscalatedStageError:
    stage: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class InterruptFailure:
    """A signal arrived; ``tier`` is the tier active when it was delivered."""

    signal_name: str
    tier: Tier
    stage: str | None = None

    @property
    def message(self) -> str:
        where = f" during {self.stage}" if self.stage else ""
        return f"interrupted by {self.signal_name}{where}"


@dataclass(frozen=True, slots=True)
class RecoveryError:
    """Secondary failure while rolling back; never retried."""

    step: str
    message: str
    hint: str | None = "please check current state manually"


type ReleaseFailure = (
    PreflightError
    | ConnectivityError
    | ResolverError
    | ReversibleStageError
    | EscalatedStageError
    | InterruptFailure
    | RecoveryError
)
