"""Failure presentation.

Centralized formatting and exit code mapping for every way a release can
end badly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cutrel.core.config import ConfigError
from cutrel.core.errors import ErrorCode
from cutrel.output.console import Style
from cutrel.release.errors import (
    ConnectivityError,
    EscalatedStageError,
    InterruptFailure,
    PreflightError,
    RecoveryError,
    ReleaseFailure,
    ResolverError,
    ReversibleStageError,
)
from cutrel.release.model import Tier

if TYPE_CHECKING:
    from cutrel.output.console import ConsoleProtocol

__all__ = ["failure_exit_code", "print_config_error", "print_failure"]


def print_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    """Print a failure as a single error line plus an optional hint."""
    hint: str | None = None
    match failure:
        case PreflightError(check=check, message=message, hint=hint):
            console.error(f"preflight ({check}): {message}")
        case ConnectivityError(message=message, hint=hint):
            console.error(f"connectivity: {message}")
        case ResolverError(message=message, hint=hint):
            console.error(f"version: {message}")
        case ReversibleStageError(stage=stage, message=message, hint=hint):
            console.error(f"stage {stage} failed: {message}")
        case EscalatedStageError(stage=stage, message=message, hint=hint):
            console.error(f"stage {stage} failed after the point of no return: {message}")
        case InterruptFailure():
            console.error(failure.message)
        case RecoveryError(step=step, message=message, hint=hint):
            console.error(f"rollback failed at {step}: {message}")
    if hint:
        console.print(f"hint: {hint}", Style.DIM)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def failure_exit_code(failure: ReleaseFailure) -> int:
    """Get the process exit code for a failure."""
    match failure:
        case PreflightError(check="confirm"):
            return int(ErrorCode.USER_ERROR)
        case PreflightError() | ConnectivityError() | ResolverError():
            return int(ErrorCode.ENV_ERROR)
        case ReversibleStageError():
            return int(ErrorCode.STAGE_ERROR)
        case EscalatedStageError():
            return int(ErrorCode.ESCALATED)
        case InterruptFailure(tier=Tier.IRREVERSIBLE):
            return int(ErrorCode.ESCALATED)
        case InterruptFailure():
            return int(ErrorCode.INTERRUPTED)
        case RecoveryError():
            return int(ErrorCode.RECOVERY_FAILED)
    raise AssertionError(f"unexpected failure: {failure!r}")
