# SPDX-License-Identifier: MIT
"""Application services for the release command.

Services implement the release workflow, coordinating between the domain
layer (release/) and infrastructure (git/, platform/).
"""

from cutrel.services.interrupts import InterruptRouter, ReleaseInterrupted
from cutrel.services.pipeline import ReleasePipeline
from cutrel.services.preflight import PreflightValidator
from cutrel.services.recovery import (
    EscalatedPolicy,
    FailurePolicy,
    PolicySet,
    RecoverablePolicy,
    revert_local_changes,
)

__all__ = [
    # Pipeline
    "ReleasePipeline",
    "PreflightValidator",
    # Failure handling
    "EscalatedPolicy",
    "FailurePolicy",
    "PolicySet",
    "RecoverablePolicy",
    "revert_local_changes",
    # Interrupts
    "InterruptRouter",
    "ReleaseInterrupted",
]
