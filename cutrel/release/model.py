"""Release domain model.

``ReleaseRequest`` and ``RemoteTarget`` are immutable inputs built once from
the command line. ``ReleaseSession`` is the mutable run state owned by the
pipeline; its ``tier`` is the single switch consulted by the failure
policies and by the interrupt router.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from cutrel.core.result import Result

if TYPE_CHECKING:
    from cutrel.release.errors import AdvisoryWarning, StageFailure


RELEASE_BRANCH_PREFIX = "releasing-"
TAG_PREFIX = "v"


def release_branch_name(version: str) -> str:
    return f"{RELEASE_BRANCH_PREFIX}{version}"


def release_tag_name(version: str) -> str:
    return f"{TAG_PREFIX}{version}"


class Tier(Enum):
    """Failure-handling regime of the session.

    Transitions are monotonic: PREFLIGHT -> REVERSIBLE -> IRREVERSIBLE.
    """

    PREFLIGHT = "preflight"
    REVERSIBLE = "reversible"
    IRREVERSIBLE = "irreversible"

    def __str__(self) -> str:
        return self.value


_NEXT_TIER: dict[Tier, Tier] = {
    Tier.PREFLIGHT: Tier.REVERSIBLE,
    Tier.REVERSIBLE: Tier.IRREVERSIBLE,
}


@dataclass(frozen=True, slots=True)
class RemoteTarget:
    """Publish destination (host + path)."""

    host: str
    path: str

    @property
    def destination(self) -> str:
        """rsync/scp style ``host:path/``."""
        return f"{self.host}:{self.path.rstrip('/')}/"

    def __str__(self) -> str:
        return f"{self.host}:{self.path}"


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Validated command line input, read-only for the process lifetime."""

    version: str
    remote: RemoteTarget
    dry_run: bool = True
    run_tests: bool = False
    skip_compat_check: bool = False
    skip_revert: bool = False

    @property
    def mode(self) -> str:
        return "dry-run" if self.dry_run else "real-run"


type StageAction = Callable[[], Result[None, StageFailure]]


@dataclass(frozen=True, slots=True)
class Stage:
    """A named, all-or-nothing unit of work.

    Attributes:
        name: Stage name used in logs and reports.
        tier: Tier whose failure policy handles this stage's failure.
        action: The work itself.
        enabled: False when the request skips this stage.
        advisory: Failure is reported as a warning and does not abort.
        skip_reason: Logged when the stage is disabled.
    """

    name: str
    tier: Tier
    action: StageAction
    enabled: bool = True
    advisory: bool = False
    skip_reason: str = "not requested"


def _empty_warnings() -> list[AdvisoryWarning]:
    return []


@dataclass(slots=True)
class ReleaseSession:
    """Mutable state of one release run.

    ``tier`` only moves forward, through ``begin`` and ``enter_irreversible``.
    Failure handling and interrupt routing both read it at the moment they
    act, so a transition is a single assignment.
    """

    request: ReleaseRequest
    initial_branch: str
    release_branch: str
    tag: str
    tier: Tier = Tier.PREFLIGHT
    completed: list[str] = field(default_factory=list)
    warnings: list[AdvisoryWarning] = field(default_factory=_empty_warnings)
    current_stage: str | None = None

    @classmethod
    def start(cls, request: ReleaseRequest, initial_branch: str) -> ReleaseSession:
        return cls(
            request=request,
            initial_branch=initial_branch,
            release_branch=release_branch_name(request.version),
            tag=release_tag_name(request.version),
        )

    def begin(self) -> None:
        """Enter the reversible tier."""
        self._advance(Tier.REVERSIBLE)

    def enter_irreversible(self) -> None:
        """Cross the point of no return. Happens exactly once."""
        self._advance(Tier.IRREVERSIBLE)

    def record(self, stage: str) -> None:
        self.completed.append(stage)

    def _advance(self, target: Tier) -> None:
        if _NEXT_TIER.get(self.tier) is not target:
            raise RuntimeError(f"invalid tier transition: {self.tier} -> {target}")
        self.tier = target
