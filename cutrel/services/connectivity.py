"""Remote connectivity check.

A no-op ssh round trip to the publish host. It runs before any repository
mutation so an unreachable host fails the release while nothing needs undoing.
"""

from __future__ import annotations

from pathlib import Path

from cutrel.core.result import Err, Ok, Result
from cutrel.output.release_log import ReleaseLog
from cutrel.platform.process import CommandRunner
from cutrel.release.errors import ConnectivityError
from cutrel.release.model import RemoteTarget

_SSH_CONNECT_TIMEOUT_SECONDS = 10
_CHECK_TIMEOUT_SECONDS = 60.0


def reachability_command(target: RemoteTarget) -> list[str]:
    return [
        "ssh",
        "-o",
        "BatchMode=yes",
        "-o",
        f"ConnectTimeout={_SSH_CONNECT_TIMEOUT_SECONDS}",
        target.host,
        "true",
    ]


def check_connectivity(
    *,
    target: RemoteTarget,
    runner: CommandRunner,
    cwd: Path,
    log: ReleaseLog,
) -> Result[None, ConnectivityError]:
    cmd = reachability_command(target)
    log.stage("connectivity", f"checking {target.host}")
    log.command(cmd)

    result = runner.run(cmd, cwd=cwd, timeout=_CHECK_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ConnectivityError(
                target=str(target),
                message=f"cannot reach {target.host}: {result.error}",
                hint=result.error.detail or "Check your ssh keys and network, or use --server.",
            )
        )
    return Ok(None)
