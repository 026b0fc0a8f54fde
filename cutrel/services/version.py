"""Resolve the version currently configured in the build."""

from __future__ import annotations

import re
from pathlib import Path

from cutrel.core.config import BuildConfig
from cutrel.core.result import Err, Ok, Result
from cutrel.output.release_log import ReleaseLog
from cutrel.platform.process import CommandRunner
from cutrel.release.errors import ResolverError

# CSI sequences (colors, cursor movement) and OSC sequences (titles, links).
_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b[@-Z\\-_]")
_VERSION_RE = re.compile(r"^[0-9][0-9A-Za-z.+\-]*$")

_VERSION_QUERY_TIMEOUT_SECONDS = 10 * 60.0


def strip_ansi(text: str) -> str:
    """Remove terminal control sequences and carriage returns."""
    return _ANSI_RE.sub("", text).replace("\r", "")


def parse_version_output(output: str) -> str | None:
    """The version is the last non-empty line the build tool prints."""
    lines = [ln.strip() for ln in strip_ansi(output).splitlines() if ln.strip()]
    if not lines:
        return None
    candidate = lines[-1]
    if not _VERSION_RE.match(candidate):
        return None
    return candidate


def resolve_current_version(
    *,
    build: BuildConfig,
    runner: CommandRunner,
    cwd: Path,
    log: ReleaseLog,
) -> Result[str, ResolverError]:
    log.stage("version", "querying the build for the current version")
    log.command(build.version)

    result = runner.run(list(build.version), cwd=cwd, timeout=_VERSION_QUERY_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ResolverError(
                message=f"version query failed: {result.error}",
                hint=result.error.detail,
            )
        )

    version = parse_version_output(result.value)
    if version is None:
        return Err(
            ResolverError(
                message="build tool printed no recognizable version",
                hint=strip_ansi(result.value).strip()[-200:] or None,
            )
        )

    log.note(f"current version: {version}")
    return Ok(version)
