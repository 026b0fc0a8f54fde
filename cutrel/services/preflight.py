# SPDX-License-Identifier: MIT
"""Preflight validation.

Checks the ambient environment before anything is mutated:
- required executables are on PATH
- the required toolchain major/minor version is active
- the working copy is on a named branch with no uncommitted changes
- the release branch and tag do not exist yet

Then it asks the operator to confirm removal of untracked files and removes
them. Declining aborts the release; there is no flag to skip the prompt.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from cutrel.core.config import ReleaseConfig
from cutrel.core.result import Err, Ok, Result
from cutrel.git.repository import Repository
from cutrel.output.console import ConsoleProtocol, Style
from cutrel.platform.process import CommandRunner
from cutrel.release.errors import PreflightError
from cutrel.release.model import release_branch_name, release_tag_name

_JAVA_STYLE_RE = re.compile(r"version\s+\"?(\d+(?:\.\d+)*)")
_DOTTED_RE = re.compile(r"(\d+(?:\.\d+)+)")

_TOOLCHAIN_TIMEOUT_SECONDS = 30.0


def parse_toolchain_version(output: str) -> tuple[int, ...] | None:
    """Extract a dotted version from toolchain output.

    Prefers ``version "X.Y.Z"`` (java, javac, scala) and falls back to the
    first dotted number.
    """
    match = _JAVA_STYLE_RE.search(output) or _DOTTED_RE.search(output)
    if match is None:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def toolchain_matches(found: tuple[int, ...], required: str) -> bool:
    """True if ``found`` starts with the dotted components of ``required``.

    Missing trailing components of ``found`` count as zero, so a JDK that
    reports ``"17"`` satisfies ``"17.0"``.
    """
    wanted = tuple(int(part) for part in required.split("."))
    padded = found + (0,) * max(0, len(wanted) - len(found))
    return padded[: len(wanted)] == wanted


def _default_which(name: str) -> str | None:
    return shutil.which(name)


@dataclass(frozen=True, slots=True)
class PreflightValidator:
    """Validate the environment, then clean untracked files.

    Attributes:
        repo: Working copy to release from
        config: Release configuration
        runner: Command runner for the toolchain version query
        console: Output sink
        confirm: Interactive yes/no capability
        which: PATH lookup (replaced in tests)
    """

    repo: Repository
    config: ReleaseConfig
    runner: CommandRunner
    console: ConsoleProtocol
    confirm: Callable[[str], bool]
    which: Callable[[str], str | None] = field(default=_default_which)

    def run(self, version: str) -> Result[str, PreflightError]:
        """Run all checks and the untracked cleanup.

        Returns:
            Ok(initial branch name) when the release may start.
        """
        checks = self.check(version)
        if isinstance(checks, Err):
            return checks

        cleanup = self.cleanup_untracked()
        if isinstance(cleanup, Err):
            return cleanup
        return checks

    def check(self, version: str) -> Result[str, PreflightError]:
        """Pure checks, in order. The first violation wins."""
        self.console.header("Preflight")

        tools = self.check_tools()
        if isinstance(tools, Err):
            return tools

        toolchain = self.check_toolchain()
        if isinstance(toolchain, Err):
            return toolchain

        branch = self.check_branch()
        if isinstance(branch, Err):
            return branch

        clean = self.check_clean()
        if isinstance(clean, Err):
            return clean

        names = self.check_release_names(version)
        if isinstance(names, Err):
            return names

        return branch

    def check_tools(self) -> Result[None, PreflightError]:
        missing = [name for name in self.config.required_tools if not self.which(name)]
        if missing:
            return Err(
                PreflightError(
                    check="tools",
                    message=f"required tools not found on PATH: {', '.join(missing)}",
                    hint="Install the missing tools or fix PATH, then retry.",
                )
            )
        self.console.success(f"tools: {', '.join(self.config.required_tools)}")
        return Ok(None)

    def check_toolchain(self) -> Result[None, PreflightError]:
        toolchain = self.config.toolchain
        result = self.runner.run(
            list(toolchain.command),
            cwd=self.repo.path,
            merge_stderr=True,
            timeout=_TOOLCHAIN_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                PreflightError(
                    check="toolchain",
                    message=f"toolchain version query failed: {result.error}",
                    hint=result.error.detail,
                )
            )

        found = parse_toolchain_version(result.value)
        if found is None:
            return Err(
                PreflightError(
                    check="toolchain",
                    message=f"cannot read toolchain version from: {' '.join(toolchain.command)}",
                )
            )

        found_text = ".".join(str(p) for p in found)
        if not toolchain_matches(found, toolchain.version):
            return Err(
                PreflightError(
                    check="toolchain",
                    message=f"toolchain {toolchain.version} required, found {found_text}",
                    hint="Switch the active toolchain (e.g. JAVA_HOME) and retry.",
                )
            )
        self.console.success(f"toolchain: {found_text}")
        return Ok(None)

    def check_branch(self) -> Result[str, PreflightError]:
        branch = self.repo.current_branch()
        if branch is None:
            return Err(
                PreflightError(
                    check="branch",
                    message="working copy is not on a named branch (detached HEAD)",
                    hint="git checkout <branch> before releasing.",
                )
            )
        self.console.success(f"branch: {branch}")
        return Ok(branch)

    def check_clean(self) -> Result[None, PreflightError]:
        status = self.repo.status()
        if isinstance(status, Err):
            return Err(
                PreflightError(check="clean", message=f"git status failed: {status.error.message}")
            )

        dirty = status.value.uncommitted
        if dirty:
            for entry in dirty[:10]:
                self.console.print(f"  {entry.xy} {entry.path}", Style.DIM)
            return Err(
                PreflightError(
                    check="clean",
                    message=f"working copy has {len(dirty)} uncommitted change(s)",
                    hint="Commit or stash your changes, then retry.",
                )
            )
        self.console.success("working copy: no uncommitted changes")
        return Ok(None)

    def check_release_names(self, version: str) -> Result[None, PreflightError]:
        branch = release_branch_name(version)
        tag = release_tag_name(version)
        if self.repo.branch_exists(branch):
            return Err(
                PreflightError(
                    check="release-names",
                    message=f"release branch already exists: {branch}",
                    hint=f"Inspect it, then remove it with: git branch -D {branch}",
                )
            )
        if self.repo.tag_exists(tag):
            return Err(
                PreflightError(
                    check="release-names",
                    message=f"release tag already exists: {tag}",
                    hint="Was this version already released?",
                )
            )
        return Ok(None)

    def cleanup_untracked(self) -> Result[None, PreflightError]:
        """Confirm, then remove untracked files."""
        preview = self.repo.untracked_paths()
        if isinstance(preview, Err):
            return Err(
                PreflightError(
                    check="cleanup",
                    message=f"listing untracked files failed: {preview.error.message}",
                )
            )

        paths = preview.value
        if paths:
            self.console.print("Untracked files that will be removed:", Style.WARNING)
            for path in paths:
                self.console.print(f"  {path}", Style.DIM)
        else:
            self.console.print("No untracked files to remove.", Style.DIM)

        if not self.confirm(f"Remove untracked files in {self.repo.path} and start the release?"):
            return Err(
                PreflightError(
                    check="confirm",
                    message="release aborted: cleanup was not confirmed",
                )
            )

        removed = self.repo.clean_untracked()
        if isinstance(removed, Err):
            return Err(
                PreflightError(
                    check="cleanup", message=f"git clean failed: {removed.error.message}"
                )
            )
        self.console.success("untracked files removed")
        return Ok(None)

