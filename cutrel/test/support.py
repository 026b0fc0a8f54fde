"""Test doubles and git helpers shared by the test suite."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from cutrel.core.result import Err, Result
from cutrel.platform.process import CommandRunner, ProcessError

Response = Result[str, ProcessError] | Callable[[list[str]], Result[str, ProcessError]]

CURRENT_VERSION = "1.2.3-SNAPSHOT"


def _empty_calls() -> list[list[str]]:
    return []


def _empty_responses() -> list[tuple[tuple[str, ...], Response]]:
    return []


@dataclass
class ScriptedRunner:
    """CommandRunner answering by argv prefix and recording every call.

    Later registrations win. Commands matching no prefix go to ``fallback``
    (typically the real runner, for git) or fail the test.
    """

    fallback: CommandRunner | None = None
    calls: list[list[str]] = field(default_factory=_empty_calls)
    responses: list[tuple[tuple[str, ...], Response]] = field(default_factory=_empty_responses)

    def on(self, prefix: Sequence[str], response: Response) -> ScriptedRunner:
        self.responses.append((tuple(prefix), response))
        return self

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        merge_stderr: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        argv = list(cmd)
        self.calls.append(argv)
        for prefix, response in reversed(self.responses):
            if tuple(argv[: len(prefix)]) == prefix:
                return response(argv) if callable(response) else response
        if self.fallback is not None:
            return self.fallback.run(
                argv, cwd=cwd, stream=stream, merge_stderr=merge_stderr, timeout=timeout
            )
        raise AssertionError(f"unexpected command: {argv}")

    def calls_to(self, executable: str) -> list[list[str]]:
        return [c for c in self.calls if c and c[0] == executable]

    def git_calls(self) -> list[list[str]]:
        """git subcommands, without the leading ``git -C <path>``."""
        return [c[3:] for c in self.calls_to("git") if c[1:2] == ["-C"]]


def failed(cmd: Sequence[str], returncode: int = 1, stderr: str = "boom") -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr))


def run_git(cwd: Path, *args: str) -> str:
    """Run git and return stdout; raises CalledProcessError on failure."""
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout


@dataclass(frozen=True, slots=True)
class GitWorkspace:
    """A working copy on ``main`` plus the bare repository it pushes to."""

    work: Path
    remote: Path

    def branches(self) -> list[str]:
        out = run_git(self.work, "for-each-ref", "--format=%(refname:short)", "refs/heads")
        return out.split()

    def tags(self) -> list[str]:
        return run_git(self.work, "tag", "--list").split()

    def remote_tags(self) -> list[str]:
        return run_git(self.remote, "tag", "--list").split()

    def head_branch(self) -> str:
        return run_git(self.work, "rev-parse", "--abbrev-ref", "HEAD").strip()

    def head_sha(self) -> str:
        return run_git(self.work, "rev-parse", "HEAD").strip()

    def porcelain(self) -> str:
        return run_git(self.work, "status", "--porcelain")

    def show(self, rev: str, path: str) -> str:
        return run_git(self.work, "show", f"{rev}:{path}")


def init_workspace(root: Path) -> GitWorkspace:
    """Create a committed sbt-style project with a bare ``origin``."""
    remote = root / "remote.git"
    work = root / "work"
    remote.mkdir()
    work.mkdir()

    run_git(remote, "init", "--bare", "--quiet")
    run_git(work, "init", "--quiet")
    run_git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    for key, value in (
        ("user.name", "Release Bot"),
        ("user.email", "release@example.org"),
        ("commit.gpgsign", "false"),
        ("tag.gpgsign", "false"),
    ):
        run_git(work, "config", key, value)

    (work / "build.sbt").write_text(
        f'name := "demo"\nversion := "{CURRENT_VERSION}"\n', encoding="utf-8"
    )
    (work / "README.md").write_text(
        f"# demo\n\nCurrent: {CURRENT_VERSION}. Unrelated: 11.2.3-SNAPSHOT.\n",
        encoding="utf-8",
    )
    (work / ".gitignore").write_text("target/\n", encoding="utf-8")
    run_git(work, "add", "-A")
    run_git(work, "commit", "--quiet", "-m", "initial")
    run_git(work, "remote", "add", "origin", str(remote))

    return GitWorkspace(work=work, remote=remote)
