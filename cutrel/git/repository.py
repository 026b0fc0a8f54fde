"""Git repository abstraction.

``Repository`` is the version-control client the release stages use. Every
operation goes through a ``CommandRunner`` and returns a Result, so a stage
never looks at exit codes itself.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status():
        case Ok(status):
            for entry in status.uncommitted:
                print(f"{entry.xy} {entry.path}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from cutrel.core.result import Err, Ok, Result
from cutrel.platform.process import CommandRunner, ProcessRunner

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1``.

    Attributes:
        entries: All status entries (staged, unstaged, untracked)
    """

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def uncommitted(self) -> list[StatusEntry]:
        """Staged or unstaged changes to tracked files."""
        return [e for e in self.entries if not e.is_untracked]


class Repository:
    """Git client for a single working copy.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, runner: CommandRunner | None = None) -> None:
        self.path = path
        self._runner: CommandRunner = runner or ProcessRunner()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status."""
        result = self._git(["status", "--porcelain=v1"], "status")
        if isinstance(result, Err):
            return result
        return Ok(self._parse_status(result.value))

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if HEAD is detached or git fails.
        """
        result = self._git(["symbolic-ref", "--quiet", "--short", "HEAD"], "symbolic-ref")
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def branch_exists(self, name: str) -> bool:
        return self._ref_exists(f"refs/heads/{name}")

    def tag_exists(self, name: str) -> bool:
        return self._ref_exists(f"refs/tags/{name}")

    def tracked_files(self) -> Result[list[str], GitError]:
        """Paths of all tracked files, relative to the repository root."""
        result = self._git(["ls-files", "-z"], "ls-files")
        if isinstance(result, Err):
            return result
        return Ok([p for p in result.value.split("\0") if p])

    def untracked_paths(self) -> Result[list[str], GitError]:
        """Untracked paths that ``clean_untracked`` would remove.

        Wholly untracked directories are reported once, with a trailing slash.
        """
        result = self._git(
            ["ls-files", "--others", "--exclude-standard", "--directory", "-z"],
            "ls-files --others",
        )
        if isinstance(result, Err):
            return result
        return Ok([p for p in result.value.split("\0") if p])

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def create_branch(self, name: str) -> Result[None, GitError]:
        """Create a branch from HEAD and switch to it."""
        return self._git(["checkout", "-b", name], "checkout -b").map(_discard)

    def checkout(self, name: str) -> Result[None, GitError]:
        return self._git(["checkout", name], "checkout").map(_discard)

    def delete_branch(self, name: str) -> Result[None, GitError]:
        """Force-delete a local branch (it is never merged anywhere)."""
        return self._git(["branch", "-D", name], "branch -D").map(_discard)

    def delete_tag(self, name: str) -> Result[None, GitError]:
        return self._git(["tag", "-d", name], "tag -d").map(_discard)

    def add_all(self) -> Result[None, GitError]:
        return self._git(["add", "-A"], "add").map(_discard)

    def commit(self, message: str) -> Result[None, GitError]:
        return self._git(["commit", "-m", message], "commit").map(_discard)

    def tag_annotated(self, name: str, message: str) -> Result[None, GitError]:
        return self._git(["tag", "-a", name, "-m", message], "tag -a").map(_discard)

    def reset_hard(self) -> Result[None, GitError]:
        """Discard all uncommitted changes to tracked files."""
        return self._git(["reset", "--hard", "--quiet"], "reset --hard").map(_discard)

    def clean_untracked(self) -> Result[None, GitError]:
        """Remove untracked files and directories (ignored files are kept)."""
        return self._git(["clean", "-fd"], "clean -fd").map(_discard)

    # ------------------------------------------------------------------
    # Remote mutations
    # ------------------------------------------------------------------

    def push_tag(self, remote: str, tag: str) -> Result[None, GitError]:
        return self._git(["push", remote, f"refs/tags/{tag}"], "push").map(_discard)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ref_exists(self, ref: str) -> bool:
        result = self._git(["rev-parse", "--verify", "--quiet", ref], "rev-parse")
        return isinstance(result, Ok)

    def _git(self, args: list[str], label: str) -> Result[str, GitError]:
        """Run a git command in this repository."""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if args[0] in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        result = self._runner.run(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=timeout,
        )
        match result:
            case Ok(stdout):
                return Ok(stdout)
            case Err(e):
                return Err(
                    GitError(
                        command=label,
                        message=e.detail or f"git {label} failed",
                        returncode=e.returncode,
                    )
                )

    def _parse_status(self, output: str) -> GitStatus:
        """Parse git status --porcelain=v1 output."""
        entries: list[StatusEntry] = []
        for line in output.splitlines():
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)
        return GitStatus(entries=tuple(entries))

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None
        if line.startswith("?? "):
            return StatusEntry(xy="??", path=line[3:])
        return StatusEntry(xy=line[:2], path=line[3:])


def _discard(_: str) -> None:
    return None
