"""Subprocess execution with Result-based error handling.

This is the only module allowed to call ``subprocess``. Everything else goes
through the ``CommandRunner`` capability, which tests replace with scripted
fakes.

Usage:
    runner = ProcessRunner()
    match runner.run(["git", "status"], cwd=repo_path):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from cutrel.core.result import Err, Ok, Result

__all__ = ["CommandRunner", "ProcessError", "ProcessRunner", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str | None:
        """Most useful diagnostic text, if any."""
        return self.stderr.strip() or self.stdout.strip() or None


class CommandRunner(Protocol):
    """Capability to run an external command as a pass/fail operation."""

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        merge_stderr: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run cmd and return its stdout (empty when streamed).

        Args:
            cmd: Command and arguments.
            cwd: Working directory.
            stream: Let output go to the terminal instead of capturing it.
            merge_stderr: Capture stderr into stdout (tools that report
                their version on stderr).
            timeout: Maximum seconds to wait (None for no limit).
        """
        ...


class ProcessRunner:
    """Default runner backed by subprocess."""

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        stream: bool = False,
        merge_stderr: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        if stream:
            return run_silent(list(cmd), cwd).map(lambda _: "")
        return run(list(cmd), cwd, merge_stderr=merge_stderr, timeout=timeout)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    merge_stderr: bool = False,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        merge_stderr: Redirect stderr into stdout.
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout or "",
                stderr=proc.stderr or "",
            )
        )

    return Ok(proc.stdout or "")


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command without capturing output.

    Use this for long-running build tool invocations whose output should
    stream to the terminal.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            check=False,
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout="",
                stderr="",
            )
        )

    return Ok(None)
