from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from cutrel.core.config import ReleaseConfig, load_config_or_default
from cutrel.core.errors import ErrorCode
from cutrel.core.result import Err
from cutrel.output.console import ConsoleProtocol, RichConsole
from cutrel.output.errors import print_config_error
from cutrel.platform.process import CommandRunner, ProcessRunner


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    runner: CommandRunner
    console: ConsoleProtocol


def find_repo_root(start: Path, runner: CommandRunner) -> Path | None:
    result = runner.run(["git", "rev-parse", "--show-toplevel"], cwd=start, timeout=30.0)
    if isinstance(result, Err):
        return None
    top = result.value.strip()
    return Path(top) if top else None


def build_context(cwd: Path | None = None) -> CLIContext:
    console = RichConsole()
    runner = ProcessRunner()
    start = cwd or Path.cwd()

    root = find_repo_root(start, runner)
    if root is None:
        console.error(f"not inside a git working copy: {start}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(root)
    if isinstance(config_result, Err):
        print_config_error(config_result.error, console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        root=root,
        config=config_result.value,
        runner=runner,
        console=console,
    )
