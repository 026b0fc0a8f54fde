from __future__ import annotations

import typer

from cutrel.cli.commands._helpers import exit_with_code, exit_with_error, is_release_version
from cutrel.cli.context import build_context
from cutrel.core.errors import ErrorCode
from cutrel.git.repository import Repository
from cutrel.release.model import ReleaseRequest, RemoteTarget
from cutrel.services.pipeline import ReleasePipeline


def _show_help(ctx: typer.Context, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    typer.echo(ctx.get_help())
    raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def release(
    version: str = typer.Argument(..., metavar="VERSION", help="Version to release, e.g. 1.4.0"),
    run_tests: bool = typer.Option(False, "-t", "--run-tests", help="Run the test suite"),
    server: str | None = typer.Option(
        None, "-s", "--server", metavar="ADDR", help="Override the remote host"
    ),
    path: str | None = typer.Option(
        None, "-p", "--path", metavar="PATH", help="Override the remote path"
    ),
    real_run: bool = typer.Option(
        False, "-e", "--real-run", help="Push and upload for real (default is a dry run)"
    ),
    no_mima: bool = typer.Option(
        False, "-m", "--no-mima", help="Skip the binary compatibility check"
    ),
    no_revert: bool = typer.Option(
        False, "-r", "--no-revert", help="Dry run: keep the release branch and tag"
    ),
    help_: bool = typer.Option(
        False,
        "-h",
        "--help",
        is_eager=True,
        callback=_show_help,
        help="Show this message and exit.",
    ),
) -> None:
    """Cut a release: branch, bump, build, commit, tag, then publish.

    Everything before the tag is pushed is rolled back on failure. After
    that point failures are reported and left for a human to resolve.
    """
    del help_
    if not is_release_version(version):
        exit_with_error(
            f"invalid VERSION '{version}' (expected MAJOR.MINOR.PATCH[-SUFFIX])",
            code=ErrorCode.USER_ERROR,
        )

    ctx = build_context()
    remote = ctx.config.remote
    request = ReleaseRequest(
        version=version,
        remote=RemoteTarget(host=server or remote.server, path=path or remote.path),
        dry_run=not real_run,
        run_tests=run_tests,
        skip_compat_check=no_mima,
        skip_revert=no_revert,
    )

    pipeline = ReleasePipeline(
        request=request,
        config=ctx.config,
        repo=Repository(ctx.root, ctx.runner),
        runner=ctx.runner,
        console=ctx.console,
        confirm=lambda msg: typer.confirm(msg, default=False),
    )
    exit_with_code(pipeline.run())
