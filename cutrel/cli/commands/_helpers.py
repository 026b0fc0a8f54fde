"""Shared helpers for CLI commands."""

from __future__ import annotations

import re
from typing import NoReturn

import typer

from cutrel.core.errors import ErrorCode

_RELEASE_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-[0-9A-Za-z]+(?:[.\-][0-9A-Za-z]+)*)?$"
)


def is_release_version(version: str) -> bool:
    """MAJOR.MINOR.PATCH with an optional pre-release suffix (e.g. ``2.0.0-RC1``)."""
    return _RELEASE_VERSION_RE.match(version) is not None


def exit_with_error(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
