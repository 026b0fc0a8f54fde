"""Platform abstraction layer."""

from .process import (
    CommandRunner,
    ProcessError,
    ProcessRunner,
    run,
    run_silent,
)

__all__ = [
    "CommandRunner",
    "ProcessError",
    "ProcessRunner",
    "run",
    "run_silent",
]
