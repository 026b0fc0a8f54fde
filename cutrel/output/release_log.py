"""Mode-tagged release log.

Every line a release prints carries the same prefix: ``would-do:`` in a dry
run, ``doing:`` in a real run. An operator scrolling back through a terminal
can always tell which kind of run produced it.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from cutrel.output.console import ConsoleProtocol, Style

DRY_RUN_TAG = "would-do"
REAL_RUN_TAG = "doing"


class ReleaseLog:
    def __init__(self, console: ConsoleProtocol, *, dry_run: bool) -> None:
        self.console = console
        self.tag = DRY_RUN_TAG if dry_run else REAL_RUN_TAG

    def stage(self, name: str, detail: str) -> None:
        self.console.print(f"{self.tag}: [{name}] {detail}", Style.INFO)

    def done(self, name: str) -> None:
        self.console.success(f"{self.tag}: [{name}] done")

    def skipped(self, name: str, reason: str) -> None:
        self.console.print(f"{self.tag}: [{name}] skipped ({reason})", Style.DIM)

    def command(self, argv: Sequence[str]) -> None:
        """Echo a command line exactly as it is (or would be) executed."""
        self.console.print(f"{self.tag}: $ {shlex.join(argv)}", Style.DIM)

    def note(self, message: str) -> None:
        self.console.print(f"{self.tag}: {message}", Style.DIM)

    def warning(self, message: str) -> None:
        self.console.warning(f"{self.tag}: {message}")

    def error(self, message: str) -> None:
        self.console.error(f"{self.tag}: {message}")

    def transition(self, message: str) -> None:
        self.console.header(f"{self.tag}: {message}")
