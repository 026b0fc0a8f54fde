"""Tests for cutrel.output.release_log module."""

from __future__ import annotations

from cutrel.output.console import MockConsole, Style
from cutrel.output.release_log import ReleaseLog


def make_log(*, dry_run: bool) -> tuple[ReleaseLog, MockConsole]:
    console = MockConsole()
    return ReleaseLog(console, dry_run=dry_run), console


class TestModeTag:
    def test_dry_run_tag(self) -> None:
        log, console = make_log(dry_run=True)
        log.stage("branch", "create releasing-1.0.0")
        assert console.messages == ["would-do: [branch] create releasing-1.0.0"]

    def test_real_run_tag(self) -> None:
        log, console = make_log(dry_run=False)
        log.stage("branch", "create releasing-1.0.0")
        assert console.messages == ["doing: [branch] create releasing-1.0.0"]

    def test_every_line_is_tagged(self) -> None:
        log, console = make_log(dry_run=True)
        log.stage("build", "package")
        log.done("build")
        log.skipped("test", "not requested")
        log.command(["sbt", "+package"])
        log.note("something")
        log.warning("advisory")
        log.error("broken")
        log.transition("point of no return")

        assert all("would-do:" in message for message in console.messages)


class TestCommand:
    def test_quotes_arguments_with_spaces(self) -> None:
        log, console = make_log(dry_run=False)
        log.command(["sbt", "--error", "print version"])
        assert console.messages == ["doing: $ sbt --error 'print version'"]

    def test_style_is_dim(self) -> None:
        log, console = make_log(dry_run=False)
        log.command(["git", "status"])
        assert console.outputs[0].style == Style.DIM


class TestLevels:
    def test_error_is_an_error(self) -> None:
        log, console = make_log(dry_run=False)
        log.error("boom")
        assert console.has_error()
        assert console.messages == ["error: doing: boom"]

    def test_skipped_mentions_reason(self) -> None:
        log, console = make_log(dry_run=False)
        log.skipped("compat", "real run")
        assert console.messages == ["doing: [compat] skipped (real run)"]
