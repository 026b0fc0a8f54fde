from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from cutrel.cli.app import app
from cutrel.cli.commands._helpers import is_release_version
from cutrel.cli.context import CLIContext, build_context
from cutrel.core.config import ReleaseConfig, RemoteConfig
from cutrel.core.errors import ErrorCode
from cutrel.output.console import MockConsole
from cutrel.release.model import ReleaseRequest
from cutrel.test.support import ScriptedRunner

runner = CliRunner()


@dataclass
class Captured:
    requests: list[ReleaseRequest] = field(default_factory=list)


def _ctx(tmp_path: Path) -> CLIContext:
    return CLIContext(
        root=tmp_path,
        config=ReleaseConfig(remote=RemoteConfig(server="dl.example.org", path="/srv/demo")),
        runner=ScriptedRunner(),
        console=MockConsole(),
    )


@pytest.fixture
def captured(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Captured:
    import cutrel.cli.commands.release_cmd as release_cmd

    sink = Captured()

    class FakePipeline:
        def __init__(self, *, request: ReleaseRequest, **_: object) -> None:
            sink.requests.append(request)

        def run(self) -> int:
            return int(ErrorCode.OK)

    monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))
    monkeypatch.setattr(release_cmd, "ReleasePipeline", FakePipeline)
    return sink


class TestVersionArgument:
    @pytest.mark.parametrize("version", ["1.0.0", "0.12.3", "2.0.0-RC1", "1.4.0-M2.1"])
    def test_valid(self, version: str) -> None:
        assert is_release_version(version)

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "01.0.0", "1.0.0-", "latest", ""])
    def test_invalid(self, version: str) -> None:
        assert not is_release_version(version)


def test_help_exits_with_user_error() -> None:
    result = runner.invoke(app, ["-h"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "--real-run" in result.output


def test_help_wins_over_missing_version() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_invalid_version_is_rejected(captured: Captured) -> None:
    result = runner.invoke(app, ["1.0"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert captured.requests == []


def test_defaults_are_a_dry_run_against_configured_remote(captured: Captured) -> None:
    result = runner.invoke(app, ["1.2.3"])

    assert result.exit_code == 0
    (request,) = captured.requests
    assert request.version == "1.2.3"
    assert request.dry_run is True
    assert request.run_tests is False
    assert request.skip_compat_check is False
    assert request.skip_revert is False
    assert request.remote.host == "dl.example.org"
    assert request.remote.path == "/srv/demo"


def test_short_flags(captured: Captured) -> None:
    result = runner.invoke(
        app, ["-t", "-e", "-m", "-r", "-s", "other.example.org", "-p", "/tmp/x", "1.2.3"]
    )

    assert result.exit_code == 0
    (request,) = captured.requests
    assert request.run_tests is True
    assert request.dry_run is False
    assert request.skip_compat_check is True
    assert request.skip_revert is True
    assert request.remote.host == "other.example.org"
    assert request.remote.path == "/tmp/x"


def test_pipeline_exit_code_is_propagated(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import cutrel.cli.commands.release_cmd as release_cmd

    class FailingPipeline:
        def __init__(self, **_: object) -> None:
            pass

        def run(self) -> int:
            return int(ErrorCode.ESCALATED)

    monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))
    monkeypatch.setattr(release_cmd, "ReleasePipeline", FailingPipeline)

    result = runner.invoke(app, ["-e", "1.2.3"])

    assert result.exit_code == int(ErrorCode.ESCALATED)


def test_outside_a_working_copy(tmp_path: Path) -> None:
    with pytest.raises(typer.Exit) as exc:
        build_context(tmp_path)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
