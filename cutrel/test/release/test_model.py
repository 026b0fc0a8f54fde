"""Tests for cutrel.release.model module."""

from __future__ import annotations

import pytest

from cutrel.release.model import (
    ReleaseRequest,
    ReleaseSession,
    RemoteTarget,
    Tier,
    release_branch_name,
    release_tag_name,
)


def make_session(**request_fields: object) -> ReleaseSession:
    request = ReleaseRequest(
        version="1.2.3",
        remote=RemoteTarget("downloads.example.org", "/srv/releases"),
        **request_fields,  # type: ignore[arg-type]
    )
    return ReleaseSession.start(request, initial_branch="main")


class TestNames:
    def test_branch_name(self) -> None:
        assert release_branch_name("1.2.3") == "releasing-1.2.3"

    def test_tag_name(self) -> None:
        assert release_tag_name("1.2.3-RC1") == "v1.2.3-RC1"


class TestRemoteTarget:
    def test_destination_has_single_trailing_slash(self) -> None:
        assert RemoteTarget("h", "/srv/x").destination == "h:/srv/x/"
        assert RemoteTarget("h", "/srv/x/").destination == "h:/srv/x/"

    def test_str(self) -> None:
        assert str(RemoteTarget("h", "/p")) == "h:/p"


class TestReleaseRequest:
    def test_dry_run_is_default(self) -> None:
        request = ReleaseRequest(version="1.0.0", remote=RemoteTarget("h", "/p"))
        assert request.dry_run is True
        assert request.mode == "dry-run"

    def test_real_run_mode(self) -> None:
        request = ReleaseRequest(version="1.0.0", remote=RemoteTarget("h", "/p"), dry_run=False)
        assert request.mode == "real-run"

    def test_frozen(self) -> None:
        request = ReleaseRequest(version="1.0.0", remote=RemoteTarget("h", "/p"))
        with pytest.raises(AttributeError):
            request.dry_run = False  # type: ignore[misc]


class TestReleaseSession:
    def test_start_derives_names(self) -> None:
        session = make_session()
        assert session.initial_branch == "main"
        assert session.release_branch == "releasing-1.2.3"
        assert session.tag == "v1.2.3"
        assert session.tier is Tier.PREFLIGHT

    def test_transitions_are_monotonic(self) -> None:
        session = make_session()
        session.begin()
        assert session.tier is Tier.REVERSIBLE
        session.enter_irreversible()
        assert session.tier is Tier.IRREVERSIBLE

    def test_cannot_skip_reversible(self) -> None:
        session = make_session()
        with pytest.raises(RuntimeError, match="invalid tier transition"):
            session.enter_irreversible()
        assert session.tier is Tier.PREFLIGHT

    def test_point_of_no_return_is_crossed_once(self) -> None:
        session = make_session()
        session.begin()
        session.enter_irreversible()
        with pytest.raises(RuntimeError):
            session.enter_irreversible()

    def test_cannot_go_back(self) -> None:
        session = make_session()
        session.begin()
        session.enter_irreversible()
        with pytest.raises(RuntimeError):
            session.begin()

    def test_record(self) -> None:
        session = make_session()
        session.record("branch")
        session.record("substitute")
        assert session.completed == ["branch", "substitute"]
