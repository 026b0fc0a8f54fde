"""Tests for cutrel.git.repository module."""

from __future__ import annotations

from pathlib import Path

import pytest

from cutrel.core.result import Err, Ok
from cutrel.git.repository import GitError, Repository, StatusEntry
from cutrel.test.support import GitWorkspace, ScriptedRunner, failed, run_git


class TestStatusEntry:
    def test_untracked(self) -> None:
        assert StatusEntry(xy="??", path="a").is_untracked

    def test_modified_is_tracked(self) -> None:
        assert not StatusEntry(xy=" M", path="a").is_untracked
        assert not StatusEntry(xy="M ", path="a").is_untracked


class TestStatusParsing:
    def make_repo(self, output: str) -> Repository:
        runner = ScriptedRunner().on(["git"], Ok(output))
        return Repository(Path("/repo"), runner=runner)

    def test_empty_output_is_clean(self) -> None:
        assert self.make_repo("").status().unwrap().entries == ()

    def test_untracked_is_not_uncommitted(self) -> None:
        status = self.make_repo("?? notes.txt\n").status().unwrap()
        assert [e.path for e in status.entries] == ["notes.txt"]
        assert status.uncommitted == []

    def test_modified_is_uncommitted(self) -> None:
        repo = self.make_repo(" M build.sbt\nA  new.scala\n?? notes.txt\n")
        status = repo.status().unwrap()
        assert [e.path for e in status.uncommitted] == ["build.sbt", "new.scala"]

    def test_error_is_wrapped(self) -> None:
        runner = ScriptedRunner().on(["git"], failed(["git"], 128, "fatal: not a git repository"))
        result = Repository(Path("/repo"), runner=runner).status()
        assert result == Err(
            GitError(command="status", message="fatal: not a git repository", returncode=128)
        )


class TestCommandLines:
    def test_every_command_targets_the_repo(self) -> None:
        runner = ScriptedRunner().on(["git"], Ok(""))
        repo = Repository(Path("/repo"), runner=runner)

        repo.create_branch("releasing-1.0.0")
        repo.push_tag("origin", "v1.0.0")

        assert runner.calls == [
            ["git", "-C", "/repo", "checkout", "-b", "releasing-1.0.0"],
            ["git", "-C", "/repo", "push", "origin", "refs/tags/v1.0.0"],
        ]

    def test_untracked_paths_split_on_nul(self) -> None:
        runner = ScriptedRunner().on(["git"], Ok("notes.txt\0scratch/\0with space.txt\0"))
        repo = Repository(Path("/repo"), runner=runner)

        assert repo.untracked_paths() == Ok(["notes.txt", "scratch/", "with space.txt"])
        assert runner.git_calls() == [
            ["ls-files", "--others", "--exclude-standard", "--directory", "-z"]
        ]

    def test_clean_untracked_ignores_output(self) -> None:
        runner = ScriptedRunner().on(["git"], Ok("Entferne notes.txt\n"))
        repo = Repository(Path("/repo"), runner=runner)

        assert repo.clean_untracked() == Ok(None)
        assert runner.git_calls() == [["clean", "-fd"]]

    def test_detached_head_has_no_branch(self) -> None:
        runner = ScriptedRunner().on(["git"], failed(["git"], 1, ""))
        assert Repository(Path("/repo"), runner=runner).current_branch() is None


class TestRealRepository:
    def test_queries(self, git_workspace: GitWorkspace) -> None:
        repo = Repository(git_workspace.work)

        assert repo.current_branch() == "main"
        assert repo.branch_exists("main")
        assert not repo.branch_exists("releasing-1.2.3")
        assert not repo.tag_exists("v1.2.3")
        assert sorted(repo.tracked_files().unwrap()) == [".gitignore", "README.md", "build.sbt"]

    def test_branch_commit_tag_and_cleanup(self, git_workspace: GitWorkspace) -> None:
        repo = Repository(git_workspace.work)

        assert isinstance(repo.create_branch("releasing-1.2.3"), Ok)
        (git_workspace.work / "build.sbt").write_text('version := "1.2.3"\n', encoding="utf-8")
        assert isinstance(repo.add_all(), Ok)
        assert isinstance(repo.commit("Release 1.2.3"), Ok)
        assert isinstance(repo.tag_annotated("v1.2.3", "Release 1.2.3"), Ok)

        assert repo.current_branch() == "releasing-1.2.3"
        assert repo.tag_exists("v1.2.3")

        assert isinstance(repo.checkout("main"), Ok)
        assert isinstance(repo.delete_branch("releasing-1.2.3"), Ok)
        assert isinstance(repo.delete_tag("v1.2.3"), Ok)

        assert git_workspace.branches() == ["main"]
        assert git_workspace.tags() == []

    def test_reset_and_clean(self, git_workspace: GitWorkspace) -> None:
        repo = Repository(git_workspace.work)
        (git_workspace.work / "build.sbt").write_text("changed\n", encoding="utf-8")
        (git_workspace.work / "scratch").mkdir()
        (git_workspace.work / "scratch" / "tmp.txt").write_text("x", encoding="utf-8")

        assert repo.status().unwrap().uncommitted
        assert repo.untracked_paths() == Ok(["scratch/"])

        assert isinstance(repo.reset_hard(), Ok)
        assert repo.clean_untracked() == Ok(None)
        assert git_workspace.porcelain() == ""

    def test_push_tag_reaches_remote(self, git_workspace: GitWorkspace) -> None:
        repo = Repository(git_workspace.work)
        assert isinstance(repo.tag_annotated("v0.0.1", "Release 0.0.1"), Ok)

        assert isinstance(repo.push_tag("origin", "v0.0.1"), Ok)

        assert git_workspace.remote_tags() == ["v0.0.1"]

    def test_failed_checkout_reports_git_error(self, git_workspace: GitWorkspace) -> None:
        result = Repository(git_workspace.work).checkout("does-not-exist")

        assert isinstance(result, Err)
        assert result.error.command == "checkout"
        assert result.error.returncode != 0

    def test_ignored_files_are_not_cleaned(self, git_workspace: GitWorkspace) -> None:
        target = git_workspace.work / "target" / "release"
        target.mkdir(parents=True)
        (target / "demo.jar").write_bytes(b"jar")

        repo = Repository(git_workspace.work)
        assert repo.untracked_paths() == Ok([])
        assert repo.clean_untracked() == Ok(None)
        assert (target / "demo.jar").exists()
        assert run_git(git_workspace.work, "status", "--porcelain") == ""

    def test_untracked_listing_survives_translated_git(
        self, git_workspace: GitWorkspace, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LANG", "C.UTF-8")
        monkeypatch.setenv("LANGUAGE", "de")
        (git_workspace.work / "junk.txt").write_text("x", encoding="utf-8")
        repo = Repository(git_workspace.work)

        assert repo.untracked_paths() == Ok(["junk.txt"])
        assert repo.clean_untracked() == Ok(None)
        assert not (git_workspace.work / "junk.txt").exists()
