"""Release lifecycle against a real repository with a bare ``origin``."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from gitrelease.core.config import (
    ArtifactsConfig,
    Config,
    ReleaseConfig,
    VerificationConfig,
    WorkflowConfig,
)
from gitrelease.core.result import Err, Ok
from gitrelease.git.repository import Repository
from gitrelease.release.service import (
    PreparedRelease,
    create_hotfix,
    create_named_branch,
    finalize_release,
    list_releases,
    next_version,
    prepare_release,
    release_notes_for,
    repository_identity,
    rollback,
    run_verification,
)
from gitrelease.release.verify import CheckOutcome
from gitrelease.test._sandbox import GitSandbox

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _released(sandbox: GitSandbox) -> Repository:
    """A repository with v1.0.0 released and one feature on top."""
    sandbox.commit("chore: init")
    sandbox.tag("v1.0.0")
    sandbox.commit("feat: add login")
    return Repository(sandbox.root)


class FailingTests:
    def run_tests(self) -> CheckOutcome:
        return CheckOutcome.failed("2 tests failed")

    def ci_check(self, name: str) -> CheckOutcome:
        return CheckOutcome.passed()


class TestNextVersion:
    def test_initial_version_without_tags(self, sandbox: GitSandbox) -> None:
        sandbox.commit("feat: first")
        assert next_version(repo=Repository(sandbox.root), config=Config()) == Ok("0.1.0")

    def test_bump_from_commits(self, sandbox: GitSandbox) -> None:
        assert next_version(repo=_released(sandbox), config=Config()) == Ok("1.1.0")

    def test_non_semver_latest_tag(self, sandbox: GitSandbox) -> None:
        sandbox.commit("chore: init")
        sandbox.tag("nightly")

        result = next_version(repo=Repository(sandbox.root), config=Config())

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"


class TestPrepareRelease:
    def test_creates_release_branch(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)

        result = prepare_release(repo=repo, config=Config())

        assert isinstance(result, Ok)
        assert result.value.version == "1.1.0"
        assert result.value.branch == "release/1.1.0"
        assert result.value.tag == "v1.1.0"
        assert repo.current_branch() == "release/1.1.0"

    def test_explicit_version_with_prefix(self, sandbox: GitSandbox) -> None:
        result = prepare_release(repo=_released(sandbox), config=Config(), version="v2.0.0")

        assert isinstance(result, Ok)
        assert result.value.branch == "release/2.0.0"

    def test_invalid_version(self, sandbox: GitSandbox) -> None:
        result = prepare_release(repo=_released(sandbox), config=Config(), version="2.0")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"

    def test_existing_tag(self, sandbox: GitSandbox) -> None:
        result = prepare_release(repo=_released(sandbox), config=Config(), version="1.0.0")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_exists"

    def test_verification_failure_lists_problems(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        sandbox.commit("quick fix")
        (sandbox.root / "scratch.txt").write_text("x", encoding="utf-8")

        result = prepare_release(repo=repo, config=Config(), provider=FailingTests())

        assert isinstance(result, Err)
        assert result.error.kind == "dirty_worktree"
        assert result.error.details[0] == "Working directory is not clean"
        assert result.error.details[1] == "2 tests failed"
        assert result.error.details[2].startswith("1 commit(s) do not follow")
        assert repo.current_branch() == "main"

    def test_dirty_tree_allowed_when_not_required(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        (sandbox.root / "scratch.txt").write_text("x", encoding="utf-8")
        config = Config(workflow=WorkflowConfig(require_clean_work_dir=False))

        assert isinstance(prepare_release(repo=repo, config=config), Ok)

    def test_first_release_ignores_untagged_history(self, sandbox: GitSandbox) -> None:
        sandbox.commit("Initial commit")
        sandbox.commit("feat: add login")
        repo = Repository(sandbox.root)

        result = prepare_release(repo=repo, config=Config())

        expected = PreparedRelease(version="0.1.0", branch="release/0.1.0", tag="v0.1.0")
        assert result == Ok(expected)


class TestRunVerification:
    def test_untagged_history_is_not_checked(self, sandbox: GitSandbox) -> None:
        sandbox.commit("Initial commit")

        result = run_verification(repo=Repository(sandbox.root), config=Config())

        assert isinstance(result, Ok)
        assert result.value.commits is True
        assert result.value.overall is True

    def test_commits_after_latest_tag_are_checked(self, sandbox: GitSandbox) -> None:
        sandbox.commit("Initial commit")
        sandbox.tag("v0.1.0")
        sandbox.commit("tweak things")

        result = run_verification(repo=Repository(sandbox.root), config=Config())

        assert isinstance(result, Ok)
        assert result.value.commits is False
        assert [c.subject for c in result.value.non_compliant] == ["tweak things"]


class TestFinalizeRelease:
    def test_requires_release_branch(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)

        result = finalize_release(repo=repo, config=Config(), root=sandbox.root)

        assert isinstance(result, Err)
        assert result.error.kind == "not_release_branch"
        assert "main" in result.error.message

    def test_tags_pushes_and_writes_artifacts(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        feat_hash = sandbox.git("rev-parse", "--short", "HEAD")
        prepare_release(repo=repo, config=Config())

        result = finalize_release(repo=repo, config=Config(), root=sandbox.root, now=NOW)

        assert isinstance(result, Ok)
        assert result.value.tag == "v1.1.0"
        assert result.value.notes == (
            f"# Release 1.1.0\n\n## Features\n\n- feat: add login ({feat_hash})\n"
        )
        assert sandbox.git("cat-file", "-t", "v1.1.0") == "tag"

        remote_refs = sandbox.git("ls-remote", "origin")
        assert "refs/heads/release/1.1.0" in remote_refs
        assert "refs/tags/v1.1.0" in remote_refs

        dist = sandbox.root / "dist"
        assert sorted(p.name for p in result.value.artifacts) == [
            "release-notes-1.1.0.md",
            "release-snapshot-1.1.0.json",
            "sbom-1.1.0.json",
        ]
        assert (dist / "release-notes-1.1.0.md").read_text(encoding="utf-8") == result.value.notes

        snapshot = json.loads((dist / "release-snapshot-1.1.0.json").read_text(encoding="utf-8"))
        assert snapshot["version"] == "1.1.0"
        assert snapshot["timestamp"] == "2024-05-01T12:00:00+00:00"
        assert snapshot["git"]["tag"] == "v1.1.0"
        assert snapshot["git"]["previous_tag"] == "v1.0.0"
        assert snapshot["git"]["branch"] == "release/1.1.0"
        assert [c["subject"] for c in snapshot["commits"]] == ["feat: add login"]

    def test_artifacts_disabled(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        config = Config(release=ReleaseConfig(artifacts=ArtifactsConfig(save_assets=False)))
        prepare_release(repo=repo, config=config)

        result = finalize_release(repo=repo, config=config, root=sandbox.root)

        assert isinstance(result, Ok)
        assert result.value.artifacts == ()
        assert not (sandbox.root / "dist").exists()

    def test_sbom_disabled(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        config = Config(release=ReleaseConfig(artifacts=ArtifactsConfig(generate_sbom=False)))
        prepare_release(repo=repo, config=config)

        result = finalize_release(repo=repo, config=config, root=sandbox.root, now=NOW)

        assert isinstance(result, Ok)
        assert not (sandbox.root / "dist" / "sbom-1.1.0.json").exists()
        assert len(result.value.artifacts) == 2

    def test_push_failure_keeps_tag_and_notes(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        prepare_release(repo=repo, config=Config())
        sandbox.git("remote", "remove", "origin")

        result = finalize_release(repo=repo, config=Config(), root=sandbox.root)

        assert isinstance(result, Err)
        assert result.error.kind == "push_failed"
        assert result.error.tag == "v1.1.0"
        assert result.error.notes is not None
        assert result.error.notes.startswith("# Release 1.1.0")
        assert "v1.1.0" in sandbox.git("tag", "--list")

    def test_first_release_with_untagged_history(self, sandbox: GitSandbox) -> None:
        sandbox.commit("Initial commit")
        repo = Repository(sandbox.root)
        prepare_release(repo=repo, config=Config())

        result = finalize_release(repo=repo, config=Config(), root=sandbox.root, now=NOW)

        assert isinstance(result, Ok)
        assert result.value.tag == "v0.1.0"
        assert "## Other\n\n- Initial commit (" in result.value.notes

    def test_verification_failure_creates_no_tag(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        prepare_release(repo=repo, config=Config())

        result = finalize_release(
            repo=repo, config=Config(), root=sandbox.root, provider=FailingTests()
        )

        assert isinstance(result, Err)
        assert result.error.kind == "verification_failed"
        assert "v1.1.0" not in sandbox.git("tag", "--list")


class TestReleaseNotesFor:
    def test_notes_span_previous_tag(self, sandbox: GitSandbox) -> None:
        sandbox.commit("chore: init")
        sandbox.tag("v1.0.0")
        sandbox.commit("feat: a")
        sandbox.commit("fix: b")
        sandbox.tag("v1.1.0")
        sandbox.commit("feat: unreleased")
        repo = Repository(sandbox.root)

        for version in ("1.1.0", "v1.1.0"):
            result = release_notes_for(repo=repo, config=Config(), version=version)
            assert isinstance(result, Ok)
            assert result.value.startswith("# Release 1.1.0\n")
            assert "feat: a" in result.value
            assert "fix: b" in result.value
            assert "unreleased" not in result.value
            assert "chore: init" not in result.value

    def test_first_release_covers_all_history(self, sandbox: GitSandbox) -> None:
        sandbox.commit("chore: init")
        sandbox.tag("v1.0.0")

        result = release_notes_for(repo=Repository(sandbox.root), config=Config(), version="1.0.0")

        assert isinstance(result, Ok)
        assert "chore: init" in result.value

    def test_missing_release(self, sandbox: GitSandbox) -> None:
        sandbox.commit("chore: init")

        result = release_notes_for(repo=Repository(sandbox.root), config=Config(), version="9.9.9")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_missing"
        assert result.error.message == "Release 9.9.9 not found"

    def test_lenient_notes(self, sandbox: GitSandbox) -> None:
        sandbox.commit("whatever")
        sandbox.tag("v0.1.0")
        config = Config(verification=VerificationConfig(enforce_conventional_commits=False))

        result = release_notes_for(repo=Repository(sandbox.root), config=config, version="0.1.0")

        assert isinstance(result, Ok)
        assert "## Changes" in result.value


def test_list_releases_in_version_order(sandbox: GitSandbox) -> None:
    sandbox.commit("chore: init")
    sandbox.tag("v1.10.0")
    sandbox.tag("v1.2.0")
    sandbox.tag("nightly")
    head = sandbox.git("rev-parse", "HEAD")

    result = list_releases(repo=Repository(sandbox.root), config=Config())

    assert isinstance(result, Ok)
    assert [p.tag for p in result.value] == ["v1.2.0", "v1.10.0", "nightly"]
    assert result.value[0].commit == head
    assert result.value[0].short_commit == head[:7]
    assert result.value[0].date


class TestRollback:
    def test_branches_and_resets_to_tag(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)

        result = rollback(repo=repo, tag="v1.0.0", now=NOW)

        assert isinstance(result, Ok)
        assert result.value.branch == f"rollback-to-v1.0.0-{int(NOW.timestamp() * 1000)}"
        assert repo.current_branch() == result.value.branch
        assert repo.head_commit() == sandbox.git("rev-parse", "v1.0.0^{commit}")

    def test_missing_tag(self, sandbox: GitSandbox) -> None:
        result = rollback(repo=_released(sandbox), tag="v0.0.1")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_missing"


class TestHotfix:
    def test_hotfix_then_finalize(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)

        result = create_hotfix(repo=repo, config=Config(), tag="v1.0.0")

        assert isinstance(result, Ok)
        assert result.value.branch == "hotfix/1.0.1"
        assert result.value.version == "1.0.1"
        assert repo.current_branch() == "hotfix/1.0.1"
        assert repo.head_commit() == sandbox.git("rev-parse", "v1.0.0^{commit}")

        sandbox.commit("fix: patch login")
        config = Config(release=ReleaseConfig(artifacts=ArtifactsConfig(save_assets=False)))
        finalized = finalize_release(repo=repo, config=config, root=sandbox.root)

        assert isinstance(finalized, Ok)
        assert finalized.value.tag == "v1.0.1"
        assert "fix: patch login" in finalized.value.notes
        assert "feat: add login" not in finalized.value.notes

    def test_missing_tag(self, sandbox: GitSandbox) -> None:
        result = create_hotfix(repo=_released(sandbox), config=Config(), tag="v7.0.0")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_missing"

    def test_non_semver_tag(self, sandbox: GitSandbox) -> None:
        sandbox.commit("chore: init")
        sandbox.tag("nightly")

        result = create_hotfix(repo=Repository(sandbox.root), config=Config(), tag="nightly")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"


class TestNamedBranch:
    def test_creates_prefixed_branch(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)

        result = create_named_branch(
            repo=repo, config=Config(), kind="feature", name="user-authentication"
        )

        assert result == Ok("feature/user-authentication")
        assert repo.current_branch() == "feature/user-authentication"

    def test_invalid_kind(self, sandbox: GitSandbox) -> None:
        result = create_named_branch(
            repo=_released(sandbox), config=Config(), kind="topic", name="x"
        )

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_existing_branch_is_git_failure(self, sandbox: GitSandbox) -> None:
        repo = _released(sandbox)
        create_named_branch(repo=repo, config=Config(), kind="feature", name="x")

        result = create_named_branch(repo=repo, config=Config(), kind="feature", name="x")

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"


class TestRepositoryIdentity:
    def test_from_remote_url(self, sandbox: GitSandbox) -> None:
        identity = repository_identity(Repository(sandbox.root))
        assert identity == {"name": "origin", "remote_url": sandbox.remote.as_uri()}

    def test_scp_style_url(self, sandbox: GitSandbox) -> None:
        sandbox.git("remote", "set-url", "origin", "git@github.com:acme/widgets.git")
        identity = repository_identity(Repository(sandbox.root))
        assert identity["name"] == "widgets"

    def test_without_remote(self, sandbox: GitSandbox) -> None:
        sandbox.git("remote", "remove", "origin")
        identity = repository_identity(Repository(sandbox.root))
        assert identity == {"name": "work", "remote_url": ""}
