"""Release lifecycle: prepare, finalize, notes, rollback, hotfix.

A release is *prepared* (release branch created, tag name computed) and
later *finalized* (tag created and pushed, artifacts written). Nothing is
rolled back automatically: when a push fails after the tag was created the
error carries the tag and the notes so the push can be retried by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from gitrelease.core.config import Config
from gitrelease.core.result import Err, Ok, Result
from gitrelease.git.repository import CommitRecord, GitError, Repository
from gitrelease.platform.files import atomic_write_text, write_json
from gitrelease.release.decision import suggest_next_version
from gitrelease.release.errors import ReleaseError
from gitrelease.release.manifest import read_dependencies
from gitrelease.release.naming import (
    hotfix_branch,
    named_branch,
    order_tags,
    release_branch,
    release_tag,
    rollback_branch,
    strip_tag_prefix,
    version_from_branch,
)
from gitrelease.release.notes import build_release_notes
from gitrelease.release.semver import parse_version
from gitrelease.release.snapshot import ReleaseSnapshot, VcsFacts, build_snapshot
from gitrelease.release.verify import CheckProvider, VerificationResult, verify_release

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class PreparedRelease:
    version: str
    branch: str
    tag: str


@dataclass(frozen=True, slots=True)
class FinalizedRelease:
    version: str
    tag: str
    notes: str
    artifacts: tuple[Path, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleasePoint:
    tag: str
    commit: str | None
    date: str | None

    @property
    def short_commit(self) -> str:
        return (self.commit or "")[:7]


@dataclass(frozen=True, slots=True)
class RollbackResult:
    branch: str
    tag: str


@dataclass(frozen=True, slots=True)
class HotfixResult:
    branch: str
    base_tag: str
    version: str


def _git_failed(e: GitError, message: str) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=message, hint=e.message)


def commits_since_latest(
    repo: Repository,
) -> Result[tuple[str | None, tuple[CommitRecord, ...]], ReleaseError]:
    """Latest tag (None before the first release) and the commits after it."""
    latest = repo.latest_tag()
    commits = repo.commits_since(latest)
    if isinstance(commits, Err):
        return Err(_git_failed(commits.error, "failed to read commit history"))
    return Ok((latest, commits.value))


def _checked_commits(
    latest: str | None, commits: tuple[CommitRecord, ...]
) -> tuple[CommitRecord, ...]:
    """Commits subject to the conventional-commit check.

    History before the first release tag is not checked, so a repository
    that started with an "Initial commit" can still cut its first release.
    """
    return commits if latest is not None else ()


def next_version(*, repo: Repository, config: Config) -> Result[str, ReleaseError]:
    history = commits_since_latest(repo)
    if isinstance(history, Err):
        return history
    latest, commits = history.value

    suggested = suggest_next_version(latest, commits, config)
    if suggested is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"latest tag {latest} is not a semantic version",
                hint="pass the version explicitly",
            )
        )
    return Ok(suggested)


def run_verification(
    *,
    repo: Repository,
    config: Config,
    provider: CheckProvider | None = None,
) -> Result[VerificationResult, ReleaseError]:
    history = commits_since_latest(repo)
    if isinstance(history, Err):
        return history
    latest, commits = history.value
    return Ok(verify_release(repo, _checked_commits(latest, commits), config, provider))


def _require_verified(result: VerificationResult, message: str) -> Result[None, ReleaseError]:
    if result.overall:
        return Ok(None)
    # A dirty tree is a precondition failure; the other checks still report.
    return Err(
        ReleaseError(
            kind="verification_failed" if result.clean else "dirty_worktree",
            message=message,
            details=result.messages,
        )
    )


def prepare_release(
    *,
    repo: Repository,
    config: Config,
    version: str | None = None,
    provider: CheckProvider | None = None,
) -> Result[PreparedRelease, ReleaseError]:
    """Verify the repository and create the release branch."""
    if version is None:
        suggested = next_version(repo=repo, config=config)
        if isinstance(suggested, Err):
            return suggested
        version = suggested.value
    else:
        version = strip_tag_prefix(version.strip(), config.release.tag_prefix)

    if parse_version(version) is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version: {version}",
                hint="expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]",
            )
        )
    logger.debug("preparing release %s", version)

    tag = release_tag(version, config.release)
    tags = repo.tags()
    if isinstance(tags, Err):
        return Err(_git_failed(tags.error, "failed to list tags"))
    if tag in tags.value:
        return Err(ReleaseError(kind="tag_exists", message=f"tag {tag} already exists"))

    verification = run_verification(repo=repo, config=config, provider=provider)
    if isinstance(verification, Err):
        return verification
    verified = _require_verified(verification.value, "Release verification failed")
    if isinstance(verified, Err):
        return verified

    branch = release_branch(version, config.repository)
    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(_git_failed(created.error, f"Failed to create branch {branch}"))

    logger.debug("created release branch %s", branch)
    return Ok(PreparedRelease(version=version, branch=branch, tag=tag))


def collect_snapshot(
    *,
    repo: Repository,
    config: Config,
    root: Path,
    version: str,
    previous_tag: str | None,
    commits: tuple[CommitRecord, ...],
    now: datetime,
) -> Result[ReleaseSnapshot, ReleaseError]:
    """Gather repository facts and dependencies into a snapshot."""
    dependencies = read_dependencies(root)
    if isinstance(dependencies, Err):
        return dependencies

    vcs = VcsFacts(
        commit=repo.head_commit(),
        branch=repo.current_branch(),
        tag=release_tag(version, config.release),
        previous_tag=previous_tag,
        remote=repo.remote_url(),
    )
    return Ok(build_snapshot(version, vcs, config, commits, dependencies.value, now))


def write_artifacts(
    *,
    root: Path,
    config: Config,
    notes: str,
    snapshot: ReleaseSnapshot,
) -> Result[tuple[Path, ...], ReleaseError]:
    """Write release notes, SBOM and snapshot under the configured asset path."""
    asset_dir = root / config.release.artifacts.asset_path
    version = snapshot.version
    written: list[Path] = []

    try:
        if config.release.artifacts.generate_sbom:
            sbom_path = asset_dir / f"sbom-{version}.json"
            write_json(sbom_path, snapshot.sbom.to_dict())
            written.append(sbom_path)

        notes_path = asset_dir / f"release-notes-{version}.md"
        atomic_write_text(notes_path, notes)
        written.append(notes_path)

        snapshot_path = asset_dir / f"release-snapshot-{version}.json"
        write_json(snapshot_path, snapshot.to_dict())
        written.append(snapshot_path)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to write release artifacts: {e}",
                hint=str(asset_dir),
            )
        )

    return Ok(tuple(written))


def finalize_release(
    *,
    repo: Repository,
    config: Config,
    root: Path,
    provider: CheckProvider | None = None,
    now: datetime | None = None,
) -> Result[FinalizedRelease, ReleaseError]:
    """Tag the release on the current release/hotfix branch and push it."""
    branch = repo.current_branch()
    version = version_from_branch(branch or "", config.repository)
    if version is None:
        return Err(
            ReleaseError(
                kind="not_release_branch",
                message=f"Not on a release branch. Current branch: {branch or '(detached)'}",
                hint=(
                    f"release branches start with '{config.repository.release_prefix}' "
                    f"or '{config.repository.hotfix_prefix}'"
                ),
            )
        )
    tag = release_tag(version, config.release)

    history = commits_since_latest(repo)
    if isinstance(history, Err):
        return history
    previous_tag, commits = history.value

    verification = verify_release(
        repo, _checked_commits(previous_tag, commits), config, provider
    )
    verified = _require_verified(verification, "Final verification failed")
    if isinstance(verified, Err):
        return verified

    notes = build_release_notes(
        version, commits, config.verification.enforce_conventional_commits
    )

    tagged = repo.create_tag(tag, notes)
    if isinstance(tagged, Err):
        return Err(_git_failed(tagged.error, f"Failed to create tag {tag}"))
    logger.debug("created tag %s", tag)

    pushed = repo.push(DEFAULT_REMOTE, branch or "")
    if isinstance(pushed, Ok):
        pushed = repo.push_tags(DEFAULT_REMOTE)
    if isinstance(pushed, Err):
        return Err(
            ReleaseError(
                kind="push_failed",
                message="Failed to push to remote",
                hint=pushed.error.message,
                tag=tag,
                notes=notes,
            )
        )

    artifacts: tuple[Path, ...] = ()
    if config.release.artifacts.save_assets:
        snapshot = collect_snapshot(
            repo=repo,
            config=config,
            root=root,
            version=version,
            previous_tag=previous_tag,
            commits=commits,
            now=now or datetime.now(UTC),
        )
        written = (
            write_artifacts(root=root, config=config, notes=notes, snapshot=snapshot.value)
            if isinstance(snapshot, Ok)
            else snapshot
        )
        if isinstance(written, Err):
            e = written.error
            return Err(
                ReleaseError(
                    kind=e.kind, message=e.message, hint=e.hint, tag=tag, notes=notes
                )
            )
        artifacts = written.value

    return Ok(FinalizedRelease(version=version, tag=tag, notes=notes, artifacts=artifacts))


def release_notes_for(
    *, repo: Repository, config: Config, version: str
) -> Result[str, ReleaseError]:
    """Notes for an existing release: commits since the release tag before it."""
    prefix = config.release.tag_prefix
    tag = version if prefix and version.startswith(prefix) else f"{prefix}{version}"

    tags = repo.tags()
    if isinstance(tags, Err):
        return Err(_git_failed(tags.error, "failed to list tags"))
    if tag not in tags.value:
        return Err(ReleaseError(kind="tag_missing", message=f"Release {version} not found"))

    previous: str | None = None
    if parse_version(strip_tag_prefix(tag, prefix)) is not None:
        ordered = order_tags(tags.value, prefix)
        index = ordered.index(tag)
        if index > 0:
            previous = ordered[index - 1]

    commits = repo.commits_between(previous, tag)
    if isinstance(commits, Err):
        return Err(_git_failed(commits.error, f"failed to read history of {tag}"))

    return Ok(
        build_release_notes(
            strip_tag_prefix(tag, prefix),
            commits.value,
            config.verification.enforce_conventional_commits,
        )
    )


def list_releases(
    *, repo: Repository, config: Config
) -> Result[tuple[ReleasePoint, ...], ReleaseError]:
    """Every tag with its commit and date, in version order."""
    tags = repo.tags()
    if isinstance(tags, Err):
        return Err(_git_failed(tags.error, "failed to list tags"))

    points: list[ReleasePoint] = []
    for tag in order_tags(tags.value, config.release.tag_prefix):
        commit = repo.tag_commit(tag)
        date = repo.commit_date(commit) if commit else None
        points.append(ReleasePoint(tag=tag, commit=commit, date=date))
    return Ok(tuple(points))


def _require_tag(repo: Repository, tag: str) -> Result[None, ReleaseError]:
    tags = repo.tags()
    if isinstance(tags, Err):
        return Err(_git_failed(tags.error, "failed to list tags"))
    if tag not in tags.value:
        return Err(ReleaseError(kind="tag_missing", message=f"Tag {tag} does not exist"))
    return Ok(None)


def rollback(
    *, repo: Repository, tag: str, now: datetime | None = None
) -> Result[RollbackResult, ReleaseError]:
    """Create a rollback branch and hard-reset it to ``tag``."""
    exists = _require_tag(repo, tag)
    if isinstance(exists, Err):
        return exists

    branch = rollback_branch(tag, now or datetime.now(UTC))
    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(_git_failed(created.error, f"Failed to create rollback branch {branch}"))

    reset = repo.reset_hard(tag)
    if isinstance(reset, Err):
        return Err(_git_failed(reset.error, f"Failed to reset to tag {tag}"))

    logger.debug("rolled back to %s on %s", tag, branch)
    return Ok(RollbackResult(branch=branch, tag=tag))


def create_hotfix(
    *, repo: Repository, config: Config, tag: str
) -> Result[HotfixResult, ReleaseError]:
    """Check out ``tag`` and branch a patch-level hotfix from it."""
    exists = _require_tag(repo, tag)
    if isinstance(exists, Err):
        return exists

    derived = hotfix_branch(tag, config.repository, config.release)
    if isinstance(derived, Err):
        return derived
    branch, version = derived.value

    checked_out = repo.checkout(tag)
    if isinstance(checked_out, Err):
        return Err(_git_failed(checked_out.error, f"Failed to checkout tag {tag}"))

    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(_git_failed(created.error, f"Failed to create hotfix branch {branch}"))

    return Ok(HotfixResult(branch=branch, base_tag=tag, version=str(version)))


def create_named_branch(
    *, repo: Repository, config: Config, kind: str, name: str
) -> Result[str, ReleaseError]:
    """Create a feature/hotfix/release branch following the configured prefixes."""
    named = named_branch(kind, name, config.repository)
    if isinstance(named, Err):
        return named

    created = repo.create_branch(named.value)
    if isinstance(created, Err):
        return Err(_git_failed(created.error, f"Failed to create branch {named.value}"))
    return named


def repository_identity(repo: Repository) -> dict[str, str]:
    """Name and remote URL of the repository, for ``init``."""
    url = repo.remote_url() or ""
    name = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1].removesuffix(".git")
    if not name:
        name = repo.path.resolve().name
    return {"name": name, "remote_url": url}
