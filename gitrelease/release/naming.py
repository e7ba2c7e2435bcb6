from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Literal, get_args

from gitrelease.core.config import ReleaseConfig, RepositoryConfig
from gitrelease.core.result import Err, Ok, Result
from gitrelease.release.errors import ReleaseError
from gitrelease.release.semver import SemanticVersion, increment, parse_version, precedence_key

BranchKind = Literal["feature", "hotfix", "release"]
BRANCH_KINDS: tuple[str, ...] = get_args(BranchKind)


def release_branch(version: str, repo: RepositoryConfig) -> str:
    return f"{repo.release_prefix}{version}"


def release_tag(version: str, release: ReleaseConfig) -> str:
    return f"{release.tag_prefix}{version}"


def strip_tag_prefix(tag: str, prefix: str) -> str:
    """Recover the version part of a tag; tags without the prefix pass through."""
    if prefix and tag.startswith(prefix):
        return tag[len(prefix) :]
    return tag


def hotfix_branch(
    base_tag: str, repo: RepositoryConfig, release: ReleaseConfig
) -> Result[tuple[str, SemanticVersion], ReleaseError]:
    """Branch name and version for a hotfix on top of ``base_tag``.

    The hotfix version is the base version with its patch incremented.
    """
    base_version = strip_tag_prefix(base_tag, release.tag_prefix)
    next_version = increment("patch", base_version)
    if next_version is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"Could not parse version from tag {base_tag}",
            )
        )
    return Ok((f"{repo.hotfix_prefix}{next_version}", next_version))


def rollback_branch(tag: str, now: datetime) -> str:
    """Rollback branch name; the epoch-millisecond suffix keeps repeats unique."""
    return f"rollback-to-{tag}-{int(now.timestamp() * 1000)}"


def named_branch(kind: str, name: str, repo: RepositoryConfig) -> Result[str, ReleaseError]:
    match kind:
        case "feature":
            prefix = repo.feature_prefix
        case "hotfix":
            prefix = repo.hotfix_prefix
        case "release":
            prefix = repo.release_prefix
        case _:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"Invalid branch type: {kind}",
                    hint=f"expected one of: {', '.join(BRANCH_KINDS)}",
                )
            )

    if not name.strip():
        return Err(ReleaseError(kind="invalid_input", message="Branch name must not be empty"))
    return Ok(f"{prefix}{name.strip()}")


def version_from_branch(branch: str, repo: RepositoryConfig) -> str | None:
    """Version encoded in a release or hotfix branch name, None otherwise."""
    for prefix in (repo.release_prefix, repo.hotfix_prefix):
        if prefix and branch.startswith(prefix) and len(branch) > len(prefix):
            return branch[len(prefix) :]
    return None


def order_tags(tags: Iterable[str], prefix: str) -> list[str]:
    """Tags in semver precedence order; non-semver tags follow, alphabetically."""
    versioned: list[tuple[tuple[object, ...], str]] = []
    others: list[str] = []
    for tag in tags:
        parsed = parse_version(strip_tag_prefix(tag, prefix))
        if parsed is None:
            others.append(tag)
        else:
            versioned.append((precedence_key(parsed), tag))
    versioned.sort(key=lambda item: item[0])
    return [tag for _, tag in versioned] + sorted(others)
