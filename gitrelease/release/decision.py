from __future__ import annotations

from collections.abc import Sequence

from gitrelease.core.config import Config
from gitrelease.git.repository import CommitRecord
from gitrelease.release.commits import bump_for
from gitrelease.release.naming import strip_tag_prefix
from gitrelease.release.semver import BumpCategory, increment


def bump_category(commits: Sequence[CommitRecord], config: Config) -> BumpCategory:
    """Bump to apply: derived from commits when conventional commits are enforced."""
    if config.verification.enforce_conventional_commits and commits:
        return bump_for(commits)
    return "patch"


def suggest_next_version(
    latest_tag: str | None,
    commits: Sequence[CommitRecord],
    config: Config,
) -> str | None:
    """Next release version as text.

    Without a previous tag this is the configured initial version. Returns
    None when the latest tag does not carry a semantic version.
    """
    if latest_tag is None:
        return config.versioning.initial_version

    current = strip_tag_prefix(latest_tag, config.release.tag_prefix)
    next_version = increment(bump_category(commits, config), current)
    return None if next_version is None else str(next_version)
