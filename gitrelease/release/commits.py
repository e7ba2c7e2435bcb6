"""Conventional commit classification and bump derivation.

A subject line such as ``feat(auth)!: drop legacy tokens`` classifies as
``CommitMeta(type=FEAT, scope="auth", breaking=True)``. Commits that do not
follow the grammar are *unclassified*; they never block a bump decision.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from gitrelease.git.repository import CommitRecord
from gitrelease.release.semver import BumpCategory


class CommitType(str, Enum):
    BUILD = "build"
    CHORE = "chore"
    CI = "ci"
    DOCS = "docs"
    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    REVERT = "revert"
    STYLE = "style"
    TEST = "test"

    def __str__(self) -> str:
        return self.value


_TYPES = "|".join(t.value for t in CommitType)
_CONVENTIONAL_RE = re.compile(
    rf"^({_TYPES})(\([a-z0-9-]+\))?!?: (.+)$",
    re.IGNORECASE,
)

BREAKING_MARKER = "BREAKING CHANGE:"
# Matched anywhere in the message, not only before the first colon.
BANG_MARKER = "!:"


@dataclass(frozen=True, slots=True)
class CommitMeta:
    type: CommitType
    scope: str
    subject: str
    breaking: bool


@dataclass(frozen=True, slots=True)
class ClassifiedCommit:
    commit: CommitRecord
    meta: CommitMeta | None

    @property
    def is_classified(self) -> bool:
        return self.meta is not None


def classify(message: str) -> CommitMeta | None:
    """Classify a commit message; None when it is not a conventional commit.

    Only the first line is matched against the grammar. The breaking flag
    also looks at the rest of the message for ``BREAKING CHANGE:``.
    """
    first_line = message.split("\n", 1)[0].strip()
    m = _CONVENTIONAL_RE.match(first_line)
    if m is None:
        return None

    type_, scope, subject = m.group(1), m.group(2), m.group(3)
    return CommitMeta(
        type=CommitType(type_.lower()),
        scope=scope[1:-1] if scope else "",
        subject=subject,
        breaking=BREAKING_MARKER in message or BANG_MARKER in message,
    )


def classify_commits(commits: Iterable[CommitRecord]) -> tuple[ClassifiedCommit, ...]:
    return tuple(ClassifiedCommit(commit=c, meta=classify(c.message)) for c in commits)


def non_compliant(commits: Iterable[CommitRecord]) -> tuple[CommitRecord, ...]:
    """Commits that do not follow the conventional commit grammar."""
    return tuple(c.commit for c in classify_commits(commits) if c.meta is None)


def bump_for(commits: Iterable[CommitRecord]) -> BumpCategory:
    """Derive the version bump required by ``commits``.

    Any breaking change wins (major), then any feature (minor); everything
    else, including an empty or fully unclassified list, is a patch.
    """
    metas = [c.meta for c in classify_commits(commits) if c.meta is not None]
    if any(m.breaking for m in metas):
        return "major"
    if any(m.type is CommitType.FEAT for m in metas):
        return "minor"
    return "patch"
