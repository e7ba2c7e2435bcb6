"""Release decision logic.

- semver: semantic version parsing and bumping
- commits: conventional commit classification and bump derivation
- stages: linear workflow stage gate
- naming: branch and tag names
- notes, decision, snapshot: release notes, next version, audit records
- verify: pre-release checks
- service: prepare/finalize lifecycle and git-backed operations
"""

from gitrelease.release.commits import (
    ClassifiedCommit,
    CommitMeta,
    CommitType,
    bump_for,
    classify,
)
from gitrelease.release.decision import suggest_next_version
from gitrelease.release.errors import ReleaseError
from gitrelease.release.notes import build_release_notes
from gitrelease.release.semver import (
    BumpCategory,
    SemanticVersion,
    format_version,
    increment,
    parse_version,
)
from gitrelease.release.snapshot import ReleaseSnapshot, build_snapshot
from gitrelease.release.stages import TransitionError, validate_transition
from gitrelease.release.verify import (
    CheckOutcome,
    CheckProvider,
    StubCheckProvider,
    VerificationResult,
    verify_release,
)

__all__ = [
    # semver
    "BumpCategory",
    "SemanticVersion",
    "format_version",
    "increment",
    "parse_version",
    # commits
    "ClassifiedCommit",
    "CommitMeta",
    "CommitType",
    "bump_for",
    "classify",
    # stages
    "TransitionError",
    "validate_transition",
    # decision engine
    "ReleaseSnapshot",
    "build_release_notes",
    "build_snapshot",
    "suggest_next_version",
    # verification
    "CheckOutcome",
    "CheckProvider",
    "StubCheckProvider",
    "VerificationResult",
    "verify_release",
    # errors
    "ReleaseError",
]
