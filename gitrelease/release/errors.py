from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_input",
    "invalid_version",
    "dirty_worktree",
    "not_release_branch",
    "tag_missing",
    "tag_exists",
    "verification_failed",
    "git_failed",
    "push_failed",
    "config_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A release command failed.

    ``tag`` and ``notes`` are set when the failure happened after the tag
    was created, so the operator can finish the push by hand. ``details``
    lists individual problems (e.g. each failed verification check).
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    tag: str | None = None
    notes: str | None = None
    details: tuple[str, ...] = ()
