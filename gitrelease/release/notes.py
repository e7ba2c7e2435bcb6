"""Release notes rendering.

The layout is fixed: Features, Bug Fixes, Other Changes, Other. Every
bullet is ``- {subject} ({hash})`` where ``subject`` is the full commit
subject line.
"""

from __future__ import annotations

from collections.abc import Sequence

from gitrelease.git.repository import CommitRecord
from gitrelease.release.commits import CommitType, classify_commits


def _bullet(commit: CommitRecord, label: str = "") -> str:
    return f"- {label}{commit.subject} ({commit.hash})"


def _section(title: str, bullets: list[str]) -> list[str]:
    return [f"## {title}", "", *bullets, ""]


def build_release_notes(
    version: str,
    commits: Sequence[CommitRecord],
    enforce_conventional: bool,
) -> str:
    lines = [f"# Release {version}", ""]

    if not enforce_conventional:
        lines += _section("Changes", [_bullet(c) for c in commits])
        return "\n".join(lines).rstrip() + "\n"

    grouped: dict[CommitType, list[CommitRecord]] = {}
    unclassified: list[CommitRecord] = []
    for item in classify_commits(commits):
        if item.meta is None:
            unclassified.append(item.commit)
            continue
        # dict preserves first-seen order of types
        grouped.setdefault(item.meta.type, []).append(item.commit)

    features = grouped.pop(CommitType.FEAT, [])
    fixes = grouped.pop(CommitType.FIX, [])

    if features:
        lines += _section("Features", [_bullet(c) for c in features])
    if fixes:
        lines += _section("Bug Fixes", [_bullet(c) for c in fixes])
    if grouped:
        other_changes = [
            _bullet(c, label=f"**{commit_type.value}:** ")
            for commit_type, group in grouped.items()
            for c in group
        ]
        lines += _section("Other Changes", other_changes)
    if unclassified:
        lines += _section("Other", [_bullet(c) for c in unclassified])

    return "\n".join(lines).rstrip() + "\n"
