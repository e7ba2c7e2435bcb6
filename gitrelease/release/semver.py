"""Semantic version parsing, formatting and bumping.

Versions are immutable; bumping returns a new instance with the prerelease
and build metadata cleared.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal

BumpCategory = Literal["major", "minor", "patch"]

_IDENT = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}))?"
    rf"(?:\+({_IDENT}))?$"
)


@dataclass(frozen=True, slots=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    prerelease: str = ""
    buildmetadata: str = ""

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"version components must be non-negative: {self!r}")

    def __str__(self) -> str:
        return format_version(self)

    def bump(self, kind: BumpCategory) -> SemanticVersion:
        match kind:
            case "major":
                return SemanticVersion(self.major + 1, 0, 0)
            case "minor":
                return SemanticVersion(self.major, self.minor + 1, 0)
            case "patch":
                return SemanticVersion(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def with_prerelease(self, prerelease: str) -> SemanticVersion:
        return replace(self, prerelease=prerelease)

    def with_build(self, buildmetadata: str) -> SemanticVersion:
        return replace(self, buildmetadata=buildmetadata)


def parse_version(text: str | None) -> SemanticVersion | None:
    """Parse ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.

    Returns None for anything that is not a canonical semantic version;
    callers pick their own fallback.
    """
    m = _SEMVER_RE.match(text or "")
    if m is None:
        return None
    return SemanticVersion(
        major=int(m.group(1)),
        minor=int(m.group(2)),
        patch=int(m.group(3)),
        prerelease=m.group(4) or "",
        buildmetadata=m.group(5) or "",
    )


def format_version(v: SemanticVersion) -> str:
    out = f"{v.major}.{v.minor}.{v.patch}"
    if v.prerelease:
        out += f"-{v.prerelease}"
    if v.buildmetadata:
        out += f"+{v.buildmetadata}"
    return out


def increment(kind: BumpCategory, version: str) -> SemanticVersion | None:
    """Bump a version string; None if it does not parse."""
    parsed = parse_version(version)
    if parsed is None:
        return None
    return parsed.bump(kind)


def precedence_key(v: SemanticVersion) -> tuple[object, ...]:
    """Sort key following semver precedence.

    Build metadata is ignored. A prerelease sorts before its release;
    numeric identifiers sort before alphanumeric ones.
    """
    if not v.prerelease:
        return (v.major, v.minor, v.patch, 1, ())
    idents: list[tuple[int, int, str]] = []
    for ident in v.prerelease.split("."):
        if ident.isdigit():
            idents.append((0, int(ident), ""))
        else:
            idents.append((1, 0, ident))
    return (v.major, v.minor, v.patch, 0, tuple(idents))
