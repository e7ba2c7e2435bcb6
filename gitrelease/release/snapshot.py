"""Point-in-time release records: SBOM and release snapshot.

Both are plain aggregations of facts gathered by the caller; nothing here
touches git or the filesystem.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from gitrelease.core.config import Config
from gitrelease.git.repository import CommitRecord
from gitrelease.release.manifest import Dependency


@dataclass(frozen=True, slots=True)
class VcsFacts:
    commit: str | None
    branch: str | None
    tag: str
    previous_tag: str | None
    remote: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "commit": self.commit,
            "branch": self.branch,
            "tag": self.tag,
            "previous_tag": self.previous_tag,
            "remote": self.remote,
        }


@dataclass(frozen=True, slots=True)
class Sbom:
    timestamp: datetime
    vcs: VcsFacts
    dependencies: tuple[Dependency, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "git": {
                "commit": self.vcs.commit,
                "branch": self.vcs.branch,
                "remote": self.vcs.remote,
            },
            "dependencies": [d.to_dict() for d in self.dependencies],
        }


@dataclass(frozen=True, slots=True)
class ReleaseSnapshot:
    """Immutable audit record of a release, created once at finalize time."""

    version: str
    timestamp: datetime
    vcs: VcsFacts
    config: Config
    commits: tuple[CommitRecord, ...]
    sbom: Sbom

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "git": self.vcs.to_dict(),
            "config": self.config.to_dict(),
            "commits": [c.to_dict() for c in self.commits],
            "sbom": self.sbom.to_dict(),
        }


def build_sbom(vcs: VcsFacts, dependencies: Sequence[Dependency], timestamp: datetime) -> Sbom:
    return Sbom(timestamp=timestamp, vcs=vcs, dependencies=tuple(dependencies))


def build_snapshot(
    version: str,
    vcs: VcsFacts,
    config: Config,
    commits: Sequence[CommitRecord],
    dependencies: Sequence[Dependency],
    timestamp: datetime,
) -> ReleaseSnapshot:
    return ReleaseSnapshot(
        version=version,
        timestamp=timestamp,
        vcs=vcs,
        config=config,
        commits=tuple(commits),
        sbom=build_sbom(vcs, dependencies, timestamp),
    )
