"""Git repository abstraction.

This module provides the Repository class, the single collaborator through
which gitrelease reads repository facts (branch, tags, history, working-tree
state) and performs write actions (branch, tag, reset, push).

Reads that may legitimately find nothing (no tags yet, detached HEAD)
return ``None``; write actions return ``Result[None, GitError]``.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.commits_since(repo.latest_tag()):
        case Ok(commits):
            for c in commits:
                print(f"{c.hash} {c.subject}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from gitrelease.core.result import Err, Ok, Result
from gitrelease.platform.process import ProcessError
from gitrelease.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
# push must fail rather than wait on a credential prompt
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}

# git log field/record separators (ASCII unit/record separator)
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%h%x1f%s%x1f%an%x1f%ad%x1f%b%x1e"

logger = logging.getLogger(__name__)

__all__ = [
    "CommitRecord",
    "GitError",
    "Repository",
    "parse_log",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A commit as read from history. Never mutated.

    Attributes:
        hash: Abbreviated commit hash
        subject: First line of the commit message
        author: Author name
        date: Author date (ISO 8601)
        body: Remaining lines of the message, may be empty
    """

    hash: str
    subject: str
    author: str = ""
    date: str = ""
    body: str = ""

    @property
    def message(self) -> str:
        """Full commit message (subject, blank line, body)."""
        if not self.body:
            return self.subject
        return f"{self.subject}\n\n{self.body}"

    def to_dict(self) -> dict[str, str]:
        return {
            "hash": self.hash,
            "subject": self.subject,
            "author": self.author,
            "date": self.date,
        }


def parse_log(output: str) -> tuple[CommitRecord, ...]:
    """Parse ``git log`` output produced with the record format above."""
    commits: list[CommitRecord] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        fields = record.split(_FIELD_SEP, 4)
        fields += [""] * (5 - len(fields))
        hash_, subject, author, date, body = fields
        commits.append(
            CommitRecord(
                hash=hash_.strip(),
                subject=subject.strip(),
                author=author.strip(),
                date=date.strip(),
                body=body.strip(),
            )
        )
    return tuple(commits)


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    # -------------------------------------------------------------------------
    # Read-only facts
    # -------------------------------------------------------------------------

    def is_clean(self) -> bool:
        """Check if working tree is clean (no changes).

        Returns False if status cannot be determined.
        """
        match self._run(["status", "--porcelain"]):
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        match self._run(["rev-parse", "--abbrev-ref", "HEAD"]):
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def head_commit(self) -> str | None:
        """Full hash of HEAD, None for a repository without commits."""
        match self._run(["rev-parse", "HEAD"]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def remote_url(self, remote: str = "origin") -> str | None:
        match self._run(["config", "--get", f"remote.{remote}.url"]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def latest_tag(self) -> str | None:
        """Most recent tag reachable from HEAD, None if there is none."""
        match self._run(["describe", "--tags", "--abbrev=0"]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def tags(self) -> Result[tuple[str, ...], GitError]:
        """All tags in the repository."""
        result = self._run(["tag", "--list"])
        match result:
            case Err(e):
                return Err(_git_error("tag --list", e, "failed to list tags"))
            case Ok(stdout):
                return Ok(tuple(line.strip() for line in stdout.splitlines() if line.strip()))

    def tag_commit(self, tag: str) -> str | None:
        """Commit hash a tag points at."""
        match self._run(["rev-list", "-n", "1", tag]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def commit_date(self, ref: str) -> str | None:
        """Committer date of ``ref`` in ISO format."""
        match self._run(["log", "-1", "--format=%cd", "--date=iso", ref]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def commits_since(self, tag: str | None) -> Result[tuple[CommitRecord, ...], GitError]:
        """Commits reachable from HEAD but not from ``tag``, newest first.

        With no tag, the whole history of HEAD is returned.
        """
        return self.commits_between(tag, "HEAD")

    def commits_between(
        self, start: str | None, end: str
    ) -> Result[tuple[CommitRecord, ...], GitError]:
        """Commits in ``start..end`` (or all of ``end`` when start is None)."""
        if end == "HEAD" and self.head_commit() is None:
            return Ok(())

        rev_range = f"{start}..{end}" if start else end
        result = self._run(
            ["log", rev_range, f"--pretty=format:{_LOG_FORMAT}", "--date=iso-strict"]
        )
        match result:
            case Err(e):
                return Err(_git_error(f"log {rev_range}", e, "failed to read commit log"))
            case Ok(stdout):
                return Ok(parse_log(stdout))

    # -------------------------------------------------------------------------
    # Write actions
    # -------------------------------------------------------------------------

    def create_branch(self, name: str) -> Result[None, GitError]:
        """Create ``name`` from HEAD and check it out."""
        return self._write(["checkout", "-b", name], "failed to create branch")

    def checkout(self, ref: str) -> Result[None, GitError]:
        return self._write(["checkout", ref], "checkout failed")

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        return self._write(["tag", "-a", name, "-m", message], "failed to create tag")

    def reset_hard(self, ref: str) -> Result[None, GitError]:
        return self._write(["reset", "--hard", ref], "reset failed")

    def push(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._write(["push", remote, branch], "push failed")

    def push_tags(self, remote: str) -> Result[None, GitError]:
        return self._write(["push", remote, "--tags"], "push --tags failed")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _write(self, args: list[str], fallback: str) -> Result[None, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error(" ".join(args[:2]), e, fallback))
            case Ok(_):
                return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        logger.debug("git %s", " ".join(args))
        result = run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, env=_GIT_ENV, timeout=timeout
        )
        if isinstance(result, Err):
            logger.debug("git %s failed: %s", command, result.error.output)
        return result


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.output or fallback,
        returncode=error.returncode,
    )
