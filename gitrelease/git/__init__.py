"""Git operations module.

Usage:
    from gitrelease.git import Repository

    repo = Repository(Path("/path/to/repo"))
    if repo.is_clean():
        print(f"Branch: {repo.current_branch()}")
"""

from gitrelease.git.repository import (
    CommitRecord,
    GitError,
    Repository,
    parse_log,
)

__all__ = [
    "CommitRecord",
    "GitError",
    "Repository",
    "parse_log",
]
