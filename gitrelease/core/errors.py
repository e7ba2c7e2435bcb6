"""Error codes for CLI exit status.

Each command maps its failure to one of these codes so scripts wrapping
gitrelease can tell a bad argument from a dirty tree or a failed push.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad argument, unknown branch type, malformed version)
    - 2: Precondition failed (dirty tree, wrong branch, missing tag)
    - 3: git command failed (branch, tag, reset, push)
    - 4: Release verification failed
    - 5: I/O error (config or artifact file could not be read or written)
    """

    OK = 0
    USER_ERROR = 1
    PRECONDITION_ERROR = 2
    VCS_ERROR = 3
    VERIFY_ERROR = 4
    IO_ERROR = 5
