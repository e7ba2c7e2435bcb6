"""Subprocess execution with Result-based error handling.

The only place in gitrelease that starts processes. git commands go
through :func:`run`, which captures output and turns non-zero exits,
timeouts and missing binaries into a :class:`ProcessError` value.

Usage:
    match run(["git", "tag"], cwd=repo_root, timeout=30.0):
        case Ok(stdout):
            tags = stdout.splitlines()
        case Err(error):
            print(f"Failed: {error.output}")
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from gitrelease.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    @property
    def output(self) -> str:
        """Whatever the process said about the failure, stderr first."""
        return self.stderr.strip() or self.stdout.strip()


def _failure(cmd: list[str], returncode: int, stdout: str, stderr: str) -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd), returncode, stdout, stderr))


def run(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    ``env`` is layered over the current environment rather than replacing
    it, so callers only pass the variables they need to pin.
    """
    merged = {**os.environ, **env} if env else None
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=merged,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failure(cmd, -1, partial, f"Command timed out after {timeout}s")
    except OSError as e:
        return _failure(cmd, -1, "", str(e))

    if proc.returncode != 0:
        return _failure(cmd, proc.returncode, proc.stdout, proc.stderr)
    return Ok(proc.stdout)
