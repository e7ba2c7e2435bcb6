"""Tests for gitrelease.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gitrelease.core.result import Err, Ok
from gitrelease.platform.process import ProcessError, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "-C", "/repo", "log", "--oneline"),
            returncode=128,
            stdout="",
            stderr="error",
        )
        assert str(error) == "git -C /repo ... failed (exit 128)"

    def test_output_prefers_stderr(self) -> None:
        error = ProcessError(("git", "push"), 1, "ignored\n", "  rejected\n")
        assert error.output == "rejected"

    def test_output_falls_back_to_stdout(self) -> None:
        error = ProcessError(("git", "commit"), 1, "nothing to commit\n", "")
        assert error.output == "nothing to commit"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_captures_stderr(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(1)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert "error msg" in result.error.stderr

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(5)"],
            cwd=tmp_path,
            timeout=0.2,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_env_is_layered_over_current_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITRELEASE_OUTER", "outer")
        script = "import os; print(os.environ['GITRELEASE_OUTER'], os.environ['GITRELEASE_INNER'])"

        env = {"GITRELEASE_INNER": "inner"}

        result = run([sys.executable, "-c", script], cwd=tmp_path, env=env)

        assert isinstance(result, Ok)
        assert result.value.strip() == "outer inner"
