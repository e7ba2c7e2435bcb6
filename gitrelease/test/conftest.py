from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from gitrelease.test._sandbox import GitSandbox


@pytest.fixture
def sandbox(tmp_path: Path) -> GitSandbox:
    if shutil.which("git") is None:
        pytest.skip("git not available")
    return GitSandbox.create(tmp_path)
