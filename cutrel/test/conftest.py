from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from cutrel.test.support import GitWorkspace, init_workspace


@pytest.fixture
def git_workspace(tmp_path: Path) -> GitWorkspace:
    """A committed project on ``main`` with a bare ``origin`` remote."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    return init_workspace(tmp_path)
