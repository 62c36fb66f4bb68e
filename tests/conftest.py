from __future__ import annotations

from pathlib import Path

import pytest

from sourcelink.git.query import GitQuery
from sourcelink.paths import normalize_path
from tests._fixtures.fake_git import FakeGit


@pytest.fixture
def fake_git() -> FakeGit:
    """Provide a recording git runner with no repositories configured."""
    return FakeGit()


@pytest.fixture
def git_query(fake_git: FakeGit) -> GitQuery:
    """A GitQuery wired to the fake runner that reports git as installed."""
    return GitQuery(runner=fake_git, which=lambda command: f"/usr/bin/{command}")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Real directories for tests that change into them."""
    return Path(normalize_path(tmp_path.resolve()))
