from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from dulwich.repo import MemoryRepo, Repo

from repo_helpers import RepoBuilder
from timexpack.store import GitObjectStore


@pytest.fixture
def builder() -> RepoBuilder:
    return RepoBuilder(MemoryRepo())


@pytest.fixture
def store(builder: RepoBuilder) -> GitObjectStore:
    return GitObjectStore(builder.repo)


@pytest.fixture
def disk_repo(tmp_path: Path) -> Iterator[tuple[Path, RepoBuilder]]:
    repo_path = tmp_path / "repo"
    repo = Repo.init(str(repo_path), mkdir=True)
    yield repo_path, RepoBuilder(repo)
    repo.close()
