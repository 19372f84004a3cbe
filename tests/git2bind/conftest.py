from pathlib import Path

import pytest

from git2bind.repository import Repository

from ..common import GIT_AVAILABLE, LIBGIT2_AVAILABLE, commit_file, git


@pytest.fixture
def native_lib():
    """Skip tests which need libgit2 if it isn’t installed."""
    if not LIBGIT2_AVAILABLE:
        pytest.skip("libgit2 not available")


@pytest.fixture
def repo_root(tmp_path: Path, native_lib) -> Path:
    if not GIT_AVAILABLE:
        pytest.skip("git not available")

    repo_root = tmp_path / "git_repo"
    repo_root.mkdir()
    git(repo_root, "init", "-q", "--initial-branch", "main")

    commit_file(repo_root, "a_file", "A file.\n", "Add a file")

    return repo_root


@pytest.fixture
def repo_root_str(repo_root: Path) -> str:
    return str(repo_root)


@pytest.fixture
def repo(repo_root: Path) -> Repository:
    return Repository(repo_root)
