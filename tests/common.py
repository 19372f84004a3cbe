import shutil
import subprocess
from pathlib import Path
from typing import Optional

import pytest

from git2bind.common import LibError
from git2bind.native_adaptation import state


def _libgit2_available() -> bool:
    try:
        state.load()
    except (LibError, OSError):
        return False
    return True


LIBGIT2_AVAILABLE = _libgit2_available()
GIT_AVAILABLE = shutil.which("git") is not None

requires_libgit2 = pytest.mark.skipif(not LIBGIT2_AVAILABLE, reason="libgit2 not available")
requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git not available")


def git(repo_root: Path, *args: str, input: Optional[str] = None) -> str:
    """Run git in a repository, returning what it printed."""
    completed = subprocess.run(
        ["git", "-C", str(repo_root), *args],
        input=input,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


def commit_file(repo_root: Path, name: str, content: str, message: str) -> str:
    (repo_root / name).write_text(content)
    git(repo_root, "add", name)
    git(repo_root, "commit", "-q", "-m", message)
    return git(repo_root, "rev-parse", "HEAD")
