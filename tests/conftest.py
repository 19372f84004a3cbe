import gc
import os
from pathlib import Path
from unittest import mock

import pytest

from git2bind import panic
from git2bind.wrapper import WrapperOfWrappings

from .common import LIBGIT2_AVAILABLE


@pytest.fixture(autouse=True)
def git_empty_config(tmp_path: Path):
    """Ensure tests run with empty git configuration."""
    if LIBGIT2_AVAILABLE:
        from git2bind import GitError, settings
        from git2bind.constants import SEARCH_PATH_LEVELS

        for level in SEARCH_PATH_LEVELS:
            try:
                settings.search_path[level] = "/dev/null"
            except GitError:
                pass

    git_config = tmp_path / "ignorance-is-bliss"
    git_config.write_text("[user]\n\tname = The Man in the Moon\n\temail = man@moon.luna\n")
    with mock.patch.dict(
        os.environ,
        {
            "GIT_CONFIG_NOSYSTEM": "true",
            "GIT_CONFIG_GLOBAL": str(git_config),
            "GIT_AUTHOR_DATE": "2024-02-29T12:00:00+01:00",
            "GIT_COMMITTER_DATE": "2024-02-29T12:00:00+01:00",
        },
    ):
        yield


@pytest.fixture(autouse=True)
def no_pending_callback_exception():
    """Ensure no exception captured in a callback leaks into other tests."""
    yield

    leftover = panic.take()
    assert leftover is None, f"Callback exception was never re-raised: {leftover!r}"


@pytest.fixture(autouse=True)
def validate_native_refcounting() -> None:
    yield

    gc.collect()

    # Objects may be finalized after this fixture, so take still living ones into account
    # instead of expecting the handle records to be gone.

    num_unfinalized_objs = 0
    for ref in WrapperOfWrappings._live_obj_refs.values():
        obj = ref()
        if obj is None or obj._real_native and obj._libgit2_native_finalizer:
            num_unfinalized_objs += 1

    assert len(WrapperOfWrappings._handles) <= num_unfinalized_objs
