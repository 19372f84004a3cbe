"""Binding layer for libgit2 - Walk revisions"""

from collections.abc import Iterator
from ctypes import byref
from typing import TYPE_CHECKING, Optional

from .commit import Commit
from .native_adaptation import git_error_code, git_oid, git_revwalk_p, git_sort_t, lib
from .oid import Oid, OidTypes
from .wrapper import WrapperOfWrappings

if TYPE_CHECKING:
    from .repository import Repository


class RevWalk(WrapperOfWrappings, Iterator):
    """Represent a walk over commits in a repository.

    Commits pushed are walked with their ancestry, except those reachable
    from hidden commits.
    """

    _libgit2_native_finalizer = "git_revwalk_free"

    _real_native: Optional[git_revwalk_p] = None

    def __init__(self, repo: "Repository", native: git_revwalk_p) -> None:
        super().__init__(native=native, _owner=repo)

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __iter__(self) -> Iterator[Commit]:
        return self

    def __next__(self) -> Commit:
        oid = git_oid()
        error_code = lib.git_revwalk_next(byref(oid), self._native)
        result = self.raise_if_error(error_code, "Error walking revisions: {message}")
        if result == git_error_code.ITEROVER:
            raise StopIteration
        return self.repo.find_commit(Oid(oid))

    def sort(self, sort: git_sort_t) -> "RevWalk":
        error_code = lib.git_revwalk_sorting(self._native, sort)
        self.raise_if_error(error_code, "Can’t set sorting on revwalk: {message}")
        return self

    def push(self, oid: OidTypes) -> "RevWalk":
        oid = Oid._from_oid(oid)
        error_code = lib.git_revwalk_push(self._native, oid._native)
        self.raise_if_error(error_code, "Can’t push commit to revwalk: {message}")
        return self

    def push_head(self) -> "RevWalk":
        error_code = lib.git_revwalk_push_head(self._native)
        self.raise_if_error(error_code, "Can’t push HEAD to revwalk: {message}")
        return self

    def hide(self, oid: OidTypes) -> "RevWalk":
        oid = Oid._from_oid(oid)
        error_code = lib.git_revwalk_hide(self._native, oid._native)
        self.raise_if_error(error_code, "Can’t hide commit from revwalk: {message}")
        return self

    def reset(self) -> "RevWalk":
        """Forget pushed and hidden commits, so that the walk can be reused."""
        error_code = lib.git_revwalk_reset(self._native)
        self.raise_if_error(error_code)
        return self

