"""Binding layer for libgit2 - AnnotatedCommit"""

from functools import cached_property
from typing import TYPE_CHECKING, Optional

from .native_adaptation import git_annotated_commit_p, lib
from .oid import Oid
from .wrapper import WrapperOfWrappings, from_cstr

if TYPE_CHECKING:
    from .repository import Repository


class AnnotatedCommit(WrapperOfWrappings):
    """A commit together with how it was looked up, as used for merging and rebasing."""

    _libgit2_native_finalizer = "git_annotated_commit_free"

    _real_native: Optional[git_annotated_commit_p] = None

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id.hex!r}, refname={self.refname!r})"

    @cached_property
    def id(self) -> Oid:
        return Oid(lib.git_annotated_commit_id(self._native))

    @cached_property
    def refname(self) -> Optional[str]:
        """The reference name the commit was looked up from, if any."""
        return from_cstr(lib.git_annotated_commit_ref(self._native))
