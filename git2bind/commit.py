"""Binding layer for libgit2 - Commit"""

from ctypes import byref
from functools import cached_property
from typing import TYPE_CHECKING, Optional

from .native_adaptation import git_commit_p, git_tree_p, lib
from .oid import Oid, OidTypes
from .signature import Signature
from .time import Time
from .tree import Tree
from .wrapper import WrapperOfWrappings

if TYPE_CHECKING:
    from .repository import Repository


class Commit(WrapperOfWrappings):
    """Represent a git commit."""

    _libgit2_native_finalizer = "git_commit_free"

    _real_native: Optional[git_commit_p] = None

    def __init__(self, repo: "Repository", native: git_commit_p) -> None:
        super().__init__(native=native, _owner=repo)

    @classmethod
    def _from_oid(cls, repo: "Repository", oid: OidTypes) -> "Commit":
        oid = Oid._from_oid(oid)
        native = git_commit_p()
        error_code = lib.git_commit_lookup(byref(native), repo._native, oid._native)
        cls.raise_if_error(error_code, key=oid.hex)
        return cls(repo, native)

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id.hex!r})"

    @cached_property
    def id(self) -> Oid:
        return Oid(lib.git_commit_id(self._native))

    @cached_property
    def parent_ids(self) -> list[Oid]:
        n_parents = lib.git_commit_parentcount(self._native)
        return [Oid(lib.git_commit_parent_id(self._native, n)) for n in range(n_parents)]

    @cached_property
    def tree_id(self) -> Oid:
        return Oid(lib.git_commit_tree_id(self._native))

    @property
    def tree(self) -> Tree:
        native = git_tree_p()
        error_code = lib.git_commit_tree(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t look up tree of commit: {message}")
        return Tree(self.repo, native)

    @property
    def time(self) -> Time:
        """The commit time, with the sign of its offset as recorded."""
        return Time._from_native(lib.git_commit_committer(self._native).contents.when)

    # Signatures refer to their commit, caching them here would make a cycle.

    @property
    def author(self) -> Signature:
        return Signature._from_native(native=lib.git_commit_author(self._native), _owner=self)

    @property
    def committer(self) -> Signature:
        return Signature._from_native(native=lib.git_commit_committer(self._native), _owner=self)

    @cached_property
    def message_encoding(self) -> str:
        encoding = lib.git_commit_message_encoding(self._native)
        if encoding:
            return encoding.decode("ascii")
        return "utf-8"

    @cached_property
    def message(self) -> str:
        message = lib.git_commit_message(self._native)
        return message.decode(encoding=self.message_encoding, errors="replace")
