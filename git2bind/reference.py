"""Binding layer for libgit2 - Reference"""

from ctypes import byref, cast
from functools import cached_property
from typing import TYPE_CHECKING, Optional, Union

from .commit import Commit
from .native_adaptation import (
    git_commit_p,
    git_object_p,
    git_object_t,
    git_reference_p,
    git_reference_t,
    git_tree_p,
    lib,
)
from .oid import Oid
from .tree import Tree
from .wrapper import WrapperOfWrappings, from_cstr

if TYPE_CHECKING:
    from .repository import Repository


class Reference(WrapperOfWrappings):
    """Represent a git reference."""

    _libgit2_native_finalizer = "git_reference_free"

    _real_native: Optional[git_reference_p] = None

    def __init__(self, repo: "Repository", native: git_reference_p) -> None:
        super().__init__(native=native, _owner=repo)

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def __eq__(self, other: "Reference") -> bool:
        return (
            isinstance(other, Reference)
            and self.repo is other.repo
            and self.name == other.name
            and self.target == other.target
        )

    def __hash__(self) -> int:
        return hash(self.name)

    @cached_property
    def name(self) -> str:
        return from_cstr(lib.git_reference_name(self._native), path=True)

    @cached_property
    def shorthand(self) -> str:
        return from_cstr(lib.git_reference_shorthand(self._native), path=True)

    @property
    def type(self) -> git_reference_t:
        return lib.git_reference_type(self._native)

    @property
    def target(self) -> Union[Oid, str]:
        """The object id of a direct reference, or the name a symbolic one points to."""
        if self.type == git_reference_t.DIRECT:
            return Oid(lib.git_reference_target(self._native))

        if not (name := lib.git_reference_symbolic_target(self._native)):
            raise ValueError(f"Reference has no target: {self.name}")

        return from_cstr(name, path=True)

    def resolve(self) -> "Reference":
        """Follow symbolic references down to a direct one."""
        if self.type == git_reference_t.DIRECT:
            return self

        native = git_reference_p()
        error_code = lib.git_reference_resolve(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t resolve reference: {message}")

        return Reference(self.repo, native)

    def peel(self, target_type: git_object_t = git_object_t.COMMIT) -> Union[Commit, Tree]:
        """Peel the reference until an object of the wanted type is found."""
        if target_type not in (git_object_t.COMMIT, git_object_t.TREE):
            raise ValueError(f"Can’t peel to {target_type!r}, only to commits or trees")

        peeled = git_object_p()
        error_code = lib.git_reference_peel(byref(peeled), self._native, target_type)
        self.raise_if_error(error_code, "Can’t peel reference: {message}")

        if target_type == git_object_t.COMMIT:
            return Commit(self.repo, cast(peeled, git_commit_p))
        return Tree(self.repo, cast(peeled, git_tree_p))
