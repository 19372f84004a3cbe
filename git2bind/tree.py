"""Binding layer for libgit2 - Tree"""

from collections.abc import Iterator
from ctypes import byref
from functools import cached_property
from typing import TYPE_CHECKING, Optional, Union

from .native_adaptation import git_filemode_t, git_object_t, git_tree_entry_p, git_tree_p, lib
from .oid import Oid, OidTypes
from .wrapper import StrTypes, WrapperOfWrappings, from_cstr, to_cstr

if TYPE_CHECKING:
    from .repository import Repository


class TreeEntry(WrapperOfWrappings):
    """An entry of a tree.

    Entries obtained by position or by iterating borrow from their tree and
    can’t be used once it is closed. Entries looked up by path are copies.
    """

    _libgit2_native_finalizer = "git_tree_entry_free"

    _real_native: Optional[git_tree_entry_p] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={self.id.hex!r})"

    @cached_property
    def name(self) -> str:
        return from_cstr(lib.git_tree_entry_name(self._native), path=True)

    @cached_property
    def id(self) -> Oid:
        return Oid(lib.git_tree_entry_id(self._native))

    @cached_property
    def type(self) -> git_object_t:
        return lib.git_tree_entry_type(self._native)

    @cached_property
    def filemode(self) -> git_filemode_t:
        return lib.git_tree_entry_filemode(self._native)


class Tree(WrapperOfWrappings):
    """Represent a git tree."""

    _libgit2_native_finalizer = "git_tree_free"

    _real_native: Optional[git_tree_p] = None

    def __init__(self, repo: "Repository", native: git_tree_p) -> None:
        super().__init__(native=native, _owner=repo)

    @classmethod
    def _from_oid(cls, repo: "Repository", oid: OidTypes) -> "Tree":
        oid = Oid._from_oid(oid)
        native = git_tree_p()
        error_code = lib.git_tree_lookup(byref(native), repo._native, oid._native)
        cls.raise_if_error(error_code, key=oid.hex)
        return cls(repo, native)

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id.hex!r})"

    @cached_property
    def id(self) -> Oid:
        return Oid(lib.git_tree_id(self._native))

    def __len__(self) -> int:
        return lib.git_tree_entrycount(self._native)

    def _entry_at(self, index: int) -> TreeEntry:
        native = lib.git_tree_entry_byindex(self._native, index)
        if not native:
            raise IndexError(f"Tree entry index out of range: {index}")
        return TreeEntry._from_native(native, _must_free=False, _owner=self)

    def _entry_by_path(self, path: StrTypes) -> TreeEntry:
        native = git_tree_entry_p()
        error_code = lib.git_tree_entry_bypath(
            byref(native), self._native, to_cstr(path, path=True)
        )
        self.raise_if_error(error_code, key=path)
        return TreeEntry._from_native(native)

    def __getitem__(self, key: Union[int, StrTypes]) -> TreeEntry:
        """Look up an entry by position or by path.

        Paths may reach into subtrees, e.g. `"dir/file"`.
        """
        if isinstance(key, int):
            if key < 0:
                key += len(self)
            if key < 0:
                raise IndexError(f"Tree entry index out of range: {key}")
            return self._entry_at(key)
        return self._entry_by_path(key)

    def __contains__(self, path: StrTypes) -> bool:
        try:
            entry = self._entry_by_path(path)
        except KeyError:
            return False
        entry.close()
        return True

    def __iter__(self) -> Iterator[TreeEntry]:
        for index in range(len(self)):
            yield self._entry_at(index)
