"""Binding layer for libgit2 - Index

The index (or staging area) is what the next commit is built from.
"""

from collections.abc import Collection
from ctypes import byref, c_char_p
from typing import TYPE_CHECKING, Callable, Optional

from .native_adaptation import (
    git_index_matched_path_cb,
    git_index_p,
    git_oid,
    git_strarray,
    lib,
)
from .oid import Oid
from .panic import CallbackPayload, trampoline
from .wrapper import PathTypes, WrapperOfWrappings, from_cstr, to_cstr

if TYPE_CHECKING:
    from .repository import Repository

MatchedPathCallback = Callable[[str, Optional[str]], Optional[bool]]


@trampoline(git_index_matched_path_cb)
def _matched_path_cb(path: bytes, matched_pathspec: Optional[bytes], payload: int) -> int:
    # 0 adds the path, a positive value skips it.
    callback = CallbackPayload.unbox(payload)
    if callback(from_cstr(path, path=True), from_cstr(matched_pathspec, path=True)) is False:
        return 1
    return 0


class Index(WrapperOfWrappings):
    """Represent the git index."""

    _libgit2_native_finalizer = "git_index_free"

    _real_native: Optional[git_index_p] = None

    def __init__(self, repo: "Repository", native: git_index_p) -> None:
        super().__init__(native=native, _owner=repo)

    @property
    def repo(self) -> "Repository":
        return self._owner

    def __len__(self) -> int:
        return lib.git_index_entrycount(self._native)

    def __contains__(self, path: PathTypes) -> bool:
        return bool(lib.git_index_get_bypath(self._native, to_cstr(path, path=True), 0))

    def read(self, force: bool = False) -> None:
        """Update the index from disk.

        Unless `force` is set, this is skipped if the file didn’t change.
        """
        error_code = lib.git_index_read(self._native, force)
        self.raise_if_error(error_code, "Can’t read index: {message}")

    def write(self) -> None:
        error_code = lib.git_index_write(self._native)
        self.raise_if_error(error_code, "Can’t write index: {message}")

    def write_tree(self) -> Oid:
        """Write the index as a tree into the object database."""
        native_oid = git_oid()
        error_code = lib.git_index_write_tree(byref(native_oid), self._native)
        self.raise_if_error(error_code, "Can’t write tree from index: {message}")
        return Oid(native_oid)

    def add(self, path: PathTypes) -> None:
        """Add or update a file from the working directory."""
        error_code = lib.git_index_add_bypath(self._native, to_cstr(path, path=True))
        self.raise_if_error(error_code, io=True)

    def remove(self, path: PathTypes) -> None:
        error_code = lib.git_index_remove_bypath(self._native, to_cstr(path, path=True))
        self.raise_if_error(error_code, "Can’t remove from index: {message}")

    def add_all(
        self,
        pathspecs: Optional[Collection[PathTypes]] = None,
        callback: Optional[MatchedPathCallback] = None,
    ) -> None:
        """Add or update all files matching the pathspecs.

        Without pathspecs, all files are matched. If set, `callback(path,
        matched_pathspec)` is called for every match and may return `False` to
        leave that path alone.
        """
        encoded = [to_cstr(ps, path=True) for ps in pathspecs or ()]
        count = len(encoded)
        native_specs = git_strarray(strings=(c_char_p * count)(*encoded), count=count)

        if callback is not None:
            payload = CallbackPayload(callback)
            error_code = lib.git_index_add_all(
                self._native, byref(native_specs), 0, _matched_path_cb, payload
            )
        else:
            error_code = lib.git_index_add_all(
                self._native, byref(native_specs), 0, git_index_matched_path_cb(), None
            )
        self.raise_if_error(error_code, io=True)
