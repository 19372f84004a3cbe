"""Binding layer for libgit2 - OidArray"""

from collections.abc import Sequence
from ctypes import pointer
from typing import Optional, Union, overload

from .native_adaptation import git_oidarray, git_oidarray_p
from .oid import Oid
from .wrapper import WrapperOfWrappings


class OidArray(WrapperOfWrappings, Sequence):
    """An array of oids allocated by libgit2."""

    _libgit2_native_finalizer = "git_oidarray_dispose"

    _real_native: Optional[git_oidarray_p] = None

    def __init__(self) -> None:
        super().__init__(native=pointer(git_oidarray()))

    def __len__(self) -> int:
        return self._native.contents.count

    def __bool__(self) -> bool:
        return bool(len(self))

    @overload
    def __getitem__(self, index: int) -> Oid: ...

    @overload
    def __getitem__(self, index: slice) -> list[Oid]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Oid, list[Oid]]:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]

        count = len(self)
        if index < 0:
            index += count
        if not 0 <= index < count:
            raise IndexError("OidArray index out of range")

        return Oid(self._native.contents.ids[index])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[oid.hex for oid in self]!r})"
