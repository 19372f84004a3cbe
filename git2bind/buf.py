"""Binding layer for libgit2 - Buf"""

from ctypes import pointer, string_at
from typing import Optional

from .native_adaptation import git_buf, git_buf_p
from .wrapper import WrapperOfWrappings


class Buf(WrapperOfWrappings):
    """A buffer which libgit2 fills and which has to be disposed of by it.

    The `git_buf` structure lives in Python memory, the data it points to
    is allocated by libgit2.
    """

    _libgit2_native_finalizer = "git_buf_dispose"

    _real_native: Optional[git_buf_p] = None

    def __init__(self) -> None:
        super().__init__(native=pointer(git_buf()))

    def __len__(self) -> int:
        return self._native.contents.size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)})"

    @property
    def data(self) -> bytes:
        contents = self._native.contents
        if not contents.ptr:
            return b""
        return string_at(contents.ptr, contents.size)

    def as_str(self) -> Optional[str]:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return None
