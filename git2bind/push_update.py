"""Binding layer for libgit2 - PushUpdate"""

from functools import cached_property
from typing import Optional

from .native_adaptation import git_push_update_p
from .oid import Oid
from .wrapper import WrapperOfWrappings, from_cstr


class PushUpdate(WrapperOfWrappings):
    """A reference update a push is about to perform.

    These are borrowed from libgit2 during a push negotiation callback.
    """

    _real_native: Optional[git_push_update_p] = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(src_refname={self.src_refname!r},"
            + f" dst_refname={self.dst_refname!r})"
        )

    @cached_property
    def src_refname(self) -> Optional[str]:
        return from_cstr(self._native.contents.src_refname)

    @cached_property
    def dst_refname(self) -> Optional[str]:
        return from_cstr(self._native.contents.dst_refname)

    @cached_property
    def src(self) -> Oid:
        return Oid(self._native.contents.src)

    @cached_property
    def dst(self) -> Oid:
        return Oid(self._native.contents.dst)
