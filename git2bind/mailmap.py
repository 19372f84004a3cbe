"""Binding layer for libgit2 - Mailmap"""

from ctypes import byref
from typing import TYPE_CHECKING, Optional

from .native_adaptation import git_mailmap_p, git_signature_p, lib
from .signature import Signature
from .wrapper import StrTypes, WrapperOfWrappings, to_cstr, to_cstr_opt

if TYPE_CHECKING:
    from .repository import Repository


class Mailmap(WrapperOfWrappings):
    """Map names and email addresses to their canonical forms.

    A mailmap only lives in memory, it can’t be written back to disk.
    """

    _libgit2_native_finalizer = "git_mailmap_free"

    _real_native: Optional[git_mailmap_p] = None

    def __init__(self) -> None:
        native = git_mailmap_p()
        error_code = lib.git_mailmap_new(byref(native))
        self.raise_if_error(error_code)
        super().__init__(native=native)

    @classmethod
    def from_buffer(cls, buffer: StrTypes) -> "Mailmap":
        """Parse a mailmap in the format of a `.mailmap` file."""
        buffer = to_cstr(buffer)
        native = git_mailmap_p()
        error_code = lib.git_mailmap_from_buffer(byref(native), buffer, len(buffer))
        cls.raise_if_error(error_code, "Can’t parse mailmap: {message}")
        return cls._from_native(native)

    @classmethod
    def from_repository(cls, repo: "Repository") -> "Mailmap":
        native = git_mailmap_p()
        error_code = lib.git_mailmap_from_repository(byref(native), repo._native)
        cls.raise_if_error(error_code, "Can’t load mailmap: {message}")
        return cls._from_native(native)

    def add_entry(
        self,
        real_name: Optional[StrTypes] = None,
        real_email: Optional[StrTypes] = None,
        replace_name: Optional[StrTypes] = None,
        replace_email: StrTypes = None,
    ) -> None:
        if replace_email is None:
            raise TypeError("replace_email is required")

        error_code = lib.git_mailmap_add_entry(
            self._native,
            to_cstr_opt(real_name),
            to_cstr_opt(real_email),
            to_cstr_opt(replace_name),
            to_cstr(replace_email),
        )
        self.raise_if_error(error_code, "Can’t add mailmap entry: {message}")

    def resolve_signature(self, signature: Signature) -> Signature:
        """Resolve a signature to the real name and email, as a new signature."""
        native = git_signature_p()
        error_code = lib.git_mailmap_resolve_signature(
            byref(native), self._native, signature._native
        )
        self.raise_if_error(error_code, "Can’t resolve signature: {message}")
        return Signature._from_native(native)
