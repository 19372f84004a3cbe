"""Binding layer for libgit2 - Object database"""

import logging
from ctypes import byref
from typing import TYPE_CHECKING, Optional

from .buf import Buf
from .native_adaptation import git_object_t, git_odb_backend_p, git_odb_p, git_oid, lib
from .oid import Oid, OidTypes
from .wrapper import WrapperOfWrappings

if TYPE_CHECKING:
    from .repository import Repository

log = logging.getLogger(__name__)


class Odb(WrapperOfWrappings):
    """Represent the object database of a repository."""

    _libgit2_native_finalizer = "git_odb_free"

    _real_native: Optional[git_odb_p] = None

    def exists(self, oid: OidTypes) -> bool:
        oid = Oid._from_oid(oid)
        return bool(lib.git_odb_exists(self._native, oid._native))

    def __contains__(self, oid: OidTypes) -> bool:
        return self.exists(oid)

    def write(self, object_type: git_object_t, data: bytes) -> Oid:
        native = git_oid()
        error_code = lib.git_odb_write(byref(native), self._native, data, len(data), object_type)
        self.raise_if_error(error_code, "Can’t write object: {message}")
        return Oid(native)

    def add_mempack(self, priority: int) -> "Mempack":
        """Create an in-memory backend and add it to this database.

        The backend belongs to the database and is freed along with it, so
        the returned object can’t be used once the database is closed.
        """
        backend = git_odb_backend_p()
        error_code = lib.git_mempack_new(byref(backend))
        self.raise_if_error(error_code, "Can’t create mempack backend: {message}")

        error_code = lib.git_odb_add_backend(self._native, backend, priority)
        if error_code:
            # Only an object database can free a backend.
            log.warning("Leaking mempack backend which couldn’t be added to %r", self)
        self.raise_if_error(error_code, "Can’t add mempack backend: {message}")

        return Mempack._from_native(backend, _must_free=False, _owner=self)


class Mempack(WrapperOfWrappings):
    """An in-memory object database backend."""

    _real_native: Optional[git_odb_backend_p] = None

    def dump(self, repo: "Repository", buf: Optional[Buf] = None) -> Buf:
        """Write the objects held in memory as a packfile into `buf`."""
        if buf is None:
            buf = Buf()
        error_code = lib.git_mempack_dump(buf._native, repo._native, self._native)
        self.raise_if_error(error_code, "Can’t dump mempack: {message}")
        return buf

    def reset(self) -> None:
        """Drop all objects held in memory."""
        error_code = lib.git_mempack_reset(self._native)
        self.raise_if_error(error_code, "Can’t reset mempack: {message}")
